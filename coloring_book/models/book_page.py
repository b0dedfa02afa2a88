from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .bitmap import Bitmap


class PageKind(Enum):
    COLORING = "coloring"
    PAINT_BY_NUMBERS = "paint-by-numbers"


@dataclass
class BookPage:
    """
    Data object: one processed raster destined for the printed book.
    palette[i] is the colour of swatch number i + 1.
    """
    image: Bitmap
    kind: PageKind
    palette: List[str] = field(default_factory=list)  # '#rrggbb' strings
    source: str | None = None  # name of the photo the page came from
