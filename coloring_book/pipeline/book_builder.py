# pipeline/book_builder.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple, Union
import logging
import os

import numpy as np
from dotenv import load_dotenv
from tqdm import tqdm

from ..errors import BookError, ImageProcessingError
from ..models.bitmap import Bitmap
from ..models.book_page import BookPage
from ..models.processing_options import ProcessingMode, ProcessingOptions
from ..services.book_service import BookService
from ..services.image_service import ImageService
from .page_generator import generate_pages

# ------------------------------------------------------------------
# env‑vars
load_dotenv()
MAX_PHOTOS = int(os.getenv("MAX_PHOTOS", "20"))
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "4"))
BOOK_NUM_COLORS = int(os.getenv("BOOK_NUM_COLORS", "12"))

logger = logging.getLogger(__name__)

PhotoInput = Union[str, Path, bytes, Bitmap]


@dataclass
class PageStatus:
    """Outcome for one input photo."""
    source: str
    ok: bool
    pages: int = 0
    stage: str | None = None   # failing stage when ok is False
    error: str | None = None


@dataclass
class BookResult:
    pdf: bytes
    pages: List[BookPage] = field(default_factory=list)
    statuses: List[PageStatus] = field(default_factory=list)

    @property
    def failed(self) -> List[PageStatus]:
        return [s for s in self.statuses if not s.ok]


def _describe(photo: PhotoInput, index: int) -> str:
    if isinstance(photo, (str, Path)):
        return Path(photo).name
    if isinstance(photo, Bitmap) and photo.path is not None:
        return photo.path.name
    return f"photo {index + 1}"


def _to_bitmap(photo: PhotoInput, image_service: ImageService) -> Bitmap:
    if isinstance(photo, Bitmap):
        return photo
    if isinstance(photo, (bytes, bytearray)):
        return image_service.decode(bytes(photo))
    return image_service.load(photo)


def process_photo(
    photo: PhotoInput,
    index: int,
    mode: ProcessingMode,
    options: ProcessingOptions,
    rng: np.random.Generator,
    *,
    image_service: ImageService = ImageService(),
) -> Tuple[PageStatus, List[BookPage]]:
    """
    Decode and transform a single photo. Failures are reported in the
    returned status instead of raised, so one bad photo never stops a book.
    """
    source = _describe(photo, index)
    try:
        bitmap = _to_bitmap(photo, image_service)
        pages = generate_pages(bitmap, mode, options, rng)
    except ImageProcessingError as err:
        logger.warning(f"Skipping {source}: {err}")
        return PageStatus(source=source, ok=False, stage=err.stage, error=str(err)), []
    except (ValueError, MemoryError, OSError) as err:
        logger.exception(f"Skipping {source}: unexpected {type(err).__name__}")
        return PageStatus(source=source, ok=False, stage="process", error=str(err)), []

    for page in pages:
        page.source = page.source or source
    return PageStatus(source=source, ok=True, pages=len(pages)), pages


def build_book(
    photos: Sequence[PhotoInput],
    name: str,
    mode: ProcessingMode = ProcessingMode.COLORING,
    options: ProcessingOptions | None = None,
    *,
    title: str | None = None,
    max_workers: int = MAX_WORKERS,
    max_photos: int = MAX_PHOTOS,
    image_service: ImageService = ImageService(),
    book_service: BookService = BookService(),
    show_progress: bool = False,
) -> BookResult:
    """
    For every photo (in parallel, independent of each other):
        • decode → bounded resize
        • line art and/or posterized page depending on *mode*
    then lay all successful pages out into one PDF, in input order.

    Raises:
        ValueError: empty name, no photos, or more than *max_photos*.
        BookError: stage "assemble" when no photo could be processed;
            its ``statuses`` list says why each photo failed.
    """
    if not name or not name.strip():
        raise ValueError("A name and at least one photo are required")
    if not photos:
        raise ValueError("A name and at least one photo are required")
    if len(photos) > max_photos:
        raise ValueError(f"At most {max_photos} photos are allowed, got {len(photos)}")

    options = options or ProcessingOptions.from_env(num_colors=BOOK_NUM_COLORS)

    # One child stream per photo keeps seeded books reproducible
    # whatever order the workers finish in.
    children = np.random.SeedSequence(options.seed).spawn(len(photos))
    rngs = [np.random.default_rng(child) for child in children]

    logger.info(f"Building book for '{name}': {len(photos)} photos, mode {mode.value}, "
                f"{max_workers} workers")

    def _run(index: int) -> Tuple[PageStatus, List[BookPage]]:
        return process_photo(photos[index], index, mode, options, rngs[index],
                             image_service=image_service)

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        outcomes = pool.map(_run, range(len(photos)))
        if show_progress:
            outcomes = tqdm(outcomes, total=len(photos), desc="photos", ncols=70)
        results = list(outcomes)

    statuses = [status for status, _ in results]
    pages = [page for _, photo_pages in results for page in photo_pages]

    if not pages:
        raise BookError(statuses)

    pdf = book_service.build_pdf(name, pages, title=title)
    ok = sum(1 for s in statuses if s.ok)
    logger.info(f"Book complete: {ok}/{len(statuses)} photos, {len(pages)} pages")
    return BookResult(pdf=pdf, pages=pages, statuses=statuses)
