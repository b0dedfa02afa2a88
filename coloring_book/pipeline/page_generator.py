# pipeline/page_generator.py
from __future__ import annotations
from typing import List
import logging

import numpy as np

from ..models.bitmap import Bitmap
from ..models.book_page import BookPage, PageKind
from ..models.processing_options import PaletteSource, ProcessingMode, ProcessingOptions
from ..services.line_art_service import LineArtService
from ..services.palette_service import PaletteService
from ..services.quantization_service import QuantizationService

logger = logging.getLogger(__name__)


def generate_coloring_page(
    bitmap: Bitmap,
    options: ProcessingOptions,
    *,
    line_art_service: LineArtService = LineArtService(),
) -> BookPage:
    image = line_art_service.extract(bitmap, options)
    return BookPage(image=image, kind=PageKind.COLORING, source=_source_name(bitmap))


def generate_paint_by_numbers_page(
    bitmap: Bitmap,
    options: ProcessingOptions,
    rng: np.random.Generator,
    *,
    quantization_service: QuantizationService = QuantizationService(),
    palette_service: PaletteService = PaletteService(),
) -> BookPage:
    """
    Posterize *bitmap* and attach its swatch palette.

    PaletteSource.QUANTIZER keeps the quantizer's own K colours (every region
    has a swatch); PaletteSource.SAMPLED re-reads the colours from a strided
    sample of the posterized raster.
    """
    result = quantization_service.quantize(bitmap, options.num_colors, options, rng)
    if options.palette_source is PaletteSource.SAMPLED:
        palette = palette_service.extract_palette(result.image, options.num_colors)
    else:
        palette = result.palette
    return BookPage(image=result.image, kind=PageKind.PAINT_BY_NUMBERS,
                    palette=palette, source=_source_name(bitmap))


def generate_pages(
    bitmap: Bitmap,
    mode: ProcessingMode,
    options: ProcessingOptions,
    rng: np.random.Generator | None = None,
) -> List[BookPage]:
    """
    For one photo:
        • COLORING          → [line art]
        • PAINT_BY_NUMBERS  → [posterized page]
        • BOTH              → [line art, posterized page]
    """
    rng = rng if rng is not None else np.random.default_rng(options.seed)
    pages: List[BookPage] = []

    if mode in (ProcessingMode.COLORING, ProcessingMode.BOTH):
        pages.append(generate_coloring_page(bitmap, options))

    if mode in (ProcessingMode.PAINT_BY_NUMBERS, ProcessingMode.BOTH):
        pages.append(generate_paint_by_numbers_page(bitmap, options, rng))

    logger.debug(f"{_source_name(bitmap)}: {len(pages)} page(s) in mode {mode.value}")
    return pages


def _source_name(bitmap: Bitmap) -> str | None:
    return bitmap.path.name if bitmap.path else None
