"""Photo → coloring page / paint-by-numbers page transforms and book assembly."""

from .errors import BookError, DecodeError, ImageProcessingError
from .models.bitmap import Bitmap
from .models.book_page import BookPage, PageKind
from .models.processing_options import (
    EdgeOperator,
    PaletteSource,
    ProcessingMode,
    ProcessingOptions,
)
from .services.line_art_service import LineArtService
from .services.palette_service import PaletteService
from .services.quantization_service import QuantizationResult, QuantizationService

__all__ = [
    "Bitmap",
    "BookError",
    "BookPage",
    "DecodeError",
    "EdgeOperator",
    "ImageProcessingError",
    "LineArtService",
    "PageKind",
    "PaletteService",
    "PaletteSource",
    "ProcessingMode",
    "ProcessingOptions",
    "QuantizationResult",
    "QuantizationService",
]
