from __future__ import annotations
from io import BytesIO
from typing import List, Sequence
import logging
import os
import re

from dotenv import load_dotenv
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..errors import ImageProcessingError
from ..models.bitmap import Bitmap
from ..models.book_page import BookPage, PageKind
from ..models.color import hex_to_rgb
from .image_service import ImageService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4          # points
MARGIN = 15 * mm
PALETTE_SPACE = 20 * mm
SWATCH_SIZE = 8 * mm
SWATCH_GAP = 4 * mm
COVER_BACKGROUND = (255, 250, 240)
SITE_LINE = os.getenv("BOOK_SITE_LINE", "malbuch.app")


def book_filename(name: str) -> str:
    """Download-safe file name: every non-alphanumeric character becomes '_'."""
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', name)}_ColoringBook.pdf"


def _rgb(color) -> tuple:
    return tuple(c / 255.0 for c in color)


class BookService:
    """
    Lays processed pages out into an A4 PDF:
    cover → one page per BookPage (in order) → back cover.
    """

    def __init__(self, image_service: ImageService | None = None):
        self.image_service = image_service or ImageService()

    # ─── Page drawing helpers ──────────────────────────────────────
    @staticmethod
    def _fill_background(pdf: canvas.Canvas) -> None:
        pdf.setFillColorRGB(*_rgb(COVER_BACKGROUND))
        pdf.rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT, stroke=0, fill=1)

    def _draw_cover(self, pdf: canvas.Canvas, title: str) -> None:
        self._fill_background(pdf)

        title_y = PAGE_HEIGHT - PAGE_HEIGHT / 3
        pdf.setFillColorRGB(*_rgb((60, 60, 60)))
        pdf.setFont("Helvetica-Bold", 36)
        pdf.drawCentredString(PAGE_WIDTH / 2, title_y, title)

        pdf.setFont("Helvetica", 18)
        pdf.drawCentredString(PAGE_WIDTH / 2, title_y - 20 * mm, "A personalized coloring book")

        # Decorative frame
        pdf.setStrokeColorRGB(*_rgb((200, 180, 160)))
        pdf.setLineWidth(0.5 * mm)
        pdf.rect(20 * mm, 20 * mm, PAGE_WIDTH - 40 * mm, PAGE_HEIGHT - 40 * mm, stroke=1, fill=0)

    def _draw_image(self, pdf: canvas.Canvas, image: Bitmap) -> None:
        box_w = PAGE_WIDTH - 2 * MARGIN
        box_h = PAGE_HEIGHT - 2 * MARGIN - PALETTE_SPACE
        try:
            reader = ImageReader(BytesIO(self.image_service.encode_png(image)))
            pdf.drawImage(reader, MARGIN, MARGIN + PALETTE_SPACE, box_w, box_h,
                          preserveAspectRatio=True, anchor="c")
        except Exception as err:
            # Keep the rest of the book; the page shows a notice instead.
            logger.error(f"Failed to add image to PDF: {err}")
            pdf.setFont("Helvetica", 14)
            pdf.setFillColorRGB(*_rgb((200, 100, 100)))
            pdf.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT / 2, "Image could not be loaded")

    @staticmethod
    def _draw_palette(pdf: canvas.Canvas, palette: Sequence[str]) -> None:
        """Centred swatch strip; swatch i is labelled i + 1."""
        swatch_top = 25 * mm
        swatch_y = swatch_top - SWATCH_SIZE
        start_x = (PAGE_WIDTH - len(palette) * (SWATCH_SIZE + SWATCH_GAP)) / 2

        pdf.setFont("Helvetica", 8)
        pdf.setFillColorRGB(*_rgb((100, 100, 100)))
        pdf.drawCentredString(PAGE_WIDTH / 2, swatch_top + 5 * mm, "Color palette:")

        for idx, color in enumerate(palette):
            x = start_x + idx * (SWATCH_SIZE + SWATCH_GAP)
            pdf.setFillColorRGB(*_rgb(hex_to_rgb(color)))
            pdf.setStrokeColorRGB(*_rgb((100, 100, 100)))
            pdf.rect(x, swatch_y, SWATCH_SIZE, SWATCH_SIZE, stroke=1, fill=1)

            pdf.setFillColorRGB(*_rgb((60, 60, 60)))
            pdf.drawCentredString(x + SWATCH_SIZE / 2, swatch_y - 4 * mm, f"{idx + 1}")

    def _draw_page(self, pdf: canvas.Canvas, page: BookPage, number: int) -> None:
        pdf.setFont("Helvetica", 10)
        pdf.setFillColorRGB(*_rgb((150, 150, 150)))
        pdf.drawCentredString(PAGE_WIDTH / 2, 10 * mm, f"{number}")

        self._draw_image(pdf, page.image)

        if page.kind is PageKind.PAINT_BY_NUMBERS and page.palette:
            self._draw_palette(pdf, page.palette)

    def _draw_back_cover(self, pdf: canvas.Canvas, name: str) -> None:
        self._fill_background(pdf)
        pdf.setFont("Helvetica-Oblique", 14)
        pdf.setFillColorRGB(*_rgb((120, 120, 120)))
        pdf.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT / 2, f"Made for {name}")
        pdf.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT / 2 - 10 * mm, SITE_LINE)

    # ─── Public API ────────────────────────────────────────────────
    def build_pdf(self, name: str, pages: List[BookPage], title: str | None = None) -> bytes:
        """
        Args:
            name: recipient shown on the cover and back cover
            pages: processed pages, printed in this order
            title: cover title (defaults to "<name>'s Coloring Book")

        Returns:
            bytes: the finished PDF document
        """
        if not name or not name.strip():
            raise ValueError("A recipient name is required")

        book_title = title or f"{name}'s Coloring Book"
        buffer = BytesIO()
        try:
            pdf = canvas.Canvas(buffer, pagesize=A4)
            pdf.setTitle(book_title)
            pdf.setAuthor(name)

            self._draw_cover(pdf, book_title)
            pdf.showPage()

            for number, page in enumerate(pages, 1):
                self._draw_page(pdf, page, number)
                pdf.showPage()

            self._draw_back_cover(pdf, name)
            pdf.showPage()
            pdf.save()
        except (OSError, ValueError) as err:
            raise ImageProcessingError("assemble", err) from err

        data = buffer.getvalue()
        logger.info(f"Book for '{name}': {len(pages)} pages, {len(data)} bytes")
        return data

    def build_single_page(self, image: Bitmap, name: str, kind: PageKind,
                          palette: Sequence[str] | None = None) -> bytes:
        return self.build_pdf(name, [BookPage(image=image, kind=kind, palette=list(palette or []))])
