from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..errors import BookError, ImageProcessingError
from ..models.processing_options import PaletteSource, ProcessingMode, ProcessingOptions
from ..pipeline.book_builder import BOOK_NUM_COLORS, MAX_WORKERS, build_book
from ..services.book_service import book_filename
from ..services.image_service import ImageService

OUTPUT_DIR = os.getenv("OUTPUT_DIR_PATH", "data/books")

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="coloring-book",
        description="Turn photos into a printable coloring / paint-by-numbers book (PDF).",
    )
    parser.add_argument("photos", nargs="+", type=Path,
                        help="Photo files or folders of photos")
    parser.add_argument("--name", required=True, help="Recipient name printed on the cover")
    parser.add_argument("--mode", choices=[m.value for m in ProcessingMode],
                        default=ProcessingMode.COLORING.value)
    parser.add_argument("--title", default=None, help="Cover title")
    parser.add_argument("--colors", type=int, default=BOOK_NUM_COLORS,
                        help="Colours per paint-by-numbers page")
    parser.add_argument("--palette-source", choices=[p.value for p in PaletteSource], default=None)
    parser.add_argument("--max-dimension", type=int, default=None, help="Long-edge bound in pixels")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible palettes")
    parser.add_argument("--workers", type=int, default=MAX_WORKERS)
    parser.add_argument("--output", type=Path, default=None, help="PDF path")
    parser.add_argument("--save-pages", action="store_true",
                        help="Also write every page as PNG next to the PDF")
    parser.add_argument("--recursive", action="store_true", help="Descend into sub-folders")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def collect_photos(inputs: List[Path], image_service: ImageService, recursive: bool = False) -> List[Path]:
    photos: List[Path] = []
    for item in inputs:
        if item.is_dir():
            photos.extend(image_service.list_folder(item, recursive=recursive))
        else:
            photos.append(item)
    return photos


def _report(statuses) -> None:
    for status in statuses:
        if status.ok:
            print(f"  ok      {status.source} ({status.pages} page(s))")
        else:
            print(f"  FAILED  {status.source} [{status.stage}] {status.error}")


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)

    image_service = ImageService()
    photos = collect_photos(args.photos, image_service, recursive=args.recursive)
    if not photos:
        logger.error("No photos found")
        return 2

    options = ProcessingOptions.from_env(
        num_colors=args.colors,
        max_dimension=args.max_dimension,
        seed=args.seed,
        palette_source=PaletteSource(args.palette_source) if args.palette_source else None,
    )

    try:
        result = build_book(
            photos,
            args.name,
            ProcessingMode(args.mode),
            options,
            title=args.title,
            max_workers=args.workers,
            image_service=image_service,
            show_progress=True,
        )
    except BookError as err:
        logger.error(f"Could not build book: {err}")
        _report(err.statuses)
        return 1
    except (ValueError, ImageProcessingError) as err:
        logger.error(f"Could not build book: {err}")
        return 1

    output = args.output or Path(OUTPUT_DIR) / book_filename(args.name)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.pdf)

    if args.save_pages:
        pages_dir = output.with_suffix("")
        for number, page in enumerate(result.pages, 1):
            image_service.save(page.image, pages_dir / f"{number:02d}_{page.kind.value}.png")
        logger.info(f"Pages written to {pages_dir}")

    _report(result.statuses)
    print(f"Book saved to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
