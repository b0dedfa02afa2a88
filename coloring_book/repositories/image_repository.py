from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Union, Iterable, List, Iterator
import logging
import os

import numpy as np
from dotenv import load_dotenv
from PIL import Image as PILImage, ImageOps, UnidentifiedImageError

from ..errors import DecodeError
from ..models.bitmap import Bitmap

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTS = ".jpg,.jpeg,.png,.webp,.bmp"


class ImageRepository:
    """
    Handles codec work and file I/O for Bitmap entities.
    Everything above this layer sees decoded pixels only.
    """
    def __init__(self):
        self.VALID_EXTS = {
            ext.strip().lower()
            for ext in os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_EXTS).split(",")
            if ext.strip()
        }

    @staticmethod
    def create_bitmap(pixels: np.ndarray, path: Union[str, Path] = None) -> Bitmap:
        if path is None:
            return Bitmap(pixels)
        return Bitmap(pixels=pixels, path=Path(path))

    @staticmethod
    def _from_pil(pil_obj: PILImage.Image, path: Path | None) -> Bitmap:
        # Phone photos carry their rotation in EXIF.
        pil_obj = ImageOps.exif_transpose(pil_obj)
        mode = "RGBA" if pil_obj.mode in ("RGBA", "LA", "PA") or "transparency" in pil_obj.info else "RGB"
        arr = np.asarray(pil_obj.convert(mode), dtype=np.uint8)
        return Bitmap(pixels=np.ascontiguousarray(arr), path=path)

    def decode(self, data: bytes, path: Union[str, Path] = None) -> Bitmap:
        """
        Decode an encoded image (JPEG/PNG/WEBP/...) into a Bitmap.

        Raises:
            DecodeError: if *data* is empty or not a readable image.
        """
        if not data:
            raise DecodeError(message="decode failed: empty image buffer")
        try:
            with PILImage.open(BytesIO(data)) as pil_obj:
                pil_obj.load()
                return self._from_pil(pil_obj, Path(path) if path else None)
        except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as err:
            raise DecodeError(err) from err

    def load(self, path: Union[str, Path]) -> Bitmap:
        path = Path(path)
        if not path.is_file():
            raise DecodeError(FileNotFoundError(f"Image not found or unreadable: {path}"))
        return self.decode(path.read_bytes(), path)

    @staticmethod
    def encode_png(bitmap: Bitmap) -> bytes:
        buffer = BytesIO()
        PILImage.fromarray(np.ascontiguousarray(bitmap.pixels)).save(buffer, format="PNG")
        return buffer.getvalue()

    def save(self, bitmap: Bitmap, path: Union[str, Path] = None) -> Path:
        path = Path(path or bitmap.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.encode_png(bitmap))
        return path

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Path]:
        """
        Yield image file paths one at a time, sorted by name so book
        page order is stable.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if not p.is_file():
                continue
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            yield p

    def list_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[Path]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
