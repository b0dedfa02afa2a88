from pathlib import Path
from typing import List, Union, Tuple
import logging

import cv2
import numpy as np

from ..errors import ImageProcessingError
from ..models.bitmap import Bitmap
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


class ImageService:
    """Decoding, resizing and colour-space helpers. No page semantics here."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_bitmap(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Bitmap:
        return self.image_repository.create_bitmap(pixels, path)

    def load(self, path: Union[str, Path]) -> Bitmap:
        """Load a single image from disk into a Bitmap."""
        return self.image_repository.load(path)

    def decode(self, data: bytes, path: Union[str, Path] = None) -> Bitmap:
        return self.image_repository.decode(data, path)

    def encode_png(self, bitmap: Bitmap) -> bytes:
        return self.image_repository.encode_png(bitmap)

    def save(self, bitmap: Bitmap, path: Union[str, Path] = None) -> Path:
        return self.image_repository.save(bitmap, path)

    def list_folder(self, folder: Union[str, Path], *, recursive: bool = False) -> List[Path]:
        return self.image_repository.list_dir(folder, recursive=recursive)

    # ─── Geometry ─────────────────────────────────────────────────────
    @staticmethod
    def bounded_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
        """
        Target (width, height) so that max(width, height) <= max_dimension.
        Aspect ratio is preserved; images are never upscaled.
        """
        longest = max(width, height)
        if longest <= max_dimension:
            return width, height
        scale = max_dimension / longest
        return max(1, int(round(width * scale))), max(1, int(round(height * scale)))

    def resize_to_bound(self, bitmap: Bitmap, max_dimension: int) -> Bitmap:
        """
        Downscale *bitmap* to fit the long-edge bound. Returns the input
        unchanged when it already fits.
        """
        new_w, new_h = self.bounded_size(bitmap.width, bitmap.height, max_dimension)
        if (new_w, new_h) == (bitmap.width, bitmap.height):
            return bitmap
        try:
            resized = cv2.resize(bitmap.pixels, (new_w, new_h), interpolation=cv2.INTER_AREA)
        except cv2.error as err:
            raise ImageProcessingError("resize", err) from err
        logger.debug(f"Resized {bitmap.width}x{bitmap.height} → {new_w}x{new_h}")
        return self.create_bitmap(resized, bitmap.path)

    # ─── Colour ───────────────────────────────────────────────────────
    @staticmethod
    def luma(bitmap: Bitmap) -> np.ndarray:
        """
        Single-channel grayscale (H, W) uint8:
        gray = 0.299 R + 0.587 G + 0.114 B, rounded to nearest.
        """
        gray = bitmap.rgb.astype(np.float64) @ LUMA_WEIGHTS
        return np.clip(np.rint(gray), 0, 255).astype(np.uint8)

    def to_grayscale(self, bitmap: Bitmap) -> Bitmap:
        """
        Same geometry and channel count; R, G and B all carry the luma value.
        Alpha (if any) is left as is. Applying it twice changes nothing.
        """
        gray = self.luma(bitmap)
        pixels = bitmap.pixels.copy()
        pixels[:, :, :3] = gray[:, :, None]
        return self.create_bitmap(pixels, bitmap.path)

    @staticmethod
    def gray_to_rgb(gray: np.ndarray) -> np.ndarray:
        """(H, W) → (H, W, 3) with the channel replicated."""
        return np.ascontiguousarray(np.repeat(gray[:, :, None], 3, axis=2))
