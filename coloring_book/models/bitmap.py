from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass
class Bitmap:
    """
    Simple data object: decoded pixels (+ optional source path for bookkeeping).
    No codec logic outside the repository layer.
    """
    pixels: np.ndarray  # Shape (H, W, C), dtype uint8, C in {3, 4}, RGB(A) order.
    path: Path | None = None  # Source of the bitmap.

    def __post_init__(self):
        if not isinstance(self.pixels, np.ndarray):
            raise ValueError(f"Bitmap pixels must be a numpy array, got {type(self.pixels).__name__}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] not in (3, 4):
            raise ValueError(f"Bitmap pixels must have shape (H, W, 3|4), got {self.pixels.shape}")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("Bitmap is empty")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Bitmap pixels must be uint8, got {self.pixels.dtype}")

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def rgb(self) -> np.ndarray:
        """Colour channels only; alpha never takes part in colour maths."""
        return self.pixels[:, :, :3]
