from __future__ import annotations
import logging

import cv2
import numpy as np

from ..errors import ImageProcessingError
from ..models.bitmap import Bitmap
from ..models.kernel import LAPLACIAN, SOBEL_X, SOBEL_Y
from ..models.processing_options import EdgeOperator, ProcessingOptions
from .image_service import ImageService

logger = logging.getLogger(__name__)


class LineArtService:
    """
    Photo → coloring-page line art.

    Pipeline: bound resize → luma → edge magnitude → threshold/amplify →
    invert → replicate to RGB. Dark ink on white paper.
    """

    def __init__(self, image_service: ImageService | None = None):
        self.image_service = image_service or ImageService()

    # ─── Edge maps ─────────────────────────────────────────────────
    @staticmethod
    def _correlate(gray: np.ndarray, kernel: np.ndarray) -> np.ndarray:
        # filter2D correlates; the kernel is not flipped.
        return cv2.filter2D(gray.astype(np.float64), cv2.CV_64F, np.array(kernel),
                            borderType=cv2.BORDER_REPLICATE)

    @classmethod
    def gradient_magnitude(cls, gray: np.ndarray,
                           operator: EdgeOperator = EdgeOperator.SOBEL) -> np.ndarray:
        """
        Per-pixel edge strength (float64, same shape as *gray*).
        Pixels without a full 3×3 neighbourhood are 0.
        """
        if operator is EdgeOperator.LAPLACIAN:
            magnitude = np.abs(cls._correlate(gray, LAPLACIAN))
        else:
            gx = cls._correlate(gray, SOBEL_X)
            gy = cls._correlate(gray, SOBEL_Y)
            magnitude = np.sqrt(gx * gx + gy * gy)

        magnitude[0, :] = 0
        magnitude[-1, :] = 0
        magnitude[:, 0] = 0
        magnitude[:, -1] = 0
        return magnitude

    @staticmethod
    def threshold_edges(magnitude: np.ndarray, threshold: float, amplify: float) -> np.ndarray:
        """magnitude <= threshold → 0, otherwise min(255, magnitude * amplify), truncated to uint8."""
        edges = np.where(magnitude > threshold, np.minimum(255.0, magnitude * amplify), 0.0)
        return np.floor(edges).astype(np.uint8)

    def edge_map(self, bitmap: Bitmap, options: ProcessingOptions) -> np.ndarray:
        """Edge values (H, W) uint8 before inversion; 0 means background."""
        gray = self.image_service.luma(bitmap)
        magnitude = self.gradient_magnitude(gray, options.edge_operator)
        return self.threshold_edges(magnitude, options.edge_threshold, options.edge_amplify)

    # ─── Public API ────────────────────────────────────────────────
    def extract(self, bitmap: Bitmap, options: ProcessingOptions | None = None) -> Bitmap:
        """
        Args:
            bitmap: decoded input photo (any size, RGB or RGBA)
            options: processing options (defaults used when None)

        Returns:
            Bitmap: 3-channel line art, resized to the long-edge bound.

        Raises:
            ImageProcessingError: stage "line_art" (or "resize").
        """
        options = options or ProcessingOptions()
        if not isinstance(bitmap, Bitmap):
            raise ImageProcessingError("line_art", TypeError(f"expected Bitmap, got {type(bitmap).__name__}"))

        resized = self.image_service.resize_to_bound(bitmap, options.max_dimension)
        try:
            edges = self.edge_map(resized, options)
        except (cv2.error, ValueError, MemoryError) as err:
            raise ImageProcessingError("line_art", err) from err

        inverted = 255 - edges
        out = self.image_service.create_bitmap(self.image_service.gray_to_rgb(inverted), bitmap.path)

        ink = int(np.count_nonzero(edges))
        logger.info(f"Line art {out.width}x{out.height}: {ink} edge pixels "
                    f"({100.0 * ink / edges.size:.1f}%)")
        return out
