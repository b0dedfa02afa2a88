from __future__ import annotations
from dataclasses import dataclass
from typing import List
import logging

import numpy as np

from ..errors import ImageProcessingError
from ..models.bitmap import Bitmap
from ..models.color import Color, hex_to_rgb, rgb_to_hex
from ..models.processing_options import ProcessingOptions
from .image_service import ImageService
from .palette_service import PaletteService

logger = logging.getLogger(__name__)

# Rows per block when remapping full-resolution pixels.
REMAP_CHUNK = 65_536


@dataclass
class QuantizationResult:
    """Flat-colour raster plus its palette, most used colour first."""
    image: Bitmap
    palette: List[str]       # '#rrggbb', exactly K entries
    counts: List[int]        # pixels mapped to palette[i]

    @property
    def colors(self) -> List[Color]:
        return [hex_to_rgb(h) for h in self.palette]


def nearest_indices(pixels: np.ndarray, centroids: np.ndarray, chunk: int = REMAP_CHUNK) -> np.ndarray:
    """
    Index of the nearest centroid (Euclidean RGB) for every row of *pixels*.
    On equal distances the lowest centroid index wins.
    """
    pixels = pixels.astype(np.float64, copy=False)
    centroids = centroids.astype(np.float64, copy=False)
    labels = np.empty(len(pixels), dtype=np.intp)
    for start in range(0, len(pixels), chunk):
        block = pixels[start:start + chunk]
        # Squared distance orders exactly like the true distance.
        dist = ((block[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
        labels[start:start + chunk] = np.argmin(dist, axis=1)  # first minimum
    return labels


def round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


class QuantizationService:
    """
    Posterizes a photo to K flat colours with iterative (Lloyd-style)
    clustering on a strided sample, then remaps every pixel.
    """

    def __init__(self,
                 image_service: ImageService | None = None,
                 palette_service: PaletteService | None = None):
        self.image_service = image_service or ImageService()
        self.palette_service = palette_service or PaletteService()

    # ─── Clustering steps ──────────────────────────────────────────
    @staticmethod
    def sample_pixels(pixels: np.ndarray, sample_size: int) -> np.ndarray:
        """Every ``total // sample_size``-th pixel when over the bound, else all."""
        total = len(pixels)
        if total <= sample_size:
            return pixels
        stride = total // sample_size
        return pixels[::stride]

    @staticmethod
    def seed_centroids(sample: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
        """K uniform draws from the sample; repeats only when it has fewer than K pixels."""
        picks = rng.choice(len(sample), size=k, replace=len(sample) < k)
        return sample[picks].astype(np.float64)

    @staticmethod
    def update_centroids(sample: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """
        Mean of the assigned pixels per centroid, rounded half-up and clamped.
        A centroid with no pixels keeps its value.
        """
        k = len(centroids)
        counts = np.bincount(labels, minlength=k)
        sums = np.stack(
            [np.bincount(labels, weights=sample[:, c], minlength=k) for c in range(3)],
            axis=1,
        )
        updated = centroids.copy()
        filled = counts > 0
        updated[filled] = np.clip(round_half_up(sums[filled] / counts[filled, None]), 0, 255)
        return updated

    def fit(self, sample: np.ndarray, k: int, iterations: int,
            rng: np.random.Generator) -> np.ndarray:
        """Run the fixed iteration budget and return (K, 3) integer-valued centroids."""
        centroids = self.seed_centroids(sample, k, rng)
        for i in range(iterations):
            labels = nearest_indices(sample, centroids)
            updated = self.update_centroids(sample, labels, centroids)
            moved = float(np.abs(updated - centroids).max())
            centroids = updated
            logger.debug(f"iteration {i + 1}/{iterations}: max centroid shift {moved:.1f}")
        return np.clip(round_half_up(centroids), 0, 255)

    # ─── Public API ────────────────────────────────────────────────
    def quantize(self,
                 bitmap: Bitmap,
                 num_colors: int | None = None,
                 options: ProcessingOptions | None = None,
                 rng: np.random.Generator | None = None) -> QuantizationResult:
        """
        Args:
            bitmap: decoded input photo
            num_colors: K (>= 1); falls back to options.num_colors
            options: processing options (defaults used when None)
            rng: random source for centroid seeding; when None one is
                created from options.seed (system entropy if unset)

        Returns:
            QuantizationResult with a 3-channel raster whose every pixel is
            one of the K palette colours.

        Raises:
            ValueError: if K < 1
            ImageProcessingError: stage "quantize" (or "resize").
        """
        options = options or ProcessingOptions()
        k = options.num_colors if num_colors is None else num_colors
        if k < 1:
            raise ValueError(f"num_colors must be >= 1, got {k}")
        if not isinstance(bitmap, Bitmap):
            raise ImageProcessingError("quantize", TypeError(f"expected Bitmap, got {type(bitmap).__name__}"))
        rng = rng if rng is not None else np.random.default_rng(options.seed)

        resized = self.image_service.resize_to_bound(bitmap, options.max_dimension)
        try:
            pixels = resized.rgb.reshape(-1, 3).astype(np.int64)
            sample = self.sample_pixels(pixels, options.sample_size)
            centroids = self.fit(sample, k, options.iterations, rng)

            labels = nearest_indices(pixels, centroids)
            counts = np.bincount(labels, minlength=k)

            order = self.palette_service.rank_by_frequency(counts.tolist())
            palette_rgb = centroids[order].astype(np.uint8)
            remap = np.empty(k, dtype=np.intp)
            remap[order] = np.arange(k)

            out_pixels = palette_rgb[remap[labels]].reshape(resized.height, resized.width, 3)
        except (ValueError, MemoryError) as err:
            raise ImageProcessingError("quantize", err) from err

        palette = [rgb_to_hex(*(int(c) for c in color)) for color in palette_rgb]
        out = self.image_service.create_bitmap(np.ascontiguousarray(out_pixels), bitmap.path)

        logger.info(f"Quantized {out.width}x{out.height} to {k} colours "
                    f"({len(set(palette))} distinct) from {len(sample)} samples")
        return QuantizationResult(image=out, palette=palette, counts=[int(counts[i]) for i in order])
