from __future__ import annotations
from collections import Counter
from typing import List, Sequence
import logging
import math

from ..errors import ImageProcessingError
from ..models.bitmap import Bitmap
from ..models.color import FALLBACK_PALETTE, rgb_to_hex

logger = logging.getLogger(__name__)

# Roughly how many grid points the frequency sample aims for.
SAMPLE_TARGET = 1000


class PaletteService:
    """
    Frequency-ranked palettes of exactly N colours.
    Index 0 is always the most common colour, so swatch numbers stay stable.
    """

    @staticmethod
    def sample_step(width: int, height: int) -> int:
        return max(1, int(math.floor(math.sqrt((width * height) / SAMPLE_TARGET))))

    @staticmethod
    def rank_by_frequency(counts: Sequence[int]) -> List[int]:
        """Indices of *counts* by descending count; ties keep their original order."""
        return sorted(range(len(counts)), key=lambda i: -counts[i])

    @staticmethod
    def normalize(palette: Sequence[str], num_colors: int) -> List[str]:
        """
        Truncate or pad *palette* to exactly *num_colors* entries.
        Padding takes FALLBACK_PALETTE[len(result) % 8] at each step.
        """
        result = list(palette[:num_colors])
        while len(result) < num_colors:
            result.append(FALLBACK_PALETTE[len(result) % len(FALLBACK_PALETTE)])
        return result

    def tally(self, bitmap: Bitmap) -> Counter:
        """Hex colour → occurrences on the stride-sampled grid."""
        step = self.sample_step(bitmap.width, bitmap.height)
        grid = bitmap.rgb[::step, ::step].reshape(-1, 3)
        counts: Counter = Counter()
        # Keys are inserted in scan order, which breaks ties when sorting.
        for r, g, b in grid.tolist():
            counts[rgb_to_hex(r, g, b)] += 1
        return counts

    def extract_palette(self, bitmap: Bitmap, num_colors: int = 8) -> List[str]:
        """
        Args:
            bitmap: usually an already quantized raster
            num_colors: N (>= 1)

        Returns:
            List[str]: exactly N '#rrggbb' colours, most frequent first,
            padded with fallback colours when fewer were observed.
        """
        if num_colors < 1:
            raise ValueError(f"num_colors must be >= 1, got {num_colors}")
        if not isinstance(bitmap, Bitmap):
            raise ImageProcessingError("palette", TypeError(f"expected Bitmap, got {type(bitmap).__name__}"))

        counts = self.tally(bitmap)
        keys = list(counts.keys())
        ranked = [keys[i] for i in self.rank_by_frequency([counts[k] for k in keys])]
        palette = self.normalize(ranked, num_colors)

        observed = min(len(ranked), num_colors)
        logger.info(f"Palette: {observed} observed, {num_colors - observed} fallback colours")
        return palette

