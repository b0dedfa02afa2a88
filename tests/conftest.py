import numpy as np
import pytest

from coloring_book.models.bitmap import Bitmap
from coloring_book.models.processing_options import ProcessingOptions


def _solid(width, height, color, channels=3):
    pixels = np.zeros((height, width, channels), dtype=np.uint8)
    pixels[:, :, :3] = color
    if channels == 4:
        pixels[:, :, 3] = 255
    return Bitmap(pixels)


@pytest.fixture
def solid():
    return _solid


@pytest.fixture
def options():
    return ProcessingOptions(seed=1234)


@pytest.fixture
def gradient_photo():
    """64×48 RGB with smooth ramps and a hard-edged square."""
    h, w = 48, 64
    yy, xx = np.mgrid[0:h, 0:w]
    pixels = np.stack(
        [xx * 255 // (w - 1), yy * 255 // (h - 1), (xx + yy) * 255 // (w + h - 2)],
        axis=2,
    ).astype(np.uint8)
    pixels[10:30, 20:40] = (250, 20, 20)
    return Bitmap(pixels)


@pytest.fixture
def four_color_bitmap():
    pixels = np.array(
        [[[0, 0, 0], [255, 255, 255]],
         [[255, 0, 0], [0, 0, 255]]],
        dtype=np.uint8,
    )
    return Bitmap(pixels)
