# models/kernel.py
"""
3×3 convolution kernels (signed integer weights).

Arrays are flagged read-only so a kernel can be shared between threads.
"""
import numpy as np


def _kernel(weights) -> np.ndarray:
    k = np.array(weights, dtype=np.float64).reshape(3, 3)
    k.setflags(write=False)
    return k


SOBEL_X = _kernel([-1, 0, 1,
                   -2, 0, 2,
                   -1, 0, 1])

SOBEL_Y = _kernel([-1, -2, -1,
                    0,  0,  0,
                    1,  2,  1])

LAPLACIAN = _kernel([-1, -1, -1,
                     -1,  8, -1,
                     -1, -1, -1])
