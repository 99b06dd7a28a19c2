"""
Shared gradient operator used by every edge engine.

Policy (all engines must follow it bit for bit):
  - kernels: 3x3 Sobel pair below
  - boundary: clamped replication (out-of-range neighbours read the nearest edge cell)
  - magnitude: |gx| + |gy| in 32-bit integers, saturated to [0, INT16_MAX]
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

SOBEL_X = np.array(
    [
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1],
    ],
    dtype=np.int32,
)
SOBEL_Y = np.array(
    [
        [-1, -2, -1],
        [0, 0, 0],
        [1, 2, 1],
    ],
    dtype=np.int32,
)

RADIUS = 1
INT16_MAX = int(np.iinfo(np.int16).max)

# Plain Python copies for the scalar reference path.
_KX: Tuple[Tuple[int, ...], ...] = tuple(tuple(int(v) for v in row) for row in SOBEL_X)
_KY: Tuple[Tuple[int, ...], ...] = tuple(tuple(int(v) for v in row) for row in SOBEL_Y)


def clamp_index(i: int, n: int) -> int:
    """Clamp a row/column index into [0, n - 1]."""
    if i < 0:
        return 0
    if i >= n:
        return n - 1
    return i


def neighborhood_at(rows: Sequence[Sequence[int]], y: int, x: int, h: int, w: int) -> list[list[int]]:
    """
    Return the 3x3 neighbourhood centred on (y, x) with clamped replication.
    """
    ys = [clamp_index(y + d, h) for d in (-1, 0, 1)]
    xs = [clamp_index(x + d, w) for d in (-1, 0, 1)]
    return [[rows[yy][xx] for xx in xs] for yy in ys]


def gradient_at(rows: Sequence[Sequence[int]], y: int, x: int, h: int, w: int) -> Tuple[int, int]:
    """
    Horizontal and vertical Sobel responses at (y, x).

    Args:
        rows: intensity samples indexable as rows[y][x]
        y, x: cell coordinate, must satisfy 0 <= y < h and 0 <= x < w
        h, w: grid height and width

    Returns:
        (gx, gy) as Python ints
    """
    win = neighborhood_at(rows, y, x, h, w)
    gx = 0
    gy = 0
    for i in range(3):
        wrow = win[i]
        kx = _KX[i]
        ky = _KY[i]
        for j in range(3):
            v = wrow[j]
            gx += v * kx[j]
            gy += v * ky[j]
    return gx, gy


def combine_magnitude(gx: int, gy: int) -> int:
    return saturate(abs(gx) + abs(gy))


def saturate(mag: int) -> int:
    return mag if mag <= INT16_MAX else INT16_MAX


def gradient_block(padded: np.ndarray, h: int, w: int) -> np.ndarray:
    """
    Vectorized magnitude over a block whose 1-cell halo is already present.

    Args:
        padded: (h + 2, w + 2) array holding the block plus its clamped halo
        h, w: size of the output block

    Returns:
        (h, w) int16 magnitudes, identical to combine_magnitude(gradient_at(...)) per cell
    """
    src = padded.astype(np.int32, copy=False)
    gx = np.zeros((h, w), dtype=np.int32)
    gy = np.zeros((h, w), dtype=np.int32)
    for i in range(3):
        for j in range(3):
            win = src[i:i + h, j:j + w]
            if SOBEL_X[i, j]:
                gx += win * SOBEL_X[i, j]
            if SOBEL_Y[i, j]:
                gy += win * SOBEL_Y[i, j]
    mag = np.abs(gx) + np.abs(gy)
    np.minimum(mag, INT16_MAX, out=mag)
    return mag.astype(np.int16)
