"""
CPU reference implementation of the gradient-magnitude edge map.
"""

from __future__ import annotations

import logging

import numpy as np

from common.errors import AllocationError
from common.gradient import combine_magnitude, gradient_at
from common.intensity import validate_intensity

logger = logging.getLogger(__name__)


def cpu_gradient_edges(intensity: np.ndarray) -> np.ndarray:
    """
    Single-threaded reference edge detector.

    Visits every cell once in row-major order and applies the shared Sobel
    operator with clamped borders.

    Args:
        intensity: 2D int16 intensity buffer (read-only)

    Returns:
        2D int16 edge buffer of the same shape
    """
    validate_intensity(intensity)
    h, w = intensity.shape

    try:
        edges = np.empty((h, w), dtype=np.int16)
    except MemoryError as exc:
        raise AllocationError(f"could not allocate {w}x{h} edge buffer") from exc

    # Python ints are much cheaper to index than numpy scalars.
    try:
        rows = intensity.tolist()
    except MemoryError as exc:
        raise AllocationError(f"could not copy {w}x{h} intensity buffer") from exc
    logger.debug("cpu_gradient_edges: %dx%d", w, h)

    for y in range(h):
        out_row = [0] * w
        for x in range(w):
            gx, gy = gradient_at(rows, y, x, h, w)
            out_row[x] = combine_magnitude(gx, gy)
        edges[y, :] = out_row

    return edges
