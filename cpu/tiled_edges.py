"""
Host data-parallel edge detector: disjoint tiles on a thread pool.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Optional, Tuple

import numpy as np

from common.errors import AllocationError
from common.gradient import RADIUS, gradient_block
from common.intensity import validate_intensity
from common.timing import Stopwatch

logger = logging.getLogger(__name__)

Tile = Tuple[int, int, int, int]  # y0, y1, x0, x1 (half-open)


def iter_tiles(h: int, w: int, tile_size: int) -> Iterator[Tile]:
    """Yield disjoint tiles covering an h x w grid in row-major order."""
    if tile_size < 1:
        raise ValueError(f"tile_size must be >= 1, got {tile_size}")
    for y0 in range(0, h, tile_size):
        y1 = min(y0 + tile_size, h)
        for x0 in range(0, w, tile_size):
            yield y0, y1, x0, min(x0 + tile_size, w)


def _compute_tile(intensity: np.ndarray, edges: np.ndarray, tile: Tile) -> None:
    y0, y1, x0, x1 = tile
    h, w = intensity.shape
    ys = np.clip(np.arange(y0 - RADIUS, y1 + RADIUS), 0, h - 1)
    xs = np.clip(np.arange(x0 - RADIUS, x1 + RADIUS), 0, w - 1)
    try:
        padded = intensity[np.ix_(ys, xs)]
        # Only this tile's cells are written.
        edges[y0:y1, x0:x1] = gradient_block(padded, y1 - y0, x1 - x0)
    except MemoryError as exc:
        raise AllocationError(f"could not allocate working buffers for tile {tile}") from exc


def tiled_gradient_edges(
    intensity: np.ndarray,
    tile_size: int = 64,
    workers: Optional[int] = None,
) -> tuple[np.ndarray, dict]:
    """
    Parallel edge detector on host threads.

    Args:
        intensity: 2D int16 intensity buffer (read-only, shared by all workers)
        tile_size: edge length of the square tiles each worker owns
        workers: thread count (None -> os.cpu_count())

    Returns:
        edges: 2D int16 edge buffer
        timings: dict with 't_compute_ms' and 'tiles'
    """
    validate_intensity(intensity)
    h, w = intensity.shape
    workers = workers or os.cpu_count() or 1

    try:
        edges = np.empty((h, w), dtype=np.int16)
    except MemoryError as exc:
        raise AllocationError(f"could not allocate {w}x{h} edge buffer") from exc

    tiles = list(iter_tiles(h, w, tile_size))
    logger.debug("tiled_gradient_edges: %dx%d, %d tiles, %d workers", w, h, len(tiles), workers)

    with Stopwatch() as sw:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_compute_tile, intensity, edges, t) for t in tiles]
            for fut in futures:
                fut.result()

    return edges, {"t_compute_ms": sw.elapsed_ms, "tiles": len(tiles)}
