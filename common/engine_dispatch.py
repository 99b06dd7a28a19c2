"""
Parallel edge engine selection: CUDA kernel or host tiles, chosen by config.

There is no automatic failover: an unavailable CUDA backend is an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from common.config import get_section
from cpu.tiled_edges import tiled_gradient_edges
from gpu.context import GpuContext
from gpu.edges import gpu_gradient_edges

logger = logging.getLogger(__name__)

BACKENDS = ("cuda", "tiles")


@dataclass
class ParallelEngine:
    backend: str
    ctx: Optional[GpuContext] = None
    tile_size: int = 64
    workers: Optional[int] = None

    def run(self, intensity: np.ndarray) -> tuple[np.ndarray, dict]:
        if self.backend == "cuda":
            return gpu_gradient_edges(intensity, self.ctx)
        return tiled_gradient_edges(intensity, self.tile_size, self.workers)

    def describe(self) -> str:
        if self.backend == "cuda":
            bx, by = self.ctx.block_size
            return f"cuda (device {self.ctx.device_id}: {self.ctx.device_name}, block {bx}x{by})"
        return f"tiles ({self.tile_size}x{self.tile_size}, workers={self.workers or 'auto'})"

    def close(self) -> None:
        if self.ctx is not None:
            self.ctx.close()

    def __enter__(self) -> "ParallelEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_parallel_engine(cfg: Dict[str, Any]) -> ParallelEngine:
    """
    Build and initialize the parallel engine named by cfg['parallel']['backend'].

    Raises:
        AcceleratorUnavailableError: backend is 'cuda' and the device cannot be set up
        ValueError: unknown backend or bad partition parameters
    """
    par_cfg = get_section(cfg, "parallel")
    backend = str(par_cfg.get("backend", "cuda")).lower()

    if backend == "cuda":
        block_size = tuple(par_cfg.get("block_size", [16, 16]))
        ctx = GpuContext(
            device_id=int(par_cfg.get("device_id", 0)),
            block_size=block_size,
            warmup=bool(par_cfg.get("warmup", True)),
        )
        ctx.init()
        return ParallelEngine(backend="cuda", ctx=ctx)

    elif backend == "tiles":
        tile_size = int(par_cfg.get("tile_size", 64))
        if tile_size < 1:
            raise ValueError(f"parallel.tile_size must be >= 1, got {tile_size}")
        workers = par_cfg.get("workers")
        workers = int(workers) if workers is not None else None
        logger.info("Using host tile backend (tile_size=%d)", tile_size)
        return ParallelEngine(backend="tiles", tile_size=tile_size, workers=workers)

    else:
        raise ValueError(f"Unknown parallel backend: {backend} (expected one of {BACKENDS})")
