"""
Explicit lifecycle for the CUDA execution domain: init before first use, close at the end.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from common.errors import AcceleratorUnavailableError
from common.gradient import SOBEL_X, SOBEL_Y
from gpu.edges import GRADIENT_KERNEL_NAME, GRADIENT_KERNEL_SRC, gpu_gradient_edges

try:
    import cupy as cp
    from cupy import RawKernel
except Exception as exc:  # pragma: no cover
    cp = None
    RawKernel = None
    _gpu_import_error = exc
else:
    _gpu_import_error = None

logger = logging.getLogger(__name__)


class GpuContext:
    """
    Owns the device selection, the compiled kernel and the weight buffers.

        with GpuContext(device_id=0) as ctx:
            edges, timings = gpu_gradient_edges(intensity, ctx)
    """

    def __init__(
        self,
        device_id: int = 0,
        block_size: Tuple[int, int] = (16, 16),
        warmup: bool = True,
    ) -> None:
        if len(block_size) != 2 or min(block_size) < 1:
            raise ValueError(f"block_size must be two positive ints, got {block_size}")
        self.device_id = int(device_id)
        self.block_size = (int(block_size[0]), int(block_size[1]))
        self.warmup = bool(warmup)
        self.device_name: Optional[str] = None
        self._kernel = None
        self._kx = None
        self._ky = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> "GpuContext":
        if self._initialized:
            return self
        if cp is None:
            raise AcceleratorUnavailableError(f"CuPy not available: {_gpu_import_error}")

        try:
            count = cp.cuda.runtime.getDeviceCount()
        except Exception as exc:
            raise AcceleratorUnavailableError(f"No usable CUDA runtime: {exc}") from exc
        if count == 0:
            raise AcceleratorUnavailableError("No CUDA device found")
        if not 0 <= self.device_id < count:
            raise AcceleratorUnavailableError(
                f"CUDA device {self.device_id} requested, {count} available"
            )

        try:
            cp.cuda.Device(self.device_id).use()
            props = cp.cuda.runtime.getDeviceProperties(self.device_id)
            name = props.get("name", b"")
            self.device_name = name.decode() if isinstance(name, bytes) else str(name)

            self._kernel = RawKernel(GRADIENT_KERNEL_SRC, GRADIENT_KERNEL_NAME)
            self._kernel.compile()
            self._kx = cp.asarray(SOBEL_X.ravel(), dtype=cp.int32)
            self._ky = cp.asarray(SOBEL_Y.ravel(), dtype=cp.int32)
        except Exception as exc:
            self._release()
            raise AcceleratorUnavailableError(f"CUDA initialization failed: {exc}") from exc

        self._initialized = True
        logger.info("CUDA device %d ready (%s)", self.device_id, self.device_name)

        if self.warmup:
            # First launch pays module load; keep it out of timed runs.
            try:
                gpu_gradient_edges(np.zeros((1, 1), dtype=np.int16), self)
            except Exception as exc:
                self.close()
                raise AcceleratorUnavailableError(f"CUDA warm-up launch failed: {exc}") from exc
        return self

    def require(self):
        """Return (kernel, kx, ky) or raise if the context is not usable."""
        if not self._initialized:
            raise AcceleratorUnavailableError("GpuContext used before init() or after close()")
        cp.cuda.Device(self.device_id).use()
        return self._kernel, self._kx, self._ky

    def close(self) -> None:
        if not self._initialized:
            return
        self._release()
        self._initialized = False
        cp.get_default_memory_pool().free_all_blocks()
        cp.get_default_pinned_memory_pool().free_all_blocks()
        logger.debug("CUDA context for device %d closed", self.device_id)

    def _release(self) -> None:
        self._kernel = None
        self._kx = None
        self._ky = None

    def __enter__(self) -> "GpuContext":
        return self.init()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
