"""
Intensity extraction shared by both engines.

Formula: plain integer channel average, I = (c0 + c1 + c2) // 3.
A 4th (alpha) channel is ignored; a 2-D uint8 image is taken as intensity directly.
"""

from __future__ import annotations

import numpy as np

from common.errors import AllocationError, InvalidImageError

INTENSITY_DTYPE = np.int16
SUPPORTED_CHANNELS = (3, 4)


def extract_intensity(image: np.ndarray) -> np.ndarray:
    """
    Derive a single-channel intensity buffer from a source image.

    Args:
        image: (H, W, 3|4) or (H, W) uint8 array

    Returns:
        (H, W) int16 C-contiguous read-only array
    """
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"expected numpy array, got {type(image).__name__}")
    if image.dtype != np.uint8:
        raise InvalidImageError(f"expected uint8 image, got {image.dtype}")
    if image.ndim not in (2, 3):
        raise InvalidImageError(f"expected 2D or 3D image, got shape {image.shape}")

    h, w = image.shape[:2]
    if h == 0 or w == 0:
        raise InvalidImageError(f"image has zero size: {w}x{h}")

    try:
        if image.ndim == 2:
            intensity = image.astype(INTENSITY_DTYPE)
        else:
            channels = image.shape[2]
            if channels not in SUPPORTED_CHANNELS:
                raise InvalidImageError(
                    f"unsupported channel count {channels}, expected one of {SUPPORTED_CHANNELS}"
                )
            # uint16 accumulator: 3 * 255 fits without overflow
            total = image[:, :, :3].sum(axis=2, dtype=np.uint16)
            intensity = (total // 3).astype(INTENSITY_DTYPE)
    except MemoryError as exc:
        raise AllocationError(f"could not allocate {w}x{h} intensity buffer") from exc

    intensity = np.ascontiguousarray(intensity)
    intensity.flags.writeable = False
    return intensity


def validate_intensity(intensity: np.ndarray) -> None:
    """Raise InvalidImageError unless `intensity` is a non-empty 2D int16 buffer."""
    if not isinstance(intensity, np.ndarray):
        raise InvalidImageError(f"expected numpy array, got {type(intensity).__name__}")
    if intensity.ndim != 2:
        raise InvalidImageError(f"intensity buffer must be 2D, got shape {intensity.shape}")
    if intensity.dtype != INTENSITY_DTYPE:
        raise InvalidImageError(f"intensity buffer must be int16, got {intensity.dtype}")
    if intensity.shape[0] == 0 or intensity.shape[1] == 0:
        raise InvalidImageError(f"intensity buffer has zero size: {intensity.shape}")
