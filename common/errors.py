"""
Error types shared by both edge engines and the driver.

Every error here is fatal to the current run and is never retried.
"""


class EdgeParityError(Exception):
    """Base class for all edge-parity failures."""


class InvalidImageError(EdgeParityError, ValueError):
    """Source image or intensity buffer is empty, malformed or of an unsupported layout."""


class AcceleratorUnavailableError(EdgeParityError, RuntimeError):
    """The parallel execution domain (CUDA device, kernel) cannot be initialized or used."""


class DimensionMismatchError(EdgeParityError, ValueError):
    """Two edge buffers that must be compared have different shapes."""


class AllocationError(EdgeParityError, MemoryError):
    """A host or device buffer could not be allocated."""
