"""
Exact cell-by-cell comparison of two edge buffers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from common.errors import DimensionMismatchError


@dataclass(frozen=True)
class Mismatch:
    row: int
    col: int
    left: int
    right: int


@dataclass(frozen=True)
class ComparisonResult:
    equivalent: bool
    mismatch_count: int
    total_cells: int
    mismatches: Tuple[Mismatch, ...] = field(default_factory=tuple)  # first N, row-major

    @property
    def first_mismatch(self) -> Mismatch | None:
        return self.mismatches[0] if self.mismatches else None

    @property
    def match_ratio(self) -> float:
        if self.total_cells == 0:
            return 1.0
        return (self.total_cells - self.mismatch_count) / self.total_cells


def compare_edge_buffers(left: np.ndarray, right: np.ndarray, max_report: int = 10) -> ComparisonResult:
    """
    Compare two edge buffers for exact equality.

    Args:
        left, right: 2D edge buffers
        max_report: number of mismatching cells to list (0 lists none)

    Returns:
        ComparisonResult; a non-equivalent result is a finding, not an error
    """
    left = np.asarray(left)
    right = np.asarray(right)
    if left.shape != right.shape:
        raise DimensionMismatchError(f"edge buffers differ in shape: {left.shape} vs {right.shape}")

    diff = left != right
    mismatch_count = int(np.count_nonzero(diff))

    mismatches: Tuple[Mismatch, ...] = ()
    if mismatch_count and max_report > 0:
        coords = np.argwhere(diff)[:max_report]
        mismatches = tuple(
            Mismatch(int(r), int(c), int(left[r, c]), int(right[r, c])) for r, c in coords
        )

    return ComparisonResult(
        equivalent=mismatch_count == 0,
        mismatch_count=mismatch_count,
        total_cells=int(left.size),
        mismatches=mismatches,
    )
