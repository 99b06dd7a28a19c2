"""Tests for the shared Sobel operator definition."""

import numpy as np
import pytest

from common.gradient import (
    INT16_MAX,
    SOBEL_X,
    SOBEL_Y,
    clamp_index,
    combine_magnitude,
    gradient_at,
    gradient_block,
    neighborhood_at,
)


class TestKernels:
    def test_zero_sum(self):
        assert SOBEL_X.sum() == 0
        assert SOBEL_Y.sum() == 0

    def test_transpose_pair(self):
        np.testing.assert_array_equal(SOBEL_X.T, SOBEL_Y)


class TestClamp:
    @pytest.mark.parametrize("i,n,expected", [(-1, 5, 0), (0, 5, 0), (4, 5, 4), (5, 5, 4), (2, 1, 0)])
    def test_clamp_index(self, i, n, expected):
        assert clamp_index(i, n) == expected

    def test_corner_neighborhood_replicates(self):
        rows = [[1, 2], [3, 4]]
        assert neighborhood_at(rows, 0, 0, 2, 2) == [[1, 1, 2], [1, 1, 2], [3, 3, 4]]


class TestGradientAt:
    def test_horizontal_ramp(self):
        rows = [[0, 10, 20]] * 3
        gx, gy = gradient_at(rows, 1, 1, 3, 3)
        assert gx == 80
        assert gy == 0

    def test_vertical_ramp(self):
        rows = [[0] * 3, [10] * 3, [20] * 3]
        gx, gy = gradient_at(rows, 1, 1, 3, 3)
        assert gx == 0
        assert gy == 80

    def test_single_cell(self):
        assert gradient_at([[123]], 0, 0, 1, 1) == (0, 0)

    def test_combine_is_l1(self):
        assert combine_magnitude(-30, 12) == 42

    def test_combine_saturates(self):
        assert combine_magnitude(30000, -30000) == INT16_MAX


class TestGradientBlock:
    def test_matches_scalar_path(self):
        rng = np.random.default_rng(7)
        buf = rng.integers(0, 256, size=(9, 11)).astype(np.int16)
        padded = np.pad(buf, 1, mode="edge")
        block = gradient_block(padded, 9, 11)

        rows = buf.tolist()
        expected = np.array(
            [[combine_magnitude(*gradient_at(rows, y, x, 9, 11)) for x in range(11)] for y in range(9)],
            dtype=np.int16,
        )
        assert block.dtype == np.int16
        np.testing.assert_array_equal(block, expected)

    def test_saturates_extreme_values(self):
        buf = np.zeros((3, 4), dtype=np.int16)
        buf[:, 2:] = 30000
        block = gradient_block(np.pad(buf, 1, mode="edge"), 3, 4)
        assert block.max() == INT16_MAX
