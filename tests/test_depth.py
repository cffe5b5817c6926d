"""Tests for DepthGrid and depth source normalization."""

import numpy as np
import pytest

from depthmesh.exceptions import ConfigurationError
from depthmesh.fields.depth import DepthGrid, build_depth_grid
from depthmesh.io.readers import read_pfm


class TestDepthGrid:
    def test_zeros_by_default(self):
        grid = DepthGrid(3, 2)
        assert grid.shape == (3, 2)
        assert grid.size == 6
        np.testing.assert_array_equal(grid.values, 0.0)
        assert grid.values.dtype == np.float32

    def test_idx_is_row_major(self):
        grid = DepthGrid(4, 3)
        assert grid.idx(0, 0) == 0
        assert grid.idx(3, 0) == 3
        assert grid.idx(0, 1) == 4
        assert grid.idx(2, 2) == 10

    def test_get_set(self):
        grid = DepthGrid(4, 3)
        grid[2, 1] = 0.5
        assert grid[2, 1] == 0.5
        assert grid.values[6] == 0.5
        assert grid.as_array()[1, 2] == 0.5

    def test_as_array_is_view(self):
        grid = DepthGrid(2, 2)
        grid.as_array()[1, 0] = 0.25
        assert grid[0, 1] == 0.25

    def test_from_array(self):
        grid = DepthGrid.from_array(np.arange(6).reshape(2, 3) / 10)
        assert grid.shape == (3, 2)
        assert grid[2, 0] == pytest.approx(0.2)
        assert grid[0, 1] == pytest.approx(0.3)

    def test_copy_is_independent(self):
        grid = DepthGrid(2, 1, [0.1, 0.2])
        clone = grid.copy()
        clone[0, 0] = 0.9
        assert grid[0, 0] == pytest.approx(0.1)

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError, match="finite"):
            DepthGrid(2, 1, [0.1, np.nan])
        with pytest.raises(ValueError, match="finite"):
            DepthGrid(2, 1, [np.inf, 0.0])

    def test_rejects_size_mismatch(self):
        with pytest.raises(ValueError, match="Expected 4 values"):
            DepthGrid(2, 2, [0.0, 0.0, 0.0])

    def test_rejects_negative_size(self):
        with pytest.raises(ValueError):
            DepthGrid(-1, 2)

    def test_out_of_range_cell(self):
        grid = DepthGrid(2, 2)
        with pytest.raises(IndexError):
            grid[2, 0]
        with pytest.raises(IndexError):
            grid[0, -1] = 1.0


class TestBuildDepthGrid:
    def test_pixels_are_inverted_red(self, make_pixels):
        red = np.array([[0.0, 0.25], [0.5, 1.0]])
        grid = build_depth_grid(pixels=make_pixels(red))

        assert grid.shape == (2, 2)
        np.testing.assert_allclose(grid.as_array(), 1.0 - red)

    def test_pixels_use_red_channel_only(self):
        from depthmesh.io.readers import PixelBuffer

        pixels = PixelBuffer(1, 1, np.array([[0.2, 0.9, 0.9, 0.0]]))
        assert build_depth_grid(pixels=pixels)[0, 0] == pytest.approx(0.8)

    def test_float_map_passes_through(self, make_pfm):
        float_map = read_pfm(make_pfm(np.array([[0.0, 2.0], [1.0, 2.0]])))
        grid = build_depth_grid(float_map=float_map)

        np.testing.assert_array_equal(grid.values, float_map.grid.values)
        assert grid is not float_map.grid

    def test_neither_source(self):
        with pytest.raises(ConfigurationError, match="either"):
            build_depth_grid()

    def test_both_sources(self, make_pixels, make_pfm):
        with pytest.raises(ConfigurationError, match="not both"):
            build_depth_grid(
                pixels=make_pixels(np.zeros((1, 1))),
                float_map=read_pfm(make_pfm(np.zeros((1, 1)))),
            )
