"""Tests for float-map and image readers."""

import io

import numpy as np
import pytest
from PIL import Image

from depthmesh.exceptions import DataLoadError, FormatError
from depthmesh.io.readers import (
    PfmReader,
    PixelBuffer,
    normalize_depths,
    read_image,
    read_pfm,
)
from depthmesh.io.writers import write_pfm


class TestPfmReader:
    def test_decode_normalizes_and_inverts(self, make_pfm):
        values = np.array([[2.0, 4.0, 6.0], [8.0, 10.0, 3.0]])
        float_map = read_pfm(make_pfm(values))

        assert (float_map.width, float_map.height) == (3, 2)
        expected = 1.0 - (values - 2.0) / (10.0 - 2.0)
        np.testing.assert_allclose(float_map.grid.as_array(), expected, atol=1e-6)

    def test_cells_follow_row_major_order(self, make_pfm):
        values = np.array([[0.0, 1.0], [2.0, 3.0]])
        grid = read_pfm(make_pfm(values), invert=False).grid

        assert grid[1, 0] == pytest.approx(1 / 3)
        assert grid[0, 1] == pytest.approx(2 / 3)

    def test_rows_are_not_flipped(self, make_pfm):
        # First stored row stays at y == 0
        values = np.array([[0.0], [1.0]])
        grid = read_pfm(make_pfm(values)).grid

        assert grid[0, 0] == pytest.approx(1.0)
        assert grid[0, 1] == pytest.approx(0.0)

    def test_uniform_values_normalize_to_zero(self, make_pfm):
        values = np.full((3, 4), 7.5)

        normalized = read_pfm(make_pfm(values), invert=False).grid.values
        inverted = read_pfm(make_pfm(values)).grid.values

        np.testing.assert_array_equal(normalized, 0.0)
        np.testing.assert_array_equal(inverted, 1.0)

    def test_scale_magnitude_ignored(self, make_pfm):
        values = np.array([[1.0, 2.0]])
        a = read_pfm(make_pfm(values, scale="-1.0")).grid.values
        b = read_pfm(make_pfm(values, scale="-250.5")).grid.values
        np.testing.assert_array_equal(a, b)

    @pytest.mark.parametrize("magic", ["PF", "P5", "pf", "Pf "])
    def test_rejects_bad_magic_before_samples(self, make_pfm, magic):
        stream = io.BytesIO(make_pfm(np.ones((2, 2)), magic=magic))

        with pytest.raises(FormatError, match="magic"):
            PfmReader().read(stream)
        assert stream.tell() == len(magic) + 1

    @pytest.mark.parametrize("scale", ["1.0", "0.0", "0", "+2", "nan"])
    def test_rejects_non_negative_scale_before_samples(self, make_pfm, scale):
        data = make_pfm(np.ones((2, 2)), scale=scale)
        header_length = len(data) - 2 * 2 * 4
        stream = io.BytesIO(data)

        with pytest.raises(FormatError):
            PfmReader().read(stream)
        assert stream.tell() == header_length

    def test_rejects_unparseable_scale(self, make_pfm):
        with pytest.raises(FormatError, match="scale"):
            read_pfm(make_pfm(np.ones((1, 1)), scale="minus one"))

    @pytest.mark.parametrize("size", ["4", "a b", "0 3", "3 -1", "1 2 3"])
    def test_rejects_bad_size(self, size):
        data = f"Pf\n{size}\n-1.0\n".encode("ascii") + b"\x00" * 64
        with pytest.raises(FormatError):
            read_pfm(data)

    @pytest.mark.parametrize(
        "size", ["1_0 1", "+3 1", "2 0x1", "2.0 1", " 2 1", "2  1", "2\t1"]
    )
    def test_rejects_non_decimal_size(self, size):
        data = f"Pf\n{size}\n-1.0\n".encode("ascii") + b"\x00" * 64
        with pytest.raises(FormatError):
            read_pfm(data)

    def test_rejects_oversized_header_from_bytes(self):
        data = b"Pf\n99999999999 99999999999\n-1.0\n" + b"\x00" * 16
        with pytest.raises(FormatError, match="too large"):
            read_pfm(data)

    def test_rejects_oversized_header_from_stream(self):
        stream = io.BytesIO(b"Pf\n99999999999 99999999999\n-1.0\n" + b"\x00" * 16)
        with pytest.raises(FormatError, match="too large"):
            PfmReader().read(stream)

    def test_rejects_truncated_payload(self, make_pfm):
        data = make_pfm(np.ones((3, 3)))
        with pytest.raises(FormatError, match="Truncated"):
            read_pfm(data[:-5])

    def test_rejects_unterminated_header(self):
        with pytest.raises(FormatError, match="Unterminated"):
            read_pfm(b"Pf")

    def test_rejects_non_finite_samples(self, make_pfm):
        values = np.array([[0.0, np.nan], [1.0, 2.0]])
        with pytest.raises(FormatError, match="NaN"):
            read_pfm(make_pfm(values))

    def test_ignores_trailing_bytes(self, make_pfm):
        data = make_pfm(np.array([[0.0, 1.0]])) + b"trailer"
        grid = read_pfm(data).grid
        np.testing.assert_allclose(grid.values, [1.0, 0.0])

    def test_read_from_path(self, tmp_path, make_pfm):
        path = tmp_path / "depth.pfm"
        path.write_bytes(make_pfm(np.array([[0.0, 4.0], [2.0, 1.0]])))

        float_map = read_pfm(path)

        np.testing.assert_allclose(
            float_map.grid.as_array(), [[1.0, 0.0], [0.5, 0.75]], atol=1e-6
        )

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError, match="not found"):
            read_pfm(tmp_path / "missing.pfm")

    def test_write_pfm_round_trip(self, tmp_path):
        values = np.array([[0.25, 1.0, 0.5], [0.0, 0.75, 0.1]], dtype=np.float32)
        path = tmp_path / "out" / "depth.pfm"

        write_pfm(values, path)
        grid = read_pfm(path, invert=False).grid

        np.testing.assert_allclose(grid.as_array(), values, atol=1e-6)


class TestNormalizeDepths:
    def test_range(self):
        result = normalize_depths(np.array([-1.0, 0.0, 3.0]))
        np.testing.assert_allclose(result, [0.0, 0.25, 1.0])
        assert result.dtype == np.float32

    def test_constant(self):
        np.testing.assert_array_equal(normalize_depths(np.full(5, 2.0)), 0.0)


class TestPixelBuffer:
    def test_flat_and_image_shapes(self):
        rgba = np.zeros((2, 3, 4))
        assert PixelBuffer(3, 2, rgba).n_pixels == 6
        assert PixelBuffer(3, 2, rgba.reshape(-1, 4)).n_pixels == 6

    def test_red_channel(self):
        pixels = np.array([[0.1, 0.9, 0.9], [0.7, 0.0, 0.0]])
        np.testing.assert_allclose(PixelBuffer(2, 1, pixels).red, [0.1, 0.7])

    def test_count_mismatch(self):
        with pytest.raises(ValueError, match="Expected 6 pixels"):
            PixelBuffer(3, 2, np.zeros((5, 4)))

    def test_bad_channels(self):
        with pytest.raises(ValueError):
            PixelBuffer(2, 1, np.zeros((2, 2)))


class TestImageReader:
    def test_reads_bottom_row_first(self, tmp_path):
        image = Image.new("RGB", (2, 2))
        image.putpixel((0, 0), (255, 0, 0))  # top-left
        image.putpixel((1, 1), (51, 0, 0))  # bottom-right
        path = tmp_path / "depth.png"
        image.save(path)

        pixels = read_image(path)

        assert (pixels.width, pixels.height) == (2, 2)
        np.testing.assert_allclose(pixels.red, [0.0, 0.2, 1.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(pixels.pixels[:, 3], 1.0)

    def test_without_flip(self, tmp_path):
        image = Image.new("L", (1, 2))
        image.putpixel((0, 0), 255)
        path = tmp_path / "depth.png"
        image.save(path)

        pixels = read_image(path, flip_vertical=False)

        np.testing.assert_allclose(pixels.red, [1.0, 0.0])

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "depth.png"
        path.write_text("not an image")
        with pytest.raises(DataLoadError, match="Failed to read image"):
            read_image(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError):
            read_image(tmp_path / "missing.png")
