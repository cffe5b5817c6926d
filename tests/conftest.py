"""Shared fixtures for depthmesh tests."""

import numpy as np
import pytest

from depthmesh.io.readers import PixelBuffer


def encode_pfm(values, scale="-1.000000", magic="Pf"):
    """Encode a (height, width) array as float-map bytes."""
    values = np.asarray(values, dtype="<f4")
    height, width = values.shape
    header = f"{magic}\n{width} {height}\n{scale}\n".encode("ascii")
    return header + values.tobytes()


@pytest.fixture
def make_pfm():
    """Factory producing float-map bytes from a (height, width) array."""
    return encode_pfm


@pytest.fixture
def make_pixels():
    """Factory producing a PixelBuffer whose red channel is ``red``.

    ``red`` is a (height, width) array, first row at the bottom.
    """

    def _make(red):
        red = np.asarray(red, dtype=np.float32)
        height, width = red.shape
        rgba = np.zeros((height, width, 4), dtype=np.float32)
        rgba[..., 0] = red
        rgba[..., 3] = 1.0
        return PixelBuffer(width, height, rgba)

    return _make


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
