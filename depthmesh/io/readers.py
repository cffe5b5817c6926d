"""Readers for depth sources: float-map (PFM) files and images."""

from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from typing import BinaryIO

import numpy as np
from PIL import Image

from depthmesh.exceptions import DataLoadError, FormatError
from depthmesh.fields.depth import DepthGrid

logger = logging.getLogger(__name__)

PFM_MAGIC = "Pf"

# Longest header line accepted before giving up on a newline
MAX_HEADER_TOKEN = 256


class PixelBuffer:
    """Decoded image pixels used as a depth source.

    Pixels are stored row-major with the first row at the bottom of the
    image, matching the pixel order of the rendering host. Only the red
    channel is used for depth.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: Channel values in [0, 1], shape (width * height, channels)
            or (height, width, channels) with 3 or 4 channels.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray):
        self.width = int(width)
        self.height = int(height)

        pixels = np.asarray(pixels, dtype=np.float32)
        if pixels.ndim not in (2, 3) or pixels.shape[-1] not in (3, 4):
            raise ValueError(
                "pixels must have shape (n, channels) or "
                "(height, width, channels) with 3 or 4 channels"
            )
        self.pixels = pixels.reshape(-1, pixels.shape[-1])

        if len(self.pixels) != self.width * self.height:
            raise ValueError(
                f"Expected {self.width * self.height} pixels for a "
                f"{self.width}x{self.height} image, got {len(self.pixels)}"
            )

    @property
    def red(self) -> np.ndarray:
        """Red channel of every pixel, row-major."""
        return self.pixels[:, 0]

    @property
    def n_pixels(self) -> int:
        """Number of pixels."""
        return len(self.pixels)

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


class FloatMap:
    """Decoded float-map: normalized depth grid plus its size.

    Args:
        width: Grid width.
        height: Grid height.
        grid: Depth grid of matching size.
    """

    def __init__(self, width: int, height: int, grid: DepthGrid):
        if grid.shape != (width, height):
            raise ValueError(
                f"Grid size {grid.width}x{grid.height} does not match "
                f"float-map size {width}x{height}"
            )
        self.width = int(width)
        self.height = int(height)
        self.grid = grid

    def __repr__(self) -> str:
        return f"FloatMap(width={self.width}, height={self.height})"


def normalize_depths(samples: np.ndarray) -> np.ndarray:
    """Rescale samples to [0, 1] using their global minimum and maximum.

    A constant input (max == min) maps to all zeros.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0:
        return samples.astype(np.float32)

    low = samples.min()
    depth_range = samples.max() - low
    inv_range = 1.0 / depth_range if depth_range > 0 else 0.0
    return ((samples - low) * inv_range).astype(np.float32)


class PfmReader:
    """Reader for single-channel float-map (``Pf``) files.

    The header is three newline-terminated ASCII tokens: the magic ``Pf``,
    ``"<width> <height>"`` and a scale whose sign gives the byte order.
    Only little-endian files (negative scale) are accepted; the scale
    magnitude is ignored. The header is followed by ``width * height``
    float32 samples in row-major order.

    Samples are normalized to [0, 1] and, by default, inverted
    (``1 - value``) so that near/far polarity matches image sources. Rows
    are kept in stored order without a vertical flip.

    Args:
        invert: Replace each normalized value with ``1 - value``.
            Default: True.
    """

    def __init__(self, invert: bool = True):
        self.invert = invert

    def read(self, source: str | Path | bytes | BinaryIO) -> FloatMap:
        """Read a float-map from a path, raw bytes or binary stream.

        Args:
            source: File path, bytes of a complete file, or a binary
                file-like object positioned at the header.

        Returns:
            FloatMap with normalized depth values.

        Raises:
            DataLoadError: If the file cannot be opened.
            FormatError: If the header or payload is malformed.
        """
        if isinstance(source, (bytes, bytearray)):
            return self._decode(io.BytesIO(source))

        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise DataLoadError(f"File not found: {path}")
            try:
                stream = open(path, "rb")
            except OSError as e:
                raise DataLoadError(f"Failed to open float-map {path}: {e}") from e
            with stream:
                return self._decode(stream)

        return self._decode(source)

    def _decode(self, stream: BinaryIO) -> FloatMap:
        magic = self._read_token(stream)
        if magic != PFM_MAGIC:
            raise FormatError(f"Expected {PFM_MAGIC!r} magic, got {magic!r}")

        width, height = self._parse_size(self._read_token(stream))

        scale_token = self._read_token(stream)
        try:
            scale = float(scale_token)
        except ValueError as e:
            raise FormatError(f"Invalid float-map scale: {scale_token!r}") from e
        if not scale < 0:
            raise FormatError(
                f"Expected negative (little-endian) scale, got {scale_token!r}"
            )

        n_bytes = width * height * 4
        try:
            payload = stream.read(n_bytes)
        except (OverflowError, MemoryError) as e:
            raise FormatError(
                f"Float-map payload of {n_bytes} bytes cannot be read"
            ) from e
        if len(payload) < n_bytes:
            raise FormatError(
                f"Truncated float-map: expected {n_bytes} sample bytes, "
                f"got {len(payload)}"
            )

        samples = np.frombuffer(payload, dtype="<f4")
        if not np.all(np.isfinite(samples)):
            raise FormatError("Float-map contains NaN or infinite samples")

        depths = normalize_depths(samples)
        if self.invert:
            depths = 1.0 - depths

        logger.info("Read %dx%d float-map", width, height)
        return FloatMap(width, height, DepthGrid(width, height, depths))

    @staticmethod
    def _read_token(stream: BinaryIO) -> str:
        """Read one newline-terminated header token."""
        line = stream.readline(MAX_HEADER_TOKEN)
        if not line.endswith(b"\n"):
            raise FormatError("Unterminated float-map header token")
        try:
            return line[:-1].decode("ascii")
        except UnicodeDecodeError as e:
            raise FormatError("Float-map header is not ASCII") from e

    @staticmethod
    def _parse_size(token: str) -> tuple[int, int]:
        parts = token.split(" ")
        if len(parts) != 2:
            raise FormatError(f"Expected '<width> <height>', got {token!r}")
        if not all(part.isdigit() for part in parts):
            raise FormatError(f"Invalid float-map size: {token!r}")
        width, height = int(parts[0]), int(parts[1])
        if width <= 0 or height <= 0:
            raise FormatError(f"Float-map size must be positive, got {token!r}")
        if width * height * 4 > sys.maxsize:
            raise FormatError(f"Float-map size too large: {token!r}")
        return width, height


class ImageReader:
    """Reader for 8-bit images supported by Pillow.

    Args:
        flip_vertical: Reorder rows so the first row is the bottom of the
            image. Default: True.
    """

    def __init__(self, flip_vertical: bool = True):
        self.flip_vertical = flip_vertical

    def read(self, path: str | Path) -> PixelBuffer:
        """Read an image file into a pixel buffer.

        Args:
            path: Path to image file.

        Returns:
            PixelBuffer with RGBA values in [0, 1].

        Raises:
            DataLoadError: If the file is missing or cannot be decoded.
        """
        path = Path(path)

        if not path.exists():
            raise DataLoadError(f"File not found: {path}")

        try:
            with Image.open(path) as im:
                rgba = np.asarray(im.convert("RGBA"), dtype=np.float32) / 255.0
        except OSError as e:
            raise DataLoadError(f"Failed to read image {path}: {e}") from e

        if self.flip_vertical:
            rgba = rgba[::-1]

        height, width = rgba.shape[:2]
        logger.info("Read %dx%d image %s", width, height, path.name)
        return PixelBuffer(width, height, rgba)


def read_pfm(
    source: str | Path | bytes | BinaryIO,
    invert: bool = True,
) -> FloatMap:
    """Convenience function to read a float-map.

    Args:
        source: File path, raw bytes or binary stream.
        invert: Replace each normalized value with ``1 - value``.

    Returns:
        FloatMap with normalized depth values.
    """
    return PfmReader(invert=invert).read(source)


def read_image(path: str | Path, flip_vertical: bool = True) -> PixelBuffer:
    """Convenience function to read an image into a pixel buffer."""
    return ImageReader(flip_vertical=flip_vertical).read(path)
