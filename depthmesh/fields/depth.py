"""Canonical depth grid and source normalization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from depthmesh.exceptions import ConfigurationError

if TYPE_CHECKING:
    from depthmesh.io.readers import FloatMap, PixelBuffer


class DepthGrid:
    """Dense 2D grid of depth samples stored as a flat row-major buffer.

    Cells are addressed as ``(x, y)`` with ``x`` the fast-varying axis, so
    the flat offset of a cell is ``y * width + x``. Values are float32 and
    nominally lie in [0, 1].

    Args:
        width: Number of cells along x.
        height: Number of cells along y.
        values: Optional initial values, either flat of length
            ``width * height`` or shaped ``(height, width)``. Zeros if None.

    Raises:
        ValueError: If the dimensions are negative, the value count does not
            match, or any value is NaN or infinite.

    Example:
        >>> grid = DepthGrid(4, 2)
        >>> grid[3, 1] = 0.5
        >>> grid.idx(3, 1)
        7
        >>> grid[3, 1]
        0.5
    """

    def __init__(
        self,
        width: int,
        height: int,
        values: np.ndarray | None = None,
    ):
        if width < 0 or height < 0:
            raise ValueError(
                f"Grid dimensions must be non-negative, got {width}x{height}"
            )
        self._width = int(width)
        self._height = int(height)

        if values is None:
            self._values = np.zeros(self._width * self._height, dtype=np.float32)
        else:
            self._values = np.array(values, dtype=np.float32).reshape(-1)
            if self._values.size != self._width * self._height:
                raise ValueError(
                    f"Expected {self._width * self._height} values for a "
                    f"{self._width}x{self._height} grid, got {self._values.size}"
                )
            if not np.all(np.isfinite(self._values)):
                raise ValueError("Depth values must be finite")

    @classmethod
    def from_array(cls, array: np.ndarray) -> DepthGrid:
        """Create a grid from a row-major array of shape (height, width)."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise ValueError("array must be 2D of shape (height, width)")
        height, width = array.shape
        return cls(width, height, array)

    @property
    def width(self) -> int:
        """Number of cells along x."""
        return self._width

    @property
    def height(self) -> int:
        """Number of cells along y."""
        return self._height

    @property
    def shape(self) -> tuple[int, int]:
        """Grid size as (width, height)."""
        return self._width, self._height

    @property
    def size(self) -> int:
        """Total number of cells."""
        return self._values.size

    @property
    def values(self) -> np.ndarray:
        """Flat row-major value buffer (not a copy)."""
        return self._values

    def idx(self, x: int, y: int) -> int:
        """Return the flat buffer offset of cell (x, y)."""
        return y * self._width + x

    def as_array(self) -> np.ndarray:
        """Return a (height, width) view sharing memory with the grid."""
        return self._values.reshape(self._height, self._width)

    def copy(self) -> DepthGrid:
        """Return an independent copy of the grid."""
        return DepthGrid(self._width, self._height, self._values)

    def _check_cell(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"Cell ({x}, {y}) outside {self._width}x{self._height} grid"
            )

    def __getitem__(self, key: tuple[int, int]) -> float:
        x, y = key
        self._check_cell(x, y)
        return float(self._values[self.idx(x, y)])

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        x, y = key
        self._check_cell(x, y)
        self._values[self.idx(x, y)] = value

    def __repr__(self) -> str:
        return f"DepthGrid(width={self._width}, height={self._height})"


def build_depth_grid(
    pixels: PixelBuffer | None = None,
    float_map: FloatMap | None = None,
) -> DepthGrid:
    """Normalize a raw depth source into a canonical depth grid.

    Exactly one source must be given. Pixel buffers are converted with
    ``1 - red`` per pixel. Float-maps are already normalized and inverted
    by the decoder and are copied unchanged.

    Args:
        pixels: Decoded image pixels.
        float_map: Decoded float-map.

    Returns:
        New DepthGrid owned by the caller.

    Raises:
        ConfigurationError: If neither or both sources are given.
    """
    if pixels is None and float_map is None:
        raise ConfigurationError(
            "You must either specify a pixel buffer or a float-map"
        )
    if pixels is not None and float_map is not None:
        raise ConfigurationError(
            "Specify either a pixel buffer or a float-map, not both"
        )

    if pixels is not None:
        return DepthGrid(pixels.width, pixels.height, 1.0 - pixels.red)

    return float_map.grid.copy()
