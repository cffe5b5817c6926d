"""Nearest-neighbour resampling of depth grids to power-of-two sizes."""

from __future__ import annotations

import logging

import numpy as np

from depthmesh.exceptions import MeshGenerationError
from depthmesh.fields.depth import DepthGrid

logger = logging.getLogger(__name__)


def target_size(width: int, height: int, subdivisions: int) -> tuple[int, int]:
    """Compute the resampled grid size for a source of the given size.

    The longer axis becomes ``2 ** subdivisions`` cells and the shorter
    axis is scaled by integer (truncating) division, so aspect-ratio
    rounding error always lands on the shorter axis.

    Args:
        width: Source width.
        height: Source height.
        subdivisions: Long-axis exponent.

    Returns:
        Target size as (width, height).
    """
    long_axis = 1 << subdivisions
    if width >= height:
        return long_axis, long_axis * height // width
    return long_axis * width // height, long_axis


def sample_indices(count: int, scale: float, limit: int) -> np.ndarray:
    """Return source indices sampled by ``count`` target cells.

    Index ``i`` maps to ``floor(i * scale)`` clamped to ``[0, limit]``.
    The upper bound is the source dimension itself, not ``limit - 1``.
    """
    points = np.floor(np.arange(count) * scale).astype(np.int64)
    return np.clip(points, 0, limit)


def resample_depths(grid: DepthGrid, subdivisions: int) -> DepthGrid:
    """Resample a depth grid onto its power-of-two target size.

    Args:
        grid: Source grid of any size.
        subdivisions: Long-axis exponent of the target grid.

    Returns:
        New grid of size ``target_size(grid.width, grid.height, subdivisions)``.
        Grids with a zero-length target axis are returned empty.

    Raises:
        MeshGenerationError: If the source grid is empty, or a sample index
            lands one past the last source row or column.

    Note:
        The scale is derived from the source and target sizes, so every
        sample index stays below the source dimension and the out-of-range
        error is not raised for grids produced by this function's own
        sampling.
    """
    if grid.width == 0 or grid.height == 0:
        raise MeshGenerationError(
            f"Cannot resample an empty {grid.width}x{grid.height} depth grid"
        )

    width, height = target_size(grid.width, grid.height, subdivisions)
    logger.debug(
        "Resampling %dx%d depth grid to %dx%d",
        grid.width,
        grid.height,
        width,
        height,
    )

    if width == 0 or height == 0:
        return DepthGrid(width, height)

    xs = sample_indices(width, grid.width / width, grid.width)
    ys = sample_indices(height, grid.height / height, grid.height)

    if xs[-1] >= grid.width or ys[-1] >= grid.height:
        raise MeshGenerationError(
            f"Sample index ({xs[-1]}, {ys[-1]}) out of range for "
            f"{grid.width}x{grid.height} depth grid"
        )

    return DepthGrid.from_array(grid.as_array()[np.ix_(ys, xs)])
