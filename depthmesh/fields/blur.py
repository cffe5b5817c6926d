"""Separable box blur for depth grids."""

from __future__ import annotations

import logging

import numpy as np

from depthmesh.exceptions import ParameterError
from depthmesh.fields.depth import DepthGrid

logger = logging.getLogger(__name__)


def box_blur(grid: DepthGrid, radius: int, iterations: int = 1) -> DepthGrid:
    """Smooth a depth grid in place with a separable moving average.

    Each iteration runs a horizontal pass followed by a vertical pass over
    a window of ``2 * radius + 1`` samples. Windows are truncated at the
    grid edges and averaged over the samples they actually contain, and
    every output cell is clamped to [0, 1].

    Args:
        grid: Grid to blur. Modified in place.
        radius: Half window size. 0 disables the blur.
        iterations: Number of full horizontal+vertical passes. 0 disables
            the blur.

    Returns:
        The same grid, for chaining.

    Raises:
        ParameterError: If radius or iterations is negative.
    """
    if radius < 0 or iterations < 0:
        raise ParameterError(
            f"Blur radius and iterations must be non-negative, "
            f"got radius={radius}, iterations={iterations}"
        )
    if radius == 0 or iterations == 0:
        return grid

    logger.debug(
        "Box blur %dx%d grid: radius=%d, iterations=%d",
        grid.width,
        grid.height,
        radius,
        iterations,
    )

    data = grid.as_array()
    for _ in range(iterations):
        data[:] = _blur_axis(data, radius, axis=1)
        data[:] = _blur_axis(data, radius, axis=0)

    return grid


def _blur_axis(data: np.ndarray, radius: int, axis: int) -> np.ndarray:
    """Edge-truncated sliding mean along one axis of a 2D array.

    The window sum at each index is the difference of two running sums,
    which adds the sample entering the window and drops the one leaving
    it, so each row or column costs O(n) regardless of the radius.
    """
    n = data.shape[axis]
    if n == 0:
        return data

    running = np.cumsum(data, axis=axis, dtype=np.float64)
    running = np.insert(running, 0, 0.0, axis=axis)

    index = np.arange(n)
    start = np.maximum(index - radius, 0)
    stop = np.minimum(index + radius, n - 1) + 1

    shape = [1, 1]
    shape[axis] = n
    hits = (stop - start).reshape(shape)

    sums = np.take(running, stop, axis=axis) - np.take(running, start, axis=axis)

    # Clamp due to floating-point drift in the running sums
    return np.clip(sums / hits, 0.0, 1.0)
