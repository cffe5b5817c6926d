"""Configuration for depth mesh generation."""

from __future__ import annotations

from typing import Sequence

from depthmesh.exceptions import ParameterError
from depthmesh.fields.curve import DepthCurve

MAX_BLUR_RANGE = 12
MAX_BLUR_ITERATIONS = 12
MAX_SUBDIVISIONS = 16


class MeshConfig:
    """Options controlling blur, depth-band culling and mesh resolution.

    Args:
        box_blur_range: Blur window radius, 0-12. 0 disables the blur.
        box_blur_iterations: Blur pass repetitions, 0-12. 0 disables the blur.
        min_depth: Lower bound of the retained depth band, in [0, 1].
        max_depth: Upper bound of the retained depth band, in [0, 1].
            min_depth > max_depth is allowed and culls every triangle.
        subdivisions: Long-axis exponent, 0-16. The mesh grid is
            ``2 ** subdivisions`` vertices along its longer axis.
        depth_curve: Optional DepthCurve, or sequence of (depth, depth)
            keys, remapping vertex depth before positioning.

    Raises:
        ParameterError: If an option is outside its range.

    Example:
        >>> config = MeshConfig(box_blur_range=2, subdivisions=8)
        >>> config.long_axis
        256
    """

    def __init__(
        self,
        box_blur_range: int = 1,
        box_blur_iterations: int = 1,
        min_depth: float = 0.0,
        max_depth: float = 1.0,
        subdivisions: int = 6,
        depth_curve: DepthCurve | Sequence[tuple[float, float]] | None = None,
    ):
        self._box_blur_range = _check_int(
            "box_blur_range", box_blur_range, MAX_BLUR_RANGE
        )
        self._box_blur_iterations = _check_int(
            "box_blur_iterations", box_blur_iterations, MAX_BLUR_ITERATIONS
        )
        self._subdivisions = _check_int(
            "subdivisions", subdivisions, MAX_SUBDIVISIONS
        )
        self._min_depth = _check_unit("min_depth", min_depth)
        self._max_depth = _check_unit("max_depth", max_depth)

        if depth_curve is None or isinstance(depth_curve, DepthCurve):
            self._depth_curve = depth_curve
        else:
            self._depth_curve = DepthCurve.from_pairs(depth_curve)

    @property
    def box_blur_range(self) -> int:
        """Blur window radius."""
        return self._box_blur_range

    @property
    def box_blur_iterations(self) -> int:
        """Blur pass repetitions."""
        return self._box_blur_iterations

    @property
    def min_depth(self) -> float:
        """Lower bound of the depth band."""
        return self._min_depth

    @property
    def max_depth(self) -> float:
        """Upper bound of the depth band."""
        return self._max_depth

    @property
    def subdivisions(self) -> int:
        """Long-axis exponent."""
        return self._subdivisions

    @property
    def depth_curve(self) -> DepthCurve | None:
        """Depth remapping curve, or None."""
        return self._depth_curve

    @property
    def long_axis(self) -> int:
        """Long-axis resolution of the mesh grid (2 ** subdivisions)."""
        return 1 << self._subdivisions

    @property
    def blur_enabled(self) -> bool:
        """Return True if blurring has any effect."""
        return self._box_blur_range > 0 and self._box_blur_iterations > 0

    def replace(self, **changes) -> MeshConfig:
        """Return a new configuration with the given options changed."""
        options = {
            "box_blur_range": self._box_blur_range,
            "box_blur_iterations": self._box_blur_iterations,
            "min_depth": self._min_depth,
            "max_depth": self._max_depth,
            "subdivisions": self._subdivisions,
            "depth_curve": self._depth_curve,
        }
        unknown = set(changes) - set(options)
        if unknown:
            raise ParameterError(f"Unknown options: {sorted(unknown)}")
        options.update(changes)
        return MeshConfig(**options)

    def __repr__(self) -> str:
        return (
            f"MeshConfig(blur={self._box_blur_range}x{self._box_blur_iterations}, "
            f"band=[{self._min_depth:.2f}, {self._max_depth:.2f}], "
            f"subdivisions={self._subdivisions})"
        )


def _check_int(name: str, value: int, upper: int) -> int:
    if isinstance(value, bool) or int(value) != value:
        raise ParameterError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= upper:
        raise ParameterError(f"{name} must be in [0, {upper}], got {value}")
    return int(value)


def _check_unit(name: str, value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise ParameterError(f"{name} must be in [0, 1], got {value}")
    return float(value)
