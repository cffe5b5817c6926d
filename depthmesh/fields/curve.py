"""Sampled depth remapping curves."""

from __future__ import annotations

from typing import Literal, Sequence

import numpy as np
from scipy.interpolate import CubicSpline, PchipInterpolator

from depthmesh.exceptions import ParameterError

CurveMethod = Literal["linear", "pchip", "cubic"]


class DepthCurve:
    """Depth-to-depth function sampled at a set of keys.

    Inputs outside the key range are clamped to the first or last key, so
    the curve holds its end values rather than extrapolating. A curve with
    fewer than two keys is inactive and evaluates as the identity.

    Args:
        times: Key positions (input depths), strictly increasing.
        values: Output depth at each key.
        method: Interpolation between keys. 'linear' (numpy.interp),
            'pchip' (monotonic cubic, scipy PchipInterpolator) or 'cubic'
            (natural cubic spline, scipy CubicSpline). Default: 'linear'.

    Example:
        >>> curve = DepthCurve([0.0, 0.5, 1.0], [0.0, 0.8, 1.0], method="pchip")
        >>> remapped = curve(grid.values)
    """

    def __init__(
        self,
        times: Sequence[float] | np.ndarray,
        values: Sequence[float] | np.ndarray,
        method: CurveMethod = "linear",
    ):
        self._times = np.asarray(times, dtype=float)
        self._values = np.asarray(values, dtype=float)
        self._method = method

        if self._times.ndim != 1 or self._values.ndim != 1:
            raise ParameterError("Curve times and values must be 1D arrays")
        if len(self._times) != len(self._values):
            raise ParameterError(
                f"Curve times and values must have same length, "
                f"got {len(self._times)} and {len(self._values)}"
            )
        if np.any(np.diff(self._times) <= 0):
            raise ParameterError("Curve key times must be strictly increasing")
        if not (
            np.all(np.isfinite(self._times)) and np.all(np.isfinite(self._values))
        ):
            raise ParameterError("Curve keys must be finite")
        if method not in ("linear", "pchip", "cubic"):
            raise ParameterError(
                f"Unknown curve method: {method}. "
                f"Supported: 'linear', 'pchip', 'cubic'"
            )

        self._spline = None
        if self.is_active and method == "pchip":
            self._spline = PchipInterpolator(self._times, self._values)
        elif self.is_active and method == "cubic":
            self._spline = CubicSpline(
                self._times, self._values, bc_type="natural"
            )

    @classmethod
    def from_pairs(
        cls,
        pairs: Sequence[tuple[float, float]],
        method: CurveMethod = "linear",
    ) -> DepthCurve:
        """Create a curve from a sequence of (time, value) keys."""
        keys = np.asarray(pairs, dtype=float).reshape(-1, 2)
        return cls(keys[:, 0], keys[:, 1], method=method)

    @property
    def n_keys(self) -> int:
        """Number of curve keys."""
        return len(self._times)

    @property
    def is_active(self) -> bool:
        """Return True if the curve has enough keys to remap depths."""
        return self.n_keys >= 2

    @property
    def method(self) -> str:
        """Interpolation method between keys."""
        return self._method

    @property
    def times(self) -> np.ndarray:
        """Key positions."""
        return self._times.copy()

    @property
    def values(self) -> np.ndarray:
        """Key values."""
        return self._values.copy()

    def __call__(self, depths: np.ndarray | float) -> np.ndarray:
        """Evaluate the curve at the given depths."""
        depths = np.asarray(depths, dtype=float)
        if not self.is_active:
            return depths.copy()

        clamped = np.clip(depths, self._times[0], self._times[-1])
        if self._spline is None:
            return np.interp(clamped, self._times, self._values)
        return self._spline(clamped)

    def __repr__(self) -> str:
        return f"DepthCurve(n_keys={self.n_keys}, method={self._method!r})"
