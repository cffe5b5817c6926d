"""Depth field processing utilities."""

from depthmesh.fields.blur import box_blur
from depthmesh.fields.curve import DepthCurve
from depthmesh.fields.depth import DepthGrid, build_depth_grid
from depthmesh.fields.resample import (
    resample_depths,
    sample_indices,
    target_size,
)

__all__ = [
    "DepthGrid",
    "DepthCurve",
    "build_depth_grid",
    "box_blur",
    "resample_depths",
    "sample_indices",
    "target_size",
]
