"""I/O utilities for reading depth sources and writing meshes."""

from depthmesh.io.readers import (
    FloatMap,
    ImageReader,
    PfmReader,
    PixelBuffer,
    normalize_depths,
    read_image,
    read_pfm,
)
from depthmesh.io.writers import (
    MeshTarget,
    TrimeshTarget,
    save_mesh,
    to_trimesh,
    write_pfm,
)

__all__ = [
    "FloatMap",
    "ImageReader",
    "PfmReader",
    "PixelBuffer",
    "normalize_depths",
    "read_image",
    "read_pfm",
    "MeshTarget",
    "TrimeshTarget",
    "save_mesh",
    "to_trimesh",
    "write_pfm",
]
