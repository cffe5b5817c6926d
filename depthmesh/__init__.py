"""depthmesh - backdrop meshes from depth maps.

Converts a single-channel depth field, read from an 8-bit image or a
``Pf`` float-map, into a triangulated surface mesh approximating the depth
topology, for use as a scene backdrop.

Example:
    >>> from depthmesh import DepthMeshBuilder
    >>> buffers = (
    ...     DepthMeshBuilder()
    ...     .load_pfm("depth.pfm")
    ...     .set_blur(box_blur_range=1, box_blur_iterations=2)
    ...     .set_depth_band(0.0, 0.95)
    ...     .set_subdivisions(7)
    ...     .build()
    ... )
    >>> from depthmesh.io import save_mesh
    >>> save_mesh(buffers, "backdrop.ply")
"""

from depthmesh.exceptions import (
    ConfigurationError,
    DataLoadError,
    DepthMeshError,
    FormatError,
    MeshGenerationError,
    ParameterError,
)
from depthmesh.fields import DepthCurve, DepthGrid
from depthmesh.mesh import DepthMeshBuilder, MeshBuffers, MeshConfig

__version__ = "0.1.0"

__all__ = [
    # Main API
    "DepthMeshBuilder",
    "MeshConfig",
    "MeshBuffers",
    "DepthGrid",
    "DepthCurve",
    # Exceptions
    "DepthMeshError",
    "ConfigurationError",
    "ParameterError",
    "FormatError",
    "DataLoadError",
    "MeshGenerationError",
]
