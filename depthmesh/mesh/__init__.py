"""Mesh generation utilities."""

from depthmesh.mesh.builder import DepthMeshBuilder, build_mesh, generate_mesh
from depthmesh.mesh.config import MeshConfig
from depthmesh.mesh.surface import (
    MeshBuffers,
    build_mesh_buffers,
    grid_triangles,
    in_band,
)

__all__ = [
    "DepthMeshBuilder",
    "MeshConfig",
    "MeshBuffers",
    "build_mesh",
    "build_mesh_buffers",
    "generate_mesh",
    "grid_triangles",
    "in_band",
]
