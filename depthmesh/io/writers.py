"""Mesh export, mesh targets and float-map writing."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol

import numpy as np
import trimesh

from depthmesh.exceptions import MeshGenerationError
from depthmesh.fields.depth import DepthGrid

if TYPE_CHECKING:
    from depthmesh.mesh.surface import MeshBuffers

logger = logging.getLogger(__name__)


class MeshTarget(Protocol):
    """Protocol for collaborators that receive generated mesh buffers."""

    def set_mesh(self, buffers: MeshBuffers) -> None:
        """Take ownership of freshly generated mesh buffers."""
        ...


def to_trimesh(buffers: MeshBuffers) -> trimesh.Trimesh:
    """Convert mesh buffers to a trimesh object.

    Vertices are kept exactly as generated (no merging or reordering) and
    UVs are attached as texture coordinates.

    Args:
        buffers: Generated mesh buffers.

    Returns:
        trimesh.Trimesh sharing the buffer layout.
    """
    return trimesh.Trimesh(
        vertices=buffers.vertices,
        faces=buffers.triangles,
        visual=trimesh.visual.TextureVisuals(uv=buffers.uvs),
        process=False,
    )


class TrimeshTarget:
    """Mesh target backed by trimesh.

    Recomputes bounds and vertex normals for every mesh it receives and
    optionally exports it to a file.

    Args:
        path: Optional output path. The file format follows the suffix
            (e.g. .ply, .obj, .glb).

    Example:
        >>> target = TrimeshTarget("backdrop.ply")
        >>> DepthMeshBuilder().load_pfm("depth.pfm").set_mesh_target(target).generate()
        >>> target.mesh.vertex_normals.shape
    """

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path is not None else None
        self._mesh: trimesh.Trimesh | None = None
        self._bounds: np.ndarray | None = None
        self._vertex_normals: np.ndarray | None = None

    @property
    def path(self) -> Path | None:
        """Return export path, or None if the mesh is kept in memory only."""
        return self._path

    @property
    def mesh(self) -> trimesh.Trimesh | None:
        """Return the last received mesh."""
        return self._mesh

    @property
    def bounds(self) -> np.ndarray | None:
        """Axis-aligned bounds of all vertices, shape (2, 3)."""
        return self._bounds

    @property
    def vertex_normals(self) -> np.ndarray | None:
        """Per-vertex normals of the last received mesh, shape (n, 3)."""
        return self._vertex_normals

    def set_mesh(self, buffers: MeshBuffers) -> None:
        mesh = to_trimesh(buffers)

        if buffers.n_vertices > 0:
            self._bounds = np.array(
                [buffers.vertices.min(axis=0), buffers.vertices.max(axis=0)]
            )
        else:
            self._bounds = None

        # Culled meshes may have no faces to derive normals from
        if buffers.n_triangles > 0:
            self._vertex_normals = np.asarray(mesh.vertex_normals)
        else:
            self._vertex_normals = np.zeros((buffers.n_vertices, 3))

        self._mesh = mesh

        if self._path is not None:
            _export(mesh, self._path)


def save_mesh(buffers: MeshBuffers, path: str | Path) -> None:
    """Save mesh buffers to a file using trimesh.

    Args:
        buffers: Generated mesh buffers.
        path: Output path. The file format follows the suffix.

    Raises:
        MeshGenerationError: If the mesh cannot be written.

    Example:
        >>> from depthmesh.io import save_mesh
        >>> save_mesh(buffers, "output/backdrop.ply")
    """
    _export(to_trimesh(buffers), Path(path))


def _export(mesh: trimesh.Trimesh, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        mesh.export(str(path))
    except Exception as e:
        raise MeshGenerationError(f"Failed to export mesh to {path}: {e}") from e
    logger.info("Mesh saved to %s", path)


def write_pfm(
    depths: DepthGrid | np.ndarray,
    target: str | Path | BinaryIO,
    scale: float = -1.0,
) -> None:
    """Write a 2D array as a little-endian single-channel float-map.

    Args:
        depths: DepthGrid or array of shape (height, width). Rows are
            written in array order.
        target: Output path or writable binary stream.
        scale: Header scale; must be negative (little-endian). Default: -1.0.

    Raises:
        ValueError: If the array is not 2D or the scale is not negative.
    """
    if isinstance(depths, DepthGrid):
        depths = depths.as_array()
    depths = np.asarray(depths)

    if depths.ndim != 2:
        raise ValueError("depths must be 2D array of shape (height, width)")
    if not scale < 0:
        raise ValueError("scale must be negative for little-endian float-maps")

    height, width = depths.shape
    header = f"Pf\n{width} {height}\n{scale:f}\n".encode("ascii")
    payload = np.ascontiguousarray(depths, dtype="<f4").tobytes()

    if isinstance(target, (str, Path)):
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(header)
            f.write(payload)
    else:
        target.write(header)
        target.write(payload)
