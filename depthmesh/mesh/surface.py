"""Triangulated surface mesh generation from depth grids."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from depthmesh.fields.curve import DepthCurve
    from depthmesh.fields.depth import DepthGrid


class MeshBuffers:
    """Vertex, UV and triangle buffers of a generated mesh.

    Args:
        vertices: Vertex positions, shape (n, 3).
        uvs: Texture coordinates parallel to vertices, shape (n, 2).
        triangles: Vertex index triples, shape (m, 3). Stored as uint32.
    """

    def __init__(
        self,
        vertices: np.ndarray,
        uvs: np.ndarray,
        triangles: np.ndarray,
    ):
        self.vertices = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        self.uvs = np.asarray(uvs, dtype=np.float32).reshape(-1, 2)
        self.triangles = np.asarray(triangles, dtype=np.uint32).reshape(-1, 3)

        if len(self.vertices) != len(self.uvs):
            raise ValueError(
                f"vertices and uvs must have same length, "
                f"got {len(self.vertices)} and {len(self.uvs)}"
            )
        if self.triangles.size and self.triangles.max() >= len(self.vertices):
            raise ValueError("Triangle index out of range")

    @property
    def n_vertices(self) -> int:
        """Number of vertices."""
        return len(self.vertices)

    @property
    def n_triangles(self) -> int:
        """Number of triangles."""
        return len(self.triangles)

    @property
    def indices(self) -> np.ndarray:
        """Flat triangle index list, three entries per triangle."""
        return self.triangles.reshape(-1)

    def __repr__(self) -> str:
        return (
            f"MeshBuffers(n_vertices={self.n_vertices}, "
            f"n_triangles={self.n_triangles})"
        )


def grid_triangles(width: int, height: int) -> np.ndarray:
    """Return every candidate triangle of a width x height vertex grid.

    Vertex ``(x, y)`` has index ``y * width + x``. Quads are visited in
    row-major order and each contributes ``(x+1,y+1), (x+1,y), (x,y)``
    followed by ``(x,y+1), (x+1,y+1), (x,y)``.

    Returns:
        Index array of shape (2 * (width-1) * (height-1), 3), or an empty
        (0, 3) array when either dimension is below 2.
    """
    if width < 2 or height < 2:
        return np.empty((0, 3), dtype=np.uint32)

    ids = np.arange(width * height, dtype=np.uint32).reshape(height, width)
    p00 = ids[:-1, :-1]
    p10 = ids[:-1, 1:]
    p01 = ids[1:, :-1]
    p11 = ids[1:, 1:]

    first = np.stack([p11, p10, p00], axis=-1)
    second = np.stack([p01, p11, p00], axis=-1)
    return np.stack([first, second], axis=2).reshape(-1, 3)


def in_band(depths: np.ndarray, min_depth: float, max_depth: float) -> np.ndarray:
    """Return a per-vertex mask of depths inside [min_depth, max_depth]."""
    return (depths >= min_depth) & (depths <= max_depth)


def build_mesh_buffers(
    grid: DepthGrid,
    long_axis: int,
    min_depth: float = 0.0,
    max_depth: float = 1.0,
    depth_curve: DepthCurve | None = None,
) -> MeshBuffers:
    """Convert a processed depth grid into mesh buffers.

    One vertex is emitted per grid cell in row-major order, at
    ``((x - W/2) / long_axis, (y - H/2) / long_axis, depth - 0.5)`` with UV
    ``(x / W, y / H)``. The depth used for positioning goes through
    ``depth_curve`` when it is active. Triangles are culled against the
    depth band using the grid depth before the curve: a triangle is kept
    only if all three of its vertices lie inside ``[min_depth, max_depth]``.

    Args:
        grid: Resampled and blurred depth grid.
        long_axis: Long-axis resolution used to scale positions.
        min_depth: Lower bound of the depth band (inclusive).
        max_depth: Upper bound of the depth band (inclusive). An empty band
            (min > max) culls every triangle.
        depth_curve: Optional remapping of depth before positioning.

    Returns:
        MeshBuffers with ``W * H`` vertices.
    """
    width, height = grid.width, grid.height
    depths = grid.values

    positioned = depths
    if depth_curve is not None and depth_curve.is_active:
        positioned = depth_curve(depths)

    ys, xs = np.divmod(np.arange(width * height), max(width, 1))

    vertices = np.empty((width * height, 3), dtype=np.float32)
    vertices[:, 0] = (xs - width / 2) / long_axis
    vertices[:, 1] = (ys - height / 2) / long_axis
    vertices[:, 2] = positioned - 0.5

    uvs = np.empty((width * height, 2), dtype=np.float32)
    if width and height:
        uvs[:, 0] = xs / width
        uvs[:, 1] = ys / height

    triangles = grid_triangles(width, height)
    keep = in_band(depths, min_depth, max_depth)[triangles].all(axis=1)

    return MeshBuffers(vertices, uvs, triangles[keep])
