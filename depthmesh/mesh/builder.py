"""High-level DepthMeshBuilder API for depth-map backdrop meshes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Sequence

from depthmesh.exceptions import ConfigurationError
from depthmesh.fields.blur import box_blur
from depthmesh.fields.curve import DepthCurve
from depthmesh.fields.depth import build_depth_grid
from depthmesh.fields.resample import resample_depths
from depthmesh.io.readers import FloatMap, PixelBuffer, read_image, read_pfm
from depthmesh.mesh.config import MeshConfig
from depthmesh.mesh.surface import MeshBuffers, build_mesh_buffers

if TYPE_CHECKING:
    from depthmesh.io.writers import MeshTarget

logger = logging.getLogger(__name__)


class DepthMeshBuilder:
    """High-level API for building backdrop meshes from depth maps.

    Orchestrates the full mesh generation workflow:
    1. Normalize the depth source (image pixels or float-map)
    2. Resample to a power-of-two grid
    3. Box blur the resampled depths
    4. Assemble vertices, UVs and depth-band culled triangles
    5. Hand the buffers to the mesh target (generate only)

    Args:
        config: Initial configuration. Defaults to MeshConfig().
        target: Mesh target receiving the buffers in generate().

    Example:
        >>> from depthmesh import DepthMeshBuilder
        >>> from depthmesh.io import TrimeshTarget
        >>> buffers = (
        ...     DepthMeshBuilder()
        ...     .load_pfm("depth.pfm")
        ...     .set_blur(box_blur_range=2, box_blur_iterations=1)
        ...     .set_depth_band(0.0, 0.9)
        ...     .set_subdivisions(7)
        ...     .set_mesh_target(TrimeshTarget("backdrop.ply"))
        ...     .generate()
        ... )
    """

    def __init__(
        self,
        config: MeshConfig | None = None,
        target: MeshTarget | None = None,
    ):
        self._config = config or MeshConfig()
        self._target = target

        # Depth source (exactly one must be set before building)
        self._pixels: PixelBuffer | None = None
        self._float_map: FloatMap | None = None

        # Statistics of the last build; buffers themselves are not retained
        self._last_counts: tuple[int, int] | None = None

    @property
    def config(self) -> MeshConfig:
        """Return the current configuration."""
        return self._config

    @property
    def target(self) -> MeshTarget | None:
        """Return the mesh target, or None."""
        return self._target

    @property
    def has_source(self) -> bool:
        """Return True if a depth source is set."""
        return self._pixels is not None or self._float_map is not None

    def set_pixel_buffer(self, pixels: PixelBuffer) -> DepthMeshBuilder:
        """Use decoded image pixels as the depth source.

        Args:
            pixels: PixelBuffer whose red channel holds depth.

        Returns:
            Self for method chaining.
        """
        self._pixels = pixels
        return self

    def load_image(self, path: str | Path) -> DepthMeshBuilder:
        """Load an image file as the depth source.

        Args:
            path: Path to an image readable by Pillow.

        Returns:
            Self for method chaining.
        """
        self._pixels = read_image(path)
        return self

    def set_float_map(self, float_map: FloatMap) -> DepthMeshBuilder:
        """Use a decoded float-map as the depth source.

        Args:
            float_map: FloatMap from read_pfm().

        Returns:
            Self for method chaining.
        """
        self._float_map = float_map
        return self

    def load_pfm(self, source: str | Path | bytes | BinaryIO) -> DepthMeshBuilder:
        """Load a float-map file as the depth source.

        Args:
            source: Path, raw bytes or binary stream of a ``Pf`` float-map.

        Returns:
            Self for method chaining.
        """
        self._float_map = read_pfm(source)
        return self

    def set_config(self, config: MeshConfig) -> DepthMeshBuilder:
        """Replace the whole configuration.

        Args:
            config: MeshConfig object.

        Returns:
            Self for method chaining.
        """
        self._config = config
        return self

    def set_blur(
        self,
        box_blur_range: int,
        box_blur_iterations: int = 1,
    ) -> DepthMeshBuilder:
        """Set box blur radius and iteration count.

        Returns:
            Self for method chaining.
        """
        self._config = self._config.replace(
            box_blur_range=box_blur_range,
            box_blur_iterations=box_blur_iterations,
        )
        return self

    def set_depth_band(self, min_depth: float, max_depth: float) -> DepthMeshBuilder:
        """Set the inclusive depth band kept in the output triangles.

        Returns:
            Self for method chaining.
        """
        self._config = self._config.replace(min_depth=min_depth, max_depth=max_depth)
        return self

    def set_subdivisions(self, subdivisions: int) -> DepthMeshBuilder:
        """Set the long-axis exponent of the mesh grid.

        Returns:
            Self for method chaining.
        """
        self._config = self._config.replace(subdivisions=subdivisions)
        return self

    def set_depth_curve(
        self,
        curve: DepthCurve | Sequence[tuple[float, float]] | None,
    ) -> DepthMeshBuilder:
        """Set or clear the depth remapping curve.

        Returns:
            Self for method chaining.
        """
        self._config = self._config.replace(depth_curve=curve)
        return self

    def set_mesh_target(self, target: MeshTarget) -> DepthMeshBuilder:
        """Set the collaborator that receives generated meshes.

        Returns:
            Self for method chaining.
        """
        self._target = target
        return self

    def build(self) -> MeshBuffers:
        """Run the pipeline and return the mesh buffers.

        Returns:
            MeshBuffers owned by the caller.

        Raises:
            ConfigurationError: If no depth source, or both sources, are set.
            FormatError: If a float-map source is malformed.
            MeshGenerationError: If resampling fails.
        """
        config = self._config
        grid = build_depth_grid(pixels=self._pixels, float_map=self._float_map)

        depths = resample_depths(grid, config.subdivisions)
        box_blur(depths, config.box_blur_range, config.box_blur_iterations)

        buffers = build_mesh_buffers(
            depths,
            config.long_axis,
            min_depth=config.min_depth,
            max_depth=config.max_depth,
            depth_curve=config.depth_curve,
        )

        logger.info(
            "Number of vertices: %d, number of triangles: %d",
            buffers.n_vertices,
            buffers.n_triangles,
        )
        self._last_counts = (buffers.n_vertices, buffers.n_triangles)
        return buffers

    def generate(self) -> MeshBuffers:
        """Build the mesh and hand it to the mesh target.

        Returns:
            The MeshBuffers passed to the target.

        Raises:
            ConfigurationError: If no mesh target or no depth source is set.
        """
        if self._target is None:
            raise ConfigurationError(
                "No mesh target specified. Call set_mesh_target() first."
            )

        buffers = self.build()
        self._target.set_mesh(buffers)
        return buffers

    def get_mesh_info(self) -> dict:
        """Return information about the configuration and last build.

        Returns:
            Dictionary with configuration values and mesh statistics.
        """
        config = self._config
        info = {
            "box_blur_range": config.box_blur_range,
            "box_blur_iterations": config.box_blur_iterations,
            "min_depth": config.min_depth,
            "max_depth": config.max_depth,
            "subdivisions": config.subdivisions,
            "long_axis": config.long_axis,
            "has_depth_curve": config.depth_curve is not None,
        }

        if self._pixels is not None:
            info["source"] = "pixels"
            info["source_size"] = (self._pixels.width, self._pixels.height)
        elif self._float_map is not None:
            info["source"] = "float_map"
            info["source_size"] = (self._float_map.width, self._float_map.height)

        if self._last_counts is not None:
            info["n_vertices"], info["n_triangles"] = self._last_counts

        return info


def build_mesh(
    source: PixelBuffer | FloatMap,
    config: MeshConfig | None = None,
) -> MeshBuffers:
    """Convenience function to build mesh buffers from a single source.

    Args:
        source: PixelBuffer or FloatMap.
        config: Optional configuration. Defaults to MeshConfig().

    Returns:
        MeshBuffers owned by the caller.
    """
    builder = DepthMeshBuilder(config)
    if isinstance(source, PixelBuffer):
        builder.set_pixel_buffer(source)
    elif isinstance(source, FloatMap):
        builder.set_float_map(source)
    else:
        raise ConfigurationError(
            f"Unsupported depth source: {type(source).__name__}"
        )
    return builder.build()


def generate_mesh(
    source: PixelBuffer | FloatMap,
    target: MeshTarget | None,
    config: MeshConfig | None = None,
) -> MeshBuffers:
    """Convenience function to build a mesh and hand it to a mesh target.

    Raises:
        ConfigurationError: If target is None.
    """
    if target is None:
        raise ConfigurationError("No mesh target specified")
    buffers = build_mesh(source, config)
    target.set_mesh(buffers)
    return buffers
