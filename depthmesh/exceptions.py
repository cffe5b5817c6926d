"""Custom exceptions for the depthmesh package."""


class DepthMeshError(Exception):
    """Base exception for depthmesh package."""

    pass


class ConfigurationError(DepthMeshError):
    """Pipeline is missing a depth source or mesh target."""

    pass


class ParameterError(ConfigurationError):
    """Configuration option outside its allowed range."""

    pass


class FormatError(DepthMeshError):
    """Float-map stream is malformed."""

    pass


class DataLoadError(DepthMeshError):
    """Failed to load data from file."""

    pass


class MeshGenerationError(DepthMeshError):
    """Mesh generation failed."""

    pass
