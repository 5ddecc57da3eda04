"""Exceptions raised by the image processing pipeline."""


class SerpentineError(Exception):
    """Base class for pipeline failures."""


class ImageLoadError(SerpentineError, ValueError):
    """The source image could not be fetched or decoded."""


class RenderSurfaceError(SerpentineError, RuntimeError):
    """A raster surface for resampling could not be created."""


class ProcessingError(SerpentineError, RuntimeError):
    """Quantization or pattern generation failed, or settings are malformed."""
