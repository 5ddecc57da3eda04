"""Image processing pipeline for image-to-serpentine conversion.

AIDEV-NOTE: This package handles the complete pipeline from a raster
image to zigzag line art. Organized into modular components:
- processor: Main ImageProcessor orchestrator
- sampling: Image loading and grid sampling
- modes: Grayscale / posterize / CMYK / monochrome color groups
- quantization: K-means and gray-level assignment
- rendering: Tile zigzag/curve geometry and path assembly
- svg_builder: SVG document generation
- extraction: Per-group SVG export
- colors, utils: Color conversions, sizing and density helpers
"""

from .errors import (
    ImageLoadError,
    ProcessingError,
    RenderSurfaceError,
    SerpentineError,
)
from .extraction import extract_all_color_groups, extract_color_group_svg
from .processor import ImageProcessor, process_image, process_image_async
from .svg_builder import generate_svg

__all__ = [
    "ImageLoadError",
    "ImageProcessor",
    "ProcessingError",
    "RenderSurfaceError",
    "SerpentineError",
    "extract_all_color_groups",
    "extract_color_group_svg",
    "generate_svg",
    "process_image",
    "process_image_async",
]
