"""Serpentine - raster images to zigzag line-art SVG."""

from .image_processing import (
    ImageProcessor,
    extract_all_color_groups,
    extract_color_group_svg,
    generate_svg,
    process_image,
    process_image_async,
)
from .models import (
    DEFAULT_CURVE_CONTROLS,
    ColorGroup,
    CurveControlSettings,
    ImageData,
    PathPoint,
    PixelData,
    ProcessingMode,
    Settings,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CURVE_CONTROLS",
    "ColorGroup",
    "CurveControlSettings",
    "ImageData",
    "ImageProcessor",
    "PathPoint",
    "PixelData",
    "ProcessingMode",
    "Settings",
    "extract_all_color_groups",
    "extract_color_group_svg",
    "generate_svg",
    "process_image",
    "process_image_async",
]
