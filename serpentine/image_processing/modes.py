"""Mode processors: sampled pixels to named color groups.

AIDEV-NOTE: Every processor walks the sampling grid row-major and emits
one PathPoint per retained pixel (CMYK may emit up to four, one per
ink). Anchors alternate sides by row so consecutive tiles form a
serpentine: even rows start at the tile's left edge moving right, odd
rows start at the right edge moving left. Density always comes from
calculate_context_aware_density over a per-mode intensity grid.
"""

import logging

import numpy as np

from serpentine.models import (
    ColorGroup,
    ImageData,
    PathPoint,
    PixelData,
    ProcessingMode,
    Settings,
)

from .colors import (
    calculate_brightness,
    calculate_hue,
    hex_to_rgb,
    rgb_to_cmyk,
    rgb_to_hex,
    sort_color_groups,
)
from .quantization import (
    assign_to_centroids,
    build_gray_levels,
    collect_unique_colors,
    kmeans_clustering,
    nearest_gray_level,
)
from .utils import calculate_context_aware_density

logger = logging.getLogger(__name__)

CMYK_GROUPS = {
    "cyan": ("#00FFFF", "Cyan"),
    "magenta": ("#FF00FF", "Magenta"),
    "yellow": ("#FFFF00", "Yellow"),
    "black": ("#000000", "Black"),
}


def make_path_point(
    x: int,
    y: int,
    tile_width: float,
    tile_height: float,
    density: int,
) -> PathPoint:
    """Build the PathPoint for grid cell (x, y)."""
    even_row = y % 2 == 0
    return PathPoint(
        x=x * tile_width if even_row else (x + 1) * tile_width,
        y=y * tile_height,
        width=tile_width,
        height=tile_height,
        density=density,
        row=y,
        direction=1 if even_row else -1,
    )


def _scan_order(pixels: "list[PixelData]") -> "list[PixelData]":
    return sorted(pixels, key=lambda p: (p.y, p.x))


def _empty_grid(image_data: ImageData) -> np.ndarray:
    return np.full((image_data.height, image_data.width), np.nan)


def _density(
    intensity: np.ndarray, pixel: PixelData, settings: Settings
) -> int:
    return calculate_context_aware_density(
        intensity,
        pixel.x,
        pixel.y,
        settings.min_density,
        settings.max_density,
        smoothing=settings.density_smoothing,
        even=settings.even_density,
    )


def process_grayscale(
    image_data: ImageData, settings: Settings
) -> "dict[str, ColorGroup]":
    """Group pixels into evenly spaced gray levels.

    Levels span the brightness range actually present; each pixel joins
    its nearest level and darker levels get denser zigzags.
    """
    pixels = _scan_order(image_data.pixels)
    if not pixels:
        return {}

    min_bright = min(p.brightness for p in pixels)
    max_bright = max(p.brightness for p in pixels)
    levels = build_gray_levels(min_bright, max_bright, settings.colors_amt)

    color_groups: "dict[str, ColorGroup]" = {}
    for index, level in enumerate(levels):
        color_groups[f"gray-{level}"] = ColorGroup(
            color=rgb_to_hex(level, level, level),
            display_name=f"Gray {index + 1} ({level})",
            hue=0.0,
            brightness=float(level),
        )

    assigned = {}
    intensity = _empty_grid(image_data)
    for pixel in pixels:
        level = nearest_gray_level(pixel.brightness, levels)
        assigned[(pixel.x, pixel.y)] = level
        intensity[pixel.y, pixel.x] = (255 - level) / 255

    for pixel in pixels:
        level = assigned[(pixel.x, pixel.y)]
        color_groups[f"gray-{level}"].points.append(
            make_path_point(
                pixel.x,
                pixel.y,
                image_data.tile_width,
                image_data.tile_height,
                _density(intensity, pixel, settings),
            )
        )

    return color_groups


def process_posterize(
    image_data: ImageData, settings: Settings
) -> "dict[str, ColorGroup]":
    """Cluster the distinct colors with k-means and group by centroid."""
    pixels = _scan_order(image_data.pixels)
    if not pixels:
        return {}

    unique_colors = collect_unique_colors(pixels)
    centroids = kmeans_clustering(
        unique_colors, settings.colors_amt, seed=settings.kmeans_seed
    )
    logger.debug(
        "Posterize: %d distinct colors -> %d centroids",
        len(unique_colors),
        len(centroids),
    )

    keys = [f"color-{r}-{g}-{b}" for r, g, b in centroids]
    color_groups: "dict[str, ColorGroup]" = {}
    for index, (key, (r, g, b)) in enumerate(zip(keys, centroids)):
        color_groups[key] = ColorGroup(
            color=rgb_to_hex(r, g, b),
            display_name=f"Color {index + 1}",
        )

    labels = assign_to_centroids(
        np.asarray([(p.r, p.g, p.b) for p in pixels]), centroids
    )

    intensity = _empty_grid(image_data)
    for pixel, label in zip(pixels, labels):
        r, g, b = centroids[label]
        intensity[pixel.y, pixel.x] = (255 - calculate_brightness(r, g, b)) / 255

    for pixel, label in zip(pixels, labels):
        color_groups[keys[label]].points.append(
            make_path_point(
                pixel.x,
                pixel.y,
                image_data.tile_width,
                image_data.tile_height,
                _density(intensity, pixel, settings),
            )
        )

    return sort_color_groups(color_groups)


def process_cmyk(
    image_data: ImageData, settings: Settings
) -> "dict[str, ColorGroup]":
    """One group per ink; a pixel feeds every channel it uses."""
    pixels = _scan_order(image_data.pixels)

    color_groups = {
        key: ColorGroup(color=color, display_name=name)
        for key, (color, name) in CMYK_GROUPS.items()
    }

    channels = {key: _empty_grid(image_data) for key in CMYK_GROUPS}
    cmyk_values = {}
    for pixel in pixels:
        cmyk = rgb_to_cmyk(pixel.r, pixel.g, pixel.b)
        cmyk_values[(pixel.x, pixel.y)] = cmyk
        for channel, value in cmyk.items():
            channels[channel][pixel.y, pixel.x] = value / 255

    for pixel in pixels:
        for channel, value in cmyk_values[(pixel.x, pixel.y)].items():
            if value <= 0:
                continue
            color_groups[channel].points.append(
                make_path_point(
                    pixel.x,
                    pixel.y,
                    image_data.tile_width,
                    image_data.tile_height,
                    _density(channels[channel], pixel, settings),
                )
            )

    return color_groups


def process_monochrome(
    image_data: ImageData, settings: Settings
) -> "dict[str, ColorGroup]":
    """A single group in the chosen color; darker pixels are denser."""
    pixels = _scan_order(image_data.pixels)

    r, g, b = hex_to_rgb(settings.monochrome_color)
    group = ColorGroup(
        color=settings.monochrome_color,
        display_name="Monochrome",
        hue=calculate_hue(r, g, b),
        brightness=calculate_brightness(r, g, b),
    )

    intensity = _empty_grid(image_data)
    for pixel in pixels:
        intensity[pixel.y, pixel.x] = (255 - pixel.brightness) / 255

    for pixel in pixels:
        group.points.append(
            make_path_point(
                pixel.x,
                pixel.y,
                image_data.tile_width,
                image_data.tile_height,
                _density(intensity, pixel, settings),
            )
        )

    return {"monochrome": group}


def build_color_groups(
    image_data: ImageData, settings: Settings
) -> "dict[str, ColorGroup]":
    """Run the processor for settings.processing_mode."""
    mode = settings.processing_mode
    if mode is ProcessingMode.GRAYSCALE:
        return process_grayscale(image_data, settings)
    elif mode is ProcessingMode.POSTERIZE:
        return process_posterize(image_data, settings)
    elif mode is ProcessingMode.CMYK:
        return process_cmyk(image_data, settings)
    elif mode is ProcessingMode.MONOCHROME:
        return process_monochrome(image_data, settings)
    else:
        raise NotImplementedError(f"Processing mode {mode} not implemented.")
