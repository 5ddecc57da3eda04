"""Utility functions for sizing, geometry and density calculations.

AIDEV-NOTE: This module contains helper functions for the output canvas
dimensions, point distances and the zigzag density model shared by all
mode processors.
"""

import math

import numpy as np

from serpentine.models import MAX_DIMENSION


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity.

    Python's round() uses banker's rounding; densities and gray levels
    use the conventional half-up rule instead.
    """
    return int(math.floor(value + 0.5))


def calculate_output_dimensions(
    original_width: int,
    original_height: int,
    columns_count: int,
    rows_count: int,
    max_dimension: int = MAX_DIMENSION,
) -> "tuple[int, int, float, float]":
    """Derive the output canvas size and per-tile size.

    Args:
        original_width: Source image width in pixels
        original_height: Source image height in pixels
        columns_count: Requested grid columns (> 0)
        rows_count: Requested grid rows (> 0)
        max_dimension: Size of the longer output axis

    Returns:
        Tuple of (output_width, output_height, tile_width, tile_height)

    AIDEV-NOTE: The longer image axis is scaled to max_dimension and the
    other axis follows the aspect ratio. Zero columns/rows are a
    precondition violation and are not checked here.
    """
    if original_width >= original_height:
        output_width = max_dimension
        output_height = max(
            1, round_half_up(max_dimension * original_height / original_width)
        )
    else:
        output_height = max_dimension
        output_width = max(
            1, round_half_up(max_dimension * original_width / original_height)
        )

    tile_width = output_width / columns_count
    tile_height = output_height / rows_count

    return output_width, output_height, tile_width, tile_height


def calculate_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points."""
    return math.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2)


def ensure_even_density(density: int) -> int:
    """Force a density to 0 or the next lower even number."""
    if density <= 0:
        return 0
    return density if density % 2 == 0 else density - 1


def clamp_density(density: int, max_density: int) -> int:
    """Clamp a density into [0, max_density]."""
    return max(0, min(max_density, density))


def interpolate_density(
    normalized_value: float,
    min_density: int,
    max_density: int,
    even: bool = False,
) -> int:
    """Map a normalized intensity (0-1) linearly into a zigzag density.

    Args:
        normalized_value: 0 = lightest / no ink, 1 = darkest / full ink
        min_density: Density at intensity 0
        max_density: Density at intensity 1
        even: Apply the legacy even-density rule

    Returns:
        Density clamped to [0, max_density]
    """
    density = round_half_up(
        min_density + normalized_value * (max_density - min_density)
    )
    density = clamp_density(density, max_density)
    if even:
        density = ensure_even_density(density)
    return density


def neighbour_mean(intensity: np.ndarray, x: int, y: int) -> float | None:
    """Mean intensity of the present 4-neighbours of (x, y).

    Args:
        intensity: 2D array indexed [row, column]; NaN marks missing cells

    Returns:
        Mean value, or None when no neighbour is present
    """
    height, width = intensity.shape
    values = []
    for nx, ny in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)):
        if 0 <= nx < width and 0 <= ny < height:
            value = intensity[ny, nx]
            if not np.isnan(value):
                values.append(float(value))
    if not values:
        return None
    return sum(values) / len(values)


def calculate_context_aware_density(
    intensity: np.ndarray,
    x: int,
    y: int,
    min_density: int,
    max_density: int,
    smoothing: float = 0.0,
    even: bool = False,
) -> int:
    """Density for one tile, optionally softened by its neighbours.

    Args:
        intensity: 2D normalized intensity grid [row, column], NaN = empty
        x: Grid column of the tile
        y: Grid row of the tile
        min_density: Density at intensity 0
        max_density: Density at intensity 1
        smoothing: Weight (0-1) given to the neighbour mean
        even: Apply the legacy even-density rule

    Returns:
        Density clamped to [0, max_density]

    AIDEV-NOTE: This is the single density model for every mode. With
    smoothing == 0 it reduces to plain linear interpolation.
    """
    value = float(intensity[y, x])
    if smoothing > 0:
        mean = neighbour_mean(intensity, x, y)
        if mean is not None:
            value = (1.0 - smoothing) * value + smoothing * mean
    return interpolate_density(value, min_density, max_density, even=even)
