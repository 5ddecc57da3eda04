"""Color quantization for the grayscale and posterize modes.

AIDEV-NOTE: Posterize clusters the distinct colors of the sampled grid
with scikit-learn KMeans (random initial centroids, capped iterations).
Nearest-centroid and nearest-gray-level assignment always pick the
first minimal candidate so results are reproducible for a given
centroid list.
"""

import logging

import numpy as np
from sklearn.cluster import KMeans

from serpentine.models import (
    KMEANS_MAX_ITERATIONS,
    KMEANS_TOLERANCE,
    MAX_KMEANS_COLORS,
    PixelData,
)

from .utils import round_half_up

logger = logging.getLogger(__name__)


def collect_unique_colors(pixels: "list[PixelData]") -> "list[tuple[int, int, int]]":
    """Distinct RGB colors in scan order."""
    return list(dict.fromkeys((p.r, p.g, p.b) for p in pixels))


def subsample_colors(
    colors: "list[tuple[int, int, int]]",
    limit: int = MAX_KMEANS_COLORS,
) -> "list[tuple[int, int, int]]":
    """Take every n-th color when there are more than `limit`."""
    if len(colors) <= limit:
        return colors
    step = len(colors) // limit
    return colors[::step]


def kmeans_clustering(
    colors: "list[tuple[int, int, int]]",
    num_colors: int,
    seed: int | None = None,
) -> "list[tuple[int, int, int]]":
    """Reduce a set of distinct colors to representative centroids.

    Args:
        colors: Distinct RGB colors
        num_colors: Target palette size
        seed: Random state for the initial centroids; None is random

    Returns:
        Integer RGB centroids. The list has min(num_colors, len(colors))
        entries unless two centroids round to the same color.

    AIDEV-NOTE: Uses scikit-learn KMeans like the plotter pipeline, but
    with init="random" and a small max_iter to keep interactive
    recomputation cheap.
    """
    if not colors or num_colors < 1:
        return []

    samples = subsample_colors(colors)
    k = min(num_colors, len(samples))

    if k == len(samples):
        # Every color is its own cluster
        return [tuple(int(c) for c in color) for color in samples]

    data = np.asarray(samples, dtype=np.float64)
    kmeans = KMeans(
        n_clusters=k,
        init="random",
        n_init=1,
        max_iter=KMEANS_MAX_ITERATIONS,
        tol=KMEANS_TOLERANCE,
        random_state=seed,
    )
    kmeans.fit(data)
    logger.debug(
        "K-means converged after %d iterations for %d colors",
        kmeans.n_iter_,
        len(samples),
    )

    centroids: "list[tuple[int, int, int]]" = []
    for center in kmeans.cluster_centers_:
        rounded = tuple(max(0, min(255, round_half_up(c))) for c in center)
        if rounded in centroids:
            logger.debug("Dropping duplicate centroid %s", rounded)
            continue
        centroids.append(rounded)
    return centroids


def assign_to_centroids(
    colors: np.ndarray,
    centroids: "list[tuple[int, int, int]]",
) -> np.ndarray:
    """Index of the nearest centroid (Euclidean RGB) for each color.

    Args:
        colors: (n, 3) array of RGB colors
        centroids: Non-empty centroid list

    Returns:
        (n,) integer array; ties resolve to the lowest centroid index
    """
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    centers = np.asarray(centroids, dtype=np.float64).reshape(-1, 3)
    distances = np.sum((colors[:, None, :] - centers[None, :, :]) ** 2, axis=2)
    return np.argmin(distances, axis=1)


def find_nearest_centroid(
    color: "tuple[int, int, int]",
    centroids: "list[tuple[int, int, int]]",
) -> "tuple[int, int, int]":
    """Nearest centroid for a single color."""
    index = int(assign_to_centroids(np.asarray([color]), centroids)[0])
    return centroids[index]


def build_gray_levels(
    min_brightness: int,
    max_brightness: int,
    count: int,
) -> "list[int]":
    """Evenly spaced gray levels spanning [min_brightness, max_brightness].

    Duplicate levels (narrow ranges) are collapsed, keeping order.
    """
    if count <= 1:
        return [round_half_up((min_brightness + max_brightness) / 2)]
    span = max_brightness - min_brightness
    levels = [
        round_half_up(min_brightness + (i / (count - 1)) * span) for i in range(count)
    ]
    return list(dict.fromkeys(levels))


def nearest_gray_level(brightness: int, levels: "list[int]") -> int:
    """Closest level to a brightness; the first level wins ties."""
    nearest = levels[0]
    for level in levels[1:]:
        if abs(level - brightness) < abs(nearest - brightness):
            nearest = level
    return nearest
