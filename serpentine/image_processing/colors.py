"""Color-space conversions used by the mode processors.

AIDEV-NOTE: Channel values are integers 0-255 throughout. Named colors
(e.g. "navy") are resolved with Pillow's ImageColor so the monochrome
color may be any CSS color string.
"""

import colorsys
from typing import TYPE_CHECKING

from PIL import ImageColor

from .utils import round_half_up

if TYPE_CHECKING:
    from serpentine.models import ColorGroup

# Luma weights for perceived brightness
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Convert RGB components to a lowercase #rrggbb string."""
    return "#" + "".join(
        f"{max(0, min(255, round_half_up(c))):02x}" for c in (r, g, b)
    )


def hex_to_rgb(color: str) -> "tuple[int, int, int]":
    """Parse a hex string or CSS color name into an RGB tuple.

    Raises:
        ValueError: If the color string is not recognised
    """
    rgb = ImageColor.getrgb(color)
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]))


def calculate_brightness(r: float, g: float, b: float) -> float:
    """Luma-weighted brightness (0-255)."""
    return r * LUMA_R + g * LUMA_G + b * LUMA_B


def calculate_hue(r: float, g: float, b: float) -> float:
    """Hue angle in degrees (0-360). Grays report 0."""
    h, _, _ = colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
    return h * 360.0


def rgb_to_cmyk(r: int, g: int, b: int) -> "dict[str, int]":
    """Convert RGB to CMYK with every channel scaled to 0-255.

    Standard subtractive conversion: k = 1 - max(r, g, b) and the
    remaining inks are the complements normalized by (1 - k).

    Returns:
        Mapping ordered cyan, magenta, yellow, black
    """
    rn = r / 255.0
    gn = g / 255.0
    bn = b / 255.0

    k = 1.0 - max(rn, gn, bn)
    c = m = y = 0.0
    if k < 1.0:
        ik = 1.0 / (1.0 - k)
        c = (1.0 - rn - k) * ik
        m = (1.0 - gn - k) * ik
        y = (1.0 - bn - k) * ik

    return {
        "cyan": round_half_up(c * 255),
        "magenta": round_half_up(m * 255),
        "yellow": round_half_up(y * 255),
        "black": round_half_up(k * 255),
    }


def sort_color_groups(
    color_groups: "dict[str, ColorGroup]",
) -> "dict[str, ColorGroup]":
    """Annotate groups with hue/brightness and order them for presentation.

    Groups are ordered by hue, then by brightness. Group colors must be
    parseable by hex_to_rgb.
    """
    for group in color_groups.values():
        r, g, b = hex_to_rgb(group.color)
        group.hue = calculate_hue(r, g, b)
        group.brightness = calculate_brightness(r, g, b)

    ordered = sorted(
        color_groups.items(),
        key=lambda item: (item[1].hue, item[1].brightness),
    )
    return dict(ordered)
