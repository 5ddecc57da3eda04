"""SVG document assembly for processed images."""

import logging
import re

import svg

from serpentine.models import PX_PER_MM, ColorGroup, ImageData, Settings

from .rendering import build_continuous_paths, build_tile_paths
from .utils import round_half_up

logger = logging.getLogger(__name__)

GROUP_ID_PREFIX = "color-group-"
_GROUP_ID_RE = re.compile(r"^\d*" + re.escape(GROUP_ID_PREFIX) + r"(?P<key>.+)$")

# Shared stroke styling for every generated path
PATH_ATTRIBUTES = {
    "stroke-linejoin": "round",
    "stroke-linecap": "round",
    "vector-effect": "non-scaling-stroke",
}


def group_element_id(ordinal: int, key: str) -> str:
    """Element id for a color group: "<ordinal>color-group-<key>"."""
    return f"{ordinal}{GROUP_ID_PREFIX}{key}"


def parse_group_id(element_id: str) -> str | None:
    """Recover the group key from an element id, with or without ordinal."""
    match = _GROUP_ID_RE.match(element_id or "")
    return match.group("key") if match else None


def physical_size(output_width: int, output_height: int) -> "tuple[str, str]":
    """Root width/height in millimeters for the given pixel size."""
    return (
        f"{round_half_up(output_width / PX_PER_MM)}mm",
        f"{round_half_up(output_height / PX_PER_MM)}mm",
    )


def color_group_to_svg(
    key: str,
    group: ColorGroup,
    ordinal: int,
    settings: Settings,
) -> svg.G:
    """Build the <g> element holding every path of one color group."""
    if settings.continuous_paths:
        paths = build_continuous_paths(group.points, settings)
    else:
        paths = build_tile_paths(group.points, settings)

    elements: "list[svg.Element]" = [
        svg.Path(
            d=commands,
            stroke=group.color,
            fill="none",
            stroke_width=1,
            extra=dict(PATH_ATTRIBUTES),
        )
        for commands in paths
    ]

    return svg.G(
        id=group_element_id(ordinal, key),
        elements=elements,
        extra={
            "data-key": key,
            "data-color": group.color,
            "data-name": group.display_name,
        },
    )


def generate_svg(
    image_data: ImageData,
    settings: Settings,
    background: str | None = None,
) -> str:
    """Convert processed image data to an SVG string.

    Args:
        image_data: Processing result with color groups
        settings: Path options (continuous/curved, distance threshold,
            visibility, curve controls)
        background: Optional fill color for a full-canvas background rect

    Returns:
        SVG content as string

    AIDEV-NOTE: Groups hidden through settings.visible_paths are left out
    entirely. Ordinals in group ids count every group, visible or not, so
    a group keeps the same id when others are toggled.
    """
    width = image_data.output_width
    height = image_data.output_height
    width_mm, height_mm = physical_size(width, height)

    elements: "list[svg.Element]" = []
    if background:
        elements.append(
            svg.Rect(x=0, y=0, width=width, height=height, fill=background)
        )

    color_groups = image_data.color_groups or {}
    for ordinal, (key, group) in enumerate(color_groups.items(), start=1):
        if not settings.is_visible(key):
            continue
        elements.append(color_group_to_svg(key, group, ordinal, settings))

    logger.info(
        "Generated SVG %sx%s with %d of %d color groups",
        width_mm,
        height_mm,
        sum(1 for e in elements if isinstance(e, svg.G)),
        len(color_groups),
    )

    document = svg.SVG(
        width=width_mm,
        height=height_mm,
        viewBox=svg.ViewBoxSpec(0, 0, width, height),
        elements=elements,
        extra={
            "shape-rendering": "geometricPrecision",
            "style": "stroke-linejoin: round; stroke-linecap: round;",
        },
    )
    return document.as_str()
