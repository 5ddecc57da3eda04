"""Tile pattern geometry and path assembly.

AIDEV-NOTE: A tile of density d is drawn as d vertical strokes joined by
horizontal legs (a zigzag). The last horizontal leg always lands on the
far edge of the tile: at the bottom for odd densities, at the top for
even ones. In curved mode every leg becomes a cubic Bezier and, inside
continuous paths, consecutive tiles are joined by a junction curve that
keeps the tangent direction roughly continuous.

Paths are returned as lists of svg.py path commands; svg_builder wraps
them into <path> elements.
"""

import logging
import math

import svg

from serpentine.models import CurveControlSettings, PathPoint, Settings

from .utils import calculate_distance

logger = logging.getLogger(__name__)

# Coordinates are written with this many decimals
COORDINATE_PRECISION = 3


def _round(value: float) -> float:
    rounded = round(value, COORDINATE_PRECISION)
    # Avoid "-0.0" in the output
    return 0.0 if rounded == 0 else rounded


def _normalize(dx: float, dy: float) -> "tuple[float, float] | None":
    length = math.hypot(dx, dy)
    if length < 1e-9:
        return None
    return (dx / length, dy / length)


class PathBuilder:
    """Accumulates path commands while tracking the pen and its tangent."""

    def __init__(self):
        self.commands: "list[svg.PathData]" = []
        self.pen: "tuple[float, float] | None" = None
        self.tangent: "tuple[float, float] | None" = None

    @property
    def is_empty(self) -> bool:
        return not self.commands

    def move_to(self, x: float, y: float) -> None:
        x, y = _round(x), _round(y)
        self.commands.append(svg.MoveTo(x=x, y=y))
        self.pen = (x, y)
        self.tangent = None

    def line_to(self, x: float, y: float) -> None:
        x, y = _round(x), _round(y)
        if self.pen == (x, y):
            return
        px, py = self.pen
        self.commands.append(svg.LineTo(x=x, y=y))
        self.tangent = _normalize(x - px, y - py) or self.tangent
        self.pen = (x, y)

    def curve_to(
        self,
        control1: "tuple[float, float]",
        control2: "tuple[float, float]",
        end: "tuple[float, float]",
    ) -> None:
        x1, y1 = _round(control1[0]), _round(control1[1])
        x2, y2 = _round(control2[0]), _round(control2[1])
        x, y = _round(end[0]), _round(end[1])
        px, py = self.pen
        self.commands.append(svg.CubicBezier(x1=x1, y1=y1, x2=x2, y2=y2, x=x, y=y))
        # Exit tangent: last control point toward the end point
        self.tangent = (
            _normalize(x - x2, y - y2)
            or _normalize(x - x1, y - y1)
            or _normalize(x - px, y - py)
            or self.tangent
        )
        self.pen = (x, y)


def sort_serpentine(points: "list[PathPoint]") -> "list[PathPoint]":
    """Row-major order; even rows left to right, odd rows right to left."""
    return sorted(points, key=lambda p: (p.row, p.x if p.row % 2 == 0 else -p.x))


def tile_legs(
    x: float,
    y: float,
    width: float,
    height: float,
    density: int,
    direction: int,
) -> "list[tuple[str, tuple[float, float], tuple[float, float]]]":
    """Zigzag legs for one tile.

    Args:
        x: Anchor X (start edge)
        y: Top edge
        width: Tile width
        height: Stroke height
        density: Number of vertical strokes (> 0)
        direction: +1 to draw rightward, -1 leftward

    Returns:
        List of (kind, start, end) where kind is "v" (vertical stroke) or
        "h" (horizontal leg)
    """
    step = width / density
    legs = []
    for i in range(density):
        current_x = x + i * step * direction
        next_x = x + (i + 1) * step * direction
        if i % 2 == 0:
            start_y, end_y = y, y + height  # Downward stroke
        else:
            start_y, end_y = y + height, y  # Upward stroke
        legs.append(("v", (current_x, start_y), (current_x, end_y)))
        legs.append(("h", (current_x, end_y), (next_x, end_y)))
    return legs


def _vertical_controls(
    start: "tuple[float, float]",
    end: "tuple[float, float]",
    step: float,
    direction: int,
    controls: CurveControlSettings,
) -> "tuple[tuple[float, float], tuple[float, float]]":
    x, start_y = start
    leg = end[1] - start_y
    offset_x = -controls.vertical_curve_offset_x * step * direction
    return (
        (x + offset_x, start_y + leg * controls.vertical_curve_first_point_y),
        (x + offset_x, start_y + leg * controls.vertical_curve_second_point_y),
    )


def _horizontal_controls(
    start: "tuple[float, float]",
    end: "tuple[float, float]",
    top: float,
    height: float,
    controls: CurveControlSettings,
) -> "tuple[tuple[float, float], tuple[float, float]]":
    start_x, leg_y = start
    span = end[0] - start_x
    # Bow away from the tile: down along the bottom edge, up along the top
    outward = 1.0 if leg_y > top + height / 2 else -1.0
    bow = controls.horizontal_curve_offset_y * height * outward
    shift = controls.horizontal_curve_offset_x * span
    return (
        (start_x + span * controls.horizontal_curve_first_point_x + shift, leg_y + bow),
        (start_x + span * controls.horizontal_curve_second_point_x + shift, leg_y + bow),
    )


def entry_tangent(point: PathPoint, controls: CurveControlSettings) -> "tuple[float, float]":
    """Initial direction of a curved tile (its first downward stroke)."""
    height = point.height * controls.tile_height_scale
    step = point.width / point.density
    control1, _ = _vertical_controls(
        (point.x, point.y), (point.x, point.y + height), step, point.direction, controls
    )
    return _normalize(control1[0] - point.x, control1[1] - point.y) or (0.0, 1.0)


def draw_tile(builder: PathBuilder, point: PathPoint, settings: Settings) -> None:
    """Append one tile's zigzag (straight or curved) to the builder.

    The builder's pen must already be at the tile anchor.
    """
    if point.density <= 0:
        return

    if not settings.curved_paths:
        for _, _, end in tile_legs(
            point.x, point.y, point.width, point.height, point.density, point.direction
        ):
            builder.line_to(*end)
        return

    controls = settings.curve_controls
    height = point.height * controls.tile_height_scale
    step = point.width / point.density
    for kind, start, end in tile_legs(
        point.x, point.y, point.width, height, point.density, point.direction
    ):
        if kind == "v":
            control1, control2 = _vertical_controls(
                start, end, step, point.direction, controls
            )
        else:
            control1, control2 = _horizontal_controls(
                start, end, point.y, height, controls
            )
        builder.curve_to(control1, control2, end)


def draw_junction(builder: PathBuilder, point: PathPoint, settings: Settings) -> None:
    """Connect the pen to the next tile anchor inside a continuous path.

    Straight mode draws a line. Curved mode draws one cubic whose first
    control follows the previous exit tangent (blended toward the
    axis-aligned direction of travel) and whose second control lines up
    with the next tile's entry tangent.
    """
    if not settings.curved_paths:
        builder.line_to(point.x, point.y)
        return

    px, py = builder.pen
    dx = point.x - px
    dy = point.y - py
    distance = math.hypot(dx, dy)
    if distance < 10 ** -COORDINATE_PRECISION:
        return

    controls = settings.curve_controls
    if abs(dx) >= abs(dy):
        ideal = (math.copysign(1.0, dx), 0.0)
        smoothing = controls.horizontal_junction_smoothing
    else:
        ideal = (0.0, math.copysign(1.0, dy))
        smoothing = controls.vertical_junction_smoothing

    exit_x, exit_y = builder.tangent or ideal
    blend = controls.junction_continuity_factor
    tangent = _normalize(
        (1.0 - blend) * exit_x + blend * ideal[0],
        (1.0 - blend) * exit_y + blend * ideal[1],
    ) or ideal
    # Direction modifiers scale each component; not renormalized
    tangent = (
        tangent[0] * controls.junction_tangent_direction_x,
        tangent[1] * controls.junction_tangent_direction_y,
    )

    entry_x, entry_y = entry_tangent(point, controls)
    reach1 = distance * controls.junction_first_control_scale * smoothing
    reach2 = distance * controls.junction_second_control_scale * smoothing
    builder.curve_to(
        (px + tangent[0] * reach1, py + tangent[1] * reach1),
        (point.x - entry_x * reach2, point.y - entry_y * reach2),
        (point.x, point.y),
    )


def build_continuous_paths(
    points: "list[PathPoint]", settings: Settings
) -> "list[list[svg.PathData]]":
    """Chain a group's tiles into as few paths as the distance rule allows.

    Zero-density tiles are skipped. A new path starts whenever the next
    drawn anchor is farther than settings.path_distance_threshold from
    the previous one.
    """
    paths = []
    builder: PathBuilder | None = None
    last_point: PathPoint | None = None

    for point in sort_serpentine(points):
        if point.density <= 0:
            continue

        need_new_path = last_point is not None and (
            calculate_distance(last_point.x, last_point.y, point.x, point.y)
            > settings.path_distance_threshold
        )

        if builder is None or need_new_path:
            if builder is not None and not builder.is_empty:
                paths.append(builder.commands)
                logger.debug(
                    "Path break at (%.1f, %.1f) after %d commands",
                    point.x,
                    point.y,
                    len(builder.commands),
                )
            builder = PathBuilder()
            builder.move_to(point.x, point.y)
        else:
            draw_junction(builder, point, settings)

        draw_tile(builder, point, settings)
        last_point = point

    if builder is not None and not builder.is_empty:
        paths.append(builder.commands)

    return paths


def build_tile_paths(
    points: "list[PathPoint]", settings: Settings
) -> "list[list[svg.PathData]]":
    """One independent path per drawn tile."""
    paths = []
    for point in points:
        if point.density <= 0:
            continue
        builder = PathBuilder()
        builder.move_to(point.x, point.y)
        draw_tile(builder, point, settings)
        paths.append(builder.commands)
    return paths
