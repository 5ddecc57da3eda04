"""Tests for tile geometry and path assembly."""

from __future__ import annotations

import dataclasses
import math

import pytest
import svg

from serpentine.image_processing.rendering import (
    PathBuilder,
    build_continuous_paths,
    build_tile_paths,
    entry_tangent,
    sort_serpentine,
    tile_legs,
)
from serpentine.models import (
    DEFAULT_CURVE_CONTROLS,
    CurveControlSettings,
    PathPoint,
    Settings,
)


def _point(x, y, density, row=0, direction=1, size=10.0):
    return PathPoint(
        x=x, y=y, width=size, height=size, density=density, row=row, direction=direction
    )


def _kinds(commands):
    return [type(c).__name__ for c in commands]


STRAIGHT = Settings(curved_paths=False)
CURVED = Settings(curved_paths=True)


@pytest.mark.parametrize("density", [1, 2, 3, 6])
def test_tile_legs_end_on_far_edge(density):
    legs = tile_legs(0.0, 0.0, 10.0, 10.0, density, 1)
    assert len(legs) == 2 * density
    kind, _, end = legs[-1]
    assert kind == "h"
    assert end[0] == pytest.approx(10.0)
    assert end[1] == pytest.approx(10.0 if density % 2 else 0.0)


def test_tile_legs_leftward():
    legs = tile_legs(30.0, 0.0, 10.0, 10.0, 2, -1)
    assert legs[0] == ("v", (30.0, 0.0), (30.0, 10.0))
    assert legs[-1][2][0] == pytest.approx(20.0)


def test_tile_legs_alternate_strokes():
    legs = tile_legs(0.0, 5.0, 9.0, 10.0, 3, 1)
    strokes = [(start[1], end[1]) for kind, start, end in legs if kind == "v"]
    assert strokes == [(5.0, 15.0), (15.0, 5.0), (5.0, 15.0)]


def test_path_builder_skips_zero_length_lines():
    builder = PathBuilder()
    builder.move_to(1.0, 2.0)
    builder.line_to(1.0, 2.0)
    builder.line_to(1.0004, 2.0)
    assert _kinds(builder.commands) == ["MoveTo"]
    builder.line_to(4.0, 2.0)
    assert builder.tangent == (1.0, 0.0)


def test_path_builder_rounds_negative_zero():
    builder = PathBuilder()
    builder.move_to(-0.0001, 3.0)
    assert builder.pen == (0.0, 3.0)
    assert str(builder.pen[0]) == "0.0"


def test_sort_serpentine_reverses_odd_rows():
    points = [
        _point(0, 10, 1, row=1, direction=-1),
        _point(10, 0, 1),
        _point(20, 10, 1, row=1, direction=-1),
        _point(0, 0, 1),
    ]
    ordered = [(p.row, p.x) for p in sort_serpentine(points)]
    assert ordered == [(0, 0), (0, 10), (1, 20), (1, 0)]


def test_straight_single_tile():
    paths = build_tile_paths([_point(0, 0, 3)], STRAIGHT)
    assert len(paths) == 1
    assert _kinds(paths[0]) == ["MoveTo"] + ["LineTo"] * 6
    last = paths[0][-1]
    assert (last.x, last.y) == (10.0, 10.0)


def test_straight_tile_stays_inside_its_box():
    paths = build_tile_paths([_point(20, 30, 5)], STRAIGHT)
    for command in paths[0]:
        assert 20.0 <= command.x <= 30.0
        assert 30.0 <= command.y <= 40.0


def test_zero_density_tiles_are_skipped():
    points = [_point(0, 0, 0), _point(10, 0, 0)]
    assert build_tile_paths(points, STRAIGHT) == []
    assert build_continuous_paths(points, STRAIGHT) == []


def test_continuous_path_joins_adjacent_tiles():
    points = [_point(0, 0, 1), _point(10, 0, 1)]
    paths = build_continuous_paths(
        points, dataclasses.replace(STRAIGHT, path_distance_threshold=10.0)
    )
    assert len(paths) == 1
    # Tile, junction back to the top edge, tile
    assert _kinds(paths[0]) == ["MoveTo"] + ["LineTo"] * 5


def test_continuous_path_breaks_on_long_jumps():
    points = [_point(0, 0, 2), _point(500, 500, 2, row=50)]
    paths = build_continuous_paths(
        points, dataclasses.replace(STRAIGHT, path_distance_threshold=10.0)
    )
    assert len(paths) == 2
    assert all(isinstance(path[0], svg.MoveTo) for path in paths)
    assert (paths[1][0].x, paths[1][0].y) == (500.0, 500.0)


def test_continuous_path_skips_zero_density_without_breaking():
    points = [_point(0, 0, 1), _point(10, 0, 0), _point(20, 0, 1)]
    paths = build_continuous_paths(
        points, dataclasses.replace(STRAIGHT, path_distance_threshold=25.0)
    )
    assert len(paths) == 1


def test_per_tile_paths_one_per_drawn_tile():
    points = [_point(0, 0, 2), _point(10, 0, 3), _point(20, 0, 0)]
    paths = build_tile_paths(points, STRAIGHT)
    assert len(paths) == 2


def test_curved_tile_uses_cubic_legs():
    paths = build_tile_paths([_point(0, 0, 2)], CURVED)
    assert _kinds(paths[0]) == ["MoveTo"] + ["CubicBezier"] * 4


def test_curved_tile_respects_height_scale():
    paths = build_tile_paths([_point(0, 0, 1)], CURVED)
    end = paths[0][-1]
    scale = DEFAULT_CURVE_CONTROLS.tile_height_scale
    assert (end.x, end.y) == pytest.approx((10.0, 10.0 * scale))


def test_curved_continuous_path_adds_junction_curve():
    points = [_point(0, 0, 1), _point(10, 0, 1)]
    paths = build_continuous_paths(points, CURVED)
    assert len(paths) == 1
    assert _kinds(paths[0]) == ["MoveTo"] + ["CubicBezier"] * 5
    junction = paths[0][3]
    assert (junction.x, junction.y) == (10.0, 0.0)


def test_curved_junction_skipped_when_already_at_anchor():
    # Even density ends on the top edge, exactly at the next anchor
    points = [_point(0, 0, 2), _point(10, 0, 2)]
    paths = build_continuous_paths(points, CURVED)
    assert _kinds(paths[0]) == ["MoveTo"] + ["CubicBezier"] * 8


def test_entry_tangent_points_downward():
    tx, ty = entry_tangent(_point(0, 0, 2), DEFAULT_CURVE_CONTROLS)
    assert ty > 0
    assert tx == pytest.approx(-(1 - ty**2) ** 0.5)


def _vertical_junction_path(controls=DEFAULT_CURVE_CONTROLS):
    """Density-1 tiles: the first exits at the bottom, the junction climbs."""
    settings = dataclasses.replace(CURVED, curve_controls=controls)
    return build_continuous_paths([_point(0, 0, 1), _point(10, 0, 1)], settings)[0]


def _horizontal_junction_path(controls=DEFAULT_CURVE_CONTROLS):
    """Density-2 tiles with a gap: the junction runs along the top edge."""
    settings = dataclasses.replace(
        CURVED, curve_controls=controls, path_distance_threshold=25.0
    )
    return build_continuous_paths([_point(0, 0, 2), _point(20, 0, 2)], settings)[0]


def _expected_first_control(previous, junction, smoothing, controls):
    exit_x, exit_y = previous.x - previous.x2, previous.y - previous.y2
    length = math.hypot(exit_x, exit_y)
    exit_x, exit_y = exit_x / length, exit_y / length

    dx, dy = junction.x - previous.x, junction.y - previous.y
    distance = math.hypot(dx, dy)
    if abs(dx) >= abs(dy):
        ideal = (math.copysign(1.0, dx), 0.0)
    else:
        ideal = (0.0, math.copysign(1.0, dy))

    c = controls.junction_continuity_factor
    tx = (1 - c) * exit_x + c * ideal[0]
    ty = (1 - c) * exit_y + c * ideal[1]
    norm = math.hypot(tx, ty)
    tx = tx / norm * controls.junction_tangent_direction_x
    ty = ty / norm * controls.junction_tangent_direction_y

    reach = distance * controls.junction_first_control_scale * smoothing
    return (previous.x + tx * reach, previous.y + ty * reach)


@pytest.mark.parametrize(
    "controls",
    [
        DEFAULT_CURVE_CONTROLS,
        CurveControlSettings(
            junction_continuity_factor=0.6,
            junction_tangent_direction_x=-2.0,
            junction_tangent_direction_y=1.5,
            vertical_junction_smoothing=0.8,
        ),
    ],
)
def test_vertical_junction_first_control(controls):
    commands = _vertical_junction_path(controls)
    previous, junction = commands[2], commands[3]
    expected = _expected_first_control(
        previous, junction, controls.vertical_junction_smoothing, controls
    )
    assert (junction.x1, junction.y1) == pytest.approx(expected, abs=2e-3)


def test_horizontal_junction_first_control():
    controls = CurveControlSettings(horizontal_junction_smoothing=0.9)
    commands = _horizontal_junction_path(controls)
    previous, junction = commands[4], commands[5]
    assert (junction.x, junction.y) == (20.0, 0.0)
    expected = _expected_first_control(
        previous, junction, controls.horizontal_junction_smoothing, controls
    )
    assert (junction.x1, junction.y1) == pytest.approx(expected, abs=2e-3)


def _controls(command):
    return (command.x1, command.y1, command.x2, command.y2)


@pytest.mark.parametrize(
    "field,value,build,index",
    [
        ("junction_continuity_factor", 0.7, _vertical_junction_path, 3),
        ("junction_tangent_direction_x", -3.0, _vertical_junction_path, 3),
        ("junction_tangent_direction_y", 2.5, _vertical_junction_path, 3),
        ("vertical_junction_smoothing", 0.9, _vertical_junction_path, 3),
        ("horizontal_junction_smoothing", 0.9, _horizontal_junction_path, 5),
        ("horizontal_curve_offset_y", 0.4, _vertical_junction_path, 2),
        ("vertical_curve_offset_x", 0.4, _vertical_junction_path, 1),
    ],
)
def test_curve_knobs_move_control_points(field, value, build, index):
    default = build()[index]
    tuned = build(dataclasses.replace(DEFAULT_CURVE_CONTROLS, **{field: value}))[index]
    assert (tuned.x, tuned.y) == (default.x, default.y)
    assert _controls(tuned) != _controls(default)
