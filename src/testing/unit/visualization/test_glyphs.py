import pytest

from visualfield.enum import FieldFrame, GlyphKind
from visualfield.models.data.geometry import Orientation, Quaternion, Vector3d
from visualfield.transform.vector_math import rotate
from visualfield.visualization.glyphs import (
    ARROW_REST_DIRECTION,
    build_glyphs,
    normalized_strength,
    size_scale,
    strength_color,
)

from ...helpers import make_point


def test_normalized_strength():
    assert normalized_strength(15.0, (10.0, 20.0)) == pytest.approx(0.5)
    assert normalized_strength(5.0, (10.0, 20.0)) == 0.0
    assert normalized_strength(25.0, (10.0, 20.0)) == 1.0
    # zero-width range
    assert normalized_strength(10.0, (10.0, 10.0)) == 0.0


def test_color_ramp_endpoints():
    assert strength_color(0.0).to_tuple() == (0.0, 0.0, 1.0, 0.8)
    assert strength_color(0.5).to_tuple() == (0.0, 1.0, 0.0, 0.8)
    assert strength_color(1.0).to_tuple() == (1.0, 0.0, 0.0, 0.8)
    # clamped
    assert strength_color(7.0) == strength_color(1.0)


def test_color_ramp_midpoints():
    low = strength_color(0.25)
    assert (low.r, low.g, low.b) == pytest.approx((0.0, 0.5, 0.5))
    high = strength_color(0.75)
    assert (high.r, high.g, high.b) == pytest.approx((0.5, 0.5, 0.0))


def test_size_scale():
    assert size_scale(0.0) == 0.5
    assert size_scale(1.0) == 2.0
    assert size_scale(0.5) == pytest.approx(1.25)


def test_build_glyphs_empty():
    assert build_glyphs([]) == []


def test_arrow_glyphs_point_along_field():
    points = [
        make_point((0.0, 10.0, 0.0), position=(0.0, 0.5, 2.0)),
        make_point((20.0, 0.0, 0.0)),
        make_point((0.0, -30.0, 0.0)),
    ]
    glyphs = build_glyphs(points, scale=2.0)

    assert [g.normalized_strength for g in glyphs] == pytest.approx([0.0, 0.5, 1.0])
    assert [g.scale for g in glyphs] == pytest.approx([1.0, 2.5, 4.0])
    assert glyphs[0].position == points[0].position
    assert glyphs[0].rotation == Quaternion.identity()

    for glyph, point in zip(glyphs, points):
        orientation = Orientation.from_quaternion(glyph.rotation)
        direction = rotate(ARROW_REST_DIRECTION, orientation)
        assert direction.is_close(point.world_field.normalized(), 1e-9)


def test_heat_map_glyphs_are_not_rotated():
    glyphs = build_glyphs([make_point((3.0, 4.0, 0.0))], kind=GlyphKind.HeatMap)
    assert glyphs[0].kind == GlyphKind.HeatMap
    assert glyphs[0].rotation == Quaternion.identity()
    assert glyphs[0].strength == pytest.approx(5.0)


def test_zero_field_glyph():
    glyphs = build_glyphs([make_point((0.0, 0.0, 0.0))])
    assert glyphs[0].rotation == Quaternion.identity()
    assert glyphs[0].normalized_strength == 0.0


def test_explicit_range_and_device_frame(quarter_turn_z):
    point = make_point((10.0, 0.0, 0.0), orientation=quarter_turn_z)
    [glyph] = build_glyphs(
        [point], frame=FieldFrame.Device, magnitude_range=(0.0, 20.0)
    )
    assert glyph.normalized_strength == pytest.approx(0.5)

    direction = rotate(ARROW_REST_DIRECTION, Orientation.from_quaternion(glyph.rotation))
    assert direction.is_close(Vector3d(x=1.0, y=0.0, z=0.0), 1e-9)
