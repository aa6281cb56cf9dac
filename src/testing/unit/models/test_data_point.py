import math

import pytest
from pydantic import ValidationError

from visualfield.enum import FieldFrame
from visualfield.models.data.geometry import Orientation, Point3d, Vector3d
from visualfield.models.data_point import DataPoint
from visualfield.models.header import Time

STAMP = Time(sec=1_700_000_000, nanosec=0)
RAW = Vector3d(x=10.0, y=0.0, z=0.0)


def test_capture_without_orientation_keeps_raw_field():
    point = DataPoint.capture(STAMP, RAW)

    assert point.orientation is None
    assert point.world_field == RAW
    assert point.position == Point3d.origin()
    assert point.position_tracked is False


def test_capture_rotates_into_world_frame(quarter_turn_z):
    point = DataPoint.capture(
        STAMP, RAW, orientation=quarter_turn_z, position=Point3d(x=1.0, y=2.0, z=3.0)
    )

    assert point.world_field.is_close(Vector3d(x=0.0, y=10.0, z=0.0), 1e-9)
    assert point.raw_field == RAW
    assert point.position_tracked is True


def test_capture_uses_fallback_position():
    fallback = Point3d(x=0.0, y=1.5, z=0.0)
    point = DataPoint.capture(STAMP, RAW, fallback_position=fallback)
    assert point.position == fallback
    assert not point.position_tracked


def test_world_field_must_match_rotation(quarter_turn_z):
    with pytest.raises(ValidationError, match="does not match"):
        DataPoint(
            timestamp=STAMP,
            position=Point3d.origin(),
            position_tracked=False,
            raw_field=RAW,
            orientation=quarter_turn_z,
            world_field=RAW,
        )


def test_world_field_must_equal_raw_without_orientation():
    with pytest.raises(ValidationError, match="must equal"):
        DataPoint(
            timestamp=STAMP,
            position=Point3d.origin(),
            position_tracked=False,
            raw_field=RAW,
            world_field=Vector3d(x=0.0, y=10.0, z=0.0),
        )


def test_field_strength_per_frame(quarter_turn_z):
    point = DataPoint.capture(
        STAMP, Vector3d(x=3.0, y=4.0, z=0.0), orientation=quarter_turn_z
    )

    assert point.field(FieldFrame.Device) == Vector3d(x=3.0, y=4.0, z=0.0)
    assert point.field_strength(FieldFrame.Device) == pytest.approx(5.0)
    # Rotation preserves magnitude
    assert point.field_strength() == pytest.approx(5.0)


def test_missing_required_field():
    with pytest.raises(ValidationError):
        DataPoint(
            timestamp=STAMP,
            position=Point3d.origin(),
            position_tracked=False,
            world_field=RAW,
        )


def test_rejects_nan_field():
    with pytest.raises(ValidationError):
        DataPoint.capture(STAMP, Vector3d(x=math.nan, y=0.0, z=0.0))
