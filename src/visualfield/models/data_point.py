"""
Data Point Module.

Defines `DataPoint`, the immutable record produced once per persistence tick:
a magnetometer reading attached to the pose it was captured at, with the
reading expressed in both the device and the world frame.
"""

from typing import Optional

import pyarrow as pa
from pydantic import model_validator

from ..enum import FieldFrame
from ..transform.vector_math import rotate
from .base_model import BaseModel
from .data.geometry import Orientation, Point3d, Vector3d
from .header import Time

# Allowed drift between a stored world field and its recomputation, relative to |raw|.
_WORLD_FIELD_TOLERANCE = 1e-6


class DataPoint(BaseModel):
    """
    A single collected magnetic field sample.

    Attributes:
        timestamp (Time): Wall-clock capture time.
        position (Point3d): World-frame location at capture time. When the
            tracking subsystem had no position this is the configured fallback
            and `position_tracked` is False.
        position_tracked (bool): Whether `position` came from the pose feed.
        raw_field (Vector3d): Device-frame magnetometer reading in μT.
        orientation (Optional[Orientation]): Device attitude, None when unavailable.
        world_field (Vector3d): `raw_field` rotated into the world frame; equal
            to `raw_field` when `orientation` is None.
    """

    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field(
                "timestamp",
                Time.__vf_pyarrow_struct__,
                nullable=False,
                metadata={"description": "Capture time."},
            ),
            pa.field(
                "position",
                Point3d.__vf_pyarrow_struct__,
                nullable=False,
                metadata={"description": "World-frame position [x, y, z] in meters."},
            ),
            pa.field(
                "position_tracked",
                pa.bool_(),
                nullable=False,
                metadata={"description": "False when position is the fallback."},
            ),
            pa.field(
                "raw_field",
                Vector3d.__vf_pyarrow_struct__,
                nullable=False,
                metadata={
                    "description": "Device-frame magnetic field [mx, my, mz] in microTesla."
                },
            ),
            pa.field(
                "orientation",
                Orientation.__vf_pyarrow_struct__,
                nullable=True,
                metadata={"description": "Device attitude (optional)."},
            ),
            pa.field(
                "world_field",
                Vector3d.__vf_pyarrow_struct__,
                nullable=False,
                metadata={
                    "description": "World-frame magnetic field [mx, my, mz] in microTesla."
                },
            ),
        ]
    )

    timestamp: Time
    position: Point3d
    position_tracked: bool
    raw_field: Vector3d
    orientation: Optional[Orientation] = None
    world_field: Vector3d

    @model_validator(mode="after")
    def check_world_field(self) -> "DataPoint":
        """
        Validates that `world_field` is the rotation of `raw_field` by `orientation`.

        Raises:
            ValueError: If the stored world field disagrees with the derivation.
        """
        if self.orientation is None:
            if self.world_field != self.raw_field:
                raise ValueError(
                    "'world_field' must equal 'raw_field' when 'orientation' is None."
                )
            return self

        expected = rotate(self.raw_field, self.orientation)
        tol = _WORLD_FIELD_TOLERANCE * max(1.0, self.raw_field.magnitude())
        if not expected.is_close(self.world_field, tol):
            raise ValueError(
                f"'world_field' {self.world_field.to_list()} does not match the rotated "
                f"raw field {expected.to_list()}."
            )
        return self

    @classmethod
    def capture(
        cls,
        timestamp: Time,
        raw_field: Vector3d,
        orientation: Optional[Orientation] = None,
        position: Optional[Point3d] = None,
        fallback_position: Optional[Point3d] = None,
    ) -> "DataPoint":
        """
        Builds a data point, deriving the world-frame field.

        Args:
            timestamp: Capture time.
            raw_field: Device-frame reading (μT).
            orientation: Device attitude, if known.
            position: Tracked position, if known.
            fallback_position: Used when `position` is None (defaults to the origin).
        """
        world_field = raw_field if orientation is None else rotate(raw_field, orientation)
        return cls(
            timestamp=timestamp,
            position=position
            if position is not None
            else (fallback_position or Point3d.origin()),
            position_tracked=position is not None,
            raw_field=raw_field,
            orientation=orientation,
            world_field=world_field,
        )

    def field(self, frame: FieldFrame = FieldFrame.World) -> Vector3d:
        return self.world_field if frame == FieldFrame.World else self.raw_field

    def field_strength(self, frame: FieldFrame = FieldFrame.World) -> float:
        """Magnitude of the selected field vector, in μT."""
        return self.field(frame).magnitude()
