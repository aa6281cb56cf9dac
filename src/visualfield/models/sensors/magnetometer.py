"""
Magnetometer Module.

Defines the sample type a magnetometer source hands to the collector.
"""

import pyarrow as pa

from ..base_model import BaseModel
from ..data.geometry import Vector3d
from ..header import Time


class MagnetometerSample(BaseModel):
    """
    Magnetic field measurement, in the device frame.
    """

    # --- Schema Definition ---
    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field(
                "stamp",
                Time.__vf_pyarrow_struct__,
                nullable=False,
                metadata={"description": "Time of acquisition."},
            ),
            pa.field(
                "magnetic_field",
                Vector3d.__vf_pyarrow_struct__,
                nullable=False,
                metadata={
                    "description": "Magnetic field vector [mx, my, mz] in microTesla."
                },
            ),
        ]
    )

    stamp: Time
    """Time of acquisition."""

    magnetic_field: Vector3d
    """Magnetic field vector [mx, my, mz] in microTesla."""
