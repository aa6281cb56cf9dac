from enum import StrEnum


class FieldFrame(StrEnum):
    """
    Selects which magnetic field vector of a data point an aggregate or a
    glyph is computed from.
    """

    World = "world"
    """The field rotated into the world frame (default)."""

    Device = "device"
    """The raw field as measured in the device frame."""
