from .geometry import (
    FALLBACK_UNIT_VECTOR as FALLBACK_UNIT_VECTOR,
    Orientation as Orientation,
    Point3d as Point3d,
    Pose as Pose,
    Quaternion as Quaternion,
    RotationMatrix as RotationMatrix,
    Vector3d as Vector3d,
)
