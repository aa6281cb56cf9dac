"""
Vector Math Module.

Functional 3D primitives used by the transform pipeline: magnitude,
normalization, device-to-world rotation and the minimal rotation between two
directions (used to orient arrow glyphs along a field vector).
"""

import math
from typing import Union

from ..models.data.geometry import (
    NORMALIZE_EPSILON,
    Orientation,
    Quaternion,
    RotationMatrix,
    Vector3d,
    _Vector3dStruct,
)

# Dot-product margin under which two unit vectors count as coincident or opposite.
ROTATION_EPSILON = 1e-6

_AXES = (
    Vector3d(x=1.0, y=0.0, z=0.0),
    Vector3d(x=0.0, y=1.0, z=0.0),
    Vector3d(x=0.0, y=0.0, z=1.0),
)


def magnitude(v: _Vector3dStruct) -> float:
    return v.magnitude()


def normalize(v: _Vector3dStruct) -> Vector3d:
    """
    Returns `v / |v|`.

    If `|v| < 1e-9` the fixed fallback unit vector (0, 0, 1) is returned: a
    zero reading has no direction, and NaN components must never reach the
    store or the renderer.
    """
    return Vector3d(x=v.x, y=v.y, z=v.z).normalized()


def dot(a: _Vector3dStruct, b: _Vector3dStruct) -> float:
    return a.dot(b)


def cross(a: _Vector3dStruct, b: _Vector3dStruct) -> Vector3d:
    c = a.cross(b)
    return Vector3d(x=c.x, y=c.y, z=c.z)


def rotate(
    v: _Vector3dStruct, orientation: Union[Orientation, RotationMatrix]
) -> Vector3d:
    """
    Applies the 3x3 rotation matrix to `v` (M·v): the device-to-world transform.

    Args:
        v: The device-frame vector.
        orientation: The device attitude, or directly its rotation matrix.
    """
    matrix = (
        orientation.matrix if isinstance(orientation, Orientation) else orientation
    )
    return matrix.apply(v)


def least_aligned_axis(v: _Vector3dStruct) -> Vector3d:
    """
    The coordinate axis least aligned with `v`: the one matching its smallest
    absolute component (ties resolved x, then y, then z).
    """
    components = (abs(v.x), abs(v.y), abs(v.z))
    return _AXES[components.index(min(components))]


def rotation_between(
    from_dir: _Vector3dStruct, to_dir: _Vector3dStruct
) -> Orientation:
    """
    Returns the minimal rotation R such that R·from ≈ to (both taken as directions).

    Edge cases:
    - coincident directions (dot > 1 - ε): identity.
    - opposite directions (dot < -1 + ε): 180° about the axis perpendicular
      to `from` built from the coordinate axis least aligned with it.
    """
    src = normalize(from_dir)
    dst = normalize(to_dir)
    cos_angle = src.dot(dst)

    if cos_angle > 1.0 - ROTATION_EPSILON:
        return Orientation.identity()

    if cos_angle < -1.0 + ROTATION_EPSILON:
        axis = normalize(cross(src, least_aligned_axis(src)))
        return Orientation.from_quaternion(Quaternion.from_axis_angle(axis, math.pi))

    axis = cross(src, dst)
    if axis.magnitude() < NORMALIZE_EPSILON:
        return Orientation.identity()
    angle = math.acos(max(-1.0, min(1.0, cos_angle)))
    return Orientation.from_quaternion(
        Quaternion.from_axis_angle(normalize(axis), angle)
    )
