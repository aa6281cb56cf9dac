"""
Geometry Data Structures.

This module defines vectors, points, quaternions, rotation matrices and the
composite `Orientation` / `Pose` types used to place a magnetometer reading
in space.

* **_Struct classes**: Pure data containers inheriting only from `BaseModel`.
    They define the fields (x, y, z) and the PyArrow schema, and the vector
    arithmetic shared by the public classes.
* **Public classes**: `Vector3d` (a direction/field quantity) and `Point3d`
    (a location). Structurally identical, distinguished for clarity in APIs.

All types are immutable; every operation returns a new instance.
"""

import math
from typing import Optional, Tuple

import numpy as np
import pyarrow as pa
from pydantic import model_validator

from ..base_model import BaseModel

# Below this magnitude a vector is treated as the zero vector.
NORMALIZE_EPSILON = 1e-9

# Tolerance used when checking unit quaternions and orthonormal matrices.
ROTATION_TOLERANCE = 1e-5


# ---------------------------------------------------------------------------
# Vector STRUCT classes
# ---------------------------------------------------------------------------


class _Vector3dStruct(BaseModel):
    """
    Internal structure for 3D vectors.
    Contains the data fields, the schema and the arithmetic helpers.
    """

    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field(
                "x",
                pa.float64(),
                nullable=False,
                metadata={"description": "Vector x component"},
            ),
            pa.field(
                "y",
                pa.float64(),
                nullable=False,
                metadata={"description": "Vector y component"},
            ),
            pa.field(
                "z",
                pa.float64(),
                nullable=False,
                metadata={"description": "Vector z component"},
            ),
        ]
    )

    x: float
    y: float
    z: float

    @classmethod
    def from_list(cls, data: list[float]):
        """
        Helper to create instance from a list.

        Args:
            data (list[float]): A list containing exactly [x, y, z].

        Raises:
            ValueError: If list length is not 3.
        """
        if len(data) != 3:
            raise ValueError("expected 3 values")
        return cls(x=float(data[0]), y=float(data[1]), z=float(data[2]))

    @classmethod
    def from_array(cls, arr: np.ndarray):
        """Helper to create instance from a numpy array of shape (3,)."""
        return cls.from_list(np.asarray(arr, dtype=np.float64).reshape(3).tolist())

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def magnitude(self) -> float:
        """Euclidean norm. Never negative, zero only for the zero vector."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_zero(self) -> bool:
        return self.magnitude() < NORMALIZE_EPSILON

    def normalized(self):
        """
        Unit vector with the same direction.

        A (near) zero vector has no direction: the fixed fallback unit vector
        (0, 0, 1) is returned instead of dividing by zero.
        """
        mag = self.magnitude()
        if mag < NORMALIZE_EPSILON:
            return self.__class__(x=0.0, y=0.0, z=1.0)
        return self.__class__(x=self.x / mag, y=self.y / mag, z=self.z / mag)

    def dot(self, other: "_Vector3dStruct") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "_Vector3dStruct"):
        return self.__class__(
            x=self.y * other.z - self.z * other.y,
            y=self.z * other.x - self.x * other.z,
            z=self.x * other.y - self.y * other.x,
        )

    def scaled(self, factor: float):
        return self.__class__(x=self.x * factor, y=self.y * factor, z=self.z * factor)

    def __add__(self, other: "_Vector3dStruct"):
        return self.__class__(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def __sub__(self, other: "_Vector3dStruct"):
        return self.__class__(x=self.x - other.x, y=self.y - other.y, z=self.z - other.z)

    def __mul__(self, factor: float):
        return self.scaled(factor)

    __rmul__ = __mul__

    def __neg__(self):
        return self.scaled(-1.0)

    def is_close(self, other: "_Vector3dStruct", tol: float = 1e-9) -> bool:
        return (self - other).magnitude() <= tol


# ---------------------------------------------------------------------------
# Public vector classes
# ---------------------------------------------------------------------------


class Vector3d(_Vector3dStruct):
    """
    Public 3D Vector data.
    Used for magnetic field vectors (μT) in either the device or the world frame.
    """

    @classmethod
    def zero(cls) -> "Vector3d":
        return cls(x=0.0, y=0.0, z=0.0)


class Point3d(_Vector3dStruct):
    """
    Semantically represents a Point in 3D space (world-frame location, meters).
    Structurally identical to Vector3d but distinguished for clarity in APIs.
    """

    @classmethod
    def origin(cls) -> "Point3d":
        return cls(x=0.0, y=0.0, z=0.0)


# Returned by `normalized()` for zero vectors.
FALLBACK_UNIT_VECTOR = Vector3d(x=0.0, y=0.0, z=1.0)


# ---------------------------------------------------------------------------
# Rotations
# ---------------------------------------------------------------------------


class Quaternion(BaseModel):
    """
    Semantically represents a Rotation Quaternion (x, y, z, w).

    Must be unit length within `ROTATION_TOLERANCE`.
    """

    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field("x", pa.float64(), nullable=False),
            pa.field("y", pa.float64(), nullable=False),
            pa.field("z", pa.float64(), nullable=False),
            pa.field("w", pa.float64(), nullable=False),
        ]
    )

    x: float
    y: float
    z: float
    w: float

    @model_validator(mode="after")
    def check_unit_length(self) -> "Quaternion":
        """
        Raises:
            ValueError: If the quaternion is not unit length.
        """
        norm = self.norm()
        if abs(norm - 1.0) > ROTATION_TOLERANCE:
            raise ValueError(f"Quaternion must be unit length, got norm {norm}.")
        return self

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(x=0.0, y=0.0, z=0.0, w=1.0)

    @classmethod
    def from_list(cls, data: list[float], normalize: bool = False) -> "Quaternion":
        """
        Helper to create instance from a list [x, y, z, w].

        Args:
            data (list[float]): Exactly four components.
            normalize (bool): Rescale to unit length first (for device feeds
                that report slightly denormalized quaternions).

        Raises:
            ValueError: If list length is not 4, or the (normalized) result is not a unit quaternion.
        """
        if len(data) != 4:
            raise ValueError("expected 4 values")
        x, y, z, w = (float(v) for v in data)
        if normalize:
            norm = math.sqrt(x * x + y * y + z * z + w * w)
            if norm < NORMALIZE_EPSILON:
                raise ValueError("cannot normalize a zero quaternion")
            x, y, z, w = x / norm, y / norm, z / norm, w / norm
        return cls(x=x, y=y, z=z, w=w)

    @classmethod
    def from_axis_angle(cls, axis: _Vector3dStruct, angle: float) -> "Quaternion":
        """
        Rotation of `angle` radians about `axis` (right-hand rule).
        The axis is normalized first; a zero axis falls back to +z.
        """
        unit = axis.normalized()
        s = math.sin(angle / 2.0)
        return cls(x=unit.x * s, y=unit.y * s, z=unit.z * s, w=math.cos(angle / 2.0))

    @classmethod
    def from_rotation_matrix(cls, matrix: "RotationMatrix") -> "Quaternion":
        """Converts an orthonormal rotation matrix (Shepperd's method)."""
        m = matrix.to_array()
        trace = m[0, 0] + m[1, 1] + m[2, 2]
        if trace > 0.0:
            s = math.sqrt(trace + 1.0) * 2.0
            w = 0.25 * s
            x = (m[2, 1] - m[1, 2]) / s
            y = (m[0, 2] - m[2, 0]) / s
            z = (m[1, 0] - m[0, 1]) / s
        elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
            s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2.0
            w = (m[2, 1] - m[1, 2]) / s
            x = 0.25 * s
            y = (m[0, 1] + m[1, 0]) / s
            z = (m[0, 2] + m[2, 0]) / s
        elif m[1, 1] > m[2, 2]:
            s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2.0
            w = (m[0, 2] - m[2, 0]) / s
            x = (m[0, 1] + m[1, 0]) / s
            y = 0.25 * s
            z = (m[1, 2] + m[2, 1]) / s
        else:
            s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2.0
            w = (m[1, 0] - m[0, 1]) / s
            x = (m[0, 2] + m[2, 0]) / s
            y = (m[1, 2] + m[2, 1]) / s
            z = 0.25 * s
        return cls.from_list([x, y, z, w], normalize=True)

    def norm(self) -> float:
        return math.sqrt(
            self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w
        )

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z, self.w]

    def to_rotation_matrix(self) -> "RotationMatrix":
        x, y, z, w = self.x, self.y, self.z, self.w
        return RotationMatrix(
            elements=(
                1.0 - 2.0 * (y * y + z * z),
                2.0 * (x * y - z * w),
                2.0 * (x * z + y * w),
                2.0 * (x * y + z * w),
                1.0 - 2.0 * (x * x + z * z),
                2.0 * (y * z - x * w),
                2.0 * (x * z - y * w),
                2.0 * (y * z + x * w),
                1.0 - 2.0 * (x * x + y * y),
            )
        )


_Elements9 = Tuple[float, float, float, float, float, float, float, float, float]


class RotationMatrix(BaseModel):
    """
    A 3x3 rotation matrix, stored row-major as nine floats
    [m11, m12, m13, m21, m22, m23, m31, m32, m33].

    Must be orthonormal (M·Mᵀ ≈ I) and proper (det ≈ +1) within `ROTATION_TOLERANCE`.
    """

    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field(
                "elements",
                pa.list_(pa.float64(), 9),
                nullable=False,
                metadata={"description": "Row-major 3x3 rotation matrix."},
            ),
        ]
    )

    elements: _Elements9

    @model_validator(mode="after")
    def check_orthonormal(self) -> "RotationMatrix":
        """
        Raises:
            ValueError: If the matrix is not a proper rotation.
        """
        m = self.to_array()
        if not np.allclose(m @ m.T, np.eye(3), rtol=0.0, atol=ROTATION_TOLERANCE):
            raise ValueError("Rotation matrix must be orthonormal.")
        if np.linalg.det(m) <= 0.0:
            raise ValueError("Rotation matrix must have determinant +1.")
        return self

    @classmethod
    def identity(cls) -> "RotationMatrix":
        return cls(elements=(1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0))

    @classmethod
    def from_quaternion(cls, quaternion: Quaternion) -> "RotationMatrix":
        return quaternion.to_rotation_matrix()

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "RotationMatrix":
        """Helper to create instance from a (3, 3) or (9,) numpy array."""
        flat = np.asarray(arr, dtype=np.float64).reshape(9)
        return cls(elements=tuple(float(v) for v in flat))

    def to_array(self) -> np.ndarray:
        return np.array(self.elements, dtype=np.float64).reshape(3, 3)

    def transpose(self) -> "RotationMatrix":
        return RotationMatrix.from_array(self.to_array().T)

    def apply(self, v: _Vector3dStruct) -> Vector3d:
        """Matrix-vector product M·v."""
        m = self.elements
        return Vector3d(
            x=m[0] * v.x + m[1] * v.y + m[2] * v.z,
            y=m[3] * v.x + m[4] * v.y + m[5] * v.z,
            z=m[6] * v.x + m[7] * v.y + m[8] * v.z,
        )


# ---------------------------------------------------------------------------
# Composite Structures
# ---------------------------------------------------------------------------


class Orientation(BaseModel):
    """
    Device attitude relative to the fixed world reference frame.

    Both representations are kept, as platform attitude feeds report both:
    the matrix drives the device-to-world transform, the quaternion is kept for
    consumers that prefer it. They must describe the same rotation.
    """

    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field(
                "matrix",
                RotationMatrix.__vf_pyarrow_struct__,
                nullable=False,
                metadata={"description": "Device-to-world rotation matrix."},
            ),
            pa.field(
                "quaternion",
                Quaternion.__vf_pyarrow_struct__,
                nullable=False,
                metadata={"description": "Device-to-world rotation quaternion."},
            ),
        ]
    )

    matrix: RotationMatrix
    quaternion: Quaternion

    @model_validator(mode="after")
    def check_consistent(self) -> "Orientation":
        """
        Raises:
            ValueError: If matrix and quaternion describe different rotations.
        """
        derived = self.quaternion.to_rotation_matrix().to_array()
        if not np.allclose(derived, self.matrix.to_array(), rtol=0.0, atol=1e-4):
            raise ValueError("Orientation matrix and quaternion disagree.")
        return self

    @classmethod
    def identity(cls) -> "Orientation":
        return cls(matrix=RotationMatrix.identity(), quaternion=Quaternion.identity())

    @classmethod
    def from_matrix(cls, matrix: RotationMatrix) -> "Orientation":
        return cls(matrix=matrix, quaternion=Quaternion.from_rotation_matrix(matrix))

    @classmethod
    def from_quaternion(cls, quaternion: Quaternion) -> "Orientation":
        unit = Quaternion.from_list(quaternion.to_list(), normalize=True)
        return cls(matrix=unit.to_rotation_matrix(), quaternion=unit)

    @classmethod
    def from_axis_angle(cls, axis: _Vector3dStruct, angle: float) -> "Orientation":
        return cls.from_quaternion(Quaternion.from_axis_angle(axis, angle))

    def inverse(self) -> "Orientation":
        q = self.quaternion
        return Orientation(
            matrix=self.matrix.transpose(),
            quaternion=Quaternion(x=-q.x, y=-q.y, z=-q.z, w=q.w),
        )


class Pose(BaseModel):
    """
    Represents the position and orientation of the device in world space,
    as reported by the tracking subsystem. Either part may be missing.
    """

    position: Optional[Point3d] = None
    """World-frame location of the device."""

    orientation: Optional[Orientation] = None
    """Device attitude."""

    @model_validator(mode="after")
    def check_at_least_one_exists(self) -> "Pose":
        """
        Validates that the Pose is not empty.

        Raises:
            ValueError: If both `position` and `orientation` are None.
        """
        if self.position is None and self.orientation is None:
            raise ValueError("User must provide at least 'position' or 'orientation'.")
        return self
