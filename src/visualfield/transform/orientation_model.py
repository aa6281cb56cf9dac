"""
Orientation Model Module.

Holds the latest device attitude supplied by the pose feed and converts
device-frame vectors to the world frame.
"""

from typing import Optional

from ..models.data.geometry import Orientation, Vector3d, _Vector3dStruct
from .vector_math import rotate


class OrientationModel:
    """
    Device-to-world conversion backed by the most recent known attitude.

    When no attitude is available, `to_world` is the identity: the vector is
    returned unchanged. Callers record that case as `orientation=None` on the
    data point so it stays distinguishable downstream.
    """

    def __init__(self, orientation: Optional[Orientation] = None):
        self._current: Optional[Orientation] = orientation

    @property
    def current(self) -> Optional[Orientation]:
        return self._current

    @property
    def is_available(self) -> bool:
        return self._current is not None

    def update(self, orientation: Optional[Orientation]) -> None:
        self._current = orientation

    def reset(self) -> None:
        self._current = None

    def to_world(self, device_vector: _Vector3dStruct) -> Vector3d:
        if self._current is None:
            return Vector3d(x=device_vector.x, y=device_vector.y, z=device_vector.z)
        return rotate(device_vector, self._current)

    def to_device(self, world_vector: _Vector3dStruct) -> Vector3d:
        """Inverse transform (Mᵀ·v, via `Orientation.inverse`); identity when no attitude is available."""
        if self._current is None:
            return Vector3d(x=world_vector.x, y=world_vector.y, z=world_vector.z)
        return rotate(world_vector, self._current.inverse())
