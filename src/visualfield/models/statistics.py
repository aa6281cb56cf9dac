"""
Aggregate result types exposed by the point store.
"""

from .base_model import BaseModel
from .data.geometry import Point3d, Vector3d


class FieldStatistics(BaseModel):
    """
    Min / max / mean field magnitude (μT) over the points of a store.
    All zero for an empty store.
    """

    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    count: int = 0

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.min, self.max, self.mean)


class SpatialBounds(BaseModel):
    """
    Axis-aligned bounding box over the collected positions.
    Both corners are the origin for an empty store.
    """

    min_corner: Point3d
    max_corner: Point3d

    @classmethod
    def empty(cls) -> "SpatialBounds":
        return cls(min_corner=Point3d.origin(), max_corner=Point3d.origin())

    def size(self) -> Vector3d:
        return Vector3d(
            x=self.max_corner.x - self.min_corner.x,
            y=self.max_corner.y - self.min_corner.y,
            z=self.max_corner.z - self.min_corner.z,
        )

    def center(self) -> Point3d:
        return Point3d(
            x=(self.min_corner.x + self.max_corner.x) / 2.0,
            y=(self.min_corner.y + self.max_corner.y) / 2.0,
            z=(self.min_corner.z + self.max_corner.z) / 2.0,
        )
