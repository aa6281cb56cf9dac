"""
Glyph Preparation Module.

Turns collected points into render-ready, engine-agnostic glyph records:
an arrow (or a heat-map sphere) per point, coloured and sized by the field
strength relative to the strength range of the whole set.

Colour ramp: blue (weakest) -> green (mid) -> red (strongest).
"""

from typing import Iterable, List, Optional, Tuple

from ..enum import FieldFrame, GlyphKind
from ..models.base_model import BaseModel
from ..models.data.geometry import Point3d, Quaternion, Vector3d
from ..models.data_point import DataPoint
from ..transform.vector_math import rotation_between

# Rest direction of the arrow mesh, rotated onto the field direction.
ARROW_REST_DIRECTION = Vector3d(x=0.0, y=1.0, z=0.0)

GLYPH_ALPHA = 0.8
MIN_SIZE_SCALE = 0.5
SIZE_SCALE_SPAN = 1.5


class GlyphColor(BaseModel):
    """RGBA colour, every channel in [0, 1]."""

    r: float
    g: float
    b: float
    a: float = GLYPH_ALPHA

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


class FieldGlyph(BaseModel):
    """
    One renderable marker.

    Attributes:
        kind (GlyphKind): Arrow or heat-map sphere.
        position (Point3d): World-frame anchor.
        rotation (Quaternion): Rotates the arrow rest direction (+y) onto the field.
        strength (float): Field magnitude in μT.
        normalized_strength (float): Strength mapped into [0, 1] over the set range.
        color (GlyphColor): Ramp colour for `normalized_strength`.
        scale (float): Uniform scale factor.
    """

    kind: GlyphKind
    position: Point3d
    rotation: Quaternion
    strength: float
    normalized_strength: float
    color: GlyphColor
    scale: float


def normalized_strength(magnitude: float, magnitude_range: Tuple[float, float]) -> float:
    """
    `(m - min) / (max - min)` clamped to [0, 1]. A zero-width range maps to 0.
    """
    low, high = magnitude_range
    width = high - low
    if width <= 0.0:
        return 0.0
    return max(0.0, min(1.0, (magnitude - low) / width))


def strength_color(factor: float) -> GlyphColor:
    """Blue -> green over [0, 0.5], green -> red over (0.5, 1]."""
    f = max(0.0, min(1.0, factor))
    if f <= 0.5:
        t = f * 2.0
        return GlyphColor(r=0.0, g=t, b=1.0 - t)
    t = (f - 0.5) * 2.0
    return GlyphColor(r=t, g=1.0 - t, b=0.0)


def size_scale(factor: float) -> float:
    """0.5x for the weakest point up to 2x for the strongest."""
    return MIN_SIZE_SCALE + SIZE_SCALE_SPAN * max(0.0, min(1.0, factor))


def _magnitude_range(
    points: List[DataPoint], frame: FieldFrame
) -> Tuple[float, float]:
    if not points:
        return (0.0, 1.0)
    strengths = [p.field_strength(frame) for p in points]
    return (min(strengths), max(strengths))


def build_glyphs(
    points: Iterable[DataPoint],
    kind: GlyphKind = GlyphKind.Vector,
    frame: FieldFrame = FieldFrame.World,
    scale: float = 1.0,
    magnitude_range: Optional[Tuple[float, float]] = None,
) -> List[FieldGlyph]:
    """
    Builds one glyph per point, in order.

    Args:
        points: Typically `store.snapshot()`.
        kind: Arrows pointing along the field, or heat-map spheres.
        frame: Which field vector drives direction and strength.
        scale: Global multiplier applied on top of the strength-based size.
        magnitude_range: Range used for normalization; computed from `points`
            when omitted (e.g. pass `store.magnitude_range()`).

    Returns:
        List[FieldGlyph]: Empty for an empty input.
    """
    points = list(points)
    value_range = (
        magnitude_range
        if magnitude_range is not None
        else _magnitude_range(points, frame)
    )

    glyphs = []
    for point in points:
        field = point.field(frame)
        strength = field.magnitude()
        factor = normalized_strength(strength, value_range)

        if kind == GlyphKind.Vector and not field.is_zero():
            rotation = rotation_between(ARROW_REST_DIRECTION, field).quaternion
        else:
            rotation = Quaternion.identity()

        glyphs.append(
            FieldGlyph(
                kind=kind,
                position=point.position,
                rotation=rotation,
                strength=strength,
                normalized_strength=factor,
                color=strength_color(factor),
                scale=size_scale(factor) * scale,
            )
        )
    return glyphs
