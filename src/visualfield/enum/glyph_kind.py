from enum import StrEnum


class GlyphKind(StrEnum):
    """
    Shape used to draw a collected point.
    """

    Vector = "vector"
    """An arrow pointing along the field direction."""
    HeatMap = "heatmap"
    """A sphere coloured by field strength."""
