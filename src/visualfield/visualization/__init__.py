from .glyphs import (
    FieldGlyph as FieldGlyph,
    GlyphColor as GlyphColor,
    build_glyphs as build_glyphs,
    normalized_strength as normalized_strength,
    size_scale as size_scale,
    strength_color as strength_color,
)
