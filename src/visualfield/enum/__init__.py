from .collector_state import CollectorState as CollectorState
from .field_frame import FieldFrame as FieldFrame
from .glyph_kind import GlyphKind as GlyphKind
from .serialization_format import SerializationFormat as SerializationFormat
from .store_event import StoreEventKind as StoreEventKind
