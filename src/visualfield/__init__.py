from .enum import (
    CollectorState as CollectorState,
    FieldFrame as FieldFrame,
    GlyphKind as GlyphKind,
    SerializationFormat as SerializationFormat,
    StoreEventKind as StoreEventKind,
)

from .models import (
    DataPoint as DataPoint,
    FieldStatistics as FieldStatistics,
    SpatialBounds as SpatialBounds,
    Time as Time,
)
from .models.data import (
    Orientation as Orientation,
    Point3d as Point3d,
    Pose as Pose,
    Quaternion as Quaternion,
    RotationMatrix as RotationMatrix,
    Vector3d as Vector3d,
)
from .models.sensors import MagnetometerSample as MagnetometerSample

from .transform import (
    OrientationModel as OrientationModel,
    SmoothingFilter as SmoothingFilter,
)

from .config import CollectorConfig as CollectorConfig

from .store import (
    PointStore as PointStore,
    StoreEvent as StoreEvent,
)

from .handlers import (
    AsyncioScheduler as AsyncioScheduler,
    SampleCollector as SampleCollector,
    Scheduler as Scheduler,
)

from .sources import (
    CallbackMagnetometerSource as CallbackMagnetometerSource,
    CallbackPoseSource as CallbackPoseSource,
    MagnetometerSource as MagnetometerSource,
    PoseSource as PoseSource,
    SimulatedMagnetometerSource as SimulatedMagnetometerSource,
    SimulatedPoseSource as SimulatedPoseSource,
)

from .serialization import (
    MalformedDataError as MalformedDataError,
    decode as decode,
    encode as encode,
)

from .visualization import (
    FieldGlyph as FieldGlyph,
    build_glyphs as build_glyphs,
)

# useful to do like: `from visualfield import PointStore`
__all__ = [
    "AsyncioScheduler",
    "CallbackMagnetometerSource",
    "CallbackPoseSource",
    "CollectorConfig",
    "CollectorState",
    "DataPoint",
    "FieldFrame",
    "FieldGlyph",
    "FieldStatistics",
    "GlyphKind",
    "MagnetometerSample",
    "MagnetometerSource",
    "MalformedDataError",
    "Orientation",
    "OrientationModel",
    "Point3d",
    "PointStore",
    "Pose",
    "PoseSource",
    "Quaternion",
    "RotationMatrix",
    "SampleCollector",
    "Scheduler",
    "SerializationFormat",
    "SimulatedMagnetometerSource",
    "SimulatedPoseSource",
    "SmoothingFilter",
    "SpatialBounds",
    "StoreEvent",
    "StoreEventKind",
    "Time",
    "Vector3d",
    "build_glyphs",
    "decode",
    "encode",
]
