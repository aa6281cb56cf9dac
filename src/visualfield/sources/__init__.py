from .source_base import (
    CallbackMagnetometerSource as CallbackMagnetometerSource,
    CallbackPoseSource as CallbackPoseSource,
    MagnetometerSource as MagnetometerSource,
    PoseSource as PoseSource,
    SensorSource as SensorSource,
    Subscription as Subscription,
)
from .simulated import (
    SimulatedMagnetometerSource as SimulatedMagnetometerSource,
    SimulatedPoseSource as SimulatedPoseSource,
)
