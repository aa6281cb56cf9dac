from .data_point import DataPoint as DataPoint
from .header import Time as Time
from .statistics import (
    FieldStatistics as FieldStatistics,
    SpatialBounds as SpatialBounds,
)
