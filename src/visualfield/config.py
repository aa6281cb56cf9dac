"""
Configuration Module.

This module defines the configuration structure used to control the
collection session: timer cadences, smoothing and store bounds.
"""

from dataclasses import dataclass, field

from .models.data.geometry import Point3d

DEFAULT_SAMPLING_INTERVAL = 0.1
DEFAULT_PERSIST_INTERVAL = 0.5
DEFAULT_SMOOTHING_FACTOR = 0.3
DEFAULT_STORE_CAPACITY = 1000
DEFAULT_EVICTION_BATCH_FRACTION = 0.10


@dataclass
class CollectorConfig:
    """
    Configuration settings for a collection session.

    Attributes:
        sampling_interval (float): Sensor refresh period (s): how often the raw
            reading is pushed through the smoothing filter.
        persist_interval (float): Point-capture period (s).
        smoothing_factor (float): Weight of each new sample, in (0, 1].
        store_capacity (int): Maximum number of retained points.
        eviction_batch_fraction (float): Share of the capacity dropped, oldest
            first, once the store overflows.
        fallback_position (Point3d): Position recorded when tracking has none.
    """

    sampling_interval: float = DEFAULT_SAMPLING_INTERVAL
    persist_interval: float = DEFAULT_PERSIST_INTERVAL
    smoothing_factor: float = DEFAULT_SMOOTHING_FACTOR
    store_capacity: int = DEFAULT_STORE_CAPACITY
    eviction_batch_fraction: float = DEFAULT_EVICTION_BATCH_FRACTION
    fallback_position: Point3d = field(default_factory=Point3d.origin)

    def __post_init__(self):
        if self.sampling_interval <= 0:
            raise ValueError("'sampling_interval' must be positive.")
        if self.persist_interval <= 0:
            raise ValueError("'persist_interval' must be positive.")
        if not (0.0 < self.smoothing_factor <= 1.0):
            raise ValueError("'smoothing_factor' must be in (0, 1].")
        if self.store_capacity < 1:
            raise ValueError("'store_capacity' must be at least 1.")
        if not (0.0 < self.eviction_batch_fraction <= 1.0):
            raise ValueError("'eviction_batch_fraction' must be in (0, 1].")
