"""
Simulated Sources Module.

Synthetic magnetometer and pose feeds for demos and tests. They are opt-in
only: the collector never falls back to them when a real feed is missing.

The pose follows a circle of radius 2 m at a height of 0.5 m
(x = 2 sin(0.1 t), y = 0.5, z = 2 cos(0.1 t)) while the device slowly yaws
about the vertical axis. The magnetometer reports a constant world field seen
through that attitude, plus optional Gaussian noise.
"""

import logging as log
import math
import time
from typing import Callable, Optional

import numpy as np

from ..handlers.scheduler import Scheduler, TimerHandle
from ..models.data.geometry import Orientation, Point3d, Pose, Vector3d
from ..models.header import Time
from ..models.sensors import MagnetometerSample
from .source_base import MagnetometerSource, PoseSource

# Roughly mid-latitude: horizontal component towards +y (north), pointing down.
DEFAULT_WORLD_FIELD = Vector3d(x=0.0, y=22.0, z=-42.0)

_VERTICAL_AXIS = Vector3d(x=0.0, y=0.0, z=1.0)


class SimulatedPoseSource(PoseSource):
    """
    Publishes a pose every `interval` seconds on the given scheduler while
    at least one subscriber is registered.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        interval: float = 0.1,
        time_fn: Callable[[], float] = time.monotonic,
        radius: float = 2.0,
        height: float = 0.5,
        angular_rate: float = 0.1,
        yaw_rate: float = 0.2,
        with_position: bool = True,
        with_orientation: bool = True,
    ):
        super().__init__()
        if not (with_position or with_orientation):
            raise ValueError("Simulated pose needs a position or an orientation.")
        self._scheduler = scheduler
        self._interval = interval
        self._time_fn = time_fn
        self._radius = radius
        self._height = height
        self._angular_rate = angular_rate
        self._yaw_rate = yaw_rate
        self._with_position = with_position
        self._with_orientation = with_orientation
        self._timer: Optional[TimerHandle] = None

    def is_available(self) -> bool:
        return True

    def position_at(self, t: float) -> Point3d:
        return Point3d(
            x=math.sin(t * self._angular_rate) * self._radius,
            y=self._height,
            z=math.cos(t * self._angular_rate) * self._radius,
        )

    def orientation_at(self, t: float) -> Orientation:
        return Orientation.from_axis_angle(_VERTICAL_AXIS, t * self._yaw_rate)

    def pose_at(self, t: float) -> Pose:
        return Pose(
            position=self.position_at(t) if self._with_position else None,
            orientation=self.orientation_at(t) if self._with_orientation else None,
        )

    def _tick(self) -> None:
        self.publish(self.pose_at(self._time_fn()))

    def _on_first_subscriber(self) -> None:
        log.debug("Simulated pose feed started.")
        self._timer = self._scheduler.call_every(self._interval, self._tick)

    def _on_last_unsubscribed(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        log.debug("Simulated pose feed stopped.")


class SimulatedMagnetometerSource(MagnetometerSource):
    """
    Publishes `attitude⁻¹ · world_field + noise` every `interval` seconds
    while at least one subscriber is registered.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        interval: float = 0.1,
        world_field: Vector3d = DEFAULT_WORLD_FIELD,
        attitude_fn: Optional[Callable[[float], Orientation]] = None,
        noise_std: float = 0.0,
        seed: Optional[int] = None,
        time_fn: Callable[[], float] = time.monotonic,
        clock: Callable[[], Time] = Time.now,
    ):
        """
        Args:
            scheduler: Scheduling context for the emission timer.
            interval: Emission period in seconds.
            world_field: The field in the world frame (μT).
            attitude_fn: Device attitude as a function of `time_fn()`; None
                keeps the device aligned with the world frame.
            noise_std: Standard deviation of the per-axis Gaussian noise (μT).
            seed: Seed for the noise generator.
            time_fn: Time base shared with `attitude_fn`.
            clock: Stamps the emitted samples.
        """
        super().__init__()
        if noise_std < 0:
            raise ValueError("'noise_std' must not be negative.")
        self._scheduler = scheduler
        self._interval = interval
        self._world_field = world_field
        self._attitude_fn = attitude_fn
        self._noise_std = noise_std
        self._rng = np.random.default_rng(seed)
        self._time_fn = time_fn
        self._clock = clock
        self._timer: Optional[TimerHandle] = None

    def is_available(self) -> bool:
        return True

    def reading_at(self, t: float) -> Vector3d:
        """Device-frame reading at time `t`, without noise."""
        if self._attitude_fn is None:
            return self._world_field
        # World -> device is the inverse (transpose) of the device attitude.
        return self._attitude_fn(t).matrix.transpose().apply(self._world_field)

    def _tick(self) -> None:
        reading = self.reading_at(self._time_fn())
        if self._noise_std > 0:
            noise = self._rng.normal(0.0, self._noise_std, size=3)
            reading = Vector3d.from_array(reading.to_array() + noise)
        self.publish(MagnetometerSample(stamp=self._clock(), magnetic_field=reading))

    def _on_first_subscriber(self) -> None:
        log.debug("Simulated magnetometer feed started.")
        self._timer = self._scheduler.call_every(self._interval, self._tick)

    def _on_last_unsubscribed(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        log.debug("Simulated magnetometer feed stopped.")
