"""
Sample Collector Module.

Drives a collection session: a fast timer refreshes the smoothed "current
field" from the magnetometer feed, and a slower timer turns the current field
and the latest pose into a `DataPoint` appended to the `PointStore`.

**Threading model:**
Both timers run on one cooperative scheduling context (see `Scheduler`).
Sensor callbacks may arrive on any thread; they only write into single-slot
`LatestValue` handoffs. Smoothing state, the orientation model and the store
are only mutated from inside ticks, under the collector lock.

**Cancellation:**
`stop()` cancels both timers and the sensor subscriptions before returning.
Every timer closure and sensor callback is bound to the session generation
it was created for; once `stop()` bumps the generation, anything still in
flight becomes a no-op, so no point can be appended after `stop()` returns.
"""

import logging as log
import threading
from typing import Callable, List, Optional

from ..config import CollectorConfig
from ..enum import CollectorState, FieldFrame
from ..models.data.geometry import Pose, Vector3d
from ..models.data_point import DataPoint
from ..models.header import Time
from ..models.sensors import MagnetometerSample
from ..sources.source_base import MagnetometerSource, PoseSource, Subscription
from ..store.point_store import PointStore
from ..transform.orientation_model import OrientationModel
from ..transform.smoothing import SmoothingFilter
from .latest_value import LatestValue
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle


class SampleCollector:
    """
    Collection session controller.

    States: `Idle` -> `Collecting` -> `Idle`. Starting while collecting and
    stopping while idle are no-ops. The store content survives stop/start and
    is only removed by an explicit `store.clear()`.

    Example:
        ```python
        store = PointStore()
        collector = SampleCollector(store, magnetometer, pose_source)
        collector.start()
        ...
        collector.stop()
        print(store.statistics())
        ```
    """

    def __init__(
        self,
        store: Optional[PointStore],
        magnetometer: MagnetometerSource,
        pose_source: Optional[PoseSource] = None,
        config: Optional[CollectorConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], Time] = Time.now,
    ):
        """
        Args:
            store (Optional[PointStore]): Destination of the captured points. If
                None, a store sized from `config` is created.
            magnetometer (MagnetometerSource): Raw field feed (device frame, μT).
            pose_source (Optional[PoseSource]): Position/attitude feed.
            config (Optional[CollectorConfig]): Session settings (defaults if None).
            scheduler (Optional[Scheduler]): Scheduling context for both timers.
                Defaults to the running asyncio loop.
            clock: Timestamp source for captured points.
        """
        self._config = config or CollectorConfig()
        if store is None:
            store = PointStore(
                capacity=self._config.store_capacity,
                eviction_batch_fraction=self._config.eviction_batch_fraction,
            )
        self._store = store
        self._magnetometer = magnetometer
        self._pose_source = pose_source
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock

        # --- Transform pipeline ---
        self._filter = SmoothingFilter(self._config.smoothing_factor)
        self._orientation = OrientationModel()

        # --- Sensor handoffs (written from driver threads) ---
        self._raw_handoff: LatestValue[MagnetometerSample] = LatestValue()
        self._pose_handoff: LatestValue[Pose] = LatestValue()

        # --- Caches (read by UI) ---
        self._current_field: Optional[Vector3d] = None
        self._current_pose: Optional[Pose] = None

        # --- Session state ---
        self._lock = threading.RLock()
        self._state = CollectorState.Idle
        self._generation = 0
        self._timers: List[TimerHandle] = []
        self._subscriptions: List[Subscription] = []
        self._magnetometer_unavailable_reported = False

    # --- Properties ---

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def is_collecting(self) -> bool:
        return self._state == CollectorState.Collecting

    @property
    def store(self) -> PointStore:
        return self._store

    @property
    def config(self) -> CollectorConfig:
        return self._config

    @property
    def current_field(self) -> Optional[Vector3d]:
        """Latest smoothed reading in the device frame, None before the first sample."""
        return self._current_field

    @property
    def current_world_field(self) -> Optional[Vector3d]:
        """Latest smoothed reading rotated with the latest known attitude."""
        with self._lock:
            if self._current_field is None:
                return None
            return self._orientation.to_world(self._current_field)

    @property
    def current_pose(self) -> Optional[Pose]:
        return self._current_pose

    # --- Lifecycle ---

    def start(self) -> None:
        """
        Starts a collection session: resets smoothing and caches, subscribes
        to the sensor feeds and schedules both timers.
        """
        with self._lock:
            if self._state == CollectorState.Collecting:
                log.debug("start() called while already collecting; ignored.")
                return

            self._generation += 1
            gen = self._generation

            self._filter.reset()
            self._orientation.reset()
            self._raw_handoff.clear()
            self._pose_handoff.clear()
            self._current_field = None
            self._current_pose = None

            if self._magnetometer.is_available():
                self._subscriptions.append(
                    self._magnetometer.subscribe(
                        lambda sample: self._on_magnetometer(gen, sample)
                    )
                )
            elif not self._magnetometer_unavailable_reported:
                log.warning(
                    "Magnetometer unavailable: collection runs but no field values will be produced."
                )
                self._magnetometer_unavailable_reported = True

            if self._pose_source is not None:
                if self._pose_source.is_available():
                    self._subscriptions.append(
                        self._pose_source.subscribe(
                            lambda pose: self._on_pose(gen, pose)
                        )
                    )
                else:
                    log.info("Pose feed unavailable: points are stored without pose.")

            self._timers = [
                self._scheduler.call_every(
                    self._config.sampling_interval, lambda: self._sample_tick(gen)
                ),
                self._scheduler.call_every(
                    self._config.persist_interval, lambda: self._persist_tick(gen)
                ),
            ]
            self._state = CollectorState.Collecting

        log.info(
            f"Magnetic field collection started (sampling every {self._config.sampling_interval}s, "
            f"capturing every {self._config.persist_interval}s)."
        )

    def stop(self) -> None:
        """
        Stops the session. When this returns, no timer tick or sensor callback
        can append to the store any more.
        """
        with self._lock:
            if self._state == CollectorState.Idle:
                log.debug("stop() called while idle; ignored.")
                return

            self._generation += 1
            self._state = CollectorState.Idle

            timers, self._timers = self._timers, []
            subscriptions, self._subscriptions = self._subscriptions, []
            for timer in timers:
                timer.cancel()
            for subscription in subscriptions:
                subscription.cancel()

            self._raw_handoff.clear()
            self._pose_handoff.clear()
            self._current_field = None
            self._current_pose = None

        log.info(
            f"Magnetic field collection stopped, {len(self._store)} points in store."
        )

    def __enter__(self) -> "SampleCollector":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # --- Sensor callbacks (any thread) ---

    def _on_magnetometer(self, gen: int, sample: MagnetometerSample) -> None:
        if gen != self._generation:
            return
        self._raw_handoff.put(sample)

    def _on_pose(self, gen: int, pose: Pose) -> None:
        if gen != self._generation:
            return
        self._pose_handoff.put(pose)

    # --- Ticks (scheduler context) ---

    def sample_tick(self) -> None:
        """Runs one sensor refresh step now (for hosts driving their own loop)."""
        self._sample_tick(self._generation)

    def persist_tick(self) -> None:
        """Runs one capture step now (for hosts driving their own loop)."""
        self._persist_tick(self._generation)

    def _is_live(self, gen: int) -> bool:
        return self._state == CollectorState.Collecting and gen == self._generation

    def _refresh_pose(self) -> None:
        pose = self._pose_handoff.peek()
        self._current_pose = pose
        self._orientation.update(pose.orientation if pose is not None else None)

    def _sample_tick(self, gen: int) -> None:
        with self._lock:
            if not self._is_live(gen):
                return
            self._refresh_pose()
            sample = self._raw_handoff.take()
            if sample is None:
                return
            self._current_field = self._filter.update(sample.magnetic_field)

    def _persist_tick(self, gen: int) -> None:
        with self._lock:
            if not self._is_live(gen):
                return

            raw_field = self._current_field
            if raw_field is None:
                # Nothing measured yet.
                return

            self._refresh_pose()
            pose = self._current_pose
            position = pose.position if pose is not None else None

            point = DataPoint(
                timestamp=self._clock(),
                position=position
                if position is not None
                else self._config.fallback_position,
                position_tracked=position is not None,
                raw_field=raw_field,
                orientation=self._orientation.current,
                world_field=self._orientation.to_world(raw_field),
            )

            # stop() may have run from inside the clock or on this thread meanwhile.
            if not self._is_live(gen):
                return
            self._store.append(point)

        log.debug(
            f"Captured point: |raw|={point.field_strength(FieldFrame.Device):.2f} uT, "
            f"|world|={point.field_strength():.2f} uT"
        )
