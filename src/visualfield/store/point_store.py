"""
Point Store Module.

Ordered, capacity-bounded collection of `DataPoint` objects with batch
eviction of the oldest entries, aggregate statistics and change notification.

**Concurrency:**
One writer (the collector) and many readers (visualization, analysis).
Mutations are serialized by a lock; readers get an immutable tuple snapshot,
built lazily on the first read after a mutation and shared until the next one,
so a reader never observes a partial append.
"""

import logging as log
import math
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from ..enum import FieldFrame, StoreEventKind
from ..config import DEFAULT_EVICTION_BATCH_FRACTION, DEFAULT_STORE_CAPACITY
from ..models.data.geometry import Point3d
from ..models.data_point import DataPoint
from ..models.statistics import FieldStatistics, SpatialBounds


@dataclass(frozen=True)
class StoreEvent:
    """
    Notification sent to store listeners after each mutation.

    Attributes:
        kind (StoreEventKind): What happened.
        count (int): Number of points in the store after the mutation.
        added (int): Number of points added by the mutation.
        evicted (int): Number of oldest points dropped by the mutation.
    """

    kind: StoreEventKind
    count: int
    added: int = 0
    evicted: int = 0


StoreListener = Callable[[StoreEvent], None]


class PointStore:
    """
    Insertion-ordered, capacity-bounded point collection.

    Once the number of points exceeds `capacity`, a contiguous block of the
    oldest points is removed at once: `ceil(capacity * eviction_batch_fraction)`
    points (at least one, and never fewer than needed to get back to capacity).
    Dropping a batch keeps eviction from running on every single insert.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_STORE_CAPACITY,
        eviction_batch_fraction: float = DEFAULT_EVICTION_BATCH_FRACTION,
    ):
        """
        Args:
            capacity (int): Maximum number of retained points.
            eviction_batch_fraction (float): Share of the capacity evicted on overflow.

        Raises:
            ValueError: On a capacity below 1 or a fraction outside (0, 1].
        """
        if capacity < 1:
            raise ValueError(f"Store capacity must be at least 1. Got {capacity}")
        if not (0.0 < eviction_batch_fraction <= 1.0):
            raise ValueError(
                f"Eviction batch fraction must be in (0, 1]. Got {eviction_batch_fraction}"
            )

        self._capacity = capacity
        self._eviction_batch = max(1, math.ceil(capacity * eviction_batch_fraction))

        self._lock = threading.Lock()
        self._points: List[DataPoint] = []
        self._snapshot: Optional[Tuple[DataPoint, ...]] = ()
        self._evicted_total = 0

        self._listeners_lock = threading.Lock()
        self._listeners: List[StoreListener] = []

    # --- Properties ---

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def eviction_batch(self) -> int:
        """Number of points dropped per eviction."""
        return self._eviction_batch

    @property
    def evicted_total(self) -> int:
        """Number of points evicted since the store was created."""
        return self._evicted_total

    # --- Mutation ---

    def _evict_locked(self) -> int:
        overflow = len(self._points) - self._capacity
        if overflow <= 0:
            return 0
        n = max(self._eviction_batch, overflow)
        del self._points[:n]
        self._evicted_total += n
        return n

    def append(self, point: DataPoint) -> None:
        """Adds a point at the end; evicts a batch of the oldest if over capacity."""
        with self._lock:
            self._points.append(point)
            evicted = self._evict_locked()
            self._snapshot = None
            count = len(self._points)

        if evicted:
            log.debug(f"Point store over capacity: evicted {evicted} oldest points.")
        self._notify(StoreEvent(StoreEventKind.Appended, count, 1, evicted))

    def extend(self, points: Iterable[DataPoint]) -> None:
        """Adds a batch of points in order; eviction runs once, at the end."""
        batch = list(points)
        if not batch:
            return
        with self._lock:
            self._points.extend(batch)
            evicted = self._evict_locked()
            self._snapshot = None
            count = len(self._points)

        self._notify(StoreEvent(StoreEventKind.Appended, count, len(batch), evicted))

    def replace(self, points: Iterable[DataPoint]) -> None:
        """
        Swaps the whole content for `points` in one step (e.g. after an import).
        Eviction applies if the batch is larger than the capacity.
        """
        batch = list(points)
        with self._lock:
            dropped = len(self._points)
            self._points = batch
            evicted = self._evict_locked()
            self._snapshot = None
            count = len(self._points)

        log.info(f"Point store replaced: {dropped} points dropped, {count} loaded.")
        self._notify(StoreEvent(StoreEventKind.Replaced, count, len(batch), evicted))

    def clear(self) -> None:
        """Empties the store. Idempotent."""
        with self._lock:
            if not self._points:
                return
            self._points = []
            self._snapshot = ()

        log.info("Point store cleared.")
        self._notify(StoreEvent(StoreEventKind.Cleared, 0))

    # --- Reading ---

    def snapshot(self) -> Tuple[DataPoint, ...]:
        """Immutable copy of the current content, oldest first."""
        with self._lock:
            if self._snapshot is None:
                self._snapshot = tuple(self._points)
            return self._snapshot

    def latest(self) -> Optional[DataPoint]:
        with self._lock:
            return self._points[-1] if self._points else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)

    def __iter__(self) -> Iterator[DataPoint]:
        return iter(self.snapshot())

    def _magnitudes(self, frame: FieldFrame) -> np.ndarray:
        return np.array(
            [p.field_strength(frame) for p in self.snapshot()], dtype=np.float64
        )

    def statistics(self, frame: FieldFrame = FieldFrame.World) -> FieldStatistics:
        """
        Min / max / mean field magnitude over all current points.

        Args:
            frame (FieldFrame): World-frame (default) or raw device-frame vectors.

        Returns:
            FieldStatistics: All zero when the store is empty.
        """
        magnitudes = self._magnitudes(frame)
        if magnitudes.size == 0:
            return FieldStatistics()
        return FieldStatistics(
            min=float(magnitudes.min()),
            max=float(magnitudes.max()),
            mean=float(magnitudes.mean()),
            count=int(magnitudes.size),
        )

    def magnitude_range(self, frame: FieldFrame = FieldFrame.World) -> Tuple[float, float]:
        """
        (min, max) field magnitude, used to scale glyph colours.
        Returns (0, 1) when the store is empty.
        """
        magnitudes = self._magnitudes(frame)
        if magnitudes.size == 0:
            return (0.0, 1.0)
        return (float(magnitudes.min()), float(magnitudes.max()))

    def spatial_bounds(self) -> SpatialBounds:
        """
        Axis-aligned bounding box over all positions; (origin, origin) when empty.
        """
        points = self.snapshot()
        if not points:
            return SpatialBounds.empty()
        positions = np.array([p.position.to_list() for p in points], dtype=np.float64)
        return SpatialBounds(
            min_corner=Point3d.from_array(positions.min(axis=0)),
            max_corner=Point3d.from_array(positions.max(axis=0)),
        )

    # --- Change notification ---

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Registers a listener called after each mutation.

        Listeners run on the writer's context and should return quickly;
        read `snapshot()` from inside the listener if the points are needed.

        Returns:
            A callable removing the listener (idempotent).
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._listeners_lock:
                try:
                    self._listeners.remove(listener)
                except ValueError:
                    pass  # Already removed

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                log.exception(f"Point store listener failed on {event.kind.value}: {e}")
