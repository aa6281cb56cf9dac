"""
Sensor Source Base Module.

Defines the push-based contract between platform sensor drivers and the
collector. A source fans each new value out to its subscribers; callbacks
may arrive on any thread.
"""

import logging as log
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, TypeVar

from ..models.data.geometry import Pose
from ..models.sensors import MagnetometerSample

T = TypeVar("T")


class Subscription:
    """Handle returned by `SensorSource.subscribe`."""

    def __init__(self, on_cancel: Callable[[], None]):
        self._on_cancel = on_cancel
        self._lock = threading.Lock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stops delivery to this subscriber. Idempotent."""
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._on_cancel()


class SensorSource(ABC, Generic[T]):
    """
    Abstract Base Class for push-based sensor feeds.

    Concrete sources call `publish()` whenever the driver produces a value.
    The `_on_first_subscriber` / `_on_last_unsubscribed` hooks let a source
    start and release the underlying driver only while someone listens.
    """

    def __init__(self):
        self._subscribers_lock = threading.Lock()
        self._subscribers: Dict[int, Callable[[T], None]] = {}
        self._next_id = 0

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying sensor exists on this device."""
        pass

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """
        Registers `callback` for every subsequent value.

        Returns:
            Subscription: Cancel it to stop delivery.
        """
        with self._subscribers_lock:
            sub_id = self._next_id
            self._next_id += 1
            first = not self._subscribers
            self._subscribers[sub_id] = callback

        if first:
            self._on_first_subscriber()
        return Subscription(lambda: self._unsubscribe(sub_id))

    def _unsubscribe(self, sub_id: int) -> None:
        with self._subscribers_lock:
            self._subscribers.pop(sub_id, None)
            last = not self._subscribers

        if last:
            self._on_last_unsubscribed()

    @property
    def subscriber_count(self) -> int:
        with self._subscribers_lock:
            return len(self._subscribers)

    def publish(self, value: T) -> None:
        """Delivers `value` to every current subscriber."""
        with self._subscribers_lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            try:
                callback(value)
            except Exception as e:
                log.exception(f"{type(self).__name__} subscriber failed: {e}")

    def _on_first_subscriber(self) -> None:
        pass

    def _on_last_unsubscribed(self) -> None:
        pass


class MagnetometerSource(SensorSource[MagnetometerSample]):
    """Feed of device-frame magnetometer samples (μT)."""

    pass


class PoseSource(SensorSource[Pose]):
    """Feed of device poses (world position and/or attitude)."""

    pass


class CallbackMagnetometerSource(MagnetometerSource):
    """
    Adapter for platform drivers that push readings: the driver calls
    `publish()` from its own callback.
    """

    def __init__(self, available: bool = True):
        super().__init__()
        self._available = available

    def is_available(self) -> bool:
        return self._available


class CallbackPoseSource(PoseSource):
    """
    Adapter for tracking subsystems that push poses through `publish()`.
    """

    def __init__(self, available: bool = True):
        super().__init__()
        self._available = available

    def is_available(self) -> bool:
        return self._available
