"""
Latest Value Handoff.

Single-slot, mutex-guarded cache written by a sensor callback (any thread)
and read on the scheduler context. Only the newest value is kept: a slow
reader skips intermediate samples instead of queueing them.
"""

import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class LatestValue(Generic[T]):
    """Thread-safe single-slot cache."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._fresh = False

    def put(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._fresh = True

    def peek(self) -> Optional[T]:
        """Returns the latest value (fresh or not) without consuming it."""
        with self._lock:
            return self._value

    def take(self) -> Optional[T]:
        """Returns the latest value only if it was not taken before, else None."""
        with self._lock:
            if not self._fresh:
                return None
            self._fresh = False
            return self._value

    def clear(self) -> None:
        with self._lock:
            self._value = None
            self._fresh = False
