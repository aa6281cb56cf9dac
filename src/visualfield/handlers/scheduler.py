"""
Scheduler Module.

The collector never owns a thread: both of its timers run on a single
cooperative scheduling context supplied by the host application. This module
defines that contract and the asyncio implementation used by default.
"""

import asyncio
import logging as log
from abc import ABC, abstractmethod
from typing import Callable, Optional


class TimerHandle(ABC):
    """Handle to a repeating timer."""

    @abstractmethod
    def cancel(self) -> None:
        """
        Stops the timer. After this returns the callback is never invoked again.
        Idempotent.
        """
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """
    Abstract single-threaded scheduling context.
    """

    @abstractmethod
    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Invokes `callback` every `interval` seconds, first call one interval from now.

        Args:
            interval (float): Period in seconds, strictly positive.
            callback: Invoked without arguments on the scheduling context.

        Returns:
            TimerHandle: Used to cancel the timer.
        """
        pass


class _AsyncioRepeatingTimer(TimerHandle):
    """Re-arms `loop.call_later` after every tick until cancelled."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle: Optional[asyncio.TimerHandle] = None
        self._arm()

    def _arm(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._arm()
        try:
            self._callback()
        except Exception as e:
            log.exception(f"Timer callback failed: {e}")

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Timers must be created and cancelled from the loop's own thread; sensor
    callbacks coming from other threads never touch the scheduler directly.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: The event loop to schedule on. If None, the running loop at
                the time of each `call_every` is used.
        """
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive. Got {interval}")
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioRepeatingTimer(loop, interval, callback)
