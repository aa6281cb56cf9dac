"""
Test helpers: a deterministic scheduler driven by a virtual clock, and small
factories for data points.
"""

from typing import Callable, List, Optional

from visualfield.handlers.scheduler import Scheduler, TimerHandle
from visualfield.models.data.geometry import Orientation, Point3d, Vector3d
from visualfield.models.data_point import DataPoint
from visualfield.models.header import Time

# Virtual time is kept in integer microseconds so that 5 x 0.1 s lands exactly on 0.5 s.
_US = 1_000_000


class ManualTimer(TimerHandle):
    def __init__(self, interval_us: int, callback: Callable[[], None], due_us: int, seq: int):
        self.interval_us = interval_us
        self.callback = callback
        self.due_us = due_us
        self.seq = seq
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """
    Scheduler that only fires timers when the test advances its clock.

    Timers due at the same instant fire in creation order. Exceptions raised
    by a callback propagate to the test.
    """

    def __init__(self):
        self._now_us = 0
        self._seq = 0
        self.timers: List[ManualTimer] = []

    @property
    def now(self) -> float:
        return self._now_us / _US

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive. Got {interval}")
        interval_us = round(interval * _US)
        self._seq += 1
        timer = ManualTimer(interval_us, callback, self._now_us + interval_us, self._seq)
        self.timers.append(timer)
        return timer

    @property
    def active_timers(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def _next_due(self, until_us: int) -> Optional[ManualTimer]:
        due = [t for t in self.active_timers if t.due_us <= until_us]
        if not due:
            return None
        return min(due, key=lambda t: (t.due_us, t.seq))

    def advance(self, seconds: float) -> None:
        """Moves the virtual clock forward, firing every timer that falls due."""
        until_us = self._now_us + round(seconds * _US)
        while True:
            timer = self._next_due(until_us)
            if timer is None:
                break
            self._now_us = timer.due_us
            timer.due_us += timer.interval_us
            timer.callback()
        self._now_us = until_us


class VirtualClock:
    """`Time` source bound to a `ManualScheduler` clock."""

    def __init__(self, scheduler: ManualScheduler, start_sec: int = 1_700_000_000):
        self._scheduler = scheduler
        self._start_ns = start_sec * 1_000_000_000

    def __call__(self) -> Time:
        return Time.from_nanoseconds(self._start_ns + round(self._scheduler.now * 1e9))


def make_point(
    raw: tuple = (10.0, 0.0, 0.0),
    orientation: Optional[Orientation] = None,
    position: Optional[tuple] = None,
    sec: int = 1_700_000_000,
    nanosec: int = 0,
) -> DataPoint:
    return DataPoint.capture(
        timestamp=Time(sec=sec, nanosec=nanosec),
        raw_field=Vector3d.from_list(list(raw)),
        orientation=orientation,
        position=Point3d.from_list(list(position)) if position is not None else None,
    )
