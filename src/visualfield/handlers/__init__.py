from .latest_value import LatestValue as LatestValue
from .sample_collector import SampleCollector as SampleCollector
from .scheduler import (
    AsyncioScheduler as AsyncioScheduler,
    Scheduler as Scheduler,
    TimerHandle as TimerHandle,
)
