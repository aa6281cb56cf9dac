"""
Enumerations Module.

Defines the state machine used by the sample collector.
"""

from enum import Enum


class CollectorState(Enum):
    """
    Represents the lifecycle state of a collection session.
    """

    Idle = "idle"  # No timers running, no sensor subscriptions.
    Collecting = "collecting"  # Timers active, caches live, store growing.
