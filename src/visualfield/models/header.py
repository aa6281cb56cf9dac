"""
Timestamps.

Every data point carries a `Time`: whole seconds since the Unix epoch plus a
nanosecond remainder. Keeping the two as integers means an exported point
comes back with the exact same stamp.
"""

import math
import time
from datetime import datetime, timezone
from typing import Annotated

import pyarrow as pa
from pydantic import Field, field_validator

from .base_model import BaseModel

_NS_PER_SEC = 1_000_000_000
_NS_PER_MS = 1_000_000

# Range of the Arrow `sec` column.
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class Time(BaseModel):
    """
    Capture time as (sec, nanosec).

    `sec` may be negative (before the epoch); `nanosec` is always in [0, 1e9)
    and counts forward from `sec`, so -1.5 s is stored as (-2, 500_000_000).
    """

    __vf_pyarrow_struct__ = pa.struct(
        [
            pa.field("sec", pa.int64(), nullable=False),
            pa.field("nanosec", pa.uint32(), nullable=False),
        ]
    )

    sec: Annotated[int, Field(ge=_INT64_MIN, le=_INT64_MAX)]
    nanosec: int

    @field_validator("nanosec")
    @classmethod
    def validate_nanosec(cls, v: int) -> int:
        if not (0 <= v < _NS_PER_SEC):
            raise ValueError(f"Nanoseconds must be in [0, 1e9). Got {v}")
        return v

    # --- Factories ---

    @classmethod
    def from_nanoseconds(cls, total_nanoseconds: int) -> "Time":
        sec, nanosec = divmod(total_nanoseconds, _NS_PER_SEC)
        return cls(sec=sec, nanosec=nanosec)

    @classmethod
    def from_milliseconds(cls, total_milliseconds: int) -> "Time":
        return cls.from_nanoseconds(total_milliseconds * _NS_PER_MS)

    @classmethod
    def from_float(cls, ftime: float) -> "Time":
        """
        Converts float seconds, rounding to the nearest nanosecond.

        The integer and fractional parts are split before scaling so that
        present-day epoch values keep nanosecond resolution.
        """
        whole = math.floor(ftime)
        nanosec = round((ftime - whole) * 1e9)
        carry, nanosec = divmod(nanosec, _NS_PER_SEC)
        return cls(sec=int(whole) + carry, nanosec=nanosec)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Time":
        """Naive datetimes are taken as local time, as `datetime.timestamp()` does."""
        return cls.from_float(dt.timestamp())

    @classmethod
    def now(cls) -> "Time":
        """Current wall-clock time."""
        return cls.from_nanoseconds(time.time_ns())

    # --- Conversions ---

    def to_nanoseconds(self) -> int:
        return self.sec * _NS_PER_SEC + self.nanosec

    def to_milliseconds(self) -> int:
        """Whole milliseconds, truncating the sub-millisecond part."""
        return self.to_nanoseconds() // _NS_PER_MS

    def to_float(self) -> float:
        """Float seconds. Loses sub-microsecond precision for current dates."""
        return self.sec + self.nanosec / 1e9

    def to_datetime(self) -> datetime:
        """UTC datetime, at microsecond resolution."""
        return datetime.fromtimestamp(self.to_float(), tz=timezone.utc)

    def isoformat(self) -> str:
        """ISO 8601 UTC string, e.g. for display next to exported points."""
        return self.to_datetime().isoformat()
