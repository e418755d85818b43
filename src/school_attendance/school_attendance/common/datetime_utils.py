from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Callable

Clock = Callable[[], datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into time."""
    v = value.strip()
    fmt = "%H:%M:%S" if v.count(":") == 2 else "%H:%M"
    return datetime.strptime(v, fmt).time()


def minutes_since_midnight(value: time) -> int:
    # Seconds are dropped: 16:15:59 is minute 975.
    return value.hour * 60 + value.minute


def round_half_up(value: float) -> int:
    """Round half up (2.5 -> 3), unlike the built-in round()."""
    return int(math.floor(value + 0.5))


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
