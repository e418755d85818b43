from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late arrival.

    late_minutes counts from the nominal class start, not from the end of the
    grace window (16:16 with a 16:00 start is 16 minutes late, not 1).
    """

    def decide(self, *, delta_minutes: Optional[int], grace_minutes: int) -> StatusDecision:
        if delta_minutes is None or delta_minutes <= 0:
            return StatusDecision(status=AttendanceStatus.LATE)
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=int(delta_minutes))
