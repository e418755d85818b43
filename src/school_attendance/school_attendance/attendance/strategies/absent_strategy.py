from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Absent; arrival time is irrelevant."""

    def decide(self, *, delta_minutes: Optional[int], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
