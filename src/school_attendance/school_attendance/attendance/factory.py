from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_mark(
        self,
        *,
        declared: AttendanceStatus,
        delta_minutes: Optional[int],
        grace_minutes: int,
    ) -> AttendanceStrategy:
        if declared == AttendanceStatus.ABSENT:
            return AbsentStrategy()
        if declared == AttendanceStatus.LATE:
            return LateStrategy()

        if delta_minutes is not None and delta_minutes > grace_minutes:
            return LateStrategy()
        return PresentStrategy()
