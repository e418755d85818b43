from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: Optional[int] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(self, *, delta_minutes: Optional[int], grace_minutes: int) -> StatusDecision:
        """delta_minutes is arrival minus class start, None when there is no arrival."""
        raise NotImplementedError
