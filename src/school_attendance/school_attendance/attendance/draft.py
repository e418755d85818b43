from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus
from .classifier import StatusClassifier
from .model import AttendanceDecision


class AttendanceDraft:
    """Unposted marks for one recorder session on one (class, subject, date).

    Purely in memory. Marking a student again replaces the earlier mark.
    """

    def __init__(self, *, class_id: str, subject_id: str, work_date: date, classifier: StatusClassifier):
        self.class_id = require_non_empty(class_id, "Class")
        self.subject_id = require_non_empty(subject_id, "Subject")
        self.work_date = work_date
        self._classifier = classifier
        self._decisions: dict[str, AttendanceDecision] = {}

    def set_status(self, student_id: str, status: AttendanceStatus, arrival_time: Optional[time] = None) -> AttendanceDecision:
        student_id = require_non_empty(student_id, "Student")
        decision = self._classifier.classify(status, arrival_time)
        self._decisions[student_id] = decision
        return decision

    def get(self, student_id: str) -> Optional[AttendanceDecision]:
        return self._decisions.get(student_id)

    def remove(self, student_id: str) -> None:
        self._decisions.pop(student_id, None)

    def clear(self) -> None:
        self._decisions.clear()

    def entries(self) -> list[tuple[str, AttendanceDecision]]:
        return list(self._decisions.items())

    def __len__(self) -> int:
        return len(self._decisions)

    def __bool__(self) -> bool:
        return bool(self._decisions)
