from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.validators import require_non_empty
from ..core.exceptions import ValidationError
from . import aggregator
from .model import AttendanceStats


@dataclass(frozen=True)
class ReportData:
    summary: AttendanceStats
    by_student: dict[str, AttendanceStats] = field(default_factory=dict)
    by_subject: dict[str, AttendanceStats] = field(default_factory=dict)
    sessions: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "by_student": {k: v.to_dict() for k, v in self.by_student.items()},
            "by_subject": {k: v.to_dict() for k, v in self.by_subject.items()},
            "sessions": self.sessions,
        }


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    @staticmethod
    def _check_range(start: Optional[date], end: Optional[date]) -> None:
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")

    def student_report(
        self,
        *,
        student_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        subject_id: Optional[str] = None,
    ) -> ReportData:
        self._check_range(start, end)
        records = self._attendance.list_records(
            student_id=require_non_empty(student_id, "Student"),
            subject_id=subject_id,
            start_date=start,
            end_date=end,
        )
        return ReportData(
            summary=aggregator.summarize(records),
            by_subject=aggregator.summarize_by(records, key=lambda r: r.subject_id),
        )

    def class_report(
        self,
        *,
        class_id: str,
        subject_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> ReportData:
        self._check_range(start, end)
        class_id = require_non_empty(class_id, "Class")
        records = self._attendance.list_records(
            class_id=class_id,
            subject_id=subject_id,
            start_date=start,
            end_date=end,
        )
        sessions = self._attendance.list_sessions(
            class_id=class_id,
            subject_id=subject_id,
            start_date=start,
            end_date=end,
        )
        return ReportData(
            summary=aggregator.summarize(records),
            by_student=aggregator.summarize_by(records, key=lambda r: r.student_id),
            by_subject=aggregator.summarize_by(records, key=lambda r: r.subject_id),
            sessions=[
                {
                    "class_id": s.class_id,
                    "subject_id": s.subject_id,
                    "date": s.work_date.strftime("%Y-%m-%d"),
                    "total_students": s.total_students,
                    "present_count": s.present_count,
                    "late_count": s.late_count,
                    "absent_count": s.absent_count,
                    "posted_by": s.posted_by,
                    "posted_at": s.posted_at.isoformat(),
                }
                for s in sessions
            ],
        )
