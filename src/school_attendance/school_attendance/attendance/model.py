from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceDecision:
    """A classified mark for one student, as held in a draft."""

    status: AttendanceStatus
    arrival_time: Optional[time] = None
    late_minutes: Optional[int] = None


@dataclass(frozen=True)
class NewAttendanceRecord:
    """Row to be inserted by a posting (no id yet)."""

    student_id: str
    class_id: str
    subject_id: str
    work_date: date
    status: AttendanceStatus
    arrival_time: Optional[time]
    late_minutes: Optional[int]
    marked_by: str
    created_at: datetime


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one posted attendance row.

    Unique per (student_id, class_id, subject_id, work_date).
    """

    attendance_id: int
    student_id: str
    class_id: str
    subject_id: str
    work_date: date
    status: AttendanceStatus
    arrival_time: Optional[time]
    late_minutes: Optional[int]
    marked_by: str
    created_at: datetime


@dataclass(frozen=True)
class AttendanceSession:
    """Point-in-time rollup of one class/subject/date posting."""

    class_id: str
    subject_id: str
    work_date: date
    total_students: int
    present_count: int
    late_count: int
    absent_count: int
    posted_by: str
    posted_at: datetime

    @classmethod
    def from_records(cls, records: list[NewAttendanceRecord], *, posted_by: str, posted_at: datetime) -> "AttendanceSession":
        first = records[0]
        return cls(
            class_id=first.class_id,
            subject_id=first.subject_id,
            work_date=first.work_date,
            total_students=len(records),
            present_count=sum(1 for r in records if r.status == AttendanceStatus.PRESENT),
            late_count=sum(1 for r in records if r.status == AttendanceStatus.LATE),
            absent_count=sum(1 for r in records if r.status == AttendanceStatus.ABSENT),
            posted_by=posted_by,
            posted_at=posted_at,
        )


@dataclass(frozen=True)
class AffectedStudent:
    student_id: str
    status: AttendanceStatus
    late_minutes: Optional[int] = None


@dataclass(frozen=True)
class PostResult:
    posted_count: int
    session: AttendanceSession
    affected: tuple[AffectedStudent, ...] = field(default_factory=tuple)
