from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceSession, NewAttendanceRecord


class AttendanceRepository(Protocol):
    def exists_for_session(self, *, class_id: str, subject_id: str, work_date: date) -> bool:
        raise NotImplementedError

    def insert_posting(self, records: Sequence[NewAttendanceRecord], session: AttendanceSession) -> int:
        """Insert all rows plus the session rollup in one transaction.

        Either everything lands or nothing does. Raises AlreadyPostedError on a
        unique-key conflict and StoreError on any other failure.
        """

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        class_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        student_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def update_record(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        arrival_time: Optional[time],
        late_minutes: Optional[int],
    ) -> bool:
        """Correction path: single-row update, never an insert."""

        raise NotImplementedError

    def list_sessions(
        self,
        *,
        class_id: str,
        subject_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSession]:
        raise NotImplementedError
