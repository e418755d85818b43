from __future__ import annotations

import logging
from concurrent.futures import Executor
from datetime import date, time
from typing import Iterable, Optional, Protocol, Sequence

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_non_empty, require_status
from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyPostedError, NotFoundError, ValidationError
from .classifier import StatusClassifier
from .draft import AttendanceDraft
from .model import (
    AffectedStudent,
    AttendanceDecision,
    AttendanceRecord,
    AttendanceSession,
    NewAttendanceRecord,
    PostResult,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ALERT_STATUSES = frozenset({AttendanceStatus.LATE, AttendanceStatus.ABSENT})


class AttendanceAlertSink(Protocol):
    def send_attendance_alerts(
        self,
        *,
        class_id: str,
        subject_id: str,
        work_date: date,
        affected: Sequence[AffectedStudent],
        created_by: str,
    ) -> object:
        raise NotImplementedError


class PostingCoordinator:
    """Commits a day's attendance for one class/subject exactly once.

    The uniqueness guard below is a fast path only: two recorders posting the
    same (class, subject, date) at the same moment can both pass it. The
    unique keys on ``attendance`` and ``attendance_sessions`` are what
    actually reject the second batch (surfaced as AlreadyPostedError).

    Alerts for late/absent students run after the commit. They either run on
    ``executor`` (returning immediately) or inline; in both cases a failure is
    logged and never changes the posting result.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        alerts: Optional[AttendanceAlertSink] = None,
        executor: Optional[Executor] = None,
        clock: Clock = now_local,
    ):
        self._attendance = attendance
        self._alerts = alerts
        self._executor = executor
        self._clock = clock

    def post(
        self,
        *,
        class_id: str,
        subject_id: str,
        work_date: date,
        entries: Iterable[tuple[str, AttendanceDecision]],
        recorder_id: str,
    ) -> PostResult:
        class_id = require_non_empty(class_id, "Class")
        subject_id = require_non_empty(subject_id, "Subject")
        recorder_id = require_non_empty(recorder_id, "Recorder")
        if work_date is None:
            raise ValidationError("Date is required")

        # Later entries for the same student win, as in the draft.
        decisions = {require_non_empty(student_id, "Student"): d for student_id, d in entries}
        if not decisions:
            raise ValidationError("No attendance data to post")

        if self._attendance.exists_for_session(class_id=class_id, subject_id=subject_id, work_date=work_date):
            logger.warning("Attendance already posted: class=%s subject=%s date=%s", class_id, subject_id, work_date)
            raise AlreadyPostedError(class_id, subject_id, work_date)

        now = self._clock()
        records = [
            NewAttendanceRecord(
                student_id=student_id,
                class_id=class_id,
                subject_id=subject_id,
                work_date=work_date,
                status=d.status,
                arrival_time=None if d.status == AttendanceStatus.ABSENT else d.arrival_time,
                late_minutes=d.late_minutes if d.status == AttendanceStatus.LATE else None,
                marked_by=recorder_id,
                created_at=now,
            )
            for student_id, d in decisions.items()
        ]
        session = AttendanceSession.from_records(records, posted_by=recorder_id, posted_at=now)

        try:
            posted = self._attendance.insert_posting(records, session)
        except AlreadyPostedError:
            logger.warning(
                "Attendance posted concurrently: class=%s subject=%s date=%s", class_id, subject_id, work_date
            )
            raise

        logger.info(
            "Posted attendance: class=%s subject=%s date=%s count=%d (present=%d late=%d absent=%d)",
            class_id,
            subject_id,
            work_date,
            posted,
            session.present_count,
            session.late_count,
            session.absent_count,
        )

        affected = tuple(
            AffectedStudent(student_id=r.student_id, status=r.status, late_minutes=r.late_minutes)
            for r in records
            if r.status in ALERT_STATUSES
        )
        self._dispatch_alerts(
            class_id=class_id,
            subject_id=subject_id,
            work_date=work_date,
            affected=affected,
            created_by=recorder_id,
        )
        return PostResult(posted_count=posted, session=session, affected=affected)

    def post_draft(self, draft: AttendanceDraft, *, recorder_id: str) -> PostResult:
        """Post a draft; it is cleared only after a confirmed commit."""

        result = self.post(
            class_id=draft.class_id,
            subject_id=draft.subject_id,
            work_date=draft.work_date,
            entries=draft.entries(),
            recorder_id=recorder_id,
        )
        draft.clear()
        return result

    def _dispatch_alerts(self, *, affected: Sequence[AffectedStudent], **kwargs) -> None:
        if not affected or self._alerts is None:
            return

        if self._executor is None:
            self._run_alerts(affected=affected, **kwargs)
            return

        try:
            self._executor.submit(self._run_alerts, affected=affected, **kwargs)
        except RuntimeError:
            logger.error("Could not schedule attendance alerts for %d students", len(affected), exc_info=True)

    def _run_alerts(self, **kwargs) -> None:
        try:
            self._alerts.send_attendance_alerts(**kwargs)
        except Exception:
            logger.exception(
                "Attendance alerts failed: class=%s subject=%s date=%s",
                kwargs.get("class_id"),
                kwargs.get("subject_id"),
                kwargs.get("work_date"),
            )


class AttendanceService:
    """Draft creation, correction path and read-side queries."""

    def __init__(self, attendance: AttendanceRepository, classifier: StatusClassifier):
        self._attendance = attendance
        self._classifier = classifier

    def new_draft(self, *, class_id: str, subject_id: str, work_date: date) -> AttendanceDraft:
        return AttendanceDraft(
            class_id=class_id,
            subject_id=subject_id,
            work_date=work_date,
            classifier=self._classifier,
        )

    def is_posted(self, *, class_id: str, subject_id: str, work_date: date) -> bool:
        return self._attendance.exists_for_session(class_id=class_id, subject_id=subject_id, work_date=work_date)

    def get_session_records(self, *, class_id: str, subject_id: str, work_date: date) -> dict[str, AttendanceRecord]:
        rows = self._attendance.list_records(
            class_id=require_non_empty(class_id, "Class"),
            subject_id=require_non_empty(subject_id, "Subject"),
            start_date=work_date,
            end_date=work_date,
        )
        return {r.student_id: r for r in rows}

    def update_attendance(
        self,
        attendance_id: int,
        *,
        status: AttendanceStatus,
        arrival_time: Optional[time] = None,
        corrected_by: str,
    ) -> AttendanceRecord:
        corrected_by = require_non_empty(corrected_by, "Corrected by")
        status = require_status(status)

        existing = self._attendance.get_by_id(int(attendance_id))
        if not existing:
            raise NotFoundError(f"Attendance record {attendance_id} not found")

        if arrival_time is None:
            arrival_time = existing.arrival_time
        if arrival_time is None and status == AttendanceStatus.PRESENT:
            # A past day has no "now": keep present without an arrival time.
            decision = AttendanceDecision(status=AttendanceStatus.PRESENT)
        else:
            decision = self._classifier.classify(status, arrival_time)
        ok = self._attendance.update_record(
            attendance_id=existing.attendance_id,
            status=decision.status,
            arrival_time=decision.arrival_time,
            late_minutes=decision.late_minutes,
        )
        if not ok:
            raise NotFoundError(f"Attendance record {attendance_id} not found")

        logger.info(
            "Corrected attendance %s: %s -> %s by %s",
            existing.attendance_id,
            existing.status.value,
            decision.status.value,
            corrected_by,
        )
        updated = self._attendance.get_by_id(existing.attendance_id)
        return updated or existing
