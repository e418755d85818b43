from datetime import date, datetime, time

import pytest

from src.school_attendance.school_attendance.attendance.classifier import StatusClassifier
from src.school_attendance.school_attendance.attendance.draft import AttendanceDraft
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.core.exceptions import ValidationError


def _draft():
    classifier = StatusClassifier(class_start=time(16, 0), grace_minutes=15, clock=lambda: datetime(2026, 3, 2, 16, 0))
    return AttendanceDraft(class_id="c1", subject_id="math", work_date=date(2026, 3, 2), classifier=classifier)


def test_set_status_classifies_immediately():
    draft = _draft()

    decision = draft.set_status("s1", AttendanceStatus.PRESENT, time(16, 20))

    assert decision.status == AttendanceStatus.LATE
    assert draft.get("s1") == decision


def test_last_write_wins():
    draft = _draft()
    draft.set_status("s1", AttendanceStatus.ABSENT)
    draft.set_status("s1", AttendanceStatus.PRESENT, time(16, 1))

    assert len(draft) == 1
    assert draft.get("s1").status == AttendanceStatus.PRESENT


def test_remove_and_clear():
    draft = _draft()
    draft.set_status("s1", AttendanceStatus.ABSENT)
    draft.set_status("s2", AttendanceStatus.ABSENT)

    draft.remove("s1")
    draft.remove("missing")
    assert [sid for sid, _ in draft.entries()] == ["s2"]

    draft.clear()
    assert not draft
    assert draft.get("s2") is None


def test_blank_student_is_rejected():
    with pytest.raises(ValidationError):
        _draft().set_status("  ", AttendanceStatus.PRESENT)


def test_draft_needs_class_and_subject():
    classifier = StatusClassifier(class_start=time(16, 0), grace_minutes=15)
    with pytest.raises(ValidationError):
        AttendanceDraft(class_id="", subject_id="math", work_date=date(2026, 3, 2), classifier=classifier)
