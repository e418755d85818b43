from datetime import datetime, time

import pytest

from src.school_attendance.school_attendance.attendance.classifier import StatusClassifier, classify
from src.school_attendance.school_attendance.attendance.factory import AttendanceStrategyFactory
from src.school_attendance.school_attendance.attendance.strategies.absent_strategy import AbsentStrategy
from src.school_attendance.school_attendance.attendance.strategies.late_strategy import LateStrategy
from src.school_attendance.school_attendance.attendance.strategies.present_strategy import PresentStrategy
from src.school_attendance.school_attendance.core.enums import AttendanceStatus
from src.school_attendance.school_attendance.core.exceptions import ValidationError

START = time(16, 0)


def test_present_at_end_of_grace_stays_present():
    d = classify(AttendanceStatus.PRESENT, time(16, 15), START, 15)

    assert d.status == AttendanceStatus.PRESENT
    assert d.arrival_time == time(16, 15)
    assert d.late_minutes is None


def test_present_one_minute_after_grace_becomes_late():
    d = classify(AttendanceStatus.PRESENT, time(16, 16), START, 15)

    assert d.status == AttendanceStatus.LATE
    assert d.late_minutes == 16


def test_arrival_before_start_is_present():
    d = classify(AttendanceStatus.PRESENT, time(15, 59), START, 15)

    assert d.status == AttendanceStatus.PRESENT
    assert d.late_minutes is None


def test_seconds_are_ignored():
    d = classify(AttendanceStatus.PRESENT, time(16, 15, 59), START, 15)

    assert d.status == AttendanceStatus.PRESENT


def test_absent_ignores_arrival_time():
    d = classify(AttendanceStatus.ABSENT, time(16, 45), START, 15)

    assert d.status == AttendanceStatus.ABSENT
    assert d.arrival_time is None
    assert d.late_minutes is None


def test_declared_late_stays_late_even_inside_grace():
    d = classify(AttendanceStatus.LATE, time(16, 5), START, 15)

    assert d.status == AttendanceStatus.LATE
    assert d.late_minutes == 5


def test_declared_late_without_arrival_has_no_minutes():
    d = classify(AttendanceStatus.LATE, None, START, 15)

    assert d.status == AttendanceStatus.LATE
    assert d.arrival_time is None
    assert d.late_minutes is None


def test_present_without_arrival_uses_now():
    d = classify(AttendanceStatus.PRESENT, None, START, 15, now=datetime(2026, 3, 2, 16, 20, 30, 999))

    assert d.status == AttendanceStatus.LATE
    assert d.arrival_time == time(16, 20, 30)
    assert d.late_minutes == 20


def test_status_given_as_string_is_accepted():
    assert classify("present", time(16, 0), START, 15).status == AttendanceStatus.PRESENT


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        classify("excused", time(16, 0), START, 15)


def test_negative_grace_is_rejected():
    with pytest.raises(ValidationError):
        classify(AttendanceStatus.PRESENT, time(16, 0), START, -1)


def test_bound_classifier_reads_its_clock_only_when_needed():
    calls = []

    def clock():
        calls.append(1)
        return datetime(2026, 3, 2, 16, 10)

    c = StatusClassifier(class_start=START, grace_minutes=15, clock=clock)

    assert c.classify(AttendanceStatus.PRESENT, time(16, 30)).status == AttendanceStatus.LATE
    assert calls == []
    assert c.classify(AttendanceStatus.PRESENT).arrival_time == time(16, 10)
    assert calls == [1]


@pytest.mark.parametrize(
    "declared, delta, expected",
    [
        (AttendanceStatus.ABSENT, 30, AbsentStrategy),
        (AttendanceStatus.LATE, -5, LateStrategy),
        (AttendanceStatus.PRESENT, 15, PresentStrategy),
        (AttendanceStatus.PRESENT, 16, LateStrategy),
        (AttendanceStatus.PRESENT, None, PresentStrategy),
    ],
)
def test_factory_picks_strategy(declared, delta, expected):
    strategy = AttendanceStrategyFactory().for_mark(declared=declared, delta_minutes=delta, grace_minutes=15)

    assert isinstance(strategy, expected)
