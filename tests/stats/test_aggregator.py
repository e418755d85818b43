from __future__ import annotations

from datetime import date, datetime

import pytest

from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Trend
from src.school_attendance.school_attendance.core.exceptions import ValidationError
from src.school_attendance.school_attendance.stats import aggregator
from src.school_attendance.school_attendance.stats.model import QuizResult

P, L, A = AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.ABSENT


def _rec(i, status, student_id="s1", subject_id="math", day=1):
    return AttendanceRecord(
        attendance_id=i,
        student_id=student_id,
        class_id="c1",
        subject_id=subject_id,
        work_date=date(2026, 3, day),
        status=status,
        arrival_time=None,
        late_minutes=None,
        marked_by="t1",
        created_at=datetime(2026, 3, day, 16, 30),
    )


def test_late_counts_as_attended():
    stats = aggregator.summarize([_rec(1, P), _rec(2, P), _rec(3, L), _rec(4, A)])

    assert stats.total_days == 4
    assert (stats.present_days, stats.late_days, stats.absent_days) == (2, 1, 1)
    assert stats.attendance_rate == 75


def test_empty_history_has_zero_rate():
    stats = aggregator.summarize([])

    assert stats.total_days == 0
    assert stats.attendance_rate == 0


def test_rate_rounds_half_up():
    # 1/8 absent: 87.5 -> 88
    records = [_rec(i, P) for i in range(7)] + [_rec(8, A)]

    assert aggregator.summarize(records).attendance_rate == 88


def test_summarize_by_subject_is_same_fold_on_subsets():
    records = [
        _rec(1, P, subject_id="math"),
        _rec(2, A, subject_id="math"),
        _rec(3, L, subject_id="art"),
    ]

    by_subject = aggregator.summarize_by(records, key=lambda r: r.subject_id)

    assert by_subject["math"].attendance_rate == 50
    assert by_subject["art"].attendance_rate == 100
    assert sum(s.total_days for s in by_subject.values()) == 3


@pytest.mark.parametrize(
    "percentage, grade",
    [
        (100, "A+"),
        (90, "A+"),
        (89.6, "A+"),
        (89.5, "A+"),
        (89.4, "A"),
        (80, "A"),
        (79.4, "B+"),
        (70, "B+"),
        (60, "B"),
        (50, "C+"),
        (40, "C"),
        (39.4, "F"),
        (0, "F"),
    ],
)
def test_grade_for(percentage, grade):
    assert aggregator.grade_for(percentage) == grade


def _quiz(quiz_id, marks, total=20, subject_id="math", checked=True):
    return QuizResult(
        student_id="s1",
        quiz_id=quiz_id,
        subject_id=subject_id,
        total_marks=total,
        marks_obtained=marks,
        is_checked=checked,
    )


def test_quiz_summary_ignores_unchecked_results():
    stats = aggregator.summarize_quizzes([_quiz("q1", 18), _quiz("q2", 12), _quiz("q3", None, checked=False)])

    assert stats.total_quizzes == 3
    assert stats.checked_quizzes == 2
    assert stats.unchecked_quizzes == 1
    assert stats.total_marks == 30
    assert stats.total_possible == 40
    assert stats.percentage == 75
    assert stats.grade == "B+"


def test_quiz_summary_without_checked_results():
    stats = aggregator.summarize_quizzes([_quiz("q1", None, checked=False)])

    assert stats.percentage == 0
    assert stats.grade == "F"


def test_marks_outside_total_are_rejected():
    with pytest.raises(ValidationError):
        _quiz("q1", 21)
    with pytest.raises(ValidationError):
        _quiz("q1", -1)
    with pytest.raises(ValidationError):
        _quiz("q1", 5, total=0)


@pytest.mark.parametrize(
    "scores, trend",
    [
        ([], Trend.STABLE),
        ([40, 90], Trend.STABLE),
        ([50, 55, 70, 80], Trend.UP),
        ([80, 75, 60], Trend.DOWN),
        ([70, 72, 74, 71], Trend.STABLE),
    ],
)
def test_improvement_trend(scores, trend):
    assert aggregator.improvement_trend(scores) == trend


def test_evaluate_quizzes_uses_latest_checked_scores():
    results = [
        _quiz("q1", 10),
        _quiz("q2", 10),
        _quiz("q3", 12, subject_id="art"),
        _quiz("q4", 16),
        _quiz("q5", 18),
        _quiz("q6", 19),
        _quiz("q7", None, checked=False),
    ]

    evaluation = aggregator.evaluate_quizzes(results)

    assert evaluation.recent_percentages == (50, 60, 80, 90, 95)
    assert evaluation.trend == "up"
    assert set(evaluation.by_subject) == {"math", "art"}
    assert evaluation.to_dict()["overall"]["checked_quizzes"] == 6
