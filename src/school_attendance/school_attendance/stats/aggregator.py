"""Pure folds over historical records.

Nothing here caches counters: every summary is re-derived from the records
it is given, so subject/class/student breakdowns are the same fold applied
to a filtered subsequence.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Hashable, Iterable, Sequence, TypeVar

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import round_half_up
from ..core.constants import (
    FAILING_GRADE,
    GRADE_BOUNDARIES,
    RECENT_GRADES_WINDOW,
    TREND_BAND_POINTS,
    TREND_MIN_SAMPLES,
)
from ..core.enums import AttendanceStatus, Trend
from .model import AttendanceStats, QuizEvaluation, QuizResult, QuizStats

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def summarize(records: Iterable[AttendanceRecord]) -> AttendanceStats:
    total = present = late = absent = 0
    for r in records:
        total += 1
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        elif r.status == AttendanceStatus.LATE:
            late += 1
        elif r.status == AttendanceStatus.ABSENT:
            absent += 1

    rate = round_half_up(100 * (present + late) / total) if total else 0
    return AttendanceStats(
        total_days=total,
        present_days=present,
        late_days=late,
        absent_days=absent,
        attendance_rate=rate,
    )


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    groups: dict[K, list[T]] = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return dict(groups)


def summarize_by(records: Iterable[AttendanceRecord], key: Callable[[AttendanceRecord], K]) -> dict[K, AttendanceStats]:
    return {k: summarize(rs) for k, rs in group_by(records, key).items()}


def grade_for(percentage: float) -> str:
    """Letter grade for a percentage; the percentage is rounded before lookup (89.6 -> 90 -> A+)."""
    rounded = round_half_up(percentage)
    for floor, grade in GRADE_BOUNDARIES:
        if rounded >= floor:
            return grade
    return FAILING_GRADE


def summarize_quizzes(results: Iterable[QuizResult]) -> QuizStats:
    results = list(results)
    checked = [r for r in results if r.is_checked and r.marks_obtained is not None]
    total_marks = sum(r.marks_obtained for r in checked)
    total_possible = sum(r.total_marks for r in checked)
    percentage = round_half_up(total_marks / total_possible * 100) if total_possible > 0 else 0

    return QuizStats(
        total_quizzes=len(results),
        checked_quizzes=len(checked),
        unchecked_quizzes=len(results) - len(checked),
        total_marks=total_marks,
        total_possible=total_possible,
        percentage=percentage,
        grade=grade_for(percentage),
    )


def summarize_quizzes_by(results: Iterable[QuizResult], key: Callable[[QuizResult], K]) -> dict[K, QuizStats]:
    return {k: summarize_quizzes(rs) for k, rs in group_by(results, key).items()}


def improvement_trend(percentages: Sequence[float]) -> Trend:
    """Compare the later half of recent scores against the earlier half.

    Scores are ordered oldest first. Fewer than three scores is always stable.
    """

    if len(percentages) < TREND_MIN_SAMPLES:
        return Trend.STABLE

    mid = len(percentages) // 2
    first, second = percentages[:mid], percentages[mid:]
    first_avg = sum(first) / len(first)
    second_avg = sum(second) / len(second)

    if second_avg > first_avg + TREND_BAND_POINTS:
        return Trend.UP
    if second_avg < first_avg - TREND_BAND_POINTS:
        return Trend.DOWN
    return Trend.STABLE


def evaluate_quizzes(results: Sequence[QuizResult]) -> QuizEvaluation:
    """Overall and per-subject quiz stats plus the trend of the latest checked scores.

    ``results`` must be ordered oldest first.
    """

    checked = [r for r in results if r.is_checked and r.marks_obtained is not None]
    recent = tuple(round_half_up(r.marks_obtained / r.total_marks * 100) for r in checked[-RECENT_GRADES_WINDOW:])
    return QuizEvaluation(
        overall=summarize_quizzes(results),
        by_subject=summarize_quizzes_by(results, key=lambda r: r.subject_id),
        recent_percentages=recent,
        trend=improvement_trend(recent).value,
    )
