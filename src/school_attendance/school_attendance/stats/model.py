from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from ..common.validators import require_marks_in_range, require_non_empty


@dataclass(frozen=True)
class AttendanceStats:
    total_days: int
    present_days: int
    late_days: int
    absent_days: int
    attendance_rate: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class QuizResult:
    """One student's result on a quiz-style assessment.

    marks_obtained is None until the result is checked (or when the student
    was absent).
    """

    student_id: str
    quiz_id: str
    subject_id: str
    total_marks: float
    marks_obtained: Optional[float] = None
    is_checked: bool = False

    def __post_init__(self):
        require_non_empty(self.student_id, "Student")
        require_marks_in_range(self.marks_obtained, self.total_marks)


@dataclass(frozen=True)
class QuizStats:
    total_quizzes: int
    checked_quizzes: int
    unchecked_quizzes: int
    total_marks: float
    total_possible: float
    percentage: int
    grade: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class QuizEvaluation:
    overall: QuizStats
    by_subject: dict
    recent_percentages: tuple
    trend: str

    def to_dict(self) -> dict:
        return {
            "overall": self.overall.to_dict(),
            "by_subject": {k: v.to_dict() for k, v in self.by_subject.items()},
            "recent_percentages": list(self.recent_percentages),
            "trend": self.trend,
        }
