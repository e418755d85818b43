from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_non_negative(value: int, field_name: str) -> int:
    if value is None or int(value) < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return int(value)


def require_marks_in_range(marks: Optional[float], total_marks: float) -> Optional[float]:
    if total_marks is None or total_marks <= 0:
        raise ValidationError("Total marks must be greater than 0")
    if marks is None:
        return None
    if marks < 0 or marks > total_marks:
        raise ValidationError(f"Marks must be between 0 and {total_marks}")
    return marks


def require_status(value) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")
