from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class NotificationType(str, Enum):
    ATTENDANCE_ALERT = "attendance_alert"
    QUIZ_ADDED = "quiz_added"
    QUIZ_GRADED = "quiz_graded"
    LECTURE_ADDED = "lecture_added"
    ASSIGNMENT_ADDED = "assignment_added"
    TIMETABLE_CHANGED = "timetable_changed"
    FEE_UPDATE = "fee_update"
    ANNOUNCEMENT = "announcement"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TargetType(str, Enum):
    """Who a notification is addressed to, resolved to student ids at send time."""

    INDIVIDUAL = "individual"
    CLASS = "class"
    CLASS_SUBJECT = "class_subject"
    ALL_STUDENTS = "all_students"
    STUDENTS = "students"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
