from __future__ import annotations

from ..core.enums import TargetType
from ..core.exceptions import ValidationError
from .model import NotificationTarget
from .repository import RosterRepository


class TargetResolver:
    """Resolve a NotificationTarget into the student ids to notify right now."""

    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def resolve(self, target: NotificationTarget) -> list[str]:
        t = TargetType(target.target_type)

        if t == TargetType.INDIVIDUAL:
            if not target.target_id:
                raise ValidationError("Individual notification needs a target student")
            return [target.target_id]

        if t == TargetType.STUDENTS:
            return list(target.student_ids)

        if t == TargetType.CLASS:
            if not target.target_id:
                raise ValidationError("Class notification needs a class")
            return list(self._roster.list_student_ids(class_id=target.target_id))

        if t == TargetType.CLASS_SUBJECT:
            if not target.target_id or not target.subject_id:
                raise ValidationError("Class/subject notification needs a class and a subject")
            return list(self._roster.list_enrolled_student_ids(class_id=target.target_id, subject_id=target.subject_id))

        return list(self._roster.list_student_ids())
