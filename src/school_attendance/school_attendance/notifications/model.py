from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.enums import NotificationType, Priority, TargetType


@dataclass(frozen=True)
class NotificationTarget:
    """Who to notify. Group targets are resolved to student ids at send time."""

    target_type: TargetType
    target_id: Optional[str] = None
    subject_id: Optional[str] = None
    student_ids: tuple[str, ...] = ()

    @classmethod
    def individual(cls, student_id: str) -> "NotificationTarget":
        return cls(TargetType.INDIVIDUAL, target_id=student_id)

    @classmethod
    def students(cls, student_ids, *, class_id: Optional[str] = None) -> "NotificationTarget":
        return cls(TargetType.STUDENTS, target_id=class_id, student_ids=tuple(student_ids))


@dataclass(frozen=True)
class NotificationEventDraft:
    type: NotificationType
    title: str
    message: str
    target: NotificationTarget
    priority: Priority = Priority.MEDIUM
    created_by: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationEvent:
    """Persisted parent row; immutable after creation."""

    notification_id: int
    type: NotificationType
    title: str
    message: str
    target_type: TargetType
    target_id: Optional[str]
    priority: Priority
    created_by: Optional[str]
    entity_type: Optional[str]
    entity_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class NotificationRecipient:
    notification_id: int
    user_id: str
    is_read: bool = False
    is_deleted: bool = False
    read_at: Optional[datetime] = None


@dataclass(frozen=True)
class InboxItem:
    event: NotificationEvent
    is_read: bool
    read_at: Optional[datetime] = None


@dataclass(frozen=True)
class FanoutReport:
    notification_id: int
    sent: int
    failed: int
    failed_recipients: tuple[str, ...] = ()

    @property
    def attempted(self) -> int:
        return self.sent + self.failed

    def to_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "sent": self.sent,
            "failed": self.failed,
            "failed_recipients": list(self.failed_recipients),
        }
