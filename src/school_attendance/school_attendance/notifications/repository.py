from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import InboxItem, NotificationEventDraft, NotificationRecipient


class NotificationRepository(Protocol):
    def create_event(self, draft: NotificationEventDraft, user_ids: Sequence[str], *, created_at: datetime) -> int:
        """Insert the event plus one unread, undeleted row per user id, atomically.

        Raises StoreError when either write fails; nothing is left behind.
        """

        raise NotImplementedError

    def list_recipients(self, notification_id: int) -> Sequence[NotificationRecipient]:
        raise NotImplementedError

    def list_inbox(self, user_id: str, *, unread_only: bool = False, limit: int = 100) -> Sequence[InboxItem]:
        raise NotImplementedError

    def count_unread(self, user_id: str) -> int:
        raise NotImplementedError

    def mark_read(self, *, notification_id: int, user_id: str, read_at: datetime) -> bool:
        raise NotImplementedError

    def mark_all_read(self, *, user_id: str, read_at: datetime) -> int:
        raise NotImplementedError

    def mark_deleted(self, *, notification_id: int, user_id: str) -> bool:
        raise NotImplementedError


class RosterRepository(Protocol):
    """Read-only view of the roster, used to resolve group targets."""

    def list_student_ids(self, *, class_id: Optional[str] = None) -> Sequence[str]:
        raise NotImplementedError

    def list_enrolled_student_ids(self, *, class_id: str, subject_id: str) -> Sequence[str]:
        raise NotImplementedError
