from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import NotificationType, Priority, TargetType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, store_errors
from .model import InboxItem, NotificationEvent, NotificationEventDraft, NotificationRecipient
from .repository import NotificationRepository


def _to_event(r: dict) -> NotificationEvent:
    return NotificationEvent(
        notification_id=int(r["notification_id"]),
        type=NotificationType(r["type"]),
        title=r["title"],
        message=r["message"],
        target_type=TargetType(r["target_type"]),
        target_id=r.get("target_id"),
        priority=Priority(r["priority"]),
        created_by=r.get("created_by"),
        entity_type=r.get("entity_type"),
        entity_id=r.get("entity_id"),
        created_at=r["created_at"],
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_event(self, draft: NotificationEventDraft, user_ids: Sequence[str], *, created_at: datetime) -> int:
        """Insert the event and its recipient rows in one transaction."""

        with store_errors("create notification"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(
                    type, title, message, entity_type, entity_id,
                    target_type, target_id, priority, created_by, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    draft.type.value,
                    draft.title,
                    draft.message,
                    draft.entity_type,
                    draft.entity_id,
                    draft.target.target_type.value,
                    draft.target.target_id,
                    draft.priority.value,
                    draft.created_by,
                    created_at,
                ),
            )
            notification_id = int(cur.lastrowid)
            if user_ids:
                cur.executemany(
                    """
                    INSERT INTO notification_recipients(notification_id, user_id, is_read, is_deleted)
                    VALUES(%s,%s,0,0)
                    """,
                    [(notification_id, uid) for uid in user_ids],
                )
            return notification_id

    def list_recipients(self, notification_id: int) -> Sequence[NotificationRecipient]:
        with store_errors("list notification recipients"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT notification_id, user_id, is_read, is_deleted, read_at
                FROM notification_recipients
                WHERE notification_id=%s
                ORDER BY recipient_id ASC
                """,
                (int(notification_id),),
            )
            return [
                NotificationRecipient(
                    notification_id=int(r["notification_id"]),
                    user_id=str(r["user_id"]),
                    is_read=bool(r["is_read"]),
                    is_deleted=bool(r["is_deleted"]),
                    read_at=r.get("read_at"),
                )
                for r in fetchall(cur)
            ]

    def list_inbox(self, user_id: str, *, unread_only: bool = False, limit: int = 100) -> Sequence[InboxItem]:
        unread_clause = "AND nr.is_read=0" if unread_only else ""
        with store_errors("list inbox"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    n.notification_id, n.type, n.title, n.message, n.entity_type, n.entity_id,
                    n.target_type, n.target_id, n.priority, n.created_by, n.created_at,
                    nr.is_read, nr.read_at
                FROM notification_recipients nr
                JOIN notifications n ON n.notification_id = nr.notification_id
                WHERE nr.user_id=%s AND nr.is_deleted=0 {unread_clause}
                ORDER BY n.created_at DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [
                InboxItem(event=_to_event(r), is_read=bool(r["is_read"]), read_at=r.get("read_at"))
                for r in fetchall(cur)
            ]

    def count_unread(self, user_id: str) -> int:
        with store_errors("count unread"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM notification_recipients
                WHERE user_id=%s AND is_read=0 AND is_deleted=0
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def mark_read(self, *, notification_id: int, user_id: str, read_at: datetime) -> bool:
        with store_errors("mark notification read"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notification_recipients
                SET is_read=1, read_at=COALESCE(read_at, %s)
                WHERE notification_id=%s AND user_id=%s AND is_deleted=0
                """,
                (read_at, int(notification_id), user_id),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when the row was already read.
            cur.execute(
                """
                SELECT 1 AS found FROM notification_recipients
                WHERE notification_id=%s AND user_id=%s AND is_deleted=0
                """,
                (int(notification_id), user_id),
            )
            return fetchone(cur) is not None

    def mark_all_read(self, *, user_id: str, read_at: datetime) -> int:
        with store_errors("mark all notifications read"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notification_recipients
                SET is_read=1, read_at=%s
                WHERE user_id=%s AND is_read=0 AND is_deleted=0
                """,
                (read_at, user_id),
            )
            return int(cur.rowcount)

    def mark_deleted(self, *, notification_id: int, user_id: str) -> bool:
        with store_errors("delete notification"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notification_recipients
                SET is_deleted=1
                WHERE notification_id=%s AND user_id=%s AND is_deleted=0
                """,
                (int(notification_id), user_id),
            )
            return cur.rowcount > 0
