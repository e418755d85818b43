from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from ..common.datetime_utils import Clock, now_local
from ..core.constants import DEFAULT_FANOUT_WORKERS
from ..core.exceptions import ValidationError
from .channel import PushChannel
from .model import FanoutReport, NotificationEventDraft
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


def unique_ids(ids: Iterable[str]) -> list[str]:
    """Drop blanks and duplicates, keeping first-seen order."""
    return list(dict.fromkeys(str(i).strip() for i in ids if i is not None and str(i).strip()))


class NotificationFanout:
    """Deliver one notification to many students, tracking each independently.

    The event row and the recipient rows are the source of truth a student
    sees in-app; they are written first, in one transaction, and never
    rolled back because a push failed. If that write fails no push is sent.
    Each delivery attempt is isolated: a failure is counted and the loop
    moves on. With ``max_workers`` > 1 deliveries run on a bounded pool
    and the report is built only after every attempt has finished.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        channel: PushChannel,
        *,
        max_workers: int = DEFAULT_FANOUT_WORKERS,
        clock: Clock = now_local,
    ):
        if int(max_workers) < 1:
            raise ValidationError("max_workers must be >= 1")
        self._notifications = notifications
        self._channel = channel
        self._max_workers = int(max_workers)
        self._clock = clock

    def fanout(self, event: NotificationEventDraft, recipient_ids: Iterable[str]) -> FanoutReport:
        recipients = unique_ids(recipient_ids)

        notification_id = self._notifications.create_event(event, recipients, created_at=self._clock())

        if self._max_workers == 1 or len(recipients) <= 1:
            outcomes = [self._attempt(notification_id, event, user_id) for user_id in recipients]
        else:
            workers = min(self._max_workers, len(recipients))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as pool:
                outcomes = list(pool.map(lambda uid: self._attempt(notification_id, event, uid), recipients))

        failed = tuple(uid for uid, ok in zip(recipients, outcomes) if not ok)
        report = FanoutReport(
            notification_id=notification_id,
            sent=len(recipients) - len(failed),
            failed=len(failed),
            failed_recipients=failed,
        )
        logger.info(
            "Notification %s (%s) fanned out: sent=%d failed=%d",
            notification_id,
            event.type.value,
            report.sent,
            report.failed,
        )
        return report

    def _attempt(self, notification_id: int, event: NotificationEventDraft, user_id: str) -> bool:
        try:
            ok = bool(self._channel.deliver(user_id, event.title, event.message, self._payload(notification_id, event, user_id)))
        except Exception as e:
            logger.warning("Push to %s for notification %s failed: %s", user_id, notification_id, e)
            return False
        if not ok:
            logger.warning("Push to %s for notification %s was not delivered", user_id, notification_id)
        return ok

    @staticmethod
    def _payload(notification_id: int, event: NotificationEventDraft, user_id: str) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": event.type.value,
            "notificationId": notification_id,
            "priority": event.priority.value,
            "targetType": event.target.target_type.value,
        }
        if event.entity_type:
            data["entityType"] = event.entity_type
        if event.entity_id:
            data["entityId"] = event.entity_id
        data.update(event.data)
        data["studentId"] = user_id
        return data
