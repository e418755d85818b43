from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AffectedStudent
from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_INBOX_LIMIT
from ..core.enums import AttendanceStatus, NotificationType, Priority, TargetType
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .fanout import NotificationFanout
from .model import FanoutReport, InboxItem, NotificationEventDraft, NotificationTarget
from .repository import NotificationRepository
from .targets import TargetResolver

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        notifications: NotificationRepository,
        fanout: NotificationFanout,
        resolver: TargetResolver,
        *,
        clock: Clock = now_local,
    ):
        self._notifications = notifications
        self._fanout = fanout
        self._resolver = resolver
        self._clock = clock

    def publish(self, draft: NotificationEventDraft) -> FanoutReport:
        require_non_empty(draft.title, "Title")
        require_non_empty(draft.message, "Message")
        recipients = self._resolver.resolve(draft.target)
        return self._fanout.fanout(draft, recipients)

    # Attendance
    def send_attendance_alerts(
        self,
        *,
        class_id: str,
        subject_id: str,
        work_date: date,
        affected: Sequence[AffectedStudent],
        created_by: str,
    ) -> list[FanoutReport]:
        """One notification per status group: late students, then absent students.

        A group whose event cannot be stored is logged and skipped; the other
        group is still sent. Only the reports of stored groups are returned.
        """

        day = work_date.isoformat()
        groups = (
            (
                AttendanceStatus.LATE,
                "Late Attendance Alert",
                f"You were marked late on {day}. Please be punctual next time.",
                Priority.MEDIUM,
            ),
            (
                AttendanceStatus.ABSENT,
                "Absence Alert",
                f"You were marked absent on {day}. Please contact your instructor.",
                Priority.HIGH,
            ),
        )

        reports: list[FanoutReport] = []
        for status, title, message, priority in groups:
            student_ids = [a.student_id for a in affected if a.status == status]
            if not student_ids:
                continue
            try:
                reports.append(
                    self._attendance_alert(
                        status=status,
                        title=title,
                        message=message,
                        priority=priority,
                        student_ids=student_ids,
                        class_id=class_id,
                        subject_id=subject_id,
                        day=day,
                        created_by=created_by,
                    )
                )
            except DomainError:
                logger.exception(
                    "%s alert for class %s on %s not sent to %d students",
                    status.value,
                    class_id,
                    day,
                    len(student_ids),
                )

        failed = sum(r.failed for r in reports)
        if failed:
            logger.warning("Attendance alerts for class %s on %s: %d pushes failed", class_id, day, failed)
        return reports

    def _attendance_alert(
        self,
        *,
        status: AttendanceStatus,
        title: str,
        message: str,
        priority: Priority,
        student_ids: list[str],
        class_id: str,
        subject_id: str,
        day: str,
        created_by: str,
    ) -> FanoutReport:
        draft = NotificationEventDraft(
            type=NotificationType.ATTENDANCE_ALERT,
            title=title,
            message=message,
            target=NotificationTarget.students(student_ids, class_id=class_id),
            priority=priority,
            created_by=created_by,
            entity_type="attendance",
            entity_id=class_id,
            data={"status": status.value, "date": day, "classId": class_id, "subjectId": subject_id},
        )
        return self.publish(draft)

    # Other domain events
    def notify_quiz_added(
        self,
        *,
        class_id: str,
        quiz_id: str,
        quiz_title: str,
        scheduled_date: date,
        created_by: str,
        subject_id: Optional[str] = None,
    ) -> FanoutReport:
        if subject_id:
            target = NotificationTarget(TargetType.CLASS_SUBJECT, target_id=class_id, subject_id=subject_id)
        else:
            target = NotificationTarget(TargetType.CLASS, target_id=class_id)
        return self.publish(
            NotificationEventDraft(
                type=NotificationType.QUIZ_ADDED,
                title=f"{quiz_title} Scheduled",
                message=f"A new quiz has been scheduled for {scheduled_date.isoformat()}. Prepare well!",
                target=target,
                priority=Priority.HIGH,
                created_by=created_by,
                entity_type="quiz",
                entity_id=quiz_id,
            )
        )

    def notify_assignment_added(
        self,
        *,
        assignment_id: str,
        assignment_title: str,
        due_date: date,
        created_by: str,
        class_id: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> FanoutReport:
        """Whole class when ``class_id`` is given, otherwise the one student."""

        due = due_date.isoformat()
        if class_id:
            target = NotificationTarget(TargetType.CLASS, target_id=class_id)
            title = f"New Assignment: {assignment_title}"
            message = f"A new assignment has been added for your class. Due date: {due}."
        elif student_id:
            target = NotificationTarget.individual(student_id)
            title = f"Assignment: {assignment_title}"
            message = f"You have received a new assignment. Due date: {due}."
        else:
            raise ValidationError("Assignment notification needs a class or a student")

        return self.publish(
            NotificationEventDraft(
                type=NotificationType.ASSIGNMENT_ADDED,
                title=title,
                message=message,
                target=target,
                priority=Priority.MEDIUM,
                created_by=created_by,
                entity_type="assignment",
                entity_id=assignment_id,
                data={"assignmentId": assignment_id, "dueDate": due},
            )
        )

    def notify_quiz_graded(
        self,
        *,
        student_id: str,
        quiz_id: str,
        quiz_title: str,
        score: int,
        created_by: str,
    ) -> FanoutReport:
        return self.publish(
            NotificationEventDraft(
                type=NotificationType.QUIZ_GRADED,
                title="Quiz Graded",
                message=f'Your quiz "{quiz_title}" has been graded. Score: {score}%',
                target=NotificationTarget.individual(student_id),
                priority=Priority.MEDIUM,
                created_by=created_by,
                entity_type="quiz",
                entity_id=quiz_id,
            )
        )

    def notify_lecture_added(self, *, class_id: str, lecture_id: str, lecture_title: str, created_by: str) -> FanoutReport:
        return self.publish(
            NotificationEventDraft(
                type=NotificationType.LECTURE_ADDED,
                title=f"{lecture_title} Uploaded",
                message="A new lecture has been uploaded for your class. Check it out!",
                target=NotificationTarget(TargetType.CLASS, target_id=class_id),
                priority=Priority.MEDIUM,
                created_by=created_by,
                entity_type="lecture",
                entity_id=lecture_id,
            )
        )

    def notify_fee_update(
        self,
        *,
        student_ids: Iterable[str],
        title: str,
        message: str,
        created_by: str,
        fee_id: Optional[str] = None,
        priority: Priority = Priority.MEDIUM,
    ) -> FanoutReport:
        return self.publish(
            NotificationEventDraft(
                type=NotificationType.FEE_UPDATE,
                title=title,
                message=message,
                target=NotificationTarget.students(student_ids),
                priority=priority,
                created_by=created_by,
                entity_type="fee",
                entity_id=fee_id,
                data={"timestamp": self._clock().isoformat()},
            )
        )

    def notify_announcement(self, *, class_id: str, title: str, message: str, created_by: str) -> FanoutReport:
        return self.publish(
            NotificationEventDraft(
                type=NotificationType.ANNOUNCEMENT,
                title=title,
                message=message,
                target=NotificationTarget(TargetType.CLASS, target_id=class_id),
                priority=Priority.HIGH,
                created_by=created_by,
            )
        )

    # Recipient side
    def list_inbox(self, user_id: str, *, unread_only: bool = False, limit: int = DEFAULT_INBOX_LIMIT) -> list[InboxItem]:
        user_id = require_non_empty(user_id, "User")
        return list(self._notifications.list_inbox(user_id, unread_only=unread_only, limit=int(limit)))

    def unread_count(self, user_id: str) -> int:
        return self._notifications.count_unread(require_non_empty(user_id, "User"))

    def mark_read(self, notification_id: int, *, user_id: str) -> None:
        user_id = require_non_empty(user_id, "User")
        if not self._notifications.mark_read(notification_id=int(notification_id), user_id=user_id, read_at=self._clock()):
            raise NotFoundError(f"Notification {notification_id} not found for user {user_id}")

    def mark_all_read(self, *, user_id: str) -> int:
        return self._notifications.mark_all_read(user_id=require_non_empty(user_id, "User"), read_at=self._clock())

    def delete(self, notification_id: int, *, user_id: str) -> None:
        user_id = require_non_empty(user_id, "User")
        if not self._notifications.mark_deleted(notification_id=int(notification_id), user_id=user_id):
            raise NotFoundError(f"Notification {notification_id} not found for user {user_id}")
