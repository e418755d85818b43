from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import time
from typing import Any, Optional

from .attendance.classifier import StatusClassifier
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService, PostingCoordinator
from .common.datetime_utils import Clock, now_local, parse_clock_time
from .core.constants import DEFAULT_CLASS_START_TIME, DEFAULT_FANOUT_WORKERS, DEFAULT_LATE_GRACE_MINUTES
from .database.connection import DatabaseConnection, DBConfig
from .notifications.channel import LoggingPushChannel, PushChannel
from .notifications.fanout import NotificationFanout
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.mysql_roster_repository import MySQLRosterRepository
from .notifications.repository import NotificationRepository, RosterRepository
from .notifications.service import NotificationService
from .notifications.targets import TargetResolver
from .stats.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    notifications_repo: NotificationRepository
    roster_repo: RosterRepository

    classifier: StatusClassifier
    attendance_service: AttendanceService
    posting_coordinator: PostingCoordinator
    notification_service: NotificationService
    report_service: AttendanceReportService

    conn: Optional[DatabaseConnection] = None
    alert_executor: Optional[ThreadPoolExecutor] = None

    def shutdown(self) -> None:
        if self.alert_executor is not None:
            self.alert_executor.shutdown(wait=True)


def wire(
    *,
    attendance_repo: AttendanceRepository,
    notifications_repo: NotificationRepository,
    roster_repo: RosterRepository,
    channel: PushChannel,
    class_start: time = DEFAULT_CLASS_START_TIME,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    fanout_workers: int = DEFAULT_FANOUT_WORKERS,
    notify_in_background: bool = False,
    clock: Clock = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    classifier = StatusClassifier(class_start=class_start, grace_minutes=grace_minutes, clock=clock)
    fanout = NotificationFanout(notifications_repo, channel, max_workers=fanout_workers, clock=clock)
    notification_service = NotificationService(notifications_repo, fanout, TargetResolver(roster_repo), clock=clock)

    alert_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="alerts") if notify_in_background else None
    posting_coordinator = PostingCoordinator(
        attendance_repo,
        alerts=notification_service,
        executor=alert_executor,
        clock=clock,
    )

    return Container(
        attendance_repo=attendance_repo,
        notifications_repo=notifications_repo,
        roster_repo=roster_repo,
        classifier=classifier,
        attendance_service=AttendanceService(attendance_repo, classifier),
        posting_coordinator=posting_coordinator,
        notification_service=notification_service,
        report_service=AttendanceReportService(attendance_repo),
        conn=conn,
        alert_executor=alert_executor,
    )


def build_container(*, settings: Any, channel: Optional[PushChannel] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))

    return wire(
        attendance_repo=MySQLAttendanceRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        channel=channel or LoggingPushChannel(),
        class_start=parse_clock_time(str(getattr(settings, "CLASS_START_TIME", "16:00"))),
        grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
        fanout_workers=int(getattr(settings, "FANOUT_WORKERS", DEFAULT_FANOUT_WORKERS)),
        notify_in_background=bool(getattr(settings, "NOTIFY_IN_BACKGROUND", False)),
        conn=conn,
    )
