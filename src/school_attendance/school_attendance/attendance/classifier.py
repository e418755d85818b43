from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import Clock, minutes_since_midnight, now_local
from ..common.validators import require_non_negative, require_status
from ..core.enums import AttendanceStatus
from .factory import AttendanceStrategyFactory
from .model import AttendanceDecision

_factory = AttendanceStrategyFactory()


def classify(
    declared: AttendanceStatus,
    arrival_time: Optional[time],
    class_start: time,
    grace_minutes: int,
    *,
    now: Optional[datetime] = None,
) -> AttendanceDecision:
    """Turn a recorder's mark into a final status and lateness.

    - absent ignores arrival_time entirely.
    - present without arrival_time arrives at ``now`` (defaults to the local clock).
    - arrival more than ``grace_minutes`` after ``class_start`` becomes late.
    """

    declared = require_status(declared)
    grace_minutes = require_non_negative(grace_minutes, "Grace minutes")

    if declared == AttendanceStatus.ABSENT:
        strategy = _factory.for_mark(declared=declared, delta_minutes=None, grace_minutes=grace_minutes)
        return AttendanceDecision(status=strategy.decide(delta_minutes=None, grace_minutes=grace_minutes).status)

    if arrival_time is None and declared == AttendanceStatus.PRESENT:
        arrival_time = (now or now_local()).time().replace(microsecond=0)

    delta = None
    if arrival_time is not None:
        delta = minutes_since_midnight(arrival_time) - minutes_since_midnight(class_start)

    strategy = _factory.for_mark(declared=declared, delta_minutes=delta, grace_minutes=grace_minutes)
    decision = strategy.decide(delta_minutes=delta, grace_minutes=grace_minutes)
    return AttendanceDecision(status=decision.status, arrival_time=arrival_time, late_minutes=decision.late_minutes)


class StatusClassifier:
    """classify() bound to one class schedule and clock."""

    def __init__(self, *, class_start: time, grace_minutes: int, clock: Clock = now_local):
        self._class_start = class_start
        self._grace_minutes = require_non_negative(grace_minutes, "Grace minutes")
        self._clock = clock

    @property
    def class_start(self) -> time:
        return self._class_start

    @property
    def grace_minutes(self) -> int:
        return self._grace_minutes

    def classify(self, declared: AttendanceStatus, arrival_time: Optional[time] = None) -> AttendanceDecision:
        now = self._clock() if arrival_time is None else None
        return classify(declared, arrival_time, self._class_start, self._grace_minutes, now=now)
