from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Short day on checkout; overrides whatever check-in decided.

    Check-out only: the factory never picks it at check-in.
    """

    def decide_checkin(self, *, now: datetime, cutoff: datetime) -> StatusDecision:
        raise NotImplementedError("HalfDayStrategy only decides check-out")

    def decide_checkout(self, *, work_hours: Decimal, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)
