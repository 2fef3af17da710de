from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, cutoff: datetime) -> StatusDecision:
        late_minutes = int((now - cutoff).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late {late_minutes} min")

    def decide_checkout(self, *, work_hours: Decimal, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
