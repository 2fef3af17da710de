from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

from ..core.constants import DEFAULT_HALF_DAY_THRESHOLD_HOURS
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    half_day_threshold_hours: float = DEFAULT_HALF_DAY_THRESHOLD_HOURS

    @staticmethod
    def cutoff_for(today: date, late_cutoff: time) -> datetime:
        return datetime.combine(today, late_cutoff)

    def for_checkin(self, *, now: datetime, today: date, late_cutoff: time) -> AttendanceStrategy:
        if now <= self.cutoff_for(today, late_cutoff):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, work_hours: Decimal) -> AttendanceStrategy:
        if work_hours < Decimal(str(self.half_day_threshold_hours)):
            return HalfDayStrategy()
        return NormalStrategy()
