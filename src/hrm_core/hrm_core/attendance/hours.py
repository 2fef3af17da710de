from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..common.numbers import round2
from ..core.constants import DEFAULT_STANDARD_WORK_HOURS, MAX_WORK_HOURS
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class WorkedTime:
    work_hours: Decimal
    overtime_hours: Decimal


def worked_time(check_in: datetime, check_out: datetime, *, standard_hours=DEFAULT_STANDARD_WORK_HOURS) -> WorkedTime:
    """Hours between the two stamps, 2 decimals; overtime is whatever exceeds a standard day."""
    if check_out < check_in:
        raise ValidationError("check_out cannot be earlier than check_in", field="check_out")

    seconds = Decimal(str((check_out - check_in).total_seconds()))
    hours = round2(seconds / Decimal(3600))
    if hours > MAX_WORK_HOURS:
        raise ValidationError(f"A single attendance record cannot exceed {MAX_WORK_HOURS} hours", field="check_out")
    overtime = max(hours - Decimal(str(standard_hours)), Decimal("0"))
    return WorkedTime(work_hours=hours, overtime_hours=round2(overtime))
