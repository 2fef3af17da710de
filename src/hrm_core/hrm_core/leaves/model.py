from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Thực thể miền (domain): Đơn xin nghỉ phép."""

    leave_id: int
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    approved_by: Optional[str] = None
    comments: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING

    def with_changes(self, **changes) -> "LeaveRequest":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.leave_id,
            "employee": self.employee_id,
            "leave_type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.days,
            "reason": self.reason,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "comments": self.comments,
        }
