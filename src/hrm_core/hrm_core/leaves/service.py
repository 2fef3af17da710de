from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..audit.logger import AuditLogger
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_enum, require_non_empty
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .calculator import leave_days
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

_DATE_FIELDS = ("start_date", "end_date")


def _checked_range(start: date, end: date) -> int:
    if end < start:
        raise ValidationError("end_date must be on or after start_date", field="end_date")
    return leave_days(start, end)


class LeaveService:
    """Leave requests: pending -> approved | rejected.

    The day count is derived from the date range. It is recomputed while the
    request is pending; once decided, only admin/hr may move the dates.
    """

    def __init__(self, leaves: LeaveRepository, *, audit: Optional[AuditLogger] = None):
        self._leaves = leaves
        self._audit = audit

    def _record_audit(
        self,
        *,
        actor_id: str,
        actor_role: Optional[Role],
        action: str,
        leave: LeaveRequest,
        metadata: Optional[dict] = None,
    ) -> None:
        if not self._audit:
            return
        data = {"employee": leave.employee_id, "status": leave.status.value, "days": leave.days}
        data.update(metadata or {})
        self._audit.record(
            actor_id=actor_id,
            actor_role=actor_role,
            action=action,
            target_type="leave",
            target_id=leave.leave_id,
            metadata=data,
        )

    def get(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFoundError("Leave not found")
        return leave

    def create(
        self,
        payload: dict,
        *,
        actor_id: str,
        actor_role: Role,
        actor_employee_id: Optional[str] = None,
    ) -> LeaveRequest:
        if actor_role == Role.EMPLOYEE:
            employee_id = require_non_empty(actor_employee_id, "employee_id")
        else:
            employee_id = require_non_empty(
                payload.get("employee_id") or payload.get("employee") or actor_employee_id, "employee_id"
            )

        start = parse_iso_date(payload.get("start_date"), "start_date")
        end = parse_iso_date(payload.get("end_date"), "end_date")
        leave = LeaveRequest(
            leave_id=0,
            employee_id=employee_id,
            leave_type=require_enum(LeaveType, payload.get("leave_type"), "leave_type"),
            start_date=start,
            end_date=end,
            days=_checked_range(start, end),
            reason=require_non_empty(payload.get("reason"), "reason"),
        )
        leave = leave.with_changes(leave_id=self._leaves.create(leave))

        logger.info("Leave %s created for employee %s: %s day(s)", leave.leave_id, employee_id, leave.days)
        self._record_audit(actor_id=actor_id, actor_role=actor_role, action="create", leave=leave)
        return leave

    def update(
        self,
        leave_id: int,
        payload: dict,
        *,
        actor_id: str,
        actor_role: Role,
        actor_employee_id: Optional[str] = None,
    ) -> LeaveRequest:
        current = self.get(leave_id)
        privileged = actor_role.is_privileged

        if not privileged:
            if current.employee_id != str(actor_employee_id):
                raise AuthorizationError("Access denied")
            if not current.is_pending:
                raise ValidationError("Only pending leave requests can be updated", field="status")

        touches_dates = any(name in payload for name in _DATE_FIELDS)
        if touches_dates and not current.is_pending and not privileged:
            raise ValidationError("Dates of a decided leave request cannot be changed", field="start_date")

        changes: dict = {}
        if "leave_type" in payload:
            changes["leave_type"] = require_enum(LeaveType, payload["leave_type"], "leave_type")
        if "reason" in payload:
            changes["reason"] = require_non_empty(payload["reason"], "reason")
        if "comments" in payload:
            changes["comments"] = payload["comments"]

        if touches_dates:
            start = parse_iso_date(payload["start_date"], "start_date") if "start_date" in payload else current.start_date
            end = parse_iso_date(payload["end_date"], "end_date") if "end_date" in payload else current.end_date
            changes.update(start_date=start, end_date=end, days=_checked_range(start, end))

        updated = current.with_changes(**changes)
        if not self._leaves.update(updated):
            raise NotFoundError("Leave not found")

        metadata = None
        if touches_dates and not current.is_pending:
            logger.warning(
                "Leave %s (%s) dates changed by %s: %s -> %s day(s)",
                current.leave_id,
                current.status.value,
                actor_id,
                current.days,
                updated.days,
            )
            metadata = {
                "old": {
                    "start_date": current.start_date.isoformat(),
                    "end_date": current.end_date.isoformat(),
                    "days": current.days,
                },
                "new": {
                    "start_date": updated.start_date.isoformat(),
                    "end_date": updated.end_date.isoformat(),
                    "days": updated.days,
                },
            }
        self._record_audit(actor_id=actor_id, actor_role=actor_role, action="update", leave=updated, metadata=metadata)
        return updated

    def _decide(
        self,
        leave_id: int,
        status: LeaveStatus,
        *,
        actor_id: str,
        actor_role: Role,
        comments: Optional[str],
    ) -> LeaveRequest:
        if not actor_role.is_privileged:
            raise AuthorizationError("Access denied")

        current = self.get(leave_id)
        if not current.is_pending:
            raise ValidationError(f"Leave request is already {current.status.value}", field="status")

        decided = current.with_changes(
            status=status,
            approved_by=str(actor_id),
            comments=comments if comments is not None else current.comments,
        )
        if not self._leaves.decide(decided):
            raise ValidationError("Leave request is no longer pending", field="status")

        logger.info("Leave %s %s by %s", decided.leave_id, status.value, actor_id)
        self._record_audit(
            actor_id=actor_id,
            actor_role=actor_role,
            action="approve" if status == LeaveStatus.APPROVED else "reject",
            leave=decided,
        )
        return decided

    def approve(self, leave_id: int, *, actor_id: str, actor_role: Role, comments: Optional[str] = None):
        return self._decide(leave_id, LeaveStatus.APPROVED, actor_id=actor_id, actor_role=actor_role, comments=comments)

    def reject(self, leave_id: int, *, actor_id: str, actor_role: Role, comments: Optional[str] = None):
        return self._decide(leave_id, LeaveStatus.REJECTED, actor_id=actor_id, actor_role=actor_role, comments=comments)
