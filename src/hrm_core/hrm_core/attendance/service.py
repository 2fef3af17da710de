from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local, optional_date, parse_iso_date, parse_iso_datetime
from ..common.numbers import round2
from ..common.validators import require_enum, require_non_empty
from ..core.constants import DEFAULT_LATE_CUTOFF, DEFAULT_STANDARD_WORK_HOURS
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .factory import AttendanceStrategyFactory
from .hours import worked_time
from .model import AttendanceRecord, AttendanceStats, Location, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Fields an employee may touch on their own record.
_SELF_SERVICE_FIELDS = {"check_out", "notes"}


@dataclass(frozen=True)
class TodayStatus:
    record: Optional[AttendanceRecord]
    can_check_in: bool
    can_check_out: bool

    def to_dict(self) -> dict:
        return {
            "data": self.record.to_dict() if self.record else None,
            "can_check_in": self.can_check_in,
            "can_check_out": self.can_check_out,
        }


class AttendanceService:
    """Per-day check-in/check-out state machine.

    absent (no row) -> check-in -> open -> check-out -> closed. Worked hours,
    overtime and the half-day override are derived on close, and again on any
    privileged edit that leaves both timestamps set.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        late_cutoff: time = DEFAULT_LATE_CUTOFF,
        standard_work_hours: float = DEFAULT_STANDARD_WORK_HOURS,
    ):
        self._attendance = attendance
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._late_cutoff = late_cutoff
        self._standard_work_hours = standard_work_hours

    def classify_checkin(self, check_in: datetime) -> AttendanceStatus:
        today = check_in.date()
        strategy = self._factory.for_checkin(now=check_in, today=today, late_cutoff=self._late_cutoff)
        cutoff = self._factory.cutoff_for(today, self._late_cutoff)
        return strategy.decide_checkin(now=check_in, cutoff=cutoff).status

    def _finalize(self, status: AttendanceStatus, check_in: datetime, check_out: datetime):
        worked = worked_time(check_in, check_out, standard_hours=self._standard_work_hours)
        strategy = self._factory.for_checkout(work_hours=worked.work_hours)
        decision = strategy.decide_checkout(work_hours=worked.work_hours, current=status)
        return decision.status, worked

    def check_in(
        self,
        employee_id: str,
        *,
        now: datetime | None = None,
        location: Optional[dict] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        employee_id = require_non_empty(employee_id, "employee_id")
        where = Location.from_payload(location)

        strategy = self._factory.for_checkin(now=now, today=today, late_cutoff=self._late_cutoff)
        decision = strategy.decide_checkin(now=now, cutoff=self._factory.cutoff_for(today, self._late_cutoff))

        try:
            record = self._attendance.create(
                NewAttendance(
                    employee_id=employee_id,
                    work_date=today,
                    check_in=now,
                    status=decision.status,
                    notes=decision.note,
                    location=where,
                )
            )
        except ConflictError as e:
            raise ConflictError("Already checked in today") from e

        logger.info("Employee %s checked in at %s (%s)", employee_id, now.isoformat(), decision.status.value)
        return record

    def check_out(
        self,
        employee_id: str,
        *,
        now: datetime | None = None,
        location: Optional[dict] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        where = Location.from_payload(location)

        record = self._attendance.get_for_employee_and_date(employee_id, today)
        if not record:
            raise ValidationError("Not checked in today")
        if not record.is_open:
            raise ValidationError("Already checked out today")

        status, worked = self._finalize(record.status, record.check_in, now)

        closed = self._attendance.close(
            attendance_id=record.attendance_id,
            check_out=now,
            status=status,
            work_hours=worked.work_hours,
            overtime_hours=worked.overtime_hours,
            notes=record.notes,
            location=where,
        )
        if not closed:
            # Another request closed it between our read and write.
            raise ValidationError("Already checked out today")

        logger.info("Employee %s checked out: %s h (%s)", employee_id, worked.work_hours, status.value)
        return record.with_changes(
            check_out=now,
            status=status,
            work_hours=worked.work_hours,
            overtime_hours=worked.overtime_hours,
            location=where or record.location,
        )

    def today_status(self, employee_id: str, *, today: date | None = None) -> TodayStatus:
        today = today or now_local().date()
        record = self._attendance.get_for_employee_and_date(employee_id, today)
        return TodayStatus(
            record=record,
            can_check_in=record is None,
            can_check_out=record is not None and record.is_open,
        )

    def get(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance not found")
        return record

    def backfill_create(self, *, current_role: Role, payload: dict) -> AttendanceRecord:
        """Admin/HR entry for any date. The (employee, date) key still applies."""
        if not current_role.is_privileged:
            raise AuthorizationError("Access denied")

        employee_id = require_non_empty(payload.get("employee_id") or payload.get("employee"), "employee_id")
        check_in = parse_iso_datetime(payload.get("check_in"), "check_in") if payload.get("check_in") else now_local()
        work_date = parse_iso_date(payload["date"], "date") if payload.get("date") else check_in.date()
        check_out = parse_iso_datetime(payload["check_out"], "check_out") if payload.get("check_out") else None

        if "status" in payload and payload["status"]:
            status = require_enum(AttendanceStatus, payload["status"], "status")
        else:
            status = self.classify_checkin(check_in)

        work_hours = overtime_hours = None
        if check_out is not None:
            status, worked = self._finalize_edit(status, check_in, check_out)
            work_hours, overtime_hours = worked.work_hours, worked.overtime_hours

        record = self._attendance.create(
            NewAttendance(
                employee_id=employee_id,
                work_date=work_date,
                check_in=check_in,
                check_out=check_out,
                status=status,
                work_hours=work_hours,
                overtime_hours=overtime_hours,
                notes=payload.get("notes"),
                location=Location.from_payload(payload.get("location")),
            )
        )
        logger.info("Back-filled attendance %s for employee %s on %s", record.attendance_id, employee_id, work_date)
        return record

    def _finalize_edit(self, status: AttendanceStatus, check_in: datetime, check_out: datetime):
        # Explicit absent/overtime set by HR is kept; present/late follow the short-day rule.
        if status in {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY}:
            base = self.classify_checkin(check_in) if status == AttendanceStatus.HALF_DAY else status
            return self._finalize(base, check_in, check_out)
        return status, worked_time(check_in, check_out, standard_hours=self._standard_work_hours)

    def update_record(
        self,
        *,
        current_role: Role,
        current_employee_id: Optional[str],
        attendance_id: int,
        payload: dict,
    ) -> AttendanceRecord:
        record = self.get(attendance_id)

        if not current_role.is_privileged:
            if current_role != Role.EMPLOYEE or record.employee_id != str(current_employee_id):
                raise AuthorizationError("Access denied")
            payload = {k: v for k, v in payload.items() if k in _SELF_SERVICE_FIELDS}
            if "check_out" in payload and not record.is_open:
                raise ValidationError("Attendance already closed", field="check_out")

        check_in = record.check_in
        if payload.get("check_in"):
            check_in = parse_iso_datetime(payload["check_in"], "check_in")
        check_out = record.check_out
        if "check_out" in payload:
            check_out = parse_iso_datetime(payload["check_out"], "check_out") if payload["check_out"] else None

        status = record.status
        if payload.get("status"):
            status = require_enum(AttendanceStatus, payload["status"], "status")
        elif "check_in" in payload:
            status = self.classify_checkin(check_in)

        work_hours, overtime_hours = record.work_hours, record.overtime_hours
        if check_out is not None:
            status, worked = self._finalize_edit(status, check_in, check_out)
            work_hours, overtime_hours = worked.work_hours, worked.overtime_hours
        else:
            work_hours = overtime_hours = None

        updated = record.with_changes(
            check_in=check_in,
            check_out=check_out,
            status=status,
            work_hours=work_hours,
            overtime_hours=overtime_hours,
            notes=payload.get("notes", record.notes),
            location=Location.from_payload(payload["location"]) if "location" in payload else record.location,
        )
        if not self._attendance.admin_update_record(updated):
            raise NotFoundError("Attendance not found")
        return updated

    def stats(
        self,
        employee_id: str,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> AttendanceStats:
        start = optional_date(start_date, "start_date")
        end = optional_date(end_date, "end_date")
        rows = self._attendance.list_for_employee(employee_id, start_date=start, end_date=end)

        counts = Counter(r.status for r in rows)
        total_hours = sum((r.work_hours for r in rows if r.work_hours is not None), Decimal("0"))
        return AttendanceStats(
            total=len(rows),
            present=counts[AttendanceStatus.PRESENT],
            late=counts[AttendanceStatus.LATE],
            absent=counts[AttendanceStatus.ABSENT],
            half_day=counts[AttendanceStatus.HALF_DAY],
            overtime=counts[AttendanceStatus.OVERTIME],
            total_work_hours=round2(total_hours),
        )
