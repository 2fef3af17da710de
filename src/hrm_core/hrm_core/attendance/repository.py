from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, Location, NewAttendance


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, new: NewAttendance) -> AttendanceRecord:
        """Insert a record; raises ConflictError if (employee_id, work_date) already exists."""

        raise NotImplementedError

    def close(
        self,
        *,
        attendance_id: int,
        check_out: datetime,
        status: AttendanceStatus,
        work_hours: Decimal,
        overtime_hours: Decimal,
        notes: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> bool:
        """Set check-out on an open record only. False if it was already closed.

        A None location leaves the check-in location in place.
        """

        raise NotImplementedError

    def admin_update_record(self, record: AttendanceRecord) -> bool:
        """Privileged override used by back-fill edits."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
