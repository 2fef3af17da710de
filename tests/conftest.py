from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from src.hrm_core.hrm_core.attendance.model import AttendanceRecord, NewAttendance
from src.hrm_core.hrm_core.core.enums import LeaveStatus
from src.hrm_core.hrm_core.core.exceptions import ConflictError, DirectoryUnavailable
from src.hrm_core.hrm_core.directory.model import EmployeeSummary, RosterEntry
from src.hrm_core.hrm_core.payroll.model import CompensationRecord, NewCompensation


class InMemoryCompensations:
    def __init__(self):
        self._by_id: dict[int, CompensationRecord] = {}
        self._next_id = 1
        self.fail_for: set[str] = set()

    def get_by_id(self, record_id: int) -> Optional[CompensationRecord]:
        return self._by_id.get(int(record_id))

    def find_for_period(self, *, employee_id, month, year):
        for r in self._by_id.values():
            if (r.employee_id, r.month, r.year) == (employee_id, month, year):
                return r
        return None

    def create(self, new: NewCompensation) -> CompensationRecord:
        if new.employee_id in self.fail_for:
            raise RuntimeError("connection reset")
        if self.find_for_period(employee_id=new.employee_id, month=new.month, year=new.year):
            raise ConflictError("Salary record already exists for this employee, month, and year")
        rec = CompensationRecord(
            record_id=self._next_id,
            employee_id=new.employee_id,
            month=new.month,
            year=new.year,
            base_salary=new.inputs.base_salary,
            allowances=new.inputs.allowances,
            bonuses=new.inputs.bonuses,
            penalties=new.inputs.penalties,
            deductions=new.inputs.deductions,
            overtime_hours=new.overtime_hours,
            overtime_pay=new.inputs.overtime_pay,
            gross_salary=new.breakdown.gross_salary,
            net_salary=new.breakdown.net_salary,
            status=new.status,
            payment_date=new.payment_date,
            notes=new.notes,
        )
        self._by_id[rec.record_id] = rec
        self._next_id += 1
        return rec

    def update(self, *, record_id, inputs, breakdown, overtime_hours, status, payment_date, notes) -> bool:
        cur = self._by_id.get(int(record_id))
        if not cur:
            return False
        self._by_id[cur.record_id] = CompensationRecord(
            record_id=cur.record_id,
            employee_id=cur.employee_id,
            month=cur.month,
            year=cur.year,
            base_salary=inputs.base_salary,
            allowances=inputs.allowances,
            bonuses=inputs.bonuses,
            penalties=inputs.penalties,
            deductions=inputs.deductions,
            overtime_hours=overtime_hours,
            overtime_pay=inputs.overtime_pay,
            gross_salary=breakdown.gross_salary,
            net_salary=breakdown.net_salary,
            status=status,
            payment_date=payment_date,
            notes=notes,
        )
        return True

    def __len__(self):
        return len(self._by_id)


class InMemoryAttendance:
    def __init__(self):
        self._by_id: dict[int, AttendanceRecord] = {}
        self._next_id = 1

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        if self.get_for_employee_and_date(new.employee_id, new.work_date):
            raise ConflictError("Attendance record already exists for this date")
        rec = AttendanceRecord(
            attendance_id=self._next_id,
            employee_id=new.employee_id,
            work_date=new.work_date,
            check_in=new.check_in,
            check_out=new.check_out,
            status=new.status,
            work_hours=new.work_hours,
            overtime_hours=new.overtime_hours,
            notes=new.notes,
            location=new.location,
        )
        self._by_id[rec.attendance_id] = rec
        self._next_id += 1
        return rec

    def close(self, *, attendance_id, check_out, status, work_hours, overtime_hours, notes=None, location=None) -> bool:
        rec = self._by_id.get(int(attendance_id))
        if not rec or not rec.is_open:
            return False
        self._by_id[rec.attendance_id] = rec.with_changes(
            check_out=check_out,
            status=status,
            work_hours=work_hours,
            overtime_hours=overtime_hours,
            notes=notes,
            location=location or rec.location,
        )
        return True

    def admin_update_record(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self._by_id:
            return False
        self._by_id[record.attendance_id] = record
        return True

    def list_for_employee(self, employee_id, *, start_date=None, end_date=None):
        rows = [r for r in self._by_id.values() if r.employee_id == employee_id]
        if start_date:
            rows = [r for r in rows if r.work_date >= start_date]
        if end_date:
            rows = [r for r in rows if r.work_date <= end_date]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)


class InMemoryKPI:
    def __init__(self):
        self._by_id = {}
        self._next_id = 1

    def get_by_id(self, kpi_id):
        return self._by_id.get(int(kpi_id))

    def create(self, review) -> int:
        kpi_id = self._next_id
        self._next_id += 1
        self._by_id[kpi_id] = review.with_changes(kpi_id=kpi_id)
        return kpi_id

    def update(self, review) -> bool:
        if review.kpi_id not in self._by_id:
            return False
        self._by_id[review.kpi_id] = review
        return True


class InMemoryLeaves:
    def __init__(self):
        self._by_id = {}
        self._next_id = 1

    def get_by_id(self, leave_id):
        return self._by_id.get(int(leave_id))

    def create(self, leave) -> int:
        leave_id = self._next_id
        self._next_id += 1
        self._by_id[leave_id] = leave.with_changes(leave_id=leave_id)
        return leave_id

    def update(self, leave) -> bool:
        if leave.leave_id not in self._by_id:
            return False
        self._by_id[leave.leave_id] = leave
        return True

    def decide(self, leave) -> bool:
        cur = self._by_id.get(leave.leave_id)
        if not cur or cur.status != LeaveStatus.PENDING:
            return False
        self._by_id[leave.leave_id] = leave
        return True


class InMemoryAudit:
    def __init__(self, *, broken: bool = False):
        self.entries = []
        self.broken = broken

    def create(self, entry) -> int:
        if self.broken:
            raise RuntimeError("audit table is gone")
        self.entries.append(entry)
        return len(self.entries)


class FakeDirectory:
    def __init__(self, roster=None, people=None, *, down: bool = False):
        self.roster = list(roster or [])
        self.people = dict(people or {})
        self.down = down
        self.lookups = []

    def batch_lookup(self, ids, *, auth_header=None):
        if self.down:
            raise DirectoryUnavailable("Employee lookup failed: timeout")
        ids = list(ids)
        self.lookups.append((ids, auth_header))
        return {i: self.people[i] for i in ids if i in self.people}

    def list_active(self):
        if self.down:
            raise DirectoryUnavailable("Active roster fetch failed: timeout")
        return list(self.roster)


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 15, 8, 55, 0)


@pytest.fixture
def compensation_repo():
    return InMemoryCompensations()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def kpi_repo():
    return InMemoryKPI()


@pytest.fixture
def leave_repo():
    return InMemoryLeaves()


@pytest.fixture
def audit_repo():
    return InMemoryAudit()


@pytest.fixture
def directory():
    return FakeDirectory(
        roster=[
            RosterEntry("E1", Decimal("1000")),
            RosterEntry("E2", Decimal("2500.50")),
            RosterEntry("E3", Decimal("0")),
        ],
        people={
            "E1": EmployeeSummary(id="E1", first_name="Lan", last_name="Nguyen", email="lan@example.com"),
            "E2": EmployeeSummary(id="E2", first_name="Minh", last_name="Tran"),
        },
    )


@pytest.fixture
def broken_directory():
    return FakeDirectory(down=True)


@pytest.fixture
def broken_audit_repo():
    return InMemoryAudit(broken=True)
