from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from src.hrm_core.hrm_core.attendance.model import Location, NewAttendance
from src.hrm_core.hrm_core.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.hrm_core.hrm_core.core.enums import AttendanceStatus
from src.hrm_core.hrm_core.core.exceptions import ConflictError
from src.hrm_core.hrm_core.payroll.calculator.standard_calculator import StandardSalaryCalculator
from src.hrm_core.hrm_core.payroll.model import NewCompensation, SalaryInputs
from src.hrm_core.hrm_core.payroll.mysql_compensation_repository import MySQLCompensationRepository


class FakeCursor:
    def __init__(self, *, error=None, row=None):
        self.error = error
        self.row = row
        self.executed = []
        self.lastrowid = 7
        self.rowcount = 1
        self.closed = False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.error:
            raise self.error

    def fetchone(self):
        return self.row

    def fetchall(self):
        return [self.row] if self.row else []

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self, cursor):
        self.conn = FakeConnection(cursor)

    def connect(self):
        return self.conn


def _duplicate():
    return IntegrityError(msg="Duplicate entry 'E1-3-2024' for key", errno=errorcode.ER_DUP_ENTRY)


def _not_null():
    return IntegrityError(msg="Column 'employee_id' cannot be null", errno=errorcode.ER_BAD_NULL_ERROR)


def _compensation():
    inputs = SalaryInputs(base_salary=Decimal("1000"))
    return NewCompensation(
        employee_id="E1",
        month=3,
        year=2024,
        inputs=inputs,
        breakdown=StandardSalaryCalculator().calculate(inputs),
    )


def _attendance(**overrides):
    data = dict(
        employee_id="E1",
        work_date=date(2024, 3, 15),
        check_in=datetime(2024, 3, 15, 8, 55),
        status=AttendanceStatus.PRESENT,
    )
    data.update(overrides)
    return NewAttendance(**data)


def test_compensation_duplicate_key_becomes_conflict():
    factory = FakeConnFactory(FakeCursor(error=_duplicate()))

    with pytest.raises(ConflictError) as exc:
        MySQLCompensationRepository(factory).create(_compensation())

    assert "already exists" in str(exc.value)
    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_compensation_other_integrity_error_propagates():
    factory = FakeConnFactory(FakeCursor(error=_not_null()))

    with pytest.raises(IntegrityError) as exc:
        MySQLCompensationRepository(factory).create(_compensation())

    assert exc.value.errno == errorcode.ER_BAD_NULL_ERROR
    assert factory.conn.rolled_back


def test_compensation_create_commits_and_returns_row_id():
    factory = FakeConnFactory(FakeCursor())

    record = MySQLCompensationRepository(factory).create(_compensation())

    assert record.record_id == 7
    assert record.net_salary == Decimal("1000")
    assert factory.conn.committed
    assert factory.conn._cursor.closed


def test_attendance_duplicate_key_becomes_conflict():
    factory = FakeConnFactory(FakeCursor(error=_duplicate()))

    with pytest.raises(ConflictError):
        MySQLAttendanceRepository(factory).create(_attendance())

    assert factory.conn.rolled_back


def test_attendance_other_integrity_error_propagates():
    factory = FakeConnFactory(FakeCursor(error=_not_null()))

    with pytest.raises(IntegrityError):
        MySQLAttendanceRepository(factory).create(_attendance())


def test_attendance_location_is_written_as_json():
    cursor = FakeCursor()
    location = Location(latitude=Decimal("10.5"), longitude=Decimal("106.25"), address="HQ")

    record = MySQLAttendanceRepository(FakeConnFactory(cursor)).create(_attendance(location=location))

    _, params = cursor.executed[0]
    assert json.loads(params[-1]) == {"latitude": 10.5, "longitude": 106.25, "address": "HQ"}
    assert record.location == location


def test_attendance_close_without_location_keeps_stored_one():
    cursor = FakeCursor()

    closed = MySQLAttendanceRepository(FakeConnFactory(cursor)).close(
        attendance_id=1,
        check_out=datetime(2024, 3, 15, 17, 0),
        status=AttendanceStatus.PRESENT,
        work_hours=Decimal("8.08"),
        overtime_hours=Decimal("0.08"),
    )

    sql, params = cursor.executed[0]
    assert closed
    assert "COALESCE(%s, location)" in sql
    assert params[5] is None


def test_attendance_row_location_is_parsed():
    row = {
        "attendance_id": 3,
        "employee_id": "E1",
        "work_date": date(2024, 3, 15),
        "check_in": datetime(2024, 3, 15, 8, 55),
        "check_out": None,
        "status": "present",
        "work_hours": None,
        "overtime_hours": None,
        "notes": None,
        "location": b'{"latitude": 10.5, "longitude": 106.25, "address": null}',
    }

    record = MySQLAttendanceRepository(FakeConnFactory(FakeCursor(row=row))).get_by_id(3)

    assert record.location == Location(latitude=Decimal("10.5"), longitude=Decimal("106.25"))
