from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, is_duplicate_key, load_json
from .model import AttendanceRecord, Location, NewAttendance
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, employee_id, work_date, check_in, check_out, status, work_hours, overtime_hours, notes, location"


def _optional_decimal(value) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def _location_to_json(location: Optional[Location]) -> Optional[str]:
    return dump_json(location.to_dict()) if location else None


def _location_from_row(value) -> Optional[Location]:
    return Location.from_payload(load_json(value))


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        check_in=r["check_in"],
        check_out=r.get("check_out"),
        status=AttendanceStatus(r["status"]),
        work_hours=_optional_decimal(r.get("work_hours")),
        overtime_hours=_optional_decimal(r.get("overtime_hours")),
        notes=r.get("notes"),
        location=_location_from_row(r.get("location")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (str(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, new: NewAttendance) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, check_in, check_out, status, work_hours, overtime_hours, notes, location
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        new.employee_id,
                        new.work_date,
                        new.check_in,
                        new.check_out,
                        new.status.value,
                        new.work_hours,
                        new.overtime_hours,
                        new.notes,
                        _location_to_json(new.location),
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError("Attendance record already exists for this date") from e
            raise

        return AttendanceRecord(
            attendance_id=attendance_id,
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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out=%s, status=%s, work_hours=%s, overtime_hours=%s, notes=%s,
                    location=COALESCE(%s, location)
                WHERE attendance_id=%s AND check_out IS NULL
                """,
                (
                    check_out,
                    status.value,
                    work_hours,
                    overtime_hours,
                    notes,
                    _location_to_json(location),
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def admin_update_record(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in=%s, check_out=%s, status=%s, work_hours=%s, overtime_hours=%s, notes=%s, location=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in,
                    record.check_out,
                    record.status.value,
                    record.work_hours,
                    record.overtime_hours,
                    record.notes,
                    _location_to_json(record.location),
                    int(record.attendance_id),
                ),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 FROM attendance_records WHERE attendance_id=%s", (int(record.attendance_id),))
            return fetchone(cur) is not None

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [str(employee_id)]
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
