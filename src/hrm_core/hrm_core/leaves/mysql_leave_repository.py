from __future__ import annotations

from typing import Optional

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = "leave_id, employee_id, leave_type, start_date, end_date, days, reason, status, approved_by, comments"


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=str(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days=int(r["days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        approved_by=r.get("approved_by"),
        comments=r.get("comments"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def create(self, leave: LeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, days, reason, status, approved_by, comments
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    leave.employee_id,
                    leave.leave_type.value,
                    leave.start_date,
                    leave.end_date,
                    leave.days,
                    leave.reason,
                    leave.status.value,
                    leave.approved_by,
                    leave.comments,
                ),
            )
            return int(cur.lastrowid)

    def update(self, leave: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET leave_type=%s, start_date=%s, end_date=%s, days=%s, reason=%s, comments=%s
                WHERE leave_id=%s
                """,
                (
                    leave.leave_type.value,
                    leave.start_date,
                    leave.end_date,
                    leave.days,
                    leave.reason,
                    leave.comments,
                    int(leave.leave_id),
                ),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 FROM leave_requests WHERE leave_id=%s", (int(leave.leave_id),))
            return fetchone(cur) is not None

    def decide(self, leave: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, comments=%s
                WHERE leave_id=%s AND status='pending'
                """,
                (leave.status.value, leave.approved_by, leave.comments, int(leave.leave_id)),
            )
            return cur.rowcount > 0
