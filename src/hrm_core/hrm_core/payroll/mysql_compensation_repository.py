from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import CompensationStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, is_duplicate_key, load_json
from .model import (
    Allowances,
    Bonuses,
    CompensationRecord,
    Deductions,
    NewCompensation,
    Penalties,
    SalaryBreakdown,
    SalaryInputs,
)
from .repository import CompensationRepository

_COLUMNS = """
    record_id, employee_id, month, year, base_salary,
    allowances, bonuses, penalties, deductions,
    overtime_hours, overtime_pay, gross_salary, net_salary,
    status, payment_date, notes
"""


def _row_to_record(r: dict) -> CompensationRecord:
    return CompensationRecord(
        record_id=int(r["record_id"]),
        employee_id=str(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        base_salary=Decimal(r["base_salary"]),
        allowances=Allowances.from_dict(load_json(r.get("allowances"), {}), prefix="allowances"),
        bonuses=Bonuses.from_dict(load_json(r.get("bonuses"), {}), prefix="bonuses"),
        penalties=Penalties.from_dict(load_json(r.get("penalties"), {}), prefix="penalties"),
        deductions=Deductions.from_dict(load_json(r.get("deductions"), {}), prefix="deductions"),
        overtime_hours=Decimal(r.get("overtime_hours") or 0),
        overtime_pay=Decimal(r.get("overtime_pay") or 0),
        gross_salary=Decimal(r["gross_salary"]),
        net_salary=Decimal(r["net_salary"]),
        status=CompensationStatus(r["status"]),
        payment_date=r.get("payment_date"),
        notes=r.get("notes"),
    )


class MySQLCompensationRepository(CompensationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[CompensationRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM compensation_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, new: NewCompensation) -> CompensationRecord:
        inputs = new.inputs
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO compensation_records(
                        employee_id, month, year, base_salary,
                        allowances, bonuses, penalties, deductions,
                        overtime_hours, overtime_pay, gross_salary, net_salary,
                        status, payment_date, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        new.employee_id,
                        new.month,
                        new.year,
                        inputs.base_salary,
                        dump_json(inputs.allowances.to_storage()),
                        dump_json(inputs.bonuses.to_storage()),
                        dump_json(inputs.penalties.to_storage()),
                        dump_json(inputs.deductions.to_storage()),
                        new.overtime_hours,
                        inputs.overtime_pay,
                        new.breakdown.gross_salary,
                        new.breakdown.net_salary,
                        new.status.value,
                        new.payment_date,
                        new.notes,
                    ),
                )
                record_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError("Salary record already exists for this employee, month, and year") from e
            raise

        return CompensationRecord(
            record_id=record_id,
            employee_id=new.employee_id,
            month=new.month,
            year=new.year,
            base_salary=inputs.base_salary,
            allowances=inputs.allowances,
            bonuses=inputs.bonuses,
            penalties=inputs.penalties,
            deductions=inputs.deductions,
            overtime_hours=new.overtime_hours,
            overtime_pay=inputs.overtime_pay,
            gross_salary=new.breakdown.gross_salary,
            net_salary=new.breakdown.net_salary,
            status=new.status,
            payment_date=new.payment_date,
            notes=new.notes,
        )

    def update(
        self,
        *,
        record_id: int,
        inputs: SalaryInputs,
        breakdown: SalaryBreakdown,
        overtime_hours: Decimal,
        status: CompensationStatus,
        payment_date: Optional[date],
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE compensation_records
                SET base_salary=%s, allowances=%s, bonuses=%s, penalties=%s, deductions=%s,
                    overtime_hours=%s, overtime_pay=%s, gross_salary=%s, net_salary=%s,
                    status=%s, payment_date=%s, notes=%s
                WHERE record_id=%s
                """,
                (
                    inputs.base_salary,
                    dump_json(inputs.allowances.to_storage()),
                    dump_json(inputs.bonuses.to_storage()),
                    dump_json(inputs.penalties.to_storage()),
                    dump_json(inputs.deductions.to_storage()),
                    overtime_hours,
                    inputs.overtime_pay,
                    breakdown.gross_salary,
                    breakdown.net_salary,
                    status.value,
                    payment_date,
                    notes,
                    int(record_id),
                ),
            )
            # MySQL reports 0 rows for a no-op update; treat "exists" as success.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 FROM compensation_records WHERE record_id=%s", (int(record_id),))
            return fetchone(cur) is not None
