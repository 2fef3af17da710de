from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..audit.logger import AuditLogger
from ..common.datetime_utils import now_local, optional_date
from ..common.validators import require_enum, require_month, require_non_empty, require_non_negative, require_year
from ..core.enums import CompensationStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator
from .model import (
    Allowances,
    Bonuses,
    CompensationRecord,
    Deductions,
    NewCompensation,
    Penalties,
    SalaryInputs,
)
from .repository import CompensationRepository

logger = logging.getLogger(__name__)

_DERIVED_FIELDS = ("gross_salary", "net_salary")
_IMMUTABLE_FIELDS = ("employee_id", "month", "year")


def _reject_derived(payload: dict) -> None:
    for name in _DERIVED_FIELDS:
        if name in payload:
            raise ValidationError(f"{name} is derived and cannot be set directly", field=name)


class CompensationService:
    """Use case: create/update compensation records.

    Gross and net pay are computed by the calculator on every write, right
    before the repository call.
    """

    def __init__(
        self,
        records: CompensationRepository,
        *,
        calculator: Optional[SalaryCalculator] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self._records = records
        self._calculator = calculator or StandardSalaryCalculator()
        self._audit = audit

    def _record_audit(self, *, actor_id: str, actor_role: Optional[Role], action: str, record: CompensationRecord) -> None:
        if not self._audit:
            return
        self._audit.record(
            actor_id=actor_id,
            actor_role=actor_role,
            action=action,
            target_type="salary",
            target_id=record.record_id,
            metadata={
                "employee": record.employee_id,
                "month": record.month,
                "year": record.year,
                "status": record.status.value,
            },
        )

    def get(self, record_id: int) -> CompensationRecord:
        record = self._records.get_by_id(int(record_id))
        if not record:
            raise NotFoundError("Salary not found")
        return record

    def create(self, payload: dict, *, actor_id: str, actor_role: Optional[Role] = None) -> CompensationRecord:
        _reject_derived(payload)

        employee_id = require_non_empty(payload.get("employee_id") or payload.get("employee"), "employee_id")
        month = require_month(payload.get("month"))
        year = require_year(payload.get("year"))

        inputs = SalaryInputs(
            base_salary=require_non_negative(payload.get("base_salary"), "base_salary"),
            allowances=Allowances.from_dict(payload.get("allowances"), prefix="allowances"),
            bonuses=Bonuses.from_dict(payload.get("bonuses"), prefix="bonuses"),
            penalties=Penalties.from_dict(payload.get("penalties"), prefix="penalties"),
            deductions=Deductions.from_dict(payload.get("deductions"), prefix="deductions"),
            overtime_pay=require_non_negative(payload.get("overtime_pay"), "overtime_pay"),
        )
        status = require_enum(CompensationStatus, payload.get("status") or CompensationStatus.PENDING.value, "status")

        record = self._records.create(
            NewCompensation(
                employee_id=employee_id,
                month=month,
                year=year,
                inputs=inputs,
                breakdown=self._calculator.calculate(inputs),
                overtime_hours=require_non_negative(payload.get("overtime_hours"), "overtime_hours"),
                status=status,
                payment_date=optional_date(payload.get("payment_date"), "payment_date"),
                notes=payload.get("notes"),
            )
        )
        logger.info("Created salary record %s for employee %s (%02d/%d)", record.record_id, employee_id, month, year)
        self._record_audit(actor_id=actor_id, actor_role=actor_role, action="create", record=record)
        return record

    def update(
        self,
        record_id: int,
        payload: dict,
        *,
        actor_id: str,
        actor_role: Optional[Role] = None,
        today: Optional[date] = None,
    ) -> CompensationRecord:
        _reject_derived(payload)
        current = self.get(record_id)

        for name in _IMMUTABLE_FIELDS:
            if name in payload and str(payload[name]) != str(getattr(current, name)):
                raise ValidationError(f"{name} cannot be changed on an existing record", field=name)

        inputs = SalaryInputs(
            base_salary=(
                require_non_negative(payload["base_salary"], "base_salary")
                if "base_salary" in payload
                else current.base_salary
            ),
            allowances=current.allowances.merged(payload.get("allowances"), prefix="allowances"),
            bonuses=current.bonuses.merged(payload.get("bonuses"), prefix="bonuses"),
            penalties=current.penalties.merged(payload.get("penalties"), prefix="penalties"),
            deductions=current.deductions.merged(payload.get("deductions"), prefix="deductions"),
            overtime_pay=(
                require_non_negative(payload["overtime_pay"], "overtime_pay")
                if "overtime_pay" in payload
                else current.overtime_pay
            ),
        )
        overtime_hours = (
            require_non_negative(payload["overtime_hours"], "overtime_hours")
            if "overtime_hours" in payload
            else current.overtime_hours
        )
        status = current.status
        if "status" in payload:
            status = require_enum(CompensationStatus, payload["status"], "status")

        payment_date = current.payment_date
        if "payment_date" in payload:
            payment_date = optional_date(payload["payment_date"], "payment_date")
        if status == CompensationStatus.PAID and payment_date is None:
            payment_date = today or now_local().date()

        notes = payload.get("notes", current.notes)
        breakdown = self._calculator.calculate(inputs)

        ok = self._records.update(
            record_id=current.record_id,
            inputs=inputs,
            breakdown=breakdown,
            overtime_hours=overtime_hours,
            status=status,
            payment_date=payment_date,
            notes=notes,
        )
        if not ok:
            raise NotFoundError("Salary not found")

        updated = CompensationRecord(
            record_id=current.record_id,
            employee_id=current.employee_id,
            month=current.month,
            year=current.year,
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
        self._record_audit(actor_id=actor_id, actor_role=actor_role, action="update", record=updated)
        return updated
