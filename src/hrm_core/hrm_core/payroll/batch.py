from __future__ import annotations

import logging
from typing import Optional

from ..audit.logger import AuditLogger
from ..common.validators import require_month, require_non_negative, require_year
from ..core.enums import BatchOutcome, Role
from ..core.exceptions import ConflictError, DomainError
from ..directory.client import EmployeeDirectory
from ..directory.model import RosterEntry
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator
from .model import CompensationRecord, EmployeeBatchResult, NewCompensation, PayrollBatchResult, SalaryInputs
from .repository import CompensationRepository

logger = logging.getLogger(__name__)


class PayrollBatchRunner:
    """Monthly payroll pass over the active roster.

    One record per (employee, month, year), seeded from the employee's current
    base salary with empty adjustment bundles; payroll staff complete them later.
    The repository's unique key decides "already exists", so re-running a
    processed period creates nothing. A failure for one employee is reported in
    the result and the pass moves on to the next one.
    """

    def __init__(
        self,
        records: CompensationRepository,
        directory: EmployeeDirectory,
        *,
        calculator: Optional[SalaryCalculator] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self._records = records
        self._directory = directory
        self._calculator = calculator or StandardSalaryCalculator()
        self._audit = audit

    def _seed(self, entry: RosterEntry, *, month: int, year: int) -> NewCompensation:
        inputs = SalaryInputs(base_salary=require_non_negative(entry.base_salary, "base_salary"))
        return NewCompensation(
            employee_id=entry.employee_id,
            month=month,
            year=year,
            inputs=inputs,
            breakdown=self._calculator.calculate(inputs),
        )

    def run(
        self,
        month,
        year,
        *,
        actor_id: str = "system",
        actor_role: Optional[Role] = None,
    ) -> PayrollBatchResult:
        month = require_month(month)
        year = require_year(year)

        roster = self._directory.list_active()
        logger.info("Processing payroll %02d/%d for %d active employees", month, year, len(roster))

        created: list[CompensationRecord] = []
        skipped: list[str] = []
        failed: list[EmployeeBatchResult] = []
        outcomes: list[EmployeeBatchResult] = []

        for entry in roster:
            try:
                record = self._records.create(self._seed(entry, month=month, year=year))
            except ConflictError:
                skipped.append(entry.employee_id)
                outcomes.append(EmployeeBatchResult(entry.employee_id, BatchOutcome.SKIPPED.value))
                continue
            except DomainError as e:
                result = EmployeeBatchResult(entry.employee_id, BatchOutcome.FAILED.value, error=str(e))
                failed.append(result)
                outcomes.append(result)
                logger.warning("Payroll %02d/%d: employee %s rejected: %s", month, year, entry.employee_id, e)
                continue
            except Exception as e:
                result = EmployeeBatchResult(entry.employee_id, BatchOutcome.FAILED.value, error=str(e))
                failed.append(result)
                outcomes.append(result)
                logger.exception("Payroll %02d/%d: employee %s failed", month, year, entry.employee_id)
                continue

            created.append(record)
            outcomes.append(EmployeeBatchResult(entry.employee_id, BatchOutcome.CREATED.value, record_id=record.record_id))

        logger.info(
            "Payroll %02d/%d done: created=%d skipped=%d failed=%d",
            month,
            year,
            len(created),
            len(skipped),
            len(failed),
        )

        if self._audit:
            self._audit.record(
                actor_id=actor_id,
                actor_role=actor_role,
                action="process",
                target_type="salary",
                target_id="batch",
                metadata={
                    "month": month,
                    "year": year,
                    "created": len(created),
                    "skipped": len(skipped),
                    "failed": len(failed),
                },
            )

        return PayrollBatchResult(
            month=month,
            year=year,
            records=created,
            skipped=skipped,
            failed=failed,
            outcomes=outcomes,
        )
