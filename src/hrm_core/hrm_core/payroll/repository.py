from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol

from ..core.enums import CompensationStatus
from .model import CompensationRecord, NewCompensation, SalaryBreakdown, SalaryInputs


class CompensationRepository(Protocol):
    """Giao diện repository cho bảng lương.

    `create` must raise ConflictError when (employee_id, month, year) already exists;
    callers rely on that instead of a prior read.
    """

    def get_by_id(self, record_id: int) -> Optional[CompensationRecord]:
        raise NotImplementedError

    def create(self, new: NewCompensation) -> CompensationRecord:
        raise NotImplementedError

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
        raise NotImplementedError
