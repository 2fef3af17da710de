from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Type, TypeVar

from ..common.numbers import as_float
from ..common.validators import require_non_negative
from ..core.enums import CompensationStatus
from ..core.exceptions import ValidationError

ZERO = Decimal("0")

B = TypeVar("B", bound="_Bundle")


@dataclass(frozen=True)
class _Bundle:
    """A named group of non-negative money amounts (every field defaults to 0)."""

    def total(self) -> Decimal:
        return sum((getattr(self, f.name) for f in fields(self)), ZERO)

    @classmethod
    def from_dict(cls: Type[B], data: Optional[Mapping[str, Any]], *, prefix: str) -> B:
        data = data or {}
        if not isinstance(data, Mapping):
            raise ValidationError(f"{prefix} must be an object", field=prefix)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(f"Unknown {prefix} field: {sorted(unknown)[0]}", field=prefix)
        values = {name: require_non_negative(data.get(name), f"{prefix}.{name}") for name in known}
        return cls(**values)

    def merged(self: B, patch: Optional[Mapping[str, Any]], *, prefix: str) -> B:
        """Apply a partial update on top of the current amounts."""
        if patch is not None and not isinstance(patch, Mapping):
            raise ValidationError(f"{prefix} must be an object", field=prefix)
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(patch or {})
        return type(self).from_dict(current, prefix=prefix)

    def to_dict(self) -> dict:
        return {f.name: as_float(getattr(self, f.name)) for f in fields(self)}

    def to_storage(self) -> dict:
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class Allowances(_Bundle):
    housing: Decimal = ZERO
    transportation: Decimal = ZERO
    meal: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class Bonuses(_Bundle):
    performance: Decimal = ZERO
    project: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class Penalties(_Bundle):
    late: Decimal = ZERO
    absent: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class Deductions(_Bundle):
    tax: Decimal = ZERO
    social_insurance: Decimal = ZERO
    health_insurance: Decimal = ZERO
    unemployment_insurance: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class SalaryInputs:
    """Everything the salary formula reads; nothing it derives."""

    base_salary: Decimal
    allowances: Allowances = field(default_factory=Allowances)
    bonuses: Bonuses = field(default_factory=Bonuses)
    penalties: Penalties = field(default_factory=Penalties)
    deductions: Deductions = field(default_factory=Deductions)
    overtime_pay: Decimal = ZERO


@dataclass(frozen=True)
class SalaryBreakdown:
    gross_salary: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class CompensationRecord:
    """Thực thể miền (domain): Bảng lương một nhân viên trong một kỳ (tháng/năm)."""

    record_id: int
    employee_id: str
    month: int
    year: int
    base_salary: Decimal
    allowances: Allowances
    bonuses: Bonuses
    penalties: Penalties
    deductions: Deductions
    overtime_hours: Decimal
    overtime_pay: Decimal
    gross_salary: Decimal
    net_salary: Decimal
    status: CompensationStatus = CompensationStatus.PENDING
    payment_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def inputs(self) -> SalaryInputs:
        return SalaryInputs(
            base_salary=self.base_salary,
            allowances=self.allowances,
            bonuses=self.bonuses,
            penalties=self.penalties,
            deductions=self.deductions,
            overtime_pay=self.overtime_pay,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "employee": self.employee_id,
            "month": self.month,
            "year": self.year,
            "base_salary": as_float(self.base_salary),
            "allowances": self.allowances.to_dict(),
            "bonuses": self.bonuses.to_dict(),
            "penalties": self.penalties.to_dict(),
            "deductions": self.deductions.to_dict(),
            "overtime_hours": as_float(self.overtime_hours),
            "overtime_pay": as_float(self.overtime_pay),
            "gross_salary": as_float(self.gross_salary),
            "net_salary": as_float(self.net_salary),
            "status": self.status.value,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class NewCompensation:
    """A validated record ready for insert (derived pay already computed)."""

    employee_id: str
    month: int
    year: int
    inputs: SalaryInputs
    breakdown: SalaryBreakdown
    overtime_hours: Decimal = ZERO
    status: CompensationStatus = CompensationStatus.PENDING
    payment_date: Optional[date] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class EmployeeBatchResult:
    employee_id: str
    outcome: str
    record_id: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"employee": self.employee_id, "outcome": self.outcome}
        if self.record_id is not None:
            out["record_id"] = self.record_id
        if self.error:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class PayrollBatchResult:
    month: int
    year: int
    records: list[CompensationRecord]
    skipped: list[str]
    failed: list[EmployeeBatchResult]
    outcomes: list[EmployeeBatchResult]

    @property
    def created_count(self) -> int:
        return len(self.records)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "created_count": self.created_count,
            "skipped_count": self.skipped_count,
            "failed_count": len(self.failed),
            "records": [r.to_dict() for r in self.records],
            "record_ids": [r.record_id for r in self.records],
            "failed": [f.to_dict() for f in self.failed],
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
