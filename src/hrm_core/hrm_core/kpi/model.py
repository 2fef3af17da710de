from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.numbers import as_float
from ..core.enums import KPIPeriodType, KPIRating, KPIStatus


@dataclass(frozen=True)
class Goal:
    name: str
    target: Decimal
    weight: Decimal
    actual: Optional[Decimal] = None
    unit: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "target": as_float(self.target),
            "actual": as_float(self.actual),
            "weight": as_float(self.weight),
            "unit": self.unit,
        }


@dataclass(frozen=True)
class ReviewPeriod:
    type: KPIPeriodType
    year: int
    month: Optional[int] = None
    quarter: Optional[int] = None

    def to_dict(self) -> dict:
        return {"type": self.type.value, "year": self.year, "month": self.month, "quarter": self.quarter}


@dataclass(frozen=True)
class KPIScore:
    overall_score: Optional[Decimal]
    rating: Optional[KPIRating]


@dataclass(frozen=True)
class PerformanceReview:
    """Thực thể miền (domain): Đánh giá KPI của một nhân viên trong một kỳ."""

    kpi_id: int
    employee_id: str
    period: ReviewPeriod
    goals: tuple[Goal, ...]
    overall_score: Optional[Decimal] = None
    rating: Optional[KPIRating] = None
    status: KPIStatus = KPIStatus.DRAFT
    manager_comment: Optional[str] = None
    employee_comment: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    def with_changes(self, **changes) -> "PerformanceReview":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.kpi_id,
            "employee": self.employee_id,
            "period": self.period.to_dict(),
            "goals": [g.to_dict() for g in self.goals],
            "overall_score": as_float(self.overall_score),
            "rating": self.rating.value if self.rating else None,
            "status": self.status.value,
            "manager_comment": self.manager_comment,
            "employee_comment": self.employee_comment,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }
