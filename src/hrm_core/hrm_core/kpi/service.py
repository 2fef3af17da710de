from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..audit.logger import AuditLogger
from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_int_in_range, require_non_empty, require_year
from ..core.enums import KPIPeriodType, KPIStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from .model import PerformanceReview, ReviewPeriod
from .repository import KPIRepository
from .scorer import parse_goals, score_goals

logger = logging.getLogger(__name__)

_DERIVED_FIELDS = ("overall_score", "rating")


def parse_period(raw: Any) -> ReviewPeriod:
    if not isinstance(raw, dict):
        raise ValidationError("period is required", field="period")

    period_type = require_enum(KPIPeriodType, raw.get("type"), "period.type")
    year = require_year(raw.get("year"), "period.year")
    month = quarter = None
    if raw.get("month") is not None:
        month = require_int_in_range(raw["month"], "period.month", 1, 12)
    if raw.get("quarter") is not None:
        quarter = require_int_in_range(raw["quarter"], "period.quarter", 1, 4)

    if period_type == KPIPeriodType.MONTHLY and month is None:
        raise ValidationError("period.month is required for monthly reviews", field="period.month")
    if period_type == KPIPeriodType.QUARTERLY and quarter is None:
        raise ValidationError("period.quarter is required for quarterly reviews", field="period.quarter")
    return ReviewPeriod(type=period_type, year=year, month=month, quarter=quarter)


class KPIService:
    """Performance reviews with the score and rating derived from the goals."""

    def __init__(self, reviews: KPIRepository, *, audit: Optional[AuditLogger] = None):
        self._reviews = reviews
        self._audit = audit

    def _record_audit(self, *, actor_id: str, actor_role: Optional[Role], action: str, review: PerformanceReview):
        if not self._audit:
            return
        self._audit.record(
            actor_id=actor_id,
            actor_role=actor_role,
            action=action,
            target_type="kpi",
            target_id=review.kpi_id,
            metadata={
                "employee": review.employee_id,
                "overall_score": float(review.overall_score) if review.overall_score is not None else None,
                "rating": review.rating.value if review.rating else None,
                "status": review.status.value,
            },
        )

    def get(self, kpi_id: int) -> PerformanceReview:
        review = self._reviews.get_by_id(int(kpi_id))
        if not review:
            raise NotFoundError("KPI not found")
        return review

    def create(self, payload: dict, *, actor_id: str, actor_role: Optional[Role] = None) -> PerformanceReview:
        for name in _DERIVED_FIELDS:
            if name in payload:
                raise ValidationError(f"{name} is derived and cannot be set directly", field=name)

        goals = parse_goals(payload.get("goals"))
        score = score_goals(goals)
        review = PerformanceReview(
            kpi_id=0,
            employee_id=require_non_empty(payload.get("employee_id") or payload.get("employee"), "employee_id"),
            period=parse_period(payload.get("period")),
            goals=goals,
            overall_score=score.overall_score,
            rating=score.rating,
            status=require_enum(KPIStatus, payload.get("status") or KPIStatus.DRAFT.value, "status"),
            manager_comment=payload.get("manager_comment"),
            employee_comment=payload.get("employee_comment"),
        )
        review = review.with_changes(kpi_id=self._reviews.create(review))

        logger.info("Created KPI %s for employee %s (score=%s)", review.kpi_id, review.employee_id, review.overall_score)
        self._record_audit(actor_id=actor_id, actor_role=actor_role, action="create", review=review)
        return review

    def update(
        self,
        kpi_id: int,
        payload: dict,
        *,
        actor_id: str,
        actor_role: Optional[Role] = None,
    ) -> PerformanceReview:
        for name in _DERIVED_FIELDS:
            if name in payload:
                raise ValidationError(f"{name} is derived and cannot be set directly", field=name)

        current = self.get(kpi_id)
        changes: dict = {}

        # Goals are replaced as a whole; the score is only recomputed then.
        if "goals" in payload:
            goals = parse_goals(payload["goals"])
            score = score_goals(goals)
            changes.update(goals=goals, overall_score=score.overall_score, rating=score.rating)
        if "period" in payload:
            changes["period"] = parse_period(payload["period"])
        if "status" in payload:
            changes["status"] = require_enum(KPIStatus, payload["status"], "status")
        for name in ("manager_comment", "employee_comment"):
            if name in payload:
                changes[name] = payload[name]

        updated = current.with_changes(**changes)
        if not self._reviews.update(updated):
            raise NotFoundError("KPI not found")

        self._record_audit(actor_id=actor_id, actor_role=actor_role, action="update", review=updated)
        return updated

    def review(
        self,
        kpi_id: int,
        payload: dict,
        *,
        reviewer_id: str,
        actor_role: Optional[Role] = None,
        now: Optional[datetime] = None,
    ) -> PerformanceReview:
        current = self.get(kpi_id)
        changes: dict = {
            "status": KPIStatus.REVIEWED,
            "reviewed_by": str(reviewer_id),
            "reviewed_at": now or now_local(),
        }
        for name in ("manager_comment", "employee_comment"):
            if name in payload:
                changes[name] = payload[name]

        reviewed = current.with_changes(**changes)
        if not self._reviews.update(reviewed):
            raise NotFoundError("KPI not found")

        logger.info("KPI %s reviewed by %s", reviewed.kpi_id, reviewer_id)
        self._record_audit(actor_id=reviewer_id, actor_role=actor_role, action="review", review=reviewed)
        return reviewed
