"""Weighted-goal KPI scoring.

achievement_i = min(actual_i / target_i, 1) * 100, for goals with an actual value
overall       = clamp(sum(achievement_i * weight_i) / sum(weight_i), 0, 100), 2 decimals

Only goals that have an actual value (and a positive target) are counted, on
both the create and the update path.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..common.numbers import round2, to_decimal
from ..common.validators import require_non_empty
from ..core.constants import KPI_AVERAGE_MIN, KPI_BELOW_AVERAGE_MIN, KPI_EXCELLENT_MIN, KPI_GOOD_MIN
from ..core.enums import KPIRating
from ..core.exceptions import ValidationError
from .model import Goal, KPIScore

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def parse_goals(raw: Any) -> tuple[Goal, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("goals must be a list", field="goals")

    goals = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"goals[{i}] must be an object", field=f"goals[{i}]")
        target = to_decimal(item.get("target"), f"goals[{i}].target")
        if target <= 0:
            raise ValidationError("target must be > 0", field=f"goals[{i}].target")
        weight = to_decimal(item.get("weight"), f"goals[{i}].weight")
        if weight < 0 or weight > HUNDRED:
            raise ValidationError("weight must be between 0 and 100", field=f"goals[{i}].weight")
        actual = item.get("actual")
        goals.append(
            Goal(
                name=require_non_empty(item.get("name"), f"goals[{i}].name"),
                target=target,
                weight=weight,
                actual=to_decimal(actual, f"goals[{i}].actual") if actual is not None else None,
                unit=item.get("unit"),
            )
        )
    return tuple(goals)


def achievement(goal: Goal) -> Optional[Decimal]:
    if goal.actual is None or goal.target <= 0:
        return None
    return min(goal.actual / goal.target, Decimal("1")) * HUNDRED


def rating_for(score: Decimal) -> KPIRating:
    if score >= KPI_EXCELLENT_MIN:
        return KPIRating.EXCELLENT
    if score >= KPI_GOOD_MIN:
        return KPIRating.GOOD
    if score >= KPI_AVERAGE_MIN:
        return KPIRating.AVERAGE
    if score >= KPI_BELOW_AVERAGE_MIN:
        return KPIRating.BELOW_AVERAGE
    return KPIRating.POOR


def score_goals(goals: Iterable[Goal]) -> KPIScore:
    weighted = ZERO
    total_weight = ZERO
    for goal in goals:
        value = achievement(goal)
        if value is None:
            continue
        weighted += value * goal.weight
        total_weight += goal.weight

    if total_weight <= 0:
        return KPIScore(overall_score=None, rating=None)

    score = round2(min(max(weighted / total_weight, ZERO), HUNDRED))
    return KPIScore(overall_score=score, rating=rating_for(score))


def goals_from_storage(items: Sequence[dict]) -> tuple[Goal, ...]:
    return parse_goals(list(items or []))
