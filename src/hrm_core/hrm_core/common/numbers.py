from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..core.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Coerce request/DB numbers into Decimal; missing values become 0."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal) and value.is_finite():
        return value
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        # str() keeps floats like 0.1 from dragging binary noise along
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a finite number", field=field_name)
    return amount


def round2(value: Any) -> Decimal:
    """Round half-up to 2 decimals, the way the HR reports display numbers."""
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def as_float(value: Any):
    if value is None:
        return None
    return float(value)
