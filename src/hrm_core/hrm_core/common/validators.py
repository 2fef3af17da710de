from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..core.exceptions import ValidationError
from .numbers import to_decimal


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()


def require_non_negative(value: Any, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} must be >= 0", field=field_name)
    return amount


def require_int_in_range(value: Any, field_name: str, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", field=field_name)
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}", field=field_name)
    return number


def require_month(value: Any, field_name: str = "month") -> int:
    return require_int_in_range(value, field_name, 1, 12)


def require_year(value: Any, field_name: str = "year") -> int:
    return require_int_in_range(value, field_name, 1900, 9999)


def require_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name)
