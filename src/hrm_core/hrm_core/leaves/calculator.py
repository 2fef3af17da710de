from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Union

from ..core.constants import MS_PER_DAY

DateLike = Union[date, datetime]


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def leave_days(start: DateLike, end: DateLike) -> int:
    """Inclusive day count: both boundary dates are counted.

    days = ceil(|end - start| ms / 86_400_000) + 1
    """
    delta = abs(_as_datetime(end) - _as_datetime(start))
    millis = delta.days * MS_PER_DAY + delta.seconds * 1000 + delta.microseconds // 1000
    return math.ceil(millis / MS_PER_DAY) + 1
