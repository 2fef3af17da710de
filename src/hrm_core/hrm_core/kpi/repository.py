from __future__ import annotations

from typing import Optional, Protocol

from .model import PerformanceReview


class KPIRepository(Protocol):
    def get_by_id(self, kpi_id: int) -> Optional[PerformanceReview]:
        raise NotImplementedError

    def create(self, review: PerformanceReview) -> int:
        """Insert and return the new kpi_id (the incoming kpi_id is ignored)."""

        raise NotImplementedError

    def update(self, review: PerformanceReview) -> bool:
        raise NotImplementedError
