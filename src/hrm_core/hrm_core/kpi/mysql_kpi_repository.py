from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..core.enums import KPIPeriodType, KPIRating, KPIStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, load_json
from .model import Goal, PerformanceReview, ReviewPeriod
from .repository import KPIRepository
from .scorer import goals_from_storage

_COLUMNS = """
    kpi_id, employee_id, period_type, period_month, period_quarter, period_year, goals,
    overall_score, rating, status, manager_comment, employee_comment, reviewed_by, reviewed_at
"""


def _goals_to_storage(goals: tuple[Goal, ...]) -> Optional[str]:
    return dump_json(
        [
            {
                "name": g.name,
                "target": str(g.target),
                "actual": str(g.actual) if g.actual is not None else None,
                "weight": str(g.weight),
                "unit": g.unit,
            }
            for g in goals
        ]
    )


def _row_to_review(r: dict) -> PerformanceReview:
    score = r.get("overall_score")
    rating = r.get("rating")
    return PerformanceReview(
        kpi_id=int(r["kpi_id"]),
        employee_id=str(r["employee_id"]),
        period=ReviewPeriod(
            type=KPIPeriodType(r["period_type"]),
            year=int(r["period_year"]),
            month=r.get("period_month"),
            quarter=r.get("period_quarter"),
        ),
        goals=goals_from_storage(load_json(r.get("goals"), [])),
        overall_score=Decimal(score) if score is not None else None,
        rating=KPIRating(rating) if rating else None,
        status=KPIStatus(r["status"]),
        manager_comment=r.get("manager_comment"),
        employee_comment=r.get("employee_comment"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
    )


def _row_values(review: PerformanceReview) -> tuple:
    return (
        review.employee_id,
        review.period.type.value,
        review.period.month,
        review.period.quarter,
        review.period.year,
        _goals_to_storage(review.goals),
        review.overall_score,
        review.rating.value if review.rating else None,
        review.status.value,
        review.manager_comment,
        review.employee_comment,
        review.reviewed_by,
        review.reviewed_at,
    )


class MySQLKPIRepository(KPIRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, kpi_id: int) -> Optional[PerformanceReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM kpi_reviews WHERE kpi_id=%s", (int(kpi_id),))
            r = fetchone(cur)
            return _row_to_review(r) if r else None

    def create(self, review: PerformanceReview) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kpi_reviews(
                    employee_id, period_type, period_month, period_quarter, period_year, goals,
                    overall_score, rating, status, manager_comment, employee_comment, reviewed_by, reviewed_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _row_values(review),
            )
            return int(cur.lastrowid)

    def update(self, review: PerformanceReview) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE kpi_reviews
                SET employee_id=%s, period_type=%s, period_month=%s, period_quarter=%s, period_year=%s,
                    goals=%s, overall_score=%s, rating=%s, status=%s, manager_comment=%s,
                    employee_comment=%s, reviewed_by=%s, reviewed_at=%s
                WHERE kpi_id=%s
                """,
                (*_row_values(review), int(review.kpi_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 FROM kpi_reviews WHERE kpi_id=%s", (int(review.kpi_id),))
            return fetchone(cur) is not None
