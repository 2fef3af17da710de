from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


def _name_of(value: Any, *keys: str) -> Optional[str]:
    # department/position arrive populated ({"name": ...}) or as a bare id/string
    if isinstance(value, Mapping):
        for key in keys:
            if value.get(key):
                return str(value[key])
        return None
    return str(value) if value else None


@dataclass(frozen=True)
class EmployeeSummary:
    """Display attributes of an employee, as served by the employee service."""

    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    employee_code: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "EmployeeSummary":
        return cls(
            id=str(data.get("_id") or data.get("id")),
            first_name=str(data.get("firstName") or ""),
            last_name=str(data.get("lastName") or ""),
            email=data.get("email"),
            employee_code=data.get("employeeId"),
            department=_name_of(data.get("department"), "name"),
            position=_name_of(data.get("position"), "title", "name"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "employee_code": self.employee_code,
            "department": self.department,
            "position": self.position,
        }


@dataclass(frozen=True)
class RosterEntry:
    """An active employee and the base salary payroll should be seeded from.

    `base_salary` is kept as served; the payroll run validates it per employee.
    """

    employee_id: str
    base_salary: Any

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "RosterEntry":
        return cls(
            employee_id=str(data.get("_id") or data.get("id")),
            base_salary=data.get("salary", data.get("baseSalary")),
        )
