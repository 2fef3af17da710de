from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.numbers import as_float, to_decimal
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Location:
    """Where the employee was when checking in or out (as sent by the client)."""

    latitude: Decimal
    longitude: Decimal
    address: Optional[str] = None

    @classmethod
    def from_payload(cls, raw: Any) -> Optional["Location"]:
        if raw is None:
            return None
        if not isinstance(raw, Mapping):
            raise ValidationError("location must be an object", field="location")
        if raw.get("latitude") is None or raw.get("longitude") is None:
            raise ValidationError("location needs latitude and longitude", field="location")
        latitude = to_decimal(raw["latitude"], "location.latitude")
        longitude = to_decimal(raw["longitude"], "location.longitude")
        if not -90 <= latitude <= 90:
            raise ValidationError("latitude must be between -90 and 90", field="location.latitude")
        if not -180 <= longitude <= 180:
            raise ValidationError("longitude must be between -180 and 180", field="location.longitude")
        address = raw.get("address")
        return cls(latitude=latitude, longitude=longitude, address=str(address) if address else None)

    def to_dict(self) -> dict:
        return {"latitude": float(self.latitude), "longitude": float(self.longitude), "address": self.address}


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công.

    Open while check_out is None; closed once check_out is set.
    """

    attendance_id: int
    employee_id: str
    work_date: date
    check_in: datetime
    check_out: Optional[datetime]
    status: AttendanceStatus
    work_hours: Optional[Decimal] = None
    overtime_hours: Optional[Decimal] = None
    notes: Optional[str] = None
    location: Optional[Location] = None

    @property
    def is_open(self) -> bool:
        return self.check_out is None

    def with_changes(self, **changes) -> "AttendanceRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employee": self.employee_id,
            "date": self.work_date.isoformat(),
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat() if self.check_out else None,
            "status": self.status.value,
            "work_hours": as_float(self.work_hours),
            "overtime_hours": as_float(self.overtime_hours),
            "notes": self.notes,
            "location": self.location.to_dict() if self.location else None,
        }


@dataclass(frozen=True)
class NewAttendance:
    employee_id: str
    work_date: date
    check_in: datetime
    status: AttendanceStatus
    check_out: Optional[datetime] = None
    work_hours: Optional[Decimal] = None
    overtime_hours: Optional[Decimal] = None
    notes: Optional[str] = None
    location: Optional[Location] = None


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    late: int
    absent: int
    half_day: int
    overtime: int
    total_work_hours: Decimal

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "late": self.late,
            "absent": self.absent,
            "half_day": self.half_day,
            "overtime": self.overtime,
            "total_work_hours": as_float(self.total_work_hours),
        }
