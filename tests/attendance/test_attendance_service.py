from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.hrm_core.hrm_core.attendance.hours import worked_time
from src.hrm_core.hrm_core.attendance.service import AttendanceService
from src.hrm_core.hrm_core.core.enums import AttendanceStatus, Role
from src.hrm_core.hrm_core.core.exceptions import AuthorizationError, ConflictError, ValidationError


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, 15, hour, minute)


@pytest.fixture
def service(attendance_repo):
    return AttendanceService(attendance_repo)


def test_checkin_before_cutoff_is_present(service, fixed_now):
    rec = service.check_in("E1", now=fixed_now)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.work_date == fixed_now.date()
    assert rec.is_open


def test_checkin_after_cutoff_is_late(service):
    rec = service.check_in("E1", now=at(9, 15))

    assert rec.status == AttendanceStatus.LATE
    assert rec.notes == "Late 15 min"


def test_full_day_keeps_status_and_counts_overtime(service):
    service.check_in("E1", now=at(9, 0))

    rec = service.check_out("E1", now=at(17, 30))

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.work_hours == Decimal("8.50")
    assert rec.overtime_hours == Decimal("0.50")


def test_late_full_day_stays_late(service):
    service.check_in("E1", now=at(9, 15))

    rec = service.check_out("E1", now=at(17, 0))

    assert rec.status == AttendanceStatus.LATE
    assert rec.work_hours == Decimal("7.75")
    assert rec.overtime_hours == Decimal("0")


def test_short_day_becomes_half_day(service, attendance_repo):
    service.check_in("E1", now=at(9, 0))

    rec = service.check_out("E1", now=at(12, 0))

    assert rec.status == AttendanceStatus.HALF_DAY
    assert rec.work_hours == Decimal("3.00")
    assert attendance_repo.get_by_id(rec.attendance_id).status == AttendanceStatus.HALF_DAY


def test_second_checkin_same_day_conflicts(service):
    service.check_in("E1", now=at(8, 0))

    with pytest.raises(ConflictError):
        service.check_in("E1", now=at(8, 5))


def test_checkout_without_checkin_rejected(service):
    with pytest.raises(ValidationError):
        service.check_out("E1", now=at(17, 0))


def test_second_checkout_rejected(service):
    service.check_in("E1", now=at(8, 0))
    service.check_out("E1", now=at(17, 0))

    with pytest.raises(ValidationError):
        service.check_out("E1", now=at(18, 0))


def test_today_status_flags(service):
    assert service.today_status("E1", today=date(2024, 3, 15)).can_check_in

    service.check_in("E1", now=at(8, 0))
    status = service.today_status("E1", today=date(2024, 3, 15))

    assert not status.can_check_in
    assert status.can_check_out


def test_backfill_requires_privileged_role(service):
    with pytest.raises(AuthorizationError):
        service.backfill_create(current_role=Role.EMPLOYEE, payload={"employee_id": "E1"})


def test_backfill_derives_hours_and_half_day(service):
    rec = service.backfill_create(
        current_role=Role.HR,
        payload={
            "employee_id": "E2",
            "check_in": "2024-03-10T08:30:00",
            "check_out": "2024-03-10T11:00:00",
        },
    )

    assert rec.work_date == date(2024, 3, 10)
    assert rec.work_hours == Decimal("2.50")
    assert rec.status == AttendanceStatus.HALF_DAY


def test_admin_edit_recomputes_from_new_checkout(service):
    service.check_in("E1", now=at(9, 0))
    rec = service.check_out("E1", now=at(11, 0))
    assert rec.status == AttendanceStatus.HALF_DAY

    fixed = service.update_record(
        current_role=Role.ADMIN,
        current_employee_id=None,
        attendance_id=rec.attendance_id,
        payload={"check_out": "2024-03-15T18:00:00"},
    )

    assert fixed.status == AttendanceStatus.PRESENT
    assert fixed.work_hours == Decimal("9.00")
    assert fixed.overtime_hours == Decimal("1.00")


def test_admin_explicit_absent_is_kept(service):
    rec = service.check_in("E1", now=at(9, 0))

    edited = service.update_record(
        current_role=Role.HR,
        current_employee_id=None,
        attendance_id=rec.attendance_id,
        payload={"status": "absent", "check_out": "2024-03-15T10:00:00"},
    )

    assert edited.status == AttendanceStatus.ABSENT
    assert edited.work_hours == Decimal("1.00")


def test_employee_cannot_edit_someone_elses_record(service):
    rec = service.check_in("E1", now=at(9, 0))

    with pytest.raises(AuthorizationError):
        service.update_record(
            current_role=Role.EMPLOYEE,
            current_employee_id="E2",
            attendance_id=rec.attendance_id,
            payload={"notes": "hi"},
        )


def test_employee_cannot_rewrite_closed_checkout(service):
    service.check_in("E1", now=at(9, 0))
    rec = service.check_out("E1", now=at(17, 0))

    with pytest.raises(ValidationError):
        service.update_record(
            current_role=Role.EMPLOYEE,
            current_employee_id="E1",
            attendance_id=rec.attendance_id,
            payload={"check_out": "2024-03-15T20:00:00"},
        )


def test_employee_edit_ignores_status_field(service):
    rec = service.check_in("E1", now=at(9, 30))

    edited = service.update_record(
        current_role=Role.EMPLOYEE,
        current_employee_id="E1",
        attendance_id=rec.attendance_id,
        payload={"status": "present", "notes": "train delay"},
    )

    assert edited.status == AttendanceStatus.LATE
    assert edited.notes == "train delay"


def test_stats_counts_by_status(service):
    service.backfill_create(
        current_role=Role.HR,
        payload={"employee_id": "E1", "check_in": "2024-03-11T08:50:00", "check_out": "2024-03-11T17:00:00"},
    )
    service.backfill_create(
        current_role=Role.HR,
        payload={"employee_id": "E1", "check_in": "2024-03-12T09:20:00", "check_out": "2024-03-12T17:20:00"},
    )
    service.backfill_create(
        current_role=Role.HR,
        payload={"employee_id": "E1", "check_in": "2024-03-13T09:00:00", "check_out": "2024-03-13T11:00:00"},
    )

    stats = service.stats("E1", start_date="2024-03-01", end_date="2024-03-31")

    assert stats.total == 3
    assert stats.present == 1
    assert stats.late == 1
    assert stats.half_day == 1
    assert stats.total_work_hours == Decimal("18.17")


def test_worked_time_rejects_reversed_stamps():
    with pytest.raises(ValidationError):
        worked_time(at(17, 0), at(9, 0))


def test_late_then_short_day_becomes_half_day(service):
    service.check_in("E1", now=at(9, 15))

    rec = service.check_out("E1", now=at(12, 15))

    assert rec.status == AttendanceStatus.HALF_DAY
    assert rec.work_hours == Decimal("3.00")


def test_worked_time_rejects_more_than_a_day():
    with pytest.raises(ValidationError) as exc:
        worked_time(datetime(2024, 3, 1, 9, 0), datetime(2024, 3, 2, 9, 1))

    assert exc.value.field == "check_out"


def test_worked_time_accepts_exactly_a_day():
    worked = worked_time(datetime(2024, 3, 1, 9, 0), datetime(2024, 3, 2, 9, 0))

    assert worked.work_hours == Decimal("24.00")


def test_backfill_spanning_weeks_rejected(service, attendance_repo):
    with pytest.raises(ValidationError):
        service.backfill_create(
            current_role=Role.HR,
            payload={
                "employee_id": "E1",
                "check_in": "2024-03-01T09:00:00",
                "check_out": "2024-03-20T09:00:00",
            },
        )

    assert attendance_repo.list_for_employee("E1") == []


def test_checkin_stores_location(service, attendance_repo):
    rec = service.check_in(
        "E1",
        now=at(8, 55),
        location={"latitude": 10.7769, "longitude": 106.7009, "address": "District 1"},
    )

    stored = attendance_repo.get_by_id(rec.attendance_id)
    assert stored.location.latitude == Decimal("10.7769")
    assert stored.location.address == "District 1"
    assert rec.to_dict()["location"] == {"latitude": 10.7769, "longitude": 106.7009, "address": "District 1"}


def test_checkout_without_location_keeps_checkin_location(service, attendance_repo):
    service.check_in("E1", now=at(8, 55), location={"latitude": 10.0, "longitude": 106.0})

    rec = service.check_out("E1", now=at(17, 0))

    assert rec.location.latitude == Decimal("10.0")
    assert attendance_repo.get_by_id(rec.attendance_id).location.longitude == Decimal("106.0")


def test_checkout_location_replaces_checkin_location(service, attendance_repo):
    service.check_in("E1", now=at(8, 55), location={"latitude": 10.0, "longitude": 106.0})

    rec = service.check_out("E1", now=at(17, 0), location={"latitude": 21.0285, "longitude": 105.8542})

    assert attendance_repo.get_by_id(rec.attendance_id).location.latitude == Decimal("21.0285")


def test_checkin_without_location_leaves_it_empty(service):
    rec = service.check_in("E1", now=at(8, 55))

    assert rec.location is None
    assert rec.to_dict()["location"] is None


@pytest.mark.parametrize(
    "location",
    [
        "10.1,106.2",
        {"latitude": 10.0},
        {"latitude": "north", "longitude": 106.0},
        {"latitude": 91, "longitude": 106.0},
        {"latitude": 10.0, "longitude": -181},
    ],
)
def test_checkin_rejects_bad_location(service, attendance_repo, location):
    with pytest.raises(ValidationError) as exc:
        service.check_in("E1", now=at(8, 55), location=location)

    assert exc.value.field.startswith("location")
    assert attendance_repo.list_for_employee("E1") == []


def test_admin_edit_can_set_location(service):
    rec = service.check_in("E1", now=at(9, 0))

    edited = service.update_record(
        current_role=Role.ADMIN,
        current_employee_id=None,
        attendance_id=rec.attendance_id,
        payload={"location": {"latitude": 16.0544, "longitude": 108.2022, "address": "Da Nang office"}},
    )

    assert edited.location.address == "Da Nang office"


def test_employee_edit_ignores_location(service):
    rec = service.check_in("E1", now=at(9, 0), location={"latitude": 10.0, "longitude": 106.0})

    edited = service.update_record(
        current_role=Role.EMPLOYEE,
        current_employee_id="E1",
        attendance_id=rec.attendance_id,
        payload={"location": {"latitude": 0, "longitude": 0}, "notes": "forgot badge"},
    )

    assert edited.location.latitude == Decimal("10.0")
