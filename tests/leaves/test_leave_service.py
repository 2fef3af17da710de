from __future__ import annotations

import pytest

from src.hrm_core.hrm_core.audit.logger import AuditLogger
from src.hrm_core.hrm_core.core.enums import LeaveStatus, Role
from src.hrm_core.hrm_core.core.exceptions import AuthorizationError, ValidationError
from src.hrm_core.hrm_core.leaves.service import LeaveService

REQUEST = {"leave_type": "annual", "start_date": "2024-01-10", "end_date": "2024-01-12", "reason": "Trip"}


@pytest.fixture
def service(leave_repo, audit_repo):
    return LeaveService(leave_repo, audit=AuditLogger(audit_repo, module="leave"))


def _create(service, **overrides):
    payload = dict(REQUEST, **overrides)
    return service.create(payload, actor_id="u1", actor_role=Role.EMPLOYEE, actor_employee_id="E1")


def test_create_counts_inclusive_days(service):
    leave = _create(service)

    assert leave.days == 3
    assert leave.status == LeaveStatus.PENDING
    assert leave.employee_id == "E1"


def test_employee_cannot_file_for_someone_else(service):
    leave = _create(service, employee_id="E2")

    assert leave.employee_id == "E1"


def test_end_before_start_rejected(service):
    with pytest.raises(ValidationError):
        _create(service, start_date="2024-01-12", end_date="2024-01-10")


def test_unknown_leave_type_rejected(service):
    with pytest.raises(ValidationError):
        _create(service, leave_type="sabbatical")


def test_pending_update_recomputes_days(service):
    leave = _create(service)

    updated = service.update(
        leave.leave_id,
        {"end_date": "2024-01-15"},
        actor_id="u1",
        actor_role=Role.EMPLOYEE,
        actor_employee_id="E1",
    )

    assert updated.days == 6


def test_employee_cannot_update_others_request(service):
    leave = _create(service)

    with pytest.raises(AuthorizationError):
        service.update(leave.leave_id, {"reason": "x"}, actor_id="u2", actor_role=Role.EMPLOYEE, actor_employee_id="E2")


def test_approve_then_employee_date_edit_rejected(service):
    leave = _create(service)
    service.approve(leave.leave_id, actor_id="hr1", actor_role=Role.HR)

    with pytest.raises(ValidationError):
        service.update(
            leave.leave_id,
            {"end_date": "2024-01-20"},
            actor_id="u1",
            actor_role=Role.EMPLOYEE,
            actor_employee_id="E1",
        )


def test_privileged_edit_of_approved_dates_is_audited(service, audit_repo):
    leave = _create(service)
    service.approve(leave.leave_id, actor_id="hr1", actor_role=Role.HR)

    updated = service.update(leave.leave_id, {"end_date": "2024-01-11"}, actor_id="hr1", actor_role=Role.HR)

    assert updated.days == 2
    assert updated.status == LeaveStatus.APPROVED
    entry = audit_repo.entries[-1]
    assert entry.action == "update"
    assert entry.metadata["old"]["days"] == 3
    assert entry.metadata["new"]["days"] == 2


def test_approve_stamps_approver(service):
    leave = _create(service)

    approved = service.approve(leave.leave_id, actor_id="hr1", actor_role=Role.HR, comments="ok")

    assert approved.status == LeaveStatus.APPROVED
    assert approved.approved_by == "hr1"
    assert approved.comments == "ok"


def test_decision_requires_pending(service):
    leave = _create(service)
    service.reject(leave.leave_id, actor_id="hr1", actor_role=Role.ADMIN)

    with pytest.raises(ValidationError):
        service.approve(leave.leave_id, actor_id="hr1", actor_role=Role.ADMIN)


def test_employee_cannot_approve(service):
    leave = _create(service)

    with pytest.raises(AuthorizationError):
        service.approve(leave.leave_id, actor_id="u1", actor_role=Role.EMPLOYEE)
