from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.logger import AuditLogger
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .common.datetime_utils import parse_time_of_day
from .core.constants import (
    DEFAULT_DIRECTORY_TIMEOUT_SECONDS,
    DEFAULT_HALF_DAY_THRESHOLD_HOURS,
    DEFAULT_LATE_CUTOFF,
    DEFAULT_STANDARD_WORK_HOURS,
)
from .database.connection import DBConfig, DatabaseConnection
from .directory.client import EmployeeDirectory, HttpEmployeeDirectory
from .kpi.mysql_kpi_repository import MySQLKPIRepository
from .kpi.repository import KPIRepository
from .kpi.service import KPIService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.batch import PayrollBatchRunner
from .payroll.calculator.standard_calculator import StandardSalaryCalculator
from .payroll.mysql_compensation_repository import MySQLCompensationRepository
from .payroll.repository import CompensationRepository
from .payroll.service import CompensationService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    compensation_repo: CompensationRepository
    attendance_repo: AttendanceRepository
    kpi_repo: KPIRepository
    leave_repo: LeaveRepository
    audit_repo: AuditRepository
    directory: EmployeeDirectory

    compensation_service: CompensationService
    payroll_batch_runner: PayrollBatchRunner
    attendance_service: AttendanceService
    kpi_service: KPIService
    leave_service: LeaveService


def wire_services(
    *,
    compensation_repo: CompensationRepository,
    attendance_repo: AttendanceRepository,
    kpi_repo: KPIRepository,
    leave_repo: LeaveRepository,
    audit_repo: AuditRepository,
    directory: EmployeeDirectory,
    settings: Any = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of already constructed repositories.

    Used by build_container with the MySQL repositories, and by the tests with
    in-memory ones.
    """

    late_cutoff = parse_time_of_day(getattr(settings, "LATE_CUTOFF", DEFAULT_LATE_CUTOFF))
    half_day_threshold = float(getattr(settings, "HALF_DAY_THRESHOLD_HOURS", DEFAULT_HALF_DAY_THRESHOLD_HOURS))
    standard_hours = float(getattr(settings, "STANDARD_WORK_HOURS", DEFAULT_STANDARD_WORK_HOURS))

    calculator = StandardSalaryCalculator()

    compensation_service = CompensationService(
        compensation_repo,
        calculator=calculator,
        audit=AuditLogger(audit_repo, module="salary"),
    )
    payroll_batch_runner = PayrollBatchRunner(
        compensation_repo,
        directory,
        calculator=calculator,
        audit=AuditLogger(audit_repo, module="payroll"),
    )
    attendance_service = AttendanceService(
        attendance_repo,
        strategy_factory=AttendanceStrategyFactory(half_day_threshold_hours=half_day_threshold),
        late_cutoff=late_cutoff,
        standard_work_hours=standard_hours,
    )
    kpi_service = KPIService(kpi_repo, audit=AuditLogger(audit_repo, module="kpi"))
    leave_service = LeaveService(leave_repo, audit=AuditLogger(audit_repo, module="leave"))

    return Container(
        conn=conn,
        compensation_repo=compensation_repo,
        attendance_repo=attendance_repo,
        kpi_repo=kpi_repo,
        leave_repo=leave_repo,
        audit_repo=audit_repo,
        directory=directory,
        compensation_service=compensation_service,
        payroll_batch_runner=payroll_batch_runner,
        attendance_service=attendance_service,
        kpi_service=kpi_service,
        leave_service=leave_service,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    directory = HttpEmployeeDirectory(
        str(getattr(settings, "EMPLOYEE_SERVICE_URL", "http://localhost:5000")),
        service_key=getattr(settings, "SERVICE_KEY", None),
        timeout=float(getattr(settings, "DIRECTORY_TIMEOUT_SECONDS", DEFAULT_DIRECTORY_TIMEOUT_SECONDS)),
    )

    return wire_services(
        compensation_repo=MySQLCompensationRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        kpi_repo=MySQLKPIRepository(conn),
        leave_repo=MySQLLeaveRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        directory=directory,
        settings=settings,
        conn=conn,
    )
