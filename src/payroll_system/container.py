from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .advances.mysql_advance_repository import MySQLAdvanceRepository
from .advances.service import AdvanceService
from .attendance.factory import DeductionStrategyFactory
from .attendance.leave_service import LeaveService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MEAL_DEDUCTION_PER_DAY
from .database.connection import DBConfig, DatabaseConnection
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_adjustment_repository import MySQLBonusAdjustmentRepository, MySQLSalaryAdjustmentRepository
from .payroll.service import PayrollService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .violations.mysql_violation_repository import MySQLViolationAdjustmentRepository, MySQLViolationRepository
from .violations.service import ViolationService
from .violations.storage import ImageStore


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    user_service: UserService
    shift_service: ShiftService
    attendance_service: AttendanceService
    leave_service: LeaveService
    advance_service: AdvanceService
    violation_service: ViolationService
    payroll_service: PayrollService
    images: ImageStore
    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo: Any,
    shifts_repo: Any,
    attendance_repo: Any,
    advances_repo: Any,
    violations_repo: Any,
    violation_adjustments_repo: Any,
    salary_adjustments_repo: Any,
    bonus_adjustments_repo: Any,
    jwt_secret: str,
    jwt_expires_minutes: int = 60,
    upload_folder: str = "Uploads",
    meal_deduction_per_day: float = DEFAULT_MEAL_DEDUCTION_PER_DAY,
    clock: Any = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, in-memory in tests)."""
    clock_kwargs = {"clock": clock} if clock is not None else {}

    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        shifts_repo,
        strategy_factory=DeductionStrategyFactory(),
        **clock_kwargs,
    )
    leave_service = LeaveService(attendance_repo, users_repo, shifts_repo, ledger=attendance_service.ledger)
    advance_service = AdvanceService(advances_repo, users_repo, **clock_kwargs)
    images = ImageStore(upload_folder)
    violation_service = ViolationService(violations_repo, violation_adjustments_repo, users_repo, images=images)
    payroll_service = PayrollService(
        users_repo,
        shifts_repo,
        salary_adjustments_repo,
        bonus_adjustments_repo,
        attendance_service=attendance_service,
        advance_service=advance_service,
        violation_service=violation_service,
        calculator=StandardPayrollCalculator(meal_deduction_per_day=meal_deduction_per_day),
    )

    return Container(
        auth_service=AuthService(users_repo, jwt_secret=jwt_secret, expires_minutes=jwt_expires_minutes),
        user_service=UserService(users_repo, shifts_repo),
        shift_service=ShiftService(shifts_repo, users_repo),
        attendance_service=attendance_service,
        leave_service=leave_service,
        advance_service=advance_service,
        violation_service=violation_service,
        payroll_service=payroll_service,
        images=images,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        advances_repo=MySQLAdvanceRepository(conn),
        violations_repo=MySQLViolationRepository(conn),
        violation_adjustments_repo=MySQLViolationAdjustmentRepository(conn),
        salary_adjustments_repo=MySQLSalaryAdjustmentRepository(conn),
        bonus_adjustments_repo=MySQLBonusAdjustmentRepository(conn),
        jwt_secret=str(getattr(settings, "JWT_SECRET", "")),
        jwt_expires_minutes=int(getattr(settings, "JWT_EXPIRES_MINUTES", 60)),
        upload_folder=str(getattr(settings, "UPLOAD_FOLDER", "Uploads")),
        meal_deduction_per_day=float(getattr(settings, "MEAL_DEDUCTION_PER_DAY", DEFAULT_MEAL_DEDUCTION_PER_DAY)),
        conn=conn,
    )
