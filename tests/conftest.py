from __future__ import annotations

from datetime import datetime, time
from types import SimpleNamespace

import pytest

from fakes import (
    FixedClock,
    InMemoryAdvances,
    InMemoryAttendance,
    InMemoryBonusAdjustments,
    InMemorySalaryAdjustments,
    InMemoryShifts,
    InMemoryUsers,
    InMemoryViolationAdjustments,
    InMemoryViolations,
    make_user,
)
from payroll_system.common.auth import TokenUser, issue_token
from payroll_system.container import build_services
from payroll_system.core.enums import DeductionType, Role, ShiftType, SickLeaveDeduction
from payroll_system.shifts.model import Shift, ShiftDeduction
from payroll_system.users.model import User

JWT_SECRET = "test-jwt-secret"

# Saturday to Thursday; Friday (5) is the weekly day off.
SAT_TO_THU = (0, 1, 2, 3, 4, 6)


@pytest.fixture
def morning_shift() -> Shift:
    return Shift(
        shift_id=1,
        shift_name="Morning",
        shift_type=ShiftType.MORNING,
        start_time=time(8, 0),
        end_time=time(17, 0),
        base_hours=9,
        max_overtime_hours=5,
        work_days=SAT_TO_THU,
        grace_period=30,
        deductions=(
            ShiftDeduction(type=DeductionType.QUARTER, start=time(8, 16), end=time(9, 0)),
            ShiftDeduction(type=DeductionType.HALF, start=time(9, 1), end=time(11, 0)),
        ),
        sick_leave_deduction=SickLeaveDeduction.HALF,
    )


@pytest.fixture
def evening_shift() -> Shift:
    return Shift(
        shift_id=2,
        shift_name="Night",
        shift_type=ShiftType.EVENING,
        start_time=time(20, 0),
        end_time=time(5, 0),
        base_hours=9,
        max_overtime_hours=3,
        work_days=(0, 1, 2, 3, 4, 5, 6),
        cross_day=True,
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 31, 12, 0))


@pytest.fixture
def repos(morning_shift, evening_shift) -> SimpleNamespace:
    users = InMemoryUsers(
        [
            make_user(1, "admin", shift_id=None, role=Role.ADMIN, name="Administrator"),
            make_user(2, "1001", name="Ahmed Ali"),
            make_user(3, "1002", shift_id=2, name="Sara Omar"),
        ]
    )
    return SimpleNamespace(
        users=users,
        shifts=InMemoryShifts([morning_shift, evening_shift]),
        attendance=InMemoryAttendance(),
        advances=InMemoryAdvances(),
        violations=InMemoryViolations(),
        violation_adjustments=InMemoryViolationAdjustments(),
        salary_adjustments=InMemorySalaryAdjustments(),
        bonus_adjustments=InMemoryBonusAdjustments(),
    )


@pytest.fixture
def container(repos, clock, tmp_path):
    return build_services(
        users_repo=repos.users,
        shifts_repo=repos.shifts,
        attendance_repo=repos.attendance,
        advances_repo=repos.advances,
        violations_repo=repos.violations,
        violation_adjustments_repo=repos.violation_adjustments,
        salary_adjustments_repo=repos.salary_adjustments,
        bonus_adjustments_repo=repos.bonus_adjustments,
        jwt_secret=JWT_SECRET,
        upload_folder=str(tmp_path / "Uploads"),
        clock=clock,
    )


def token_user(user: User) -> TokenUser:
    return TokenUser(
        user_id=user.user_id,
        employee_code=user.employee_code,
        name=user.name,
        department=user.department,
        role=user.role,
    )


@pytest.fixture
def admin(repos) -> TokenUser:
    return token_user(repos.users.get_by_employee_code("admin"))


@pytest.fixture
def employee(repos) -> TokenUser:
    return token_user(repos.users.get_by_employee_code("1001"))


@pytest.fixture
def app(container):
    from payroll_system.main import create_app

    return create_app(container=container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(admin) -> dict:
    return {"Authorization": f"Bearer {issue_token(admin, secret=JWT_SECRET)}"}


@pytest.fixture
def employee_headers(employee) -> dict:
    return {"Authorization": f"Bearer {issue_token(employee, secret=JWT_SECRET)}"}
