from dataclasses import replace
from datetime import date

import pytest

from fakes import make_user
from payroll_system.core.enums import AttendanceStatus
from payroll_system.core.exceptions import NotFoundError, ValidationError


def _statuses(repos, code):
    return {r.work_date: r.status for r in repos.attendance.list_range(employee_code=code)}


def test_annual_leave_charges_one_day_per_calendar_day(container, repos):
    result = container.leave_service.apply_annual_leave("2025-03-10", "2025-03-12", "1001")

    assert result["employees"] == ["1001"]
    assert set(_statuses(repos, "1001").values()) == {AttendanceStatus.ANNUAL_LEAVE}
    assert repos.users.get_by_employee_code("1001").annual_leave_balance == 18


def test_reapplying_annual_leave_costs_nothing_extra(container, repos):
    container.leave_service.apply_annual_leave("2025-03-10", "2025-03-12", "1001")
    container.leave_service.apply_annual_leave("2025-03-10", "2025-03-12", "1001")

    assert len(repos.attendance.list_range(employee_code="1001")) == 3
    assert repos.users.get_by_employee_code("1001").annual_leave_balance == 18


def test_annual_leave_requires_enough_balance(container, repos):
    user = repos.users.get_by_employee_code("1001")
    repos.users.update(replace(user, annual_leave_balance=2))

    with pytest.raises(ValidationError, match="Insufficient"):
        container.leave_service.apply_annual_leave("2025-03-10", "2025-03-12", "1001")


def test_annual_leave_for_everyone_skips_short_balances(container, repos):
    user = repos.users.get_by_employee_code("1002")
    repos.users.update(replace(user, annual_leave_balance=1))

    result = container.leave_service.apply_annual_leave("2025-03-10", "2025-03-11", apply_to_all=True)

    assert result["employees"] == ["1001"]
    assert result["skippedEmployeeCodes"] == ["1002"]
    assert _statuses(repos, "1002") == {}


def test_official_leave_for_everyone_skips_users_without_shift(container, repos):
    result = container.leave_service.apply_official_leave("2025-03-20", "2025-03-21", apply_to_all=True)

    assert sorted(result["employees"]) == ["1001", "1002"]
    assert _statuses(repos, "admin") == {}
    record = repos.attendance.on("1001", date(2025, 3, 20))
    assert record.status == AttendanceStatus.OFFICIAL_LEAVE
    assert record.is_official_leave
    assert record.deducted_days == 0


def test_official_leave_refunds_overwritten_annual_leave(container, repos):
    container.leave_service.apply_annual_leave("2025-03-10", "2025-03-10", "1001")
    container.leave_service.apply_official_leave("2025-03-10", "2025-03-10", "1001")

    assert repos.users.get_by_employee_code("1001").annual_leave_balance == 21


def test_sick_leave_lands_on_work_days_only(container, repos):
    # Thursday to Saturday; Friday is the weekly day off
    container.leave_service.apply_sick_leave("2025-03-06", "2025-03-08", "1001")

    statuses = _statuses(repos, "1001")
    assert statuses == {date(2025, 3, 6): AttendanceStatus.SICK_LEAVE, date(2025, 3, 8): AttendanceStatus.SICK_LEAVE}
    assert repos.attendance.on("1001", date(2025, 3, 6)).deducted_days == 0.5


def test_unknown_employee(container):
    with pytest.raises(NotFoundError):
        container.leave_service.apply_official_leave("2025-03-10", "2025-03-10", "nobody")


def test_employee_without_shift(container, repos):
    repos.users.add(make_user(9, "3003", shift_id=None))

    with pytest.raises(ValidationError):
        container.leave_service.apply_official_leave("2025-03-10", "2025-03-10", "3003")


def test_target_is_required(container):
    with pytest.raises(ValidationError):
        container.leave_service.apply_official_leave("2025-03-10", "2025-03-10")


def test_dates_are_required_and_ordered(container):
    with pytest.raises(ValidationError):
        container.leave_service.apply_official_leave("", "2025-03-10", "1001")
    with pytest.raises(ValidationError):
        container.leave_service.apply_official_leave("2025-03-10", "2025-03-01", "1001")
