import io
from datetime import date, datetime

import pytest

from payroll_system.core.enums import AttendanceStatus
from payroll_system.core.exceptions import NotFoundError, ValidationError

PUNCHES = b"""No.,Date/Time
1001,2025-03-02 08:20
1001,2025-03-02 17:30
1001,2025-03-03 08:25
1001,2025-03-03 17:00
1001,2025-03-04 08:20
1001,2025-03-04 17:00
4242,2025-03-04 08:00
"""


@pytest.fixture
def imported(container):
    return container.attendance_service.import_punches(io.BytesIO(PUNCHES), "march.csv")


def test_import_saves_records_and_reports_unknown_codes(imported):
    assert imported == {"saved": 3, "employees": ["1001"], "skippedEmployeeCodes": ["4242"]}


def test_import_chains_grace_through_the_month(imported, repos):
    day2 = repos.attendance.on("1001", date(2025, 3, 2))
    day3 = repos.attendance.on("1001", date(2025, 3, 3))
    day4 = repos.attendance.on("1001", date(2025, 3, 4))

    assert day2.delay_minutes == 20
    assert day2.remaining_grace_period == 10
    assert day2.deducted_days == 0
    # 25 minutes late with only 10 left: quarter-day window applies
    assert day3.deducted_days == 0.25
    assert day3.deducted_hours == pytest.approx(0.42)
    assert day4.deducted_days == 0.25
    assert repos.users.get_by_employee_code("1001").remaining_grace_period == 0


def test_reimport_replaces_instead_of_duplicating(container, imported, repos):
    container.attendance_service.import_punches(io.BytesIO(PUNCHES), "march.csv")

    assert len(repos.attendance.list_range(employee_code="1001")) == 3


def test_import_without_valid_rows_is_rejected(container):
    with pytest.raises(ValidationError):
        container.attendance_service.import_punches(io.BytesIO(b"No.,Date/Time\n,\n"), "empty.csv")


def test_listing_materializes_missing_days_up_to_today(container, imported, clock):
    clock.now = datetime(2025, 3, 10, 9, 0)

    data = container.attendance_service.get_attendance("2025-03-01", "2025-03-31", "1001")

    by_date = {r["date"]: r for r in data["records"]}
    assert len(by_date) == 10
    assert by_date["2025-03-07"]["attendanceStatus"] == "weekly_off"
    assert by_date["2025-03-05"]["attendanceStatus"] == "absent"
    assert "2025-03-11" not in by_date
    assert data["totals"]["totalAttendanceDays"] == 3
    assert data["totals"]["totalAbsentDays"] == 6
    assert data["totals"]["totalWeeklyOffDays"] == 1
    assert data["totals"]["totalDeductedDays"] == pytest.approx(6.5)
    assert data["annualLeaveBalance"] == 21


def test_listing_unknown_employee_fails(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.get_attendance("2025-03-01", "2025-03-31", "nobody")


def test_listing_rejects_reversed_range(container):
    with pytest.raises(ValidationError):
        container.attendance_service.get_attendance("2025-03-31", "2025-03-01")


def test_editing_a_punch_recomputes_the_day(container, imported, repos):
    record = repos.attendance.on("1001", date(2025, 3, 4))

    updated = container.attendance_service.update_record(record.attendance_id, {"checkIn": "08:00"})

    assert updated.check_in == datetime(2025, 3, 4, 8, 0)
    assert updated.deducted_days == 0
    assert updated.status == AttendanceStatus.PRESENT


def test_check_out_before_check_in_rolls_to_next_day(container, imported, repos):
    record = repos.attendance.on("1001", date(2025, 3, 2))

    updated = container.attendance_service.update_record(
        record.attendance_id, {"checkIn": "20:00", "checkOut": "05:00"}
    )

    assert updated.check_out == datetime(2025, 3, 3, 5, 0)


def test_switching_to_annual_leave_and_back_moves_the_balance(container, imported, repos):
    record = repos.attendance.on("1001", date(2025, 3, 3))
    service = container.attendance_service

    on_leave = service.update_record(record.attendance_id, {"attendanceStatus": "annual_leave"})
    assert on_leave.check_in is None and on_leave.check_out is None
    assert repos.users.get_by_employee_code("1001").annual_leave_balance == 20

    service.update_record(record.attendance_id, {"attendanceStatus": "present", "checkIn": "08:00", "checkOut": "17:00"})
    assert repos.users.get_by_employee_code("1001").annual_leave_balance == 21


def test_update_rejects_unknown_status(container, imported, repos):
    record = repos.attendance.on("1001", date(2025, 3, 3))

    with pytest.raises(ValidationError):
        container.attendance_service.update_record(record.attendance_id, {"attendanceStatus": "holiday"})


def test_update_missing_record(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.update_record(999, {"checkIn": "08:00"})


def test_delete_all_refunds_annual_leave(container, imported, repos):
    record = repos.attendance.on("1001", date(2025, 3, 3))
    container.attendance_service.update_record(record.attendance_id, {"attendanceStatus": "annual_leave"})

    deleted = container.attendance_service.delete_all()

    assert deleted == 3
    assert repos.attendance.records == {}
    assert repos.users.get_by_employee_code("1001").annual_leave_balance == 21


def test_export_returns_a_workbook(container, imported):
    output = container.attendance_service.export_attendance("2025-03-01", "2025-03-04", "1001")

    assert output.getvalue()[:2] == b"PK"


def test_overlong_night_shift_is_paid_the_overtime_cap(container, repos):
    night = b"No.,Date/Time\n1002,2025-03-02 20:00\n1002,2025-03-03 20:00\n1002,2025-03-04 05:00\n"
    container.attendance_service.import_punches(io.BytesIO(night), "night.csv")

    split = repos.attendance.on("1002", date(2025, 3, 2))
    following = repos.attendance.on("1002", date(2025, 3, 3))
    assert split.is_split
    assert split.check_out is None
    assert split.overtime_hours == 3
    assert split.deducted_hours == 0
    assert following.check_in == datetime(2025, 3, 3, 20, 0)
    assert following.deducted_hours == 0

    edited = container.attendance_service.update_record(split.attendance_id, {"checkOut": "06:00"})

    assert not edited.is_split
    assert edited.overtime_hours == 1
