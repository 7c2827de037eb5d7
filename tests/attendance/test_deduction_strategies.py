from datetime import datetime

import pytest

from payroll_system.attendance.factory import DeductionStrategyFactory
from payroll_system.attendance.strategies.cross_day_strategy import CrossDayStrategy
from payroll_system.attendance.strategies.morning_strategy import MorningStrategy
from payroll_system.core.enums import AttendanceStatus


def _calc(shift, check_in, check_out, grace, leave_allowance=False):
    return DeductionStrategyFactory().for_shift(shift).calculate(
        shift=shift,
        check_in=check_in,
        check_out=check_out,
        remaining_grace=grace,
        leave_allowance=leave_allowance,
    )


def test_factory_picks_strategy_by_shift_type(morning_shift, evening_shift):
    factory = DeductionStrategyFactory()
    assert isinstance(factory.for_shift(morning_shift), MorningStrategy)
    assert isinstance(factory.for_shift(evening_shift), CrossDayStrategy)


def test_arrival_before_first_window_is_not_late(morning_shift):
    result = _calc(morning_shift, datetime(2025, 3, 2, 8, 10), datetime(2025, 3, 2, 17, 10), grace=30)

    assert result.status == AttendanceStatus.PRESENT
    assert result.delay_minutes == 0
    assert result.deducted_days == 0
    assert result.remaining_grace == 30


def test_delay_within_grace_consumes_budget(morning_shift):
    result = _calc(morning_shift, datetime(2025, 3, 2, 8, 20), datetime(2025, 3, 2, 17, 30), grace=30)

    assert result.delay_minutes == 20
    assert result.deducted_days == 0
    assert result.remaining_grace == 10
    assert result.overtime_hours == pytest.approx(0.17)


def test_delay_beyond_grace_takes_window_fraction(morning_shift):
    quarter = _calc(morning_shift, datetime(2025, 3, 2, 8, 20), datetime(2025, 3, 2, 17, 20), grace=10)
    half = _calc(morning_shift, datetime(2025, 3, 2, 9, 30), datetime(2025, 3, 2, 18, 30), grace=0)

    assert quarter.deducted_days == 0.25
    assert quarter.remaining_grace == 0
    assert half.deducted_days == 0.5
    assert half.status == AttendanceStatus.LATE


def test_delay_outside_windows_is_deducted_in_hours(morning_shift):
    result = _calc(morning_shift, datetime(2025, 3, 2, 12, 0), datetime(2025, 3, 2, 17, 0), grace=0)

    assert result.deducted_days == 0
    # 4 hours late and 4 hours short of base hours: counted once
    assert result.deducted_hours == pytest.approx(4.0)


def test_grace_left_is_taken_off_a_delay_outside_windows(morning_shift):
    result = _calc(morning_shift, datetime(2025, 3, 2, 12, 0), datetime(2025, 3, 2, 21, 0), grace=30)

    assert result.delay_minutes == 210
    assert result.deducted_hours == pytest.approx(3.5)
    assert result.remaining_grace == 0
    assert result.status == AttendanceStatus.LATE


def test_no_punches_is_absent(morning_shift):
    result = _calc(morning_shift, None, None, grace=30)

    assert result.status == AttendanceStatus.ABSENT
    assert result.deducted_days == 1.0
    assert result.remaining_grace == 30


def test_missing_check_out_counts_base_hours_missing(morning_shift):
    result = _calc(morning_shift, datetime(2025, 3, 2, 8, 0), None, grace=30)

    assert result.deducted_hours == pytest.approx(9.0)
    assert result.overtime_hours == 0


def test_cross_day_overtime_is_capped(evening_shift):
    result = _calc(evening_shift, datetime(2025, 3, 2, 20, 0), datetime(2025, 3, 3, 9, 0), grace=0)

    assert result.status == AttendanceStatus.PRESENT
    assert result.delay_minutes == 0
    assert result.overtime_hours == pytest.approx(3.0)


def test_leave_allowance_doubles_worked_hours(morning_shift):
    result = _calc(
        morning_shift, datetime(2025, 3, 7, 8, 0), datetime(2025, 3, 7, 12, 0), grace=30, leave_allowance=True
    )

    assert result.overtime_hours == pytest.approx(8.0)
