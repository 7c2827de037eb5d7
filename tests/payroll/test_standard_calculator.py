from dataclasses import replace
from datetime import time

import pytest

from fakes import make_user
from payroll_system.attendance.model import AttendanceTotals
from payroll_system.core.enums import DeductionType, OvertimeBasis
from payroll_system.payroll.calculator.standard_calculator import StandardPayrollCalculator
from payroll_system.payroll.model import BonusAdjustment, SalaryAdjustment
from payroll_system.shifts.model import ShiftDeduction
from payroll_system.violations.model import ViolationAdjustment


@pytest.fixture
def user():
    return make_user(2, "1001", medical_insurance=100.0, social_insurance=200.0)


@pytest.fixture
def totals():
    return AttendanceTotals(
        attendance_days=20,
        absent_days=1,
        deducted_days=1.5,
        deducted_hours=2.0,
        overtime_hours=3.0,
        friday_overtime_hours=1.0,
        leave_allowance_days=1,
    )


@pytest.fixture
def adjustment():
    return SalaryAdjustment(
        employee_code="1001",
        month="2025-03",
        deduction_advances_installment=500.0,
        occasion_bonus=100.0,
        meal_allowance=1500.0,
        penalties=50.0,
    )


@pytest.fixture
def violations():
    return ViolationAdjustment(employee_code="1001", month="2025-03", deduction_violations_installment=200.0)


@pytest.fixture
def shift(morning_shift):
    return replace(
        morning_shift,
        overtime_multiplier=1.5,
        friday_overtime_basis=OvertimeBasis.BASIC_SALARY,
        friday_overtime_multiplier=2.0,
    )


def test_salary_breakdown(user, shift, totals, adjustment, violations):
    result = StandardPayrollCalculator(meal_deduction_per_day=50).salary(
        user=user, shift=shift, totals=totals, adjustment=adjustment, violations=violations
    )

    assert result.daily_rate == 200
    assert result.hourly_rate == pytest.approx(22.22)
    assert result.meal_deduction == 50
    assert result.remaining_meal_allowance == 1450
    assert result.deducted_days_amount == 300
    # window deductions only: hours are not charged
    assert result.deducted_hours_amount == 0
    # 2h x 22.22 x 1.5 plus 1 Friday hour x 11.11 x 2
    assert result.overtime_amount == pytest.approx(88.89)
    assert result.leave_allowance_amount == 200
    assert result.total_deductions == pytest.approx(1400)
    assert result.total_additions == pytest.approx(7888.89)
    assert result.net_salary == pytest.approx(6488.89)


def test_minutes_deduction_charges_deducted_hours(user, shift, totals, adjustment, violations):
    shift = replace(shift, deductions=(ShiftDeduction(type=DeductionType.MINUTES, start=time(8, 16), end=time(9, 0)),))

    result = StandardPayrollCalculator().salary(
        user=user, shift=shift, totals=totals, adjustment=adjustment, violations=violations
    )

    assert result.deducted_hours_amount == pytest.approx(44.44)


def test_meal_deduction_never_exceeds_the_allowance(user, shift, adjustment, violations):
    totals = AttendanceTotals(absent_days=10, annual_leave_days=10, sick_leave_days=5)
    adjustment = replace(adjustment, meal_allowance=1000.0)

    result = StandardPayrollCalculator(meal_deduction_per_day=50).salary(
        user=user, shift=shift, totals=totals, adjustment=adjustment, violations=violations
    )

    assert result.meal_deduction == 1000
    assert result.remaining_meal_allowance == 0


def test_bonus_breakdown(user):
    adjustment = BonusAdjustment(employee_code="1001", month="2025-03", binding_value=100, production_value=50)

    result = StandardPayrollCalculator().bonus(user=user, deducted_days=3, adjustment=adjustment)

    assert result.bonus_value == 1000
    assert result.daily_bonus_rate == pytest.approx(33.33)
    assert result.total_deductions == pytest.approx(99.99)
    assert result.net_bonus == pytest.approx(1050.01)
