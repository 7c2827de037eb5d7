from __future__ import annotations

from ...attendance.model import AttendanceTotals
from ...core.constants import DAYS_IN_PAYROLL_MONTH, DEFAULT_MEAL_DEDUCTION_PER_DAY
from ...core.enums import OvertimeBasis
from ...shifts.model import Shift
from ...users.model import User
from ...violations.model import ViolationAdjustment
from ..model import BonusAdjustment, BonusBreakdown, SalaryAdjustment, SalaryBreakdown
from .base import PayrollCalculator


def _r(value: float) -> float:
    return round(value, 2)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: a 30-day month, hourly rate over the shift's base hours.

    Meal allowance is reduced per day off work (absent, annual, official or
    sick leave), never below zero. Overtime is paid on the shift's basis and
    multiplier, with a separate rule for hours worked on Fridays.
    """

    def __init__(self, *, meal_deduction_per_day: float = DEFAULT_MEAL_DEDUCTION_PER_DAY):
        self._meal_deduction_per_day = meal_deduction_per_day

    def salary(
        self,
        *,
        user: User,
        shift: Shift,
        totals: AttendanceTotals,
        adjustment: SalaryAdjustment,
        violations: ViolationAdjustment,
    ) -> SalaryBreakdown:
        meal_allowance = adjustment.meal_allowance
        days_off = totals.absent_days + totals.annual_leave_days + totals.official_leave_days + totals.sick_leave_days
        meal_deduction = _r(min(days_off * self._meal_deduction_per_day, meal_allowance))

        base_hours = float(shift.base_hours) or 1.0
        daily_rate = _r(user.total_salary_with_allowances / DAYS_IN_PAYROLL_MONTH)
        hourly_rate = _r(user.total_salary_with_allowances / (DAYS_IN_PAYROLL_MONTH * base_hours))

        deducted_days_amount = _r(totals.deducted_days * daily_rate)
        deducted_hours_amount = _r(totals.deducted_hours * hourly_rate) if shift.has_minutes_deduction else 0.0

        regular_hours = totals.overtime_hours - totals.friday_overtime_hours
        overtime_amount = _r(
            regular_hours * self._overtime_rate(user, shift.overtime_basis, base_hours) * shift.overtime_multiplier
            + totals.friday_overtime_hours
            * self._overtime_rate(user, shift.friday_overtime_basis, base_hours)
            * shift.friday_overtime_multiplier
        )
        leave_allowance_amount = _r(totals.leave_allowance_days * daily_rate)

        total_deductions = _r(
            user.medical_insurance
            + user.social_insurance
            + deducted_days_amount
            + deducted_hours_amount
            + violations.deduction_violations_installment
            + adjustment.deduction_advances_installment
            + meal_deduction
            + adjustment.penalties
        )
        total_additions = _r(
            user.total_salary_with_allowances
            + meal_allowance
            + adjustment.occasion_bonus
            + overtime_amount
            + leave_allowance_amount
        )
        return SalaryBreakdown(
            daily_rate=daily_rate,
            hourly_rate=hourly_rate,
            meal_deduction=meal_deduction,
            remaining_meal_allowance=_r(meal_allowance - meal_deduction),
            deducted_days_amount=deducted_days_amount,
            deducted_hours_amount=deducted_hours_amount,
            overtime_amount=overtime_amount,
            leave_allowance_amount=leave_allowance_amount,
            total_deductions=total_deductions,
            total_additions=total_additions,
            net_salary=_r(total_additions - total_deductions),
        )

    def bonus(self, *, user: User, deducted_days: float, adjustment: BonusAdjustment) -> BonusBreakdown:
        bonus_value = _r(user.basic_bonus * user.bonus_percentage / 100)
        daily = _r(bonus_value / DAYS_IN_PAYROLL_MONTH)
        deduction = _r(deducted_days * daily)
        return BonusBreakdown(
            bonus_value=bonus_value,
            daily_bonus_rate=daily,
            deducted_days=_r(deducted_days),
            total_deductions=deduction,
            net_bonus=_r(bonus_value + adjustment.binding_value + adjustment.production_value - deduction),
        )

    @staticmethod
    def _overtime_rate(user: User, basis: OvertimeBasis, base_hours: float) -> float:
        salary = user.basic_salary if basis == OvertimeBasis.BASIC_SALARY else user.total_salary_with_allowances
        return salary / (DAYS_IN_PAYROLL_MONTH * base_hours)
