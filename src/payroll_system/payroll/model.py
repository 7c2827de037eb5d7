from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SalaryAdjustment:
    """Per employee-month snapshot of advances and manual salary items.

    Created by the first salary report of the month and reused afterwards;
    admin edits overwrite it.
    """

    employee_code: str
    month: str
    total_advances: float = 0.0
    deduction_advances_installment: float = 0.0
    remaining_advances: float = 0.0
    occasion_bonus: float = 0.0
    meal_allowance: float = 0.0
    penalties: float = 0.0

    def as_dict(self) -> dict:
        return {
            "employeeCode": self.employee_code,
            "month": self.month,
            "totalAdvances": round(self.total_advances, 2),
            "deductionAdvancesInstallment": round(self.deduction_advances_installment, 2),
            "remainingAdvances": round(self.remaining_advances, 2),
            "occasionBonus": round(self.occasion_bonus, 2),
            "mealAllowance": round(self.meal_allowance, 2),
            "penalties": round(self.penalties, 2),
        }


@dataclass(frozen=True)
class BonusAdjustment:
    employee_code: str
    month: str
    binding_value: float = 0.0
    production_value: float = 0.0

    def as_dict(self) -> dict:
        return {
            "employeeCode": self.employee_code,
            "month": self.month,
            "bindingValue": round(self.binding_value, 2),
            "productionValue": round(self.production_value, 2),
        }


@dataclass(frozen=True)
class SalaryBreakdown:
    """Money side of one employee's monthly salary."""

    daily_rate: float
    hourly_rate: float
    meal_deduction: float
    remaining_meal_allowance: float
    deducted_days_amount: float
    deducted_hours_amount: float
    overtime_amount: float
    leave_allowance_amount: float
    total_deductions: float
    total_additions: float
    net_salary: float

    def as_dict(self) -> dict:
        return {
            "dailyRate": self.daily_rate,
            "hourlyRate": self.hourly_rate,
            "mealDeduction": self.meal_deduction,
            "remainingMealAllowance": self.remaining_meal_allowance,
            "deductedDaysAmount": self.deducted_days_amount,
            "deductedHoursAmount": self.deducted_hours_amount,
            "overtimeAmount": self.overtime_amount,
            "leaveAllowanceAmount": self.leave_allowance_amount,
            "totalDeductions": self.total_deductions,
            "totalAdditions": self.total_additions,
            "netSalary": self.net_salary,
        }


@dataclass(frozen=True)
class BonusBreakdown:
    bonus_value: float
    daily_bonus_rate: float
    deducted_days: float
    total_deductions: float
    net_bonus: float

    def as_dict(self) -> dict:
        return {
            "bonusValue": self.bonus_value,
            "dailyBonusRate": self.daily_bonus_rate,
            "totalDeductedDays": self.deducted_days,
            "totalDeductions": self.total_deductions,
            "netBonus": self.net_bonus,
        }
