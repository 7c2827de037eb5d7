from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_BASIC_BONUS, DEFAULT_BONUS_PERCENTAGE, DEFAULT_MEAL_ALLOWANCE
from ..core.enums import Role


def compute_net_salary(
    *,
    total_salary: float,
    basic_bonus: float,
    bonus_percentage: float,
    meal_allowance: float,
    medical_insurance: float,
    social_insurance: float,
) -> float:
    return round(
        total_salary
        + basic_bonus * bonus_percentage / 100
        + meal_allowance
        - medical_insurance
        - social_insurance,
        2,
    )


@dataclass(frozen=True)
class User:
    """Domain entity: an employee (or admin) with salary settings.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    employee_code: str
    password_hash: str
    name: str
    department: Optional[str]
    role: Role
    shift_id: Optional[int] = None
    work_days: int = 0
    total_salary_with_allowances: float = 0.0
    basic_salary: float = 0.0
    basic_bonus: float = DEFAULT_BASIC_BONUS
    bonus_percentage: float = DEFAULT_BONUS_PERCENTAGE
    meal_allowance: float = DEFAULT_MEAL_ALLOWANCE
    medical_insurance: float = 0.0
    social_insurance: float = 0.0
    annual_leave_balance: float = 0.0
    net_salary: float = 0.0
    remaining_grace_period: Optional[int] = None

    def computed_net_salary(self) -> float:
        return compute_net_salary(
            total_salary=self.total_salary_with_allowances,
            basic_bonus=self.basic_bonus,
            bonus_percentage=self.bonus_percentage,
            meal_allowance=self.meal_allowance,
            medical_insurance=self.medical_insurance,
            social_insurance=self.social_insurance,
        )

    def as_dict(self, *, shift_name: Optional[str] = None) -> dict:
        return {
            "id": self.user_id,
            "employeeCode": self.employee_code,
            "name": self.name,
            "department": self.department,
            "role": self.role.value,
            "shiftId": self.shift_id,
            "shiftName": shift_name,
            "workDays": self.work_days,
            "totalSalaryWithAllowances": self.total_salary_with_allowances,
            "basicSalary": self.basic_salary,
            "basicBonus": self.basic_bonus,
            "bonusPercentage": self.bonus_percentage,
            "mealAllowance": self.meal_allowance,
            "medicalInsurance": self.medical_insurance,
            "socialInsurance": self.social_insurance,
            "annualLeaveBalance": self.annual_leave_balance,
            "netSalary": self.net_salary,
            "remainingGracePeriod": self.remaining_grace_period,
        }
