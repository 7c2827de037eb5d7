from __future__ import annotations

import io
import logging
from typing import Any, Optional

from ..advances.service import AdvanceService
from ..attendance.service import AttendanceService, summarize
from ..common.auth import TokenUser
from ..common.validators import lenient_number, parse_number, require_non_negative, require_year_month
from ..core.exceptions import NotFoundError, ValidationError
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..users.model import User
from ..users.repository import UserRepository
from ..violations.service import ViolationService
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .export import bonus_report_xlsx, salary_report_pdf, salary_report_xlsx
from .model import BonusAdjustment, SalaryAdjustment
from .repository import BonusAdjustmentRepository, SalaryAdjustmentRepository

logger = logging.getLogger(__name__)

_VIOLATION_KEYS = ("totalViolations", "deductionViolationsInstallment")
_ADVANCE_KEYS = ("totalAdvances", "deductionAdvancesInstallment", "occasionBonus", "penalties")


class PayrollService:
    """Use case: monthly salary and bonus reports.

    Note: reports have side effects. The first salary report of a month
    freezes that month's advance snapshot and posts due installments.
    """

    def __init__(
        self,
        users: UserRepository,
        shifts: ShiftRepository,
        salary_adjustments: SalaryAdjustmentRepository,
        bonus_adjustments: BonusAdjustmentRepository,
        *,
        attendance_service: AttendanceService,
        advance_service: AdvanceService,
        violation_service: ViolationService,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._users = users
        self._shifts = shifts
        self._salary_adjustments = salary_adjustments
        self._bonus_adjustments = bonus_adjustments
        self._attendance = attendance_service
        self._advances = advance_service
        self._violations = violation_service
        self._calculator = calculator or StandardPayrollCalculator()

    # ---- salary -------------------------------------------------------

    def salary_report(
        self,
        year_month: str,
        *,
        acting: TokenUser,
        employee_code: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> list[dict]:
        require_year_month(year_month)
        rows = []
        for user, shift in self._targets(acting, employee_code, shift_id):
            violations = self._violations.refresh_adjustment(user.employee_code, year_month)
            adjustment = self._salary_snapshot(user, year_month)
            records = self._attendance.month_records(user, year_month)
            totals = summarize(records, ignore_implausible_hours=True)
            breakdown = self._calculator.salary(
                user=user, shift=shift, totals=totals, adjustment=adjustment, violations=violations
            )

            row = {
                "employeeCode": user.employee_code,
                "employeeName": user.name,
                "department": user.department,
                "shiftName": shift.shift_name,
                "totalSalaryWithAllowances": round(user.total_salary_with_allowances, 2),
                "basicSalary": round(user.basic_salary, 2),
                "medicalInsurance": round(user.medical_insurance, 2),
                "socialInsurance": round(user.social_insurance, 2),
                "mealAllowance": round(adjustment.meal_allowance, 2),
                "annualLeaveBalance": user.annual_leave_balance,
                "occasionBonus": round(adjustment.occasion_bonus, 2),
                "penalties": round(adjustment.penalties, 2),
                "totalViolationsFull": violations.total_violations,
                "totalViolations": violations.remaining_violations,
                "violationDeduction": violations.deduction_violations_installment,
                "totalLoansFull": adjustment.total_advances,
                "totalLoans": adjustment.remaining_advances,
                "loanDeduction": adjustment.deduction_advances_installment,
            }
            row.update(totals.as_dict())
            row.update(breakdown.as_dict())
            rows.append(row)
        return rows

    def _salary_snapshot(self, user: User, year_month: str) -> SalaryAdjustment:
        existing = self._salary_adjustments.get(user.employee_code, year_month)
        if existing:
            return existing

        settlement = self._advances.settle_month(user.employee_code, year_month)
        snapshot = SalaryAdjustment(
            employee_code=user.employee_code,
            month=year_month,
            total_advances=settlement.total_advances,
            deduction_advances_installment=settlement.installment,
            remaining_advances=settlement.remaining,
            meal_allowance=round(user.meal_allowance, 2),
        )
        self._salary_adjustments.upsert(snapshot)
        logger.info("Created salary snapshot for %s in %s", user.employee_code, year_month)
        return snapshot

    def update_salary_adjustment(self, employee_code: str, year_month: str, payload: dict) -> dict:
        require_year_month(year_month)
        user = self._users.get_by_employee_code(employee_code)
        if not user:
            raise NotFoundError("Employee not found")

        touches_violations = any(k in payload for k in _VIOLATION_KEYS)
        touches_advances = any(k in payload for k in _ADVANCE_KEYS)
        if not touches_violations and not touches_advances:
            raise ValidationError("Nothing to update")

        if touches_advances:
            adjustment = self._validated_advances(user, year_month, payload)
        if touches_violations:
            if any(payload.get(k) in (None, "") for k in _VIOLATION_KEYS):
                raise ValidationError("Total violations and violation installment are both required")
            self._violations.set_installment(
                user.employee_code,
                year_month,
                total=payload["totalViolations"],
                installment=payload["deductionViolationsInstallment"],
            )
        if touches_advances:
            self._salary_adjustments.upsert(adjustment)

        result = {"violations": self._violations.refresh_adjustment(user.employee_code, year_month).as_dict()}
        salary = self._salary_adjustments.get(user.employee_code, year_month)
        if salary:
            result["salary"] = salary.as_dict()
        logger.info("Salary adjustment updated for %s in %s", user.employee_code, year_month)
        return result

    def _validated_advances(self, user: User, year_month: str, payload: dict) -> SalaryAdjustment:
        if payload.get("totalAdvances") in (None, "") or payload.get("deductionAdvancesInstallment") in (None, ""):
            raise ValidationError("Total advances and advance installment are both required")
        total = require_non_negative(payload["totalAdvances"], "Total advances")
        installment = require_non_negative(payload["deductionAdvancesInstallment"], "Advance installment")
        penalties = require_non_negative(payload.get("penalties") or 0, "Penalties")
        if installment > total:
            raise ValidationError("Advance installment cannot exceed total advances")

        return SalaryAdjustment(
            employee_code=user.employee_code,
            month=year_month,
            total_advances=round(total, 2),
            deduction_advances_installment=round(installment, 2),
            remaining_advances=round(total - installment, 2),
            occasion_bonus=round(lenient_number(payload.get("occasionBonus")), 2),
            meal_allowance=round(user.meal_allowance, 2),
            penalties=round(penalties, 2),
        )

    # ---- bonus --------------------------------------------------------

    def bonus_report(
        self,
        year_month: str,
        *,
        acting: TokenUser,
        employee_code: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> list[dict]:
        require_year_month(year_month)
        rows = []
        for user, shift in self._targets(acting, employee_code, shift_id):
            records = self._attendance.month_records(user, year_month)
            # one deduction per calendar day
            per_day: dict = {}
            for rec in records:
                if rec.deducted_days > 0:
                    per_day.setdefault(rec.work_date, rec.deducted_days)

            adjustment = self._bonus_adjustments.get(user.employee_code, year_month) or BonusAdjustment(
                employee_code=user.employee_code, month=year_month
            )
            breakdown = self._calculator.bonus(user=user, deducted_days=sum(per_day.values()), adjustment=adjustment)

            row = {
                "employeeCode": user.employee_code,
                "name": user.name,
                "shiftType": shift.shift_name,
                "basicBonus": round(user.basic_bonus, 2),
                "bonusPercentage": round(user.bonus_percentage, 2),
                "totalAttendanceDays": sum(1 for r in records if r.status.is_working),
                "bindingValue": round(adjustment.binding_value, 2),
                "productionValue": round(adjustment.production_value, 2),
            }
            row.update(breakdown.as_dict())
            rows.append(row)
        return rows

    def update_bonus_adjustment(self, employee_code: str, year_month: str, payload: dict) -> BonusAdjustment:
        require_year_month(year_month)
        user = self._users.get_by_employee_code(employee_code)
        if not user:
            raise NotFoundError("Employee not found")

        current = self._bonus_adjustments.get(user.employee_code, year_month) or BonusAdjustment(
            employee_code=user.employee_code, month=year_month
        )
        adjustment = BonusAdjustment(
            employee_code=user.employee_code,
            month=year_month,
            binding_value=self._number(payload, "bindingValue", "Binding value", current.binding_value),
            production_value=self._number(payload, "productionValue", "Production value", current.production_value),
        )
        self._bonus_adjustments.upsert(adjustment)
        return adjustment

    @staticmethod
    def _number(payload: dict, key: str, label: str, default: float) -> float:
        if payload.get(key) in (None, ""):
            return default
        return round(parse_number(payload[key], label), 2)

    # ---- exports ------------------------------------------------------

    def export_salary_xlsx(self, year_month: str, **filters: Any) -> io.BytesIO:
        return salary_report_xlsx(self.salary_report(year_month, **filters), year_month)

    def export_salary_pdf(self, year_month: str, **filters: Any) -> io.BytesIO:
        return salary_report_pdf(self.salary_report(year_month, **filters), year_month)

    def export_bonus_xlsx(self, year_month: str, **filters: Any) -> io.BytesIO:
        return bonus_report_xlsx(self.bonus_report(year_month, **filters), year_month)

    # ---- helpers ------------------------------------------------------

    def _targets(
        self, acting: TokenUser, employee_code: Optional[str], shift_id: Optional[int]
    ) -> list[tuple[User, Shift]]:
        if not acting.is_admin:
            # employees only see their own report
            employee_code, shift_id = acting.employee_code, None

        if employee_code:
            user = self._users.get_by_employee_code(employee_code.strip())
            users = [user] if user and (shift_id is None or user.shift_id == shift_id) else []
        else:
            users = list(self._users.list_all(shift_id=shift_id))

        shifts = {s.shift_id: s for s in self._shifts.list_all()}
        targets = []
        for user in users:
            shift = shifts.get(user.shift_id) if user.shift_id is not None else None
            if shift is None:
                logger.warning("User %s has no valid shift, left out of the report", user.employee_code)
                continue
            targets.append((user, shift))
        if not targets:
            raise NotFoundError("No employees found for this code or shift")
        return targets
