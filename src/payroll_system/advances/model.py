from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import AdvanceStatus


@dataclass(frozen=True)
class AdvanceDeduction:
    """One posted installment."""

    month: str
    amount: float
    deduction_date: date

    def as_dict(self) -> dict:
        return {"month": self.month, "amount": round(self.amount, 2), "deductionDate": self.deduction_date.isoformat()}


@dataclass(frozen=True)
class Advance:
    """Domain entity: a salary advance repaid in monthly installments."""

    advance_id: int
    employee_code: str
    employee_name: str
    advance_amount: float
    advance_date: date
    installment_months: int
    monthly_installment: float
    remaining_amount: float
    final_repayment_date: date
    status: AdvanceStatus = AdvanceStatus.ACTIVE
    last_deduction_month: Optional[str] = None
    deduction_history: tuple[AdvanceDeduction, ...] = field(default_factory=tuple)
    notes: str = ""
    approved_by: Optional[str] = None

    def deducted_before(self, year_month: str) -> float:
        return sum(d.amount for d in self.deduction_history if d.month < year_month)

    def deducted_total(self) -> float:
        return sum(d.amount for d in self.deduction_history)

    def deduction_for(self, year_month: str) -> Optional[AdvanceDeduction]:
        return next((d for d in self.deduction_history if d.month == year_month), None)

    def as_dict(self) -> dict:
        return {
            "id": self.advance_id,
            "employeeCode": self.employee_code,
            "employeeName": self.employee_name,
            "advanceAmount": round(self.advance_amount, 2),
            "advanceDate": self.advance_date.isoformat(),
            "installmentMonths": self.installment_months,
            "monthlyInstallment": round(self.monthly_installment, 2),
            "remainingAmount": round(self.remaining_amount, 2),
            "finalRepaymentDate": self.final_repayment_date.isoformat(),
            "status": self.status.value,
            "lastDeductionMonth": self.last_deduction_month,
            "deductionHistory": [d.as_dict() for d in self.deduction_history],
            "notes": self.notes,
            "approvedBy": self.approved_by,
        }


@dataclass(frozen=True)
class AdvanceSettlement:
    """Advance totals of one employee for one month, as the salary report needs them."""

    total_advances: float = 0.0
    installment: float = 0.0
    remaining: float = 0.0
