from __future__ import annotations

import io
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import add_months, month_bounds, month_key, months_between, now_local, parse_iso_date
from ..common.exporting import rows_to_xlsx
from ..common.validators import require_positive, require_year_month
from ..core.enums import AdvanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import Advance, AdvanceDeduction, AdvanceSettlement
from .repository import AdvanceRepository

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = {
    "employeeCode": "Employee code",
    "employeeName": "Employee name",
    "advanceAmount": "Amount",
    "advanceDate": "Advance date",
    "installmentMonths": "Months",
    "monthlyInstallment": "Monthly installment",
    "remainingAmount": "Remaining",
    "finalRepaymentDate": "Final repayment",
    "status": "Status",
}


def _months(value: Any) -> int:
    try:
        months = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Installment months must be a whole number")
    if months < 1:
        raise ValidationError("Installment months must be at least 1")
    return months


def _status(value: Any) -> AdvanceStatus:
    try:
        return AdvanceStatus(value)
    except ValueError:
        raise ValidationError("Status must be either active or completed")


class AdvanceService:
    """Use case: record salary advances and post their monthly installments."""

    def __init__(self, advances: AdvanceRepository, users: UserRepository, *, clock: Callable[[], datetime] = now_local):
        self._advances = advances
        self._users = users
        self._clock = clock

    def search_employee(self, employee_code: str) -> User:
        if not employee_code or not employee_code.strip():
            raise ValidationError("Employee code is required")
        user = self._users.get_by_employee_code(employee_code.strip())
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def list_advances(self, employee_code: Optional[str] = None) -> Sequence[Advance]:
        return self._advances.list_all(employee_code=employee_code)

    def get_advance(self, advance_id: int) -> Advance:
        advance = self._advances.get_by_id(advance_id)
        if not advance:
            raise NotFoundError("Advance not found")
        return advance

    def create_advance(self, payload: dict, *, approved_by: Optional[str] = None) -> Advance:
        if not payload.get("employeeCode") or not payload.get("advanceDate"):
            raise ValidationError("All fields are required")
        user = self.search_employee(payload["employeeCode"])
        amount = require_positive(payload.get("advanceAmount"), "Advance amount")
        months = _months(payload.get("installmentMonths"))
        advance_date = parse_iso_date(payload["advanceDate"])

        advance = Advance(
            advance_id=0,
            employee_code=user.employee_code,
            employee_name=(payload.get("employeeName") or "").strip() or user.name,
            advance_amount=amount,
            advance_date=advance_date,
            installment_months=months,
            monthly_installment=amount / months,
            remaining_amount=amount,
            final_repayment_date=add_months(advance_date, months),
            notes=(payload.get("notes") or "").strip(),
            approved_by=approved_by,
        )
        advance_id = self._advances.create(advance)
        logger.info("Advance of %.2f over %d months recorded for %s", amount, months, user.employee_code)
        return replace(advance, advance_id=advance_id)

    def update_advance(self, advance_id: int, payload: dict) -> Advance:
        """Re-plan an advance; installments already posted stay deducted."""
        if not payload.get("advanceAmount") or not payload.get("advanceDate") or not payload.get("installmentMonths"):
            raise ValidationError("Advance amount, advance date and installment months are required")
        amount = require_positive(payload["advanceAmount"], "Advance amount")
        months = _months(payload["installmentMonths"])
        advance_date = parse_iso_date(payload["advanceDate"])
        status = _status(payload["status"]) if payload.get("status") else None

        advance = self.get_advance(advance_id)
        remaining = max(round(amount - advance.deducted_total(), 2), 0.0)
        if status is None:
            status = AdvanceStatus.COMPLETED if remaining <= 0 else AdvanceStatus.ACTIVE

        updated = replace(
            advance,
            advance_amount=amount,
            advance_date=advance_date,
            installment_months=months,
            monthly_installment=amount / months,
            remaining_amount=remaining,
            final_repayment_date=add_months(advance_date, months),
            status=status,
            notes=(payload["notes"] or "").strip() if "notes" in payload else advance.notes,
        )
        self._advances.update(updated)
        return updated

    def delete_advance(self, advance_id: int) -> None:
        self.get_advance(advance_id)
        self._advances.delete_by_id(advance_id)
        logger.info("Deleted advance %s", advance_id)

    def delete_for_employee(self, employee_code: str) -> int:
        user = self.search_employee(employee_code)
        deleted = self._advances.delete_for_employee(user.employee_code)
        logger.info("Deleted %d advances of %s", deleted, user.employee_code)
        return deleted

    def export_advances(self) -> io.BytesIO:
        rows = [a.as_dict() for a in self._advances.list_all()]
        return rows_to_xlsx(rows, columns=EXPORT_COLUMNS, sheet_name="Advances")

    def settle_month(self, employee_code: str, year_month: str) -> AdvanceSettlement:
        """Advance totals for a month, posting the installment when it is due.

        An installment already posted for the month is reused. Otherwise the planned
        installment, capped at the balance left, is posted once the month is no
        longer in the future.
        """
        first, last = month_bounds(require_year_month(year_month))
        today = self._clock().date()
        current_month = month_key(today)

        total = installment = remaining_total = 0.0
        for advance in self._advances.list_active_between(employee_code, first, last):
            total += advance.advance_amount
            remaining = round(advance.advance_amount - advance.deducted_before(year_month), 2)
            passed = months_between(advance.advance_date, year_month)

            amount = 0.0
            if 0 <= passed < advance.installment_months and remaining > 0:
                posted = advance.deduction_for(year_month)
                if posted:
                    amount = posted.amount
                elif year_month <= current_month:
                    amount = round(min(advance.monthly_installment, remaining), 2)
                    self._post(advance, AdvanceDeduction(month=year_month, amount=amount, deduction_date=today))

            installment += amount
            remaining_total += remaining - amount

        return AdvanceSettlement(
            total_advances=round(total, 2),
            installment=round(installment, 2),
            remaining=round(remaining_total, 2),
        )

    def _post(self, advance: Advance, deduction: AdvanceDeduction) -> None:
        self._advances.add_deduction(advance.advance_id, deduction)
        left = max(round(advance.advance_amount - advance.deducted_total() - deduction.amount, 2), 0.0)
        last_month = max(filter(None, (advance.last_deduction_month, deduction.month)))
        self._advances.update(
            replace(
                advance,
                remaining_amount=left,
                last_deduction_month=last_month,
                status=AdvanceStatus.COMPLETED if left <= 0 else AdvanceStatus.ACTIVE,
                deduction_history=advance.deduction_history + (deduction,),
            )
        )
        logger.info("Posted advance installment %.2f for %s (%s), %.2f left", deduction.amount, advance.employee_code, deduction.month, left)
