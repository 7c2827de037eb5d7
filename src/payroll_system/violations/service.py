from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional, Sequence

from werkzeug.datastructures import FileStorage

from ..common.datetime_utils import month_bounds, month_key, parse_iso_date, previous_month
from ..common.validators import require_non_empty, require_non_negative, require_positive, require_year_month
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import Violation, ViolationAdjustment
from .repository import ViolationAdjustmentRepository, ViolationRepository
from .storage import ImageStore

logger = logging.getLogger(__name__)


class ViolationService:
    """Use case: record violations and keep the monthly violation balance current."""

    def __init__(
        self,
        violations: ViolationRepository,
        adjustments: ViolationAdjustmentRepository,
        users: UserRepository,
        *,
        images: ImageStore,
    ):
        self._violations = violations
        self._adjustments = adjustments
        self._users = users
        self._images = images

    def list_violations(self, employee_code: Optional[str] = None) -> Sequence[Violation]:
        return self._violations.list_all(employee_code=employee_code)

    def employee_info(self, employee_code: str) -> User:
        user = self._users.get_by_employee_code((employee_code or "").strip())
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def get_violation(self, violation_id: int) -> Violation:
        violation = self._violations.get_by_id(violation_id)
        if not violation:
            raise NotFoundError("Violation not found")
        return violation

    def create_violation(self, form: dict, image: Optional[FileStorage] = None) -> Violation:
        required = ("employeeCode", "violationPrice", "date", "vehicleCode", "station")
        if any(not str(form.get(k) or "").strip() for k in required):
            raise ValidationError("All required fields must be filled in")
        user = self.employee_info(form["employeeCode"])

        violation = Violation(
            violation_id=0,
            employee_code=user.employee_code,
            employee_name=(form.get("employeeName") or "").strip() or user.name,
            department=(form.get("department") or "").strip() or user.department,
            violation_price=require_positive(form["violationPrice"], "Violation price"),
            violation_date=parse_iso_date(form["date"]),
            vehicle_code=form["vehicleCode"].strip(),
            station=form["station"].strip(),
            violation_image=self._images.save(image),
        )
        violation_id = self._violations.create(violation)
        self.refresh_adjustment(violation.employee_code, month_key(violation.violation_date))
        logger.info("Violation %.2f recorded for %s", violation.violation_price, violation.employee_code)
        return replace(violation, violation_id=violation_id)

    def update_violation(self, violation_id: int, form: dict, image: Optional[FileStorage] = None) -> Violation:
        old = self.get_violation(violation_id)
        changes: dict[str, Any] = {}

        if form.get("employeeCode") and form["employeeCode"].strip() != old.employee_code:
            user = self.employee_info(form["employeeCode"])
            changes.update(employee_code=user.employee_code, employee_name=user.name, department=user.department)
        if form.get("employeeName"):
            changes["employee_name"] = require_non_empty(form["employeeName"], "Employee name")
        if form.get("department"):
            changes["department"] = form["department"].strip()
        if form.get("violationPrice") not in (None, ""):
            changes["violation_price"] = require_positive(form["violationPrice"], "Violation price")
        if form.get("date"):
            changes["violation_date"] = parse_iso_date(form["date"])
        if form.get("vehicleCode"):
            changes["vehicle_code"] = form["vehicleCode"].strip()
        if form.get("station"):
            changes["station"] = form["station"].strip()
        url = self._images.save(image)
        if url:
            changes["violation_image"] = url

        new = replace(old, **changes)
        self._violations.update(new)

        # Both the old and the new month/employee may have changed totals.
        self.refresh_adjustment(old.employee_code, month_key(old.violation_date))
        if (new.employee_code, month_key(new.violation_date)) != (old.employee_code, month_key(old.violation_date)):
            self.refresh_adjustment(new.employee_code, month_key(new.violation_date))
        return new

    def delete_violation(self, violation_id: int) -> None:
        violation = self.get_violation(violation_id)
        self._violations.delete_by_id(violation_id)
        self.refresh_adjustment(violation.employee_code, month_key(violation.violation_date))
        logger.info("Deleted violation %s of %s", violation_id, violation.employee_code)

    # ---- monthly balance ----------------------------------------------

    def refresh_adjustment(self, employee_code: str, month: str) -> ViolationAdjustment:
        """Recompute `month` from the violations and carry the result into later stored months."""
        adjustment = self._recompute(employee_code, month)
        for later in self._adjustments.list_after(employee_code, month):
            self._recompute(employee_code, later.month)
        return adjustment

    def set_installment(self, employee_code: str, month: str, *, total: Any, installment: Any) -> ViolationAdjustment:
        """Admin override of the month's violation installment.

        The total is always derived from the violations; the submitted pair
        is validated as entered and the installment must fit the derived total.
        """
        require_year_month(month)
        total_value = require_non_negative(total, "Total violations")
        installment_value = require_non_negative(installment, "Violation installment")
        if installment_value > total_value:
            raise ValidationError("Violation installment cannot exceed total violations")

        current = self._recompute(employee_code, month)
        if installment_value > current.total_violations:
            raise ValidationError("Violation installment cannot exceed total violations")

        self._adjustments.upsert(
            replace(
                current,
                deduction_violations_installment=round(installment_value, 2),
                remaining_violations=round(current.total_violations - installment_value, 2),
            )
        )
        return self.refresh_adjustment(employee_code, month)

    def _recompute(self, employee_code: str, month: str) -> ViolationAdjustment:
        first, last = month_bounds(month)
        month_total = sum(v.violation_price for v in self._violations.list_between(employee_code, first, last))
        previous = self._adjustments.get(employee_code, previous_month(month))
        carried = previous.remaining_violations if previous else 0.0

        total = round(carried + month_total, 2)
        existing = self._adjustments.get(employee_code, month)
        installment = min(existing.deduction_violations_installment if existing else 0.0, total)

        adjustment = ViolationAdjustment(
            employee_code=employee_code,
            month=month,
            total_violations=total,
            deduction_violations_installment=round(installment, 2),
            remaining_violations=round(total - installment, 2),
        )
        if adjustment != existing:
            self._adjustments.upsert(adjustment)
        return adjustment
