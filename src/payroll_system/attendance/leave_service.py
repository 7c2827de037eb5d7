from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import iter_days, parse_iso_date
from ..common.validators import require_date_range
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..users.model import User
from ..users.repository import UserRepository
from .ledger import AttendanceLedger, blank_record
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Use case: put official, annual or sick leave on a date range.

    Each operation targets one employee or everybody with a shift and
    replaces whatever was recorded for those days.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        shifts: ShiftRepository,
        *,
        ledger: AttendanceLedger,
    ):
        self._attendance = attendance
        self._users = users
        self._shifts = shifts
        self._ledger = ledger

    def apply_official_leave(
        self, start: str, end: str, employee_code: Optional[str] = None, apply_to_all: bool = False
    ) -> dict:
        days = self._days(start, end)
        applied = []
        for user, shift in self._targets(employee_code, apply_to_all):
            records = [blank_record(user, shift, day, AttendanceStatus.OFFICIAL_LEAVE) for day in days]
            self._replace(user, records, days)
            applied.append(user.employee_code)
        logger.info("Official leave %s..%s applied to %d employees", days[0], days[-1], len(applied))
        return {"employees": applied, "days": len(days)}

    def apply_annual_leave(
        self, start: str, end: str, employee_code: Optional[str] = None, apply_to_all: bool = False
    ) -> dict:
        """Charge one balance day per calendar day in the range.

        Days already on annual leave in the range are refunded first, so
        re-applying the same range costs nothing extra. With `apply_to_all`
        employees without enough balance are skipped and reported.
        """
        days = self._days(start, end)
        applied, skipped = [], []

        for user, shift in self._targets(employee_code, apply_to_all):
            already = sum(
                1
                for r in self._attendance.list_range(start_date=days[0], end_date=days[-1], employee_code=user.employee_code)
                if r.status == AttendanceStatus.ANNUAL_LEAVE
            )
            available = user.annual_leave_balance + already
            if available < len(days):
                if not apply_to_all:
                    raise ValidationError(f"Insufficient annual leave balance for employee {user.employee_code}")
                skipped.append(user.employee_code)
                continue

            new_balance = available - len(days)
            records = [
                blank_record(user, shift, day, AttendanceStatus.ANNUAL_LEAVE, leave_balance=new_balance) for day in days
            ]
            self._replace(user, records, days)
            # replace_days has refunded the overwritten days; settle the final balance
            self._users.set_leave_balance(user.employee_code, new_balance)
            applied.append(user.employee_code)

        if skipped:
            logger.warning("Annual leave skipped for insufficient balance: %s", skipped)
        return {"employees": applied, "skippedEmployeeCodes": skipped, "days": len(days)}

    def apply_sick_leave(
        self, start: str, end: str, employee_code: Optional[str] = None, apply_to_all: bool = False
    ) -> dict:
        """Sick leave lands on work days only; each day deducts the shift's sick fraction."""
        days = self._days(start, end)
        applied = []
        for user, shift in self._targets(employee_code, apply_to_all):
            work_days = [day for day in days if shift.works_on(day)]
            if not work_days:
                continue
            records = [
                blank_record(
                    user,
                    shift,
                    day,
                    AttendanceStatus.SICK_LEAVE,
                    deducted_days=shift.sick_leave_deduction.days,
                    sick_leave_deduction=shift.sick_leave_deduction,
                )
                for day in work_days
            ]
            self._replace(user, records, work_days)
            applied.append(user.employee_code)
        return {"employees": applied, "days": len(days)}

    def _replace(self, user: User, records, days: list[date]) -> None:
        self._ledger.replace_days(records, employee_codes=[user.employee_code], dates=days)
        self._ledger.reflow(user.employee_code, days[0])

    @staticmethod
    def _days(start: str, end: str) -> list[date]:
        if not start or not end:
            raise ValidationError("Start date and end date are required")
        start_date, end_date = parse_iso_date(start), parse_iso_date(end)
        require_date_range(start_date, end_date)
        return list(iter_days(start_date, end_date))

    def _targets(self, employee_code: Optional[str], apply_to_all: bool) -> list[tuple[User, Shift]]:
        if apply_to_all:
            users = list(self._users.list_all())
        elif employee_code:
            user = self._users.get_by_employee_code(employee_code.strip())
            if not user:
                raise NotFoundError("Employee not found")
            users = [user]
        else:
            raise ValidationError("Employee code is required unless applying to everyone")

        shifts = {s.shift_id: s for s in self._shifts.list_all()}
        targets = []
        for user in users:
            shift = shifts.get(user.shift_id) if user.shift_id is not None else None
            if shift is None:
                logger.debug("Skipping %s: no shift assigned", user.employee_code)
                continue
            targets.append((user, shift))
        if employee_code and not apply_to_all and not targets:
            raise ValidationError("Employee has no shift assigned")
        return targets
