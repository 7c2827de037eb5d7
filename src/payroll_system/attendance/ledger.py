from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.datetime_utils import month_key
from ..core.enums import AttendanceStatus, SickLeaveDeduction
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..users.model import User
from ..users.repository import UserRepository
from .factory import DeductionStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def blank_record(
    user: User,
    shift: Shift,
    day: date,
    status: AttendanceStatus,
    *,
    check_in: Optional[datetime] = None,
    check_out: Optional[datetime] = None,
    deducted_days: float = 0.0,
    sick_leave_deduction: SickLeaveDeduction = SickLeaveDeduction.NONE,
    leave_balance: Optional[float] = None,
    is_split: bool = False,
) -> AttendanceRecord:
    grace = user.remaining_grace_period if user.remaining_grace_period is not None else shift.grace_period
    return AttendanceRecord(
        attendance_id=0,
        employee_code=user.employee_code,
        employee_name=user.name,
        work_date=day,
        status=status,
        check_in=check_in,
        check_out=check_out,
        shift_id=shift.shift_id,
        shift_name=shift.shift_name,
        shift_type=shift.shift_type,
        is_cross_day=shift.is_cross_day,
        work_days=shift.work_days,
        grace_period=shift.grace_period,
        remaining_grace_period=grace,
        deducted_days=deducted_days,
        leave_balance=user.annual_leave_balance if leave_balance is None else leave_balance,
        sick_leave_deduction=sick_leave_deduction,
        is_official_leave=status == AttendanceStatus.OFFICIAL_LEAVE,
        is_split=is_split,
    )


def no_show_status(shift: Shift, day: date) -> tuple[AttendanceStatus, float]:
    """Status and deducted days for a day without punches."""
    if shift.works_on(day):
        return AttendanceStatus.ABSENT, 1.0
    return AttendanceStatus.WEEKLY_OFF, 0.0


class AttendanceLedger:
    """Keeps stored attendance consistent: day replacement and the monthly grace chain.

    The grace budget is per employee and calendar month: it starts at the
    shift's grace period on the first worked day of the month and each late
    arrival consumes from it in date order.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        shifts: ShiftRepository,
        *,
        strategy_factory: Optional[DeductionStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._shifts = shifts
        self._strategies = strategy_factory or DeductionStrategyFactory()

    def replace_days(
        self,
        records: Iterable[AttendanceRecord],
        *,
        employee_codes: Iterable[str],
        dates: Iterable[date],
    ) -> int:
        """Delete every record for the employee/date grid and insert `records`.

        Annual-leave days that get overwritten are refunded to the balance.
        """
        records = list(records)
        codes = set(employee_codes)
        days = set(dates)
        if not codes or not days:
            return 0

        replaced = [
            r
            for r in self._attendance.list_range(start_date=min(days), end_date=max(days))
            if r.employee_code in codes and r.work_date in days
        ]
        refunds = Counter(r.employee_code for r in replaced if r.status == AttendanceStatus.ANNUAL_LEAVE)
        for code, count in refunds.items():
            user = self._users.get_by_employee_code(code)
            if user:
                self._users.set_leave_balance(code, user.annual_leave_balance + count)
                logger.info("Refunded %d annual leave day(s) to %s", count, code)

        self._attendance.delete_for(employee_codes=codes, dates=days)
        return self._attendance.insert_many(records)

    def reflow(self, employee_code: str, from_day: date) -> None:
        """Recompute worked days from the start of `from_day`'s month onward."""
        user = self._users.get_by_employee_code(employee_code)
        if not user:
            return

        records = self._attendance.list_range(start_date=from_day.replace(day=1), employee_code=employee_code)
        shifts: dict[int, Optional[Shift]] = {}
        month: Optional[str] = None
        grace: Optional[int] = None

        for rec in records:
            shift = self._shift_for(rec, user, shifts)
            if shift is None:
                continue
            if month_key(rec.work_date) != month:
                month = month_key(rec.work_date)
                grace = shift.grace_period

            updated, grace = self.recompute(rec, shift, grace)
            if updated != rec:
                self._attendance.update(updated)

        if grace is not None:
            self._users.set_remaining_grace(employee_code, grace)

    def recompute(self, rec: AttendanceRecord, shift: Shift, grace: int) -> tuple[AttendanceRecord, int]:
        """Return the recomputed record and the grace left after it."""
        common = dict(shift_name=shift.shift_name, grace_period=shift.grace_period, is_cross_day=shift.is_cross_day)

        worked = rec.status.is_working or (rec.status == AttendanceStatus.ABSENT and rec.has_punches)
        if not worked:
            return replace(rec, remaining_grace_period=grace, **common), grace

        if not rec.has_punches:
            status, days = no_show_status(shift, rec.work_date)
            return (
                replace(
                    rec,
                    status=status,
                    deducted_days=days,
                    deducted_hours=0.0,
                    overtime_hours=0.0,
                    delay_minutes=0,
                    remaining_grace_period=grace,
                    **common,
                ),
                grace,
            )

        result = self._strategies.for_shift(shift).calculate(
            shift=shift,
            check_in=rec.check_in,
            check_out=rec.check_out,
            remaining_grace=grace,
            leave_allowance=rec.leave_allowance,
            split=rec.is_split,
        )
        updated = replace(
            rec,
            status=result.status,
            deducted_days=result.deducted_days,
            deducted_hours=round(result.deducted_hours, 2),
            overtime_hours=round(result.overtime_hours, 2),
            delay_minutes=result.delay_minutes,
            remaining_grace_period=result.remaining_grace,
            **common,
        )
        return updated, result.remaining_grace

    def _shift_for(self, rec: AttendanceRecord, user: User, cache: dict[int, Optional[Shift]]) -> Optional[Shift]:
        for shift_id in (rec.shift_id, user.shift_id):
            if shift_id is None:
                continue
            if shift_id not in cache:
                cache[shift_id] = self._shifts.get_by_id(shift_id)
            if cache[shift_id] is not None:
                return cache[shift_id]
        return None
