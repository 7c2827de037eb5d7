from __future__ import annotations

import io
import logging
from collections import Counter, defaultdict
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Any, BinaryIO, Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import iter_days, js_weekday, month_bounds, now_local, parse_hhmm, parse_iso_date
from ..common.exporting import rows_to_xlsx
from ..common.validators import require_date_range, require_year_month
from ..core.constants import FRIDAY, IMPLAUSIBLE_DEDUCTED_HOURS
from ..core.enums import AttendanceStatus, SickLeaveDeduction
from ..core.exceptions import NotFoundError, ValidationError
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..users.model import User
from ..users.repository import UserRepository
from .factory import DeductionStrategyFactory
from .importer import group_punches, read_punches
from .ledger import AttendanceLedger, blank_record, no_show_status
from .model import AttendanceRecord, AttendanceTotals
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = {
    "employeeCode": "Employee code",
    "employeeName": "Employee name",
    "date": "Date",
    "shiftName": "Shift",
    "checkIn": "Check-in",
    "checkOut": "Check-out",
    "attendanceStatus": "Status",
    "delayMinutes": "Delay (min)",
    "deductedHours": "Deducted hours",
    "deductedDays": "Deducted days",
    "overtimeHours": "Overtime hours",
    "leaveBalance": "Leave balance",
}

_TRUTHY = {"1", "true", "yes", "y", "on"}


def parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUTHY


def parse_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid attendance status: {value!r}")


def summarize(records: Iterable[AttendanceRecord], *, ignore_implausible_hours: bool = False) -> AttendanceTotals:
    totals = AttendanceTotals()
    for rec in records:
        if rec.status.is_working:
            totals.attendance_days += 1
        elif rec.status == AttendanceStatus.WEEKLY_OFF:
            totals.weekly_off_days += 1
        elif rec.status == AttendanceStatus.OFFICIAL_LEAVE:
            totals.official_leave_days += 1
        elif rec.status == AttendanceStatus.ABSENT:
            totals.absent_days += 1
        elif rec.status == AttendanceStatus.ANNUAL_LEAVE:
            totals.annual_leave_days += 1
        elif rec.status == AttendanceStatus.SICK_LEAVE:
            totals.sick_leave_days += 1
            totals.sick_leave_deduction += rec.deducted_days

        totals.overtime_hours += rec.overtime_hours
        if js_weekday(rec.work_date) == FRIDAY:
            totals.friday_overtime_hours += rec.overtime_hours
        if not (ignore_implausible_hours and rec.deducted_hours >= IMPLAUSIBLE_DEDUCTED_HOURS):
            totals.deducted_hours += rec.deducted_hours
        totals.deducted_days += rec.deducted_days
        if rec.leave_allowance:
            totals.leave_allowance_days += 1
    return totals


class AttendanceService:
    """Use cases around stored attendance: import, listing, manual edits.

    Note: `clock` is injectable so tests control what "today" is.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        shifts: ShiftRepository,
        *,
        strategy_factory: Optional[DeductionStrategyFactory] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._shifts = shifts
        self._ledger = AttendanceLedger(attendance, users, shifts, strategy_factory=strategy_factory)
        self._clock = clock

    @property
    def ledger(self) -> AttendanceLedger:
        return self._ledger

    # ---- import -------------------------------------------------------

    def import_punches(self, stream: BinaryIO, filename: str) -> dict:
        punches = read_punches(stream, filename)
        if not punches:
            raise ValidationError("The attendance file has no valid rows")

        users = {u.employee_code: u for u in self._users.list_all()}
        shifts = {s.shift_id: s for s in self._shifts.list_all()}
        grouped = group_punches(punches, users, shifts)

        by_employee: dict[str, list[AttendanceRecord]] = defaultdict(list)
        for draft in grouped.drafts.values():
            user = users[draft.employee_code]
            shift = shifts[user.shift_id]
            by_employee[draft.employee_code].append(
                blank_record(
                    user,
                    shift,
                    draft.work_date,
                    AttendanceStatus.PRESENT,
                    check_in=draft.check_in,
                    check_out=draft.check_out,
                    is_split=draft.split,
                )
            )

        saved = 0
        for code, records in by_employee.items():
            saved += self._ledger.replace_days(records, employee_codes=[code], dates=[r.work_date for r in records])
            self._ledger.reflow(code, min(r.work_date for r in records))

        logger.info("Imported %d attendance records for %d employees from %s", saved, len(by_employee), filename)
        return {
            "saved": saved,
            "employees": sorted(by_employee),
            "skippedEmployeeCodes": sorted(grouped.unknown_codes),
        }

    # ---- queries ------------------------------------------------------

    def get_attendance(self, start: str, end: str, employee_code: Optional[str] = None) -> dict:
        start_date, end_date = parse_iso_date(start), parse_iso_date(end)
        require_date_range(start_date, end_date)

        user = None
        if employee_code:
            user = self._users.get_by_employee_code(employee_code.strip())
            if not user:
                raise NotFoundError("Employee not found")
            targets = [user]
        else:
            targets = list(self._users.list_all())

        self._prepare(targets, start_date, end_date)
        records = self._attendance.list_range(
            start_date=start_date, end_date=end_date, employee_code=user.employee_code if user else None
        )
        result = {
            "records": [r.as_dict() for r in records],
            "totals": summarize(records).as_dict(),
        }
        if user:
            refreshed = self._users.get_by_employee_code(user.employee_code) or user
            result["annualLeaveBalance"] = refreshed.annual_leave_balance
        return result

    def month_records(self, user: User, year_month: str) -> Sequence[AttendanceRecord]:
        """Materialized and recomputed records of one employee for a month."""
        first, last = month_bounds(require_year_month(year_month))
        self._prepare([user], first, last)
        return self._attendance.list_range(start_date=first, end_date=last, employee_code=user.employee_code)

    def export_attendance(self, start: str, end: str, employee_code: Optional[str] = None) -> io.BytesIO:
        data = self.get_attendance(start, end, employee_code)
        return rows_to_xlsx(data["records"], columns=EXPORT_COLUMNS, sheet_name="Attendance")

    def _prepare(self, users: Iterable[User], start: date, end: date) -> None:
        """Fill missing days up to today and bring the grace chain up to date."""
        today = self._clock().date()
        last = min(end, today)

        for user in users:
            shift = self._shifts.get_by_id(user.shift_id) if user.shift_id is not None else None
            if not shift:
                continue
            existing = {r.work_date for r in self._attendance.list_range(start_date=start, end_date=end, employee_code=user.employee_code)}
            missing = []
            for day in iter_days(start, last):
                if day in existing:
                    continue
                status, days = no_show_status(shift, day)
                missing.append(blank_record(user, shift, day, status, deducted_days=days))
            if missing:
                self._attendance.insert_many(missing)
                logger.debug("Materialized %d missing days for %s", len(missing), user.employee_code)
            if existing or missing:
                self._ledger.reflow(user.employee_code, start)

    # ---- edits --------------------------------------------------------

    def update_record(self, attendance_id: int, payload: dict) -> AttendanceRecord:
        rec = self._attendance.get_by_id(attendance_id)
        if not rec:
            raise NotFoundError("Attendance record not found")
        user = self._users.get_by_employee_code(rec.employee_code)
        if not user:
            raise NotFoundError("Employee not found")
        shift = self._record_shift(rec, user)

        new_status = parse_status(payload["attendanceStatus"]) if payload.get("attendanceStatus") else None

        balance = user.annual_leave_balance
        if rec.status == AttendanceStatus.ANNUAL_LEAVE and new_status not in (None, AttendanceStatus.ANNUAL_LEAVE):
            balance += 1
        if new_status == AttendanceStatus.ANNUAL_LEAVE and rec.status != AttendanceStatus.ANNUAL_LEAVE:
            if balance < 1:
                raise ValidationError("Insufficient annual leave balance")
            balance -= 1
        if balance != user.annual_leave_balance:
            self._users.set_leave_balance(user.employee_code, balance)

        if new_status is not None and not new_status.is_working:
            check_in = check_out = None
        else:
            check_in, check_out = self._punches_from(payload, rec)

        if new_status is not None:
            status = new_status
        elif check_in or check_out:
            status = AttendanceStatus.PRESENT
        else:
            status, _ = no_show_status(shift, rec.work_date)

        sick = shift.sick_leave_deduction if status == AttendanceStatus.SICK_LEAVE else SickLeaveDeduction.NONE
        if status == AttendanceStatus.SICK_LEAVE:
            deducted_days = sick.days
        elif status == AttendanceStatus.ABSENT:
            deducted_days = 1.0
        else:
            deducted_days = 0.0

        updated = replace(
            rec,
            status=status,
            check_in=check_in,
            check_out=check_out,
            shift_id=shift.shift_id,
            shift_name=shift.shift_name,
            shift_type=shift.shift_type,
            is_cross_day=shift.is_cross_day,
            work_days=shift.work_days,
            leave_allowance=parse_flag(payload["leaveAllowance"]) if "leaveAllowance" in payload else rec.leave_allowance,
            leave_balance=balance,
            sick_leave_deduction=sick,
            is_official_leave=status == AttendanceStatus.OFFICIAL_LEAVE,
            is_split=rec.is_split and check_out is None and check_in == rec.check_in,
            deducted_days=deducted_days,
            deducted_hours=0.0,
            overtime_hours=0.0,
            delay_minutes=0,
        )
        self._attendance.update(updated)
        self._ledger.reflow(rec.employee_code, rec.work_date)
        logger.info("Attendance %s for %s on %s set to %s", attendance_id, rec.employee_code, rec.work_date, status.value)
        return self._attendance.get_by_id(attendance_id) or updated

    def delete_all(self) -> int:
        refunds = Counter(r.employee_code for r in self._attendance.list_by_status(AttendanceStatus.ANNUAL_LEAVE))
        for code, count in refunds.items():
            user = self._users.get_by_employee_code(code)
            if user:
                self._users.set_leave_balance(code, user.annual_leave_balance + count)
        deleted = self._attendance.delete_all()
        logger.warning("Deleted all %d attendance records", deleted)
        return deleted

    def _record_shift(self, rec: AttendanceRecord, user: User) -> Shift:
        for shift_id in (rec.shift_id, user.shift_id):
            if shift_id is not None:
                shift = self._shifts.get_by_id(shift_id)
                if shift:
                    return shift
        raise NotFoundError("Shift not found")

    @staticmethod
    def _punches_from(payload: dict, rec: AttendanceRecord) -> tuple[Optional[datetime], Optional[datetime]]:
        """Resolve HH:MM edits (with optional dates) against the stored punches."""

        def at(time_key: str, date_key: str, default_day: date) -> Optional[datetime]:
            try:
                moment = parse_hhmm(payload.get(time_key))
            except ValueError:
                raise ValidationError(f"{time_key} must be in HH:MM format")
            if moment is None:
                return None
            day = parse_iso_date(payload[date_key]) if payload.get(date_key) else default_day
            return datetime.combine(day, moment)

        check_in = at("checkIn", "checkInDate", rec.work_date) if "checkIn" in payload else rec.check_in

        if "checkOut" in payload:
            base_day = check_in.date() if check_in else rec.work_date
            check_out = at("checkOut", "checkOutDate", base_day)
            if check_out and check_in and check_out <= check_in and not payload.get("checkOutDate"):
                check_out += timedelta(days=1)
        else:
            check_out = rec.check_out
        return check_in, check_out
