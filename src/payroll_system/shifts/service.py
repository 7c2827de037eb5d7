from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_hhmm
from ..common.validators import parse_number, require_hhmm, require_non_empty
from ..core.constants import ALLOWED_OVERTIME_MULTIPLIERS, DEFAULT_MAX_OVERTIME_HOURS, DEFAULT_MAX_OVERTIME_HOURS_24
from ..core.enums import DeductionType, OvertimeBasis, ShiftType, SickLeaveDeduction
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Shift, ShiftDeduction
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


def _enum(enum_cls, value: Any, field_name: str, default=None):
    if value in (None, "") and default is not None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def _multiplier(value: Any, field_name: str) -> float:
    if value in (None, ""):
        return 1.0
    number = parse_number(value, field_name)
    if number not in ALLOWED_OVERTIME_MULTIPLIERS:
        raise ValidationError(f"{field_name} must be 1, 1.5 or 2")
    return number


def _span_minutes(start, end, *, wraps: bool) -> int:
    anchor = datetime(2000, 1, 1)
    s = datetime.combine(anchor, start)
    e = datetime.combine(anchor, end)
    if wraps and e <= s:
        e += timedelta(days=1)
    return int((e - s).total_seconds() // 60)


class ShiftService:
    """Use case: manage shift definitions (admin)."""

    def __init__(self, shifts: ShiftRepository, users: UserRepository):
        self._shifts = shifts
        self._users = users

    def list_shifts(self) -> Sequence[Shift]:
        return self._shifts.list_all()

    def get_shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(shift_id)
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def create_shift(self, payload: dict) -> int:
        shift = self.build_shift(payload)
        shift_id = self._shifts.create(shift)
        logger.info("Created shift %s (%s)", shift_id, shift.shift_name)
        return shift_id

    def update_shift(self, shift_id: int, payload: dict) -> Shift:
        self.get_shift(shift_id)
        shift = self.build_shift(payload, shift_id=shift_id)
        self._shifts.update(shift)
        return shift

    def delete_shift(self, shift_id: int) -> None:
        self.get_shift(shift_id)
        if self._users.list_all(shift_id=shift_id):
            raise ValidationError("Shift is assigned to employees; reassign them first")
        self._shifts.delete_by_id(shift_id)
        logger.info("Deleted shift %s", shift_id)

    def build_shift(self, payload: dict, *, shift_id: int = 0) -> Shift:
        """Validate an API payload and turn it into a Shift."""
        name = require_non_empty(payload.get("shiftName"), "Shift name")
        shift_type = _enum(ShiftType, payload.get("shiftType"), "Shift type")

        base_hours = parse_number(payload.get("baseHours"), "Base hours")
        if base_hours <= 0:
            raise ValidationError("Base hours must be a positive value")

        default_max = DEFAULT_MAX_OVERTIME_HOURS_24 if shift_type == ShiftType.FULL_DAY else DEFAULT_MAX_OVERTIME_HOURS
        raw_max = payload.get("maxOvertimeHours")
        max_overtime = default_max if raw_max in (None, "") else parse_number(raw_max, "Max overtime hours")
        if max_overtime < 0:
            raise ValidationError("Max overtime hours cannot be negative")

        grace = parse_number(payload.get("gracePeriod", 0) or 0, "Grace period")
        if grace < 0:
            raise ValidationError("Grace period cannot be negative")

        work_days = self._work_days(payload.get("workDays"))
        raw_deductions = payload.get("deductions") or []
        if not isinstance(raw_deductions, list):
            raise ValidationError("Deductions must be a list")

        start_time = end_time = None
        if shift_type in (ShiftType.MORNING, ShiftType.EVENING):
            if not payload.get("startTime") or not payload.get("endTime"):
                raise ValidationError("Start and end time are required for morning and evening shifts")
            start_time = parse_hhmm(require_hhmm(payload.get("startTime"), "Start time"))
            end_time = parse_hhmm(require_hhmm(payload.get("endTime"), "End time"))
            span = _span_minutes(start_time, end_time, wraps=shift_type == ShiftType.EVENING)
            if abs(span / 60 - base_hours) > 1e-9:
                raise ValidationError("Base hours must match the time between start and end")
            deductions = tuple(self._window_deduction(d, shift_type) for d in raw_deductions)
        else:
            if max_overtime <= 0:
                raise ValidationError("Max overtime hours must be positive for 24/24 shifts")
            deductions = tuple(self._duration_deduction(d, base_hours) for d in raw_deductions)

        cross_day = payload.get("isCrossDay")
        if cross_day is None:
            cross_day = shift_type == ShiftType.EVENING

        return Shift(
            shift_id=shift_id,
            shift_name=name,
            shift_type=shift_type,
            start_time=start_time,
            end_time=end_time,
            cross_day=bool(cross_day),
            base_hours=base_hours,
            max_overtime_hours=max_overtime,
            work_days=work_days,
            grace_period=int(grace),
            deductions=deductions,
            sick_leave_deduction=_enum(
                SickLeaveDeduction, payload.get("sickLeaveDeduction"), "Sick leave deduction", SickLeaveDeduction.NONE
            ),
            overtime_basis=_enum(OvertimeBasis, payload.get("overtimeBasis"), "Overtime basis", OvertimeBasis.TOTAL_SALARY),
            overtime_multiplier=_multiplier(payload.get("overtimeMultiplier"), "Overtime multiplier"),
            friday_overtime_basis=_enum(
                OvertimeBasis, payload.get("fridayOvertimeBasis"), "Friday overtime basis", OvertimeBasis.TOTAL_SALARY
            ),
            friday_overtime_multiplier=_multiplier(payload.get("fridayOvertimeMultiplier"), "Friday overtime multiplier"),
        )

    @staticmethod
    def _work_days(value: Optional[list]) -> tuple[int, ...]:
        if not isinstance(value, list) or not value:
            raise ValidationError("Work days are required")
        days = []
        for day in value:
            if isinstance(day, bool) or not isinstance(day, int) and not (isinstance(day, str) and day.isdigit()):
                raise ValidationError("Work days must be whole numbers between 0 and 6")
            day = int(day)
            if not 0 <= day <= 6:
                raise ValidationError("Work days must be whole numbers between 0 and 6")
            days.append(day)
        return tuple(sorted(set(days)))

    @staticmethod
    def _window_deduction(raw: dict, shift_type: ShiftType) -> ShiftDeduction:
        ded_type = _enum(DeductionType, raw.get("type"), "Deduction type")
        if raw.get("duration") or raw.get("deductionAmount"):
            raise ValidationError("Duration and amount apply to 24/24 shifts only")
        start = parse_hhmm(require_hhmm(raw.get("start"), "Deduction start"))
        end = parse_hhmm(require_hhmm(raw.get("end"), "Deduction end"))
        if _span_minutes(start, end, wraps=shift_type == ShiftType.EVENING) <= 0:
            raise ValidationError("Deduction end time must be after its start time")
        return ShiftDeduction(type=ded_type, start=start, end=end)

    @staticmethod
    def _duration_deduction(raw: dict, base_hours: float) -> ShiftDeduction:
        ded_type = _enum(DeductionType, raw.get("type"), "Deduction type")
        if raw.get("start") or raw.get("end"):
            raise ValidationError("Start and end apply to morning and evening shifts only")
        duration = parse_number(raw.get("duration"), "Deduction duration")
        amount = parse_number(raw.get("deductionAmount"), "Deduction amount")
        if duration <= 0 or amount <= 0:
            raise ValidationError("Deduction duration and amount must be positive")
        if duration > base_hours * 60:
            raise ValidationError("Deduction duration must not exceed the base hours")
        return ShiftDeduction(type=ded_type, duration=int(duration), deduction_amount=amount)
