from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_hhmm, js_weekday
from ..core.constants import DEFAULT_MAX_OVERTIME_HOURS, DEFAULT_MAX_OVERTIME_HOURS_24
from ..core.enums import DeductionType, OvertimeBasis, ShiftType, SickLeaveDeduction


@dataclass(frozen=True)
class ShiftDeduction:
    """A lateness rule.

    Day/evening shifts use a check-in window (start, end); 24/24 shifts use a
    duration in minutes and a deduction amount.
    """

    type: DeductionType
    start: Optional[time] = None
    end: Optional[time] = None
    duration: Optional[int] = None
    deduction_amount: Optional[float] = None

    def contains(self, moment: time, *, cross_day: bool) -> bool:
        if self.start is None or self.end is None:
            return False
        if cross_day and self.end <= self.start:
            return moment >= self.start or moment <= self.end
        return self.start <= moment <= self.end

    def as_dict(self) -> dict:
        return {
            "type": self.type.value,
            "start": format_hhmm(self.start),
            "end": format_hhmm(self.end),
            "duration": self.duration,
            "deductionAmount": self.deduction_amount,
        }


@dataclass(frozen=True)
class Shift:
    """Domain entity: a work shift and its payroll rules."""

    shift_id: int
    shift_name: str
    shift_type: ShiftType
    start_time: Optional[time]
    end_time: Optional[time]
    base_hours: float
    max_overtime_hours: float
    work_days: tuple[int, ...]
    grace_period: int = 0
    cross_day: bool = False
    deductions: tuple[ShiftDeduction, ...] = field(default_factory=tuple)
    sick_leave_deduction: SickLeaveDeduction = SickLeaveDeduction.NONE
    overtime_basis: OvertimeBasis = OvertimeBasis.TOTAL_SALARY
    overtime_multiplier: float = 1.0
    friday_overtime_basis: OvertimeBasis = OvertimeBasis.TOTAL_SALARY
    friday_overtime_multiplier: float = 1.0

    @property
    def is_cross_day(self) -> bool:
        return self.cross_day or self.shift_type in (ShiftType.EVENING, ShiftType.FULL_DAY)

    @property
    def overtime_cap(self) -> float:
        if self.max_overtime_hours and self.max_overtime_hours > 0:
            return float(self.max_overtime_hours)
        if self.shift_type == ShiftType.FULL_DAY:
            return DEFAULT_MAX_OVERTIME_HOURS_24
        return DEFAULT_MAX_OVERTIME_HOURS

    @property
    def has_minutes_deduction(self) -> bool:
        return any(d.type == DeductionType.MINUTES for d in self.deductions)

    def works_on(self, day: date) -> bool:
        return js_weekday(day) in self.work_days

    def as_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "shiftName": self.shift_name,
            "shiftType": self.shift_type.value,
            "startTime": format_hhmm(self.start_time),
            "endTime": format_hhmm(self.end_time),
            "isCrossDay": self.is_cross_day,
            "baseHours": self.base_hours,
            "maxOvertimeHours": self.max_overtime_hours,
            "workDays": list(self.work_days),
            "gracePeriod": self.grace_period,
            "deductions": [d.as_dict() for d in self.deductions],
            "sickLeaveDeduction": self.sick_leave_deduction.value,
            "overtimeBasis": self.overtime_basis.value,
            "overtimeMultiplier": self.overtime_multiplier,
            "fridayOvertimeBasis": self.friday_overtime_basis.value,
            "fridayOvertimeMultiplier": self.friday_overtime_multiplier,
        }
