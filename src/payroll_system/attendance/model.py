from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, ShiftType, SickLeaveDeduction


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee-day of attendance."""

    attendance_id: int
    employee_code: str
    employee_name: str
    work_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    shift_id: Optional[int] = None
    shift_name: Optional[str] = None
    shift_type: Optional[ShiftType] = None
    is_cross_day: bool = False
    work_days: tuple[int, ...] = field(default_factory=tuple)
    delay_minutes: int = 0
    grace_period: int = 0
    remaining_grace_period: int = 0
    deducted_hours: float = 0.0
    overtime_hours: float = 0.0
    deducted_days: float = 0.0
    leave_balance: float = 0.0
    leave_allowance: bool = False
    sick_leave_deduction: SickLeaveDeduction = SickLeaveDeduction.NONE
    is_official_leave: bool = False
    is_split: bool = False

    @property
    def has_punches(self) -> bool:
        return self.check_in is not None or self.check_out is not None

    def as_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employeeCode": self.employee_code,
            "employeeName": self.employee_name,
            "date": self.work_date.isoformat(),
            "checkIn": self.check_in.strftime("%H:%M") if self.check_in else None,
            "checkOut": self.check_out.strftime("%H:%M") if self.check_out else None,
            "checkInDate": self.check_in.date().isoformat() if self.check_in else None,
            "checkOutDate": self.check_out.date().isoformat() if self.check_out else None,
            "shiftId": self.shift_id,
            "shiftName": self.shift_name,
            "shiftType": self.shift_type.value if self.shift_type else None,
            "isCrossDay": self.is_cross_day,
            "workDays": list(self.work_days),
            "delayMinutes": self.delay_minutes,
            "gracePeriod": self.grace_period,
            "remainingGracePeriod": self.remaining_grace_period,
            "deductedHours": round(self.deducted_hours, 2),
            "overtimeHours": round(self.overtime_hours, 2),
            "deductedDays": self.deducted_days,
            "leaveBalance": self.leave_balance,
            "attendanceStatus": self.status.value,
            "leaveAllowance": self.leave_allowance,
            "sickLeaveDeduction": self.sick_leave_deduction.value,
            "isOfficialLeave": self.is_official_leave,
            "isSplit": self.is_split,
        }


@dataclass(frozen=True)
class Punch:
    """One row of a fingerprint-device export."""

    employee_code: str
    at: datetime


@dataclass
class AttendanceTotals:
    """Aggregates over a set of attendance records."""

    attendance_days: int = 0
    weekly_off_days: int = 0
    official_leave_days: int = 0
    absent_days: int = 0
    annual_leave_days: int = 0
    sick_leave_days: int = 0
    overtime_hours: float = 0.0
    friday_overtime_hours: float = 0.0
    deducted_hours: float = 0.0
    deducted_days: float = 0.0
    sick_leave_deduction: float = 0.0
    leave_allowance_days: int = 0

    def as_dict(self) -> dict:
        return {
            "totalAttendanceDays": self.attendance_days,
            "totalWeeklyOffDays": self.weekly_off_days,
            "totalOfficialLeaveDays": self.official_leave_days,
            "totalAbsentDays": self.absent_days,
            "totalAnnualLeaveDays": self.annual_leave_days,
            "totalSickLeaveDays": self.sick_leave_days,
            "totalOvertimeHours": round(self.overtime_hours, 2),
            "totalDeductedHours": round(self.deducted_hours, 2),
            "totalDeductedDays": round(self.deducted_days, 2),
            "totalSickLeaveDeduction": round(self.sick_leave_deduction, 2),
            "totalLeaveAllowance": self.leave_allowance_days,
        }
