from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for access control."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class ShiftType(str, Enum):
    MORNING = "morning"
    EVENING = "evening"
    FULL_DAY = "24/24"


class DeductionType(str, Enum):
    """What a late check-in inside a deduction window costs."""

    QUARTER = "quarter"
    HALF = "half"
    FULL = "full"
    MINUTES = "minutes"


class SickLeaveDeduction(str, Enum):
    NONE = "none"
    QUARTER = "quarter"
    HALF = "half"
    FULL = "full"

    @property
    def days(self) -> float:
        return {"none": 0.0, "quarter": 0.25, "half": 0.5, "full": 1.0}[self.value]


class OvertimeBasis(str, Enum):
    BASIC_SALARY = "basicSalary"
    TOTAL_SALARY = "totalSalaryWithAllowances"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    WEEKLY_OFF = "weekly_off"
    OFFICIAL_LEAVE = "official_leave"
    ANNUAL_LEAVE = "annual_leave"
    SICK_LEAVE = "sick_leave"

    @property
    def is_leave(self) -> bool:
        return self in {AttendanceStatus.OFFICIAL_LEAVE, AttendanceStatus.ANNUAL_LEAVE, AttendanceStatus.SICK_LEAVE}

    @property
    def is_working(self) -> bool:
        return self in {AttendanceStatus.PRESENT, AttendanceStatus.LATE}


class AdvanceStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
