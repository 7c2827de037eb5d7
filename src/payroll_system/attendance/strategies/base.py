from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import hours_between
from ...core.constants import LEAVE_ALLOWANCE_OVERTIME_FACTOR
from ...core.enums import AttendanceStatus
from ...shifts.model import Shift


@dataclass(frozen=True)
class DeductionResult:
    status: AttendanceStatus
    deducted_days: float = 0.0
    deducted_hours: float = 0.0
    delay_minutes: int = 0
    overtime_hours: float = 0.0
    remaining_grace: int = 0


class DeductionStrategy(ABC):
    """Strategy Pattern: how punches on a shift turn into lateness, deductions and overtime."""

    def calculate(
        self,
        *,
        shift: Shift,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        remaining_grace: int,
        leave_allowance: bool = False,
        split: bool = False,
    ) -> DeductionResult:
        if check_in is None and check_out is None:
            return DeductionResult(status=AttendanceStatus.ABSENT, deducted_days=1.0, remaining_grace=remaining_grace)

        if check_in is None:
            # Only a check-out: assume a full shift was worked.
            check_in = check_out - timedelta(hours=shift.base_hours)

        delay, late_days, late_hours, grace = self.lateness(shift=shift, check_in=check_in, remaining_grace=remaining_grace)
        if split:
            # Shift ran past base hours plus the cap; the next punch opened a new day.
            overtime, missing_hours = float(shift.overtime_cap), 0.0
        else:
            overtime, missing_hours = self.worked_time(
                shift=shift, check_in=check_in, check_out=check_out, leave_allowance=leave_allowance
            )
        return DeductionResult(
            status=self.status_for(shift=shift, delay_minutes=delay),
            deducted_days=late_days,
            deducted_hours=max(late_hours, missing_hours),
            delay_minutes=delay,
            overtime_hours=overtime,
            remaining_grace=grace,
        )

    @abstractmethod
    def lateness(self, *, shift: Shift, check_in: datetime, remaining_grace: int) -> tuple[int, float, float, int]:
        """Return (delay minutes, deducted days, deducted hours, remaining grace)."""

        raise NotImplementedError

    @abstractmethod
    def status_for(self, *, shift: Shift, delay_minutes: int) -> AttendanceStatus:
        raise NotImplementedError

    @staticmethod
    def worked_time(
        *,
        shift: Shift,
        check_in: datetime,
        check_out: Optional[datetime],
        leave_allowance: bool,
    ) -> tuple[float, float]:
        """Return (overtime hours, missing hours) for the punch pair."""
        base = float(shift.base_hours)
        if check_out is None:
            return 0.0, base

        duration = hours_between(check_in, check_out)
        if duration < 0:
            duration += 24

        cap = shift.overtime_cap
        if leave_allowance:
            overtime = duration * LEAVE_ALLOWANCE_OVERTIME_FACTOR
        elif duration > base:
            overtime = min(duration - base, cap)
        else:
            overtime = 0.0

        missing = base - duration if duration < base else 0.0
        return round(overtime, 2), round(missing, 2)
