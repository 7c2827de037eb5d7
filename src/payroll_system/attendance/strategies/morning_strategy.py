from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus, DeductionType
from ...shifts.model import Shift
from .base import DeductionStrategy

_DAY_FRACTION = {
    DeductionType.QUARTER: 0.25,
    DeductionType.HALF: 0.5,
    DeductionType.FULL: 1.0,
}


class MorningStrategy(DeductionStrategy):
    """Day shift: lateness against the shift start, grace budget, then deduction windows."""

    def lateness(self, *, shift: Shift, check_in: datetime, remaining_grace: int) -> tuple[int, float, float, int]:
        if shift.start_time is None:
            return 0, 0.0, 0.0, remaining_grace

        start_minutes = shift.start_time.hour * 60 + shift.start_time.minute
        in_minutes = check_in.hour * 60 + check_in.minute
        delay = max(0, in_minutes - start_minutes)
        if delay == 0:
            return 0, 0.0, 0.0, remaining_grace

        moment = check_in.time()
        windows = [d for d in shift.deductions if d.start is not None]
        if windows and moment < min(d.start for d in windows):
            # Arrived before the first deduction window opens: not counted as late.
            return 0, 0.0, 0.0, remaining_grace

        if delay <= remaining_grace:
            return delay, 0.0, 0.0, remaining_grace - delay

        window = next((d for d in windows if d.contains(moment, cross_day=shift.is_cross_day)), None)
        if window is None:
            late = delay - remaining_grace
            return late, 0.0, late / 60, 0

        if window.type == DeductionType.MINUTES:
            return delay, 0.0, delay / 60, 0
        return delay, _DAY_FRACTION[window.type], 0.0, 0

    def status_for(self, *, shift: Shift, delay_minutes: int) -> AttendanceStatus:
        if delay_minutes > shift.grace_period:
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT
