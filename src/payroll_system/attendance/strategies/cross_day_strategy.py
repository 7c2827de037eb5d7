from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from .base import DeductionStrategy


class CrossDayStrategy(DeductionStrategy):
    """Evening and 24/24 shifts: no lateness rules, only worked duration counts."""

    def lateness(self, *, shift: Shift, check_in: datetime, remaining_grace: int) -> tuple[int, float, float, int]:
        return 0, 0.0, 0.0, remaining_grace

    def status_for(self, *, shift: Shift, delay_minutes: int) -> AttendanceStatus:
        return AttendanceStatus.PRESENT
