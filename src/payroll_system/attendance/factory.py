from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ShiftType
from ..shifts.model import Shift
from .strategies.base import DeductionStrategy
from .strategies.cross_day_strategy import CrossDayStrategy
from .strategies.morning_strategy import MorningStrategy


@dataclass
class DeductionStrategyFactory:
    """Factory Pattern: choose the deduction rules for a shift."""

    def for_shift(self, shift: Shift) -> DeductionStrategy:
        if shift.shift_type == ShiftType.MORNING:
            return MorningStrategy()
        return CrossDayStrategy()
