from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceTotals
from ...shifts.model import Shift
from ...users.model import User
from ...violations.model import ViolationAdjustment
from ..model import BonusAdjustment, BonusBreakdown, SalaryAdjustment, SalaryBreakdown


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def salary(
        self,
        *,
        user: User,
        shift: Shift,
        totals: AttendanceTotals,
        adjustment: SalaryAdjustment,
        violations: ViolationAdjustment,
    ) -> SalaryBreakdown:
        raise NotImplementedError

    @abstractmethod
    def bonus(self, *, user: User, deducted_days: float, adjustment: BonusAdjustment) -> BonusBreakdown:
        raise NotImplementedError
