from __future__ import annotations

from typing import Optional, Protocol

from .model import BonusAdjustment, SalaryAdjustment


class SalaryAdjustmentRepository(Protocol):
    def get(self, employee_code: str, month: str) -> Optional[SalaryAdjustment]:
        raise NotImplementedError

    def upsert(self, adjustment: SalaryAdjustment) -> None:
        raise NotImplementedError


class BonusAdjustmentRepository(Protocol):
    def get(self, employee_code: str, month: str) -> Optional[BonusAdjustment]:
        raise NotImplementedError

    def upsert(self, adjustment: BonusAdjustment) -> None:
        raise NotImplementedError
