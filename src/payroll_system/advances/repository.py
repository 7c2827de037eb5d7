from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Advance, AdvanceDeduction


class AdvanceRepository(Protocol):
    def get_by_id(self, advance_id: int) -> Optional[Advance]:
        raise NotImplementedError

    def list_all(self, *, employee_code: Optional[str] = None) -> Sequence[Advance]:
        raise NotImplementedError

    def list_active_between(self, employee_code: str, start: date, end: date) -> Sequence[Advance]:
        """Active advances taken on or before `end` whose final repayment date is on or after `start`."""

        raise NotImplementedError

    def create(self, advance: Advance) -> int:
        raise NotImplementedError

    def update(self, advance: Advance) -> None:
        raise NotImplementedError

    def add_deduction(self, advance_id: int, deduction: AdvanceDeduction) -> None:
        raise NotImplementedError

    def delete_by_id(self, advance_id: int) -> bool:
        raise NotImplementedError

    def delete_for_employee(self, employee_code: str) -> int:
        raise NotImplementedError
