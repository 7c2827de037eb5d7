from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Violation, ViolationAdjustment


class ViolationRepository(Protocol):
    def get_by_id(self, violation_id: int) -> Optional[Violation]:
        raise NotImplementedError

    def list_all(self, *, employee_code: Optional[str] = None) -> Sequence[Violation]:
        raise NotImplementedError

    def list_between(self, employee_code: str, start: date, end: date) -> Sequence[Violation]:
        raise NotImplementedError

    def create(self, violation: Violation) -> int:
        raise NotImplementedError

    def update(self, violation: Violation) -> None:
        raise NotImplementedError

    def delete_by_id(self, violation_id: int) -> bool:
        raise NotImplementedError


class ViolationAdjustmentRepository(Protocol):
    def get(self, employee_code: str, month: str) -> Optional[ViolationAdjustment]:
        raise NotImplementedError

    def list_after(self, employee_code: str, month: str) -> Sequence[ViolationAdjustment]:
        """Stored adjustments later than `month`, oldest first."""

        raise NotImplementedError

    def upsert(self, adjustment: ViolationAdjustment) -> None:
        raise NotImplementedError
