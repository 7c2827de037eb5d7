from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_code: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by date then employee code; open-ended when a bound is None."""

        raise NotImplementedError

    def list_by_status(self, status: AttendanceStatus) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def insert_many(self, records: Iterable[AttendanceRecord]) -> int:
        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def delete_for(self, *, employee_codes: Iterable[str], dates: Iterable[date]) -> int:
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError
