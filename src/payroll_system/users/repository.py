from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self, *, shift_id: Optional[int] = None) -> Sequence[User]:
        raise NotImplementedError

    def create(self, user: User) -> int:
        raise NotImplementedError

    def update(self, user: User) -> None:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def set_remaining_grace(self, employee_code: str, minutes: int) -> None:
        raise NotImplementedError

    def set_leave_balance(self, employee_code: str, balance: float) -> None:
        raise NotImplementedError
