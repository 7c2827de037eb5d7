from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, employee_code, password_hash, name, department, role, shift_id, work_days,
    total_salary_with_allowances, basic_salary, basic_bonus, bonus_percentage, meal_allowance,
    medical_insurance, social_insurance, annual_leave_balance, net_salary, remaining_grace_period
"""


def _row_to_user(r: dict) -> User:
    grace = r.get("remaining_grace_period")
    return User(
        user_id=int(r["user_id"]),
        employee_code=r["employee_code"],
        password_hash=r["password_hash"],
        name=r["name"],
        department=r.get("department"),
        role=Role(r["role"]),
        shift_id=r.get("shift_id"),
        work_days=int(r.get("work_days") or 0),
        total_salary_with_allowances=as_float(r.get("total_salary_with_allowances")),
        basic_salary=as_float(r.get("basic_salary")),
        basic_bonus=as_float(r.get("basic_bonus")),
        bonus_percentage=as_float(r.get("bonus_percentage")),
        meal_allowance=as_float(r.get("meal_allowance")),
        medical_insurance=as_float(r.get("medical_insurance")),
        social_insurance=as_float(r.get("social_insurance")),
        annual_leave_balance=as_float(r.get("annual_leave_balance")),
        net_salary=as_float(r.get("net_salary")),
        remaining_grace_period=int(grace) if grace is not None else None,
    )


def _user_params(user: User) -> tuple:
    return (
        user.employee_code,
        user.password_hash,
        user.name,
        user.department,
        user.role.value,
        user.shift_id,
        user.work_days,
        user.total_salary_with_allowances,
        user.basic_salary,
        user.basic_bonus,
        user.bonus_percentage,
        user.meal_allowance,
        user.medical_insurance,
        user.social_insurance,
        user.annual_leave_balance,
        user.net_salary,
        user.remaining_grace_period,
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE employee_code=%s", (employee_code,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self, *, shift_id: Optional[int] = None) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            if shift_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY employee_code")
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM users WHERE shift_id=%s ORDER BY employee_code", (shift_id,))
            return [_row_to_user(r) for r in fetchall(cur)]

    def create(self, user: User) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(employee_code, password_hash, name, department, role, shift_id, work_days,
                                  total_salary_with_allowances, basic_salary, basic_bonus, bonus_percentage,
                                  meal_allowance, medical_insurance, social_insurance, annual_leave_balance,
                                  net_salary, remaining_grace_period)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _user_params(user),
            )
            return int(cur.lastrowid)

    def update(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET employee_code=%s, password_hash=%s, name=%s, department=%s, role=%s, shift_id=%s,
                    work_days=%s, total_salary_with_allowances=%s, basic_salary=%s, basic_bonus=%s,
                    bonus_percentage=%s, meal_allowance=%s, medical_insurance=%s, social_insurance=%s,
                    annual_leave_balance=%s, net_salary=%s, remaining_grace_period=%s
                WHERE user_id=%s
                """,
                _user_params(user) + (user.user_id,),
            )

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def set_remaining_grace(self, employee_code: str, minutes: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET remaining_grace_period=%s WHERE employee_code=%s",
                (minutes, employee_code),
            )

    def set_leave_balance(self, employee_code: str, balance: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET annual_leave_balance=%s WHERE employee_code=%s",
                (balance, employee_code),
            )
            cur.execute(
                "UPDATE attendance SET leave_balance=%s WHERE employee_code=%s",
                (balance, employee_code),
            )
