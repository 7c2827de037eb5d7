from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

from ..core.enums import AdvanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Advance, AdvanceDeduction
from .repository import AdvanceRepository

_COLUMNS = """
    advance_id, employee_code, employee_name, advance_amount, advance_date, installment_months,
    monthly_installment, remaining_amount, final_repayment_date, status, last_deduction_month,
    notes, approved_by
"""


def _row_to_advance(r: dict, history: Sequence[AdvanceDeduction] = ()) -> Advance:
    return Advance(
        advance_id=int(r["advance_id"]),
        employee_code=r["employee_code"],
        employee_name=r["employee_name"],
        advance_amount=as_float(r["advance_amount"]),
        advance_date=normalize_mysql_date(r["advance_date"]),
        installment_months=int(r["installment_months"]),
        monthly_installment=as_float(r["monthly_installment"]),
        remaining_amount=as_float(r["remaining_amount"]),
        final_repayment_date=normalize_mysql_date(r["final_repayment_date"]),
        status=AdvanceStatus(r["status"]),
        last_deduction_month=r.get("last_deduction_month"),
        deduction_history=tuple(history),
        notes=r.get("notes") or "",
        approved_by=r.get("approved_by"),
    )


def _advance_params(a: Advance) -> tuple:
    return (
        a.employee_code,
        a.employee_name,
        a.advance_amount,
        a.advance_date,
        a.installment_months,
        a.monthly_installment,
        a.remaining_amount,
        a.final_repayment_date,
        a.status.value,
        a.last_deduction_month,
        a.notes,
        a.approved_by,
    )


class MySQLAdvanceRepository(AdvanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _with_history(self, cur, rows: list[dict]) -> list[Advance]:
        if not rows:
            return []
        ids = [int(r["advance_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT advance_id, month, amount, deduction_date
            FROM advance_deductions
            WHERE advance_id IN ({placeholders})
            ORDER BY month
            """,
            tuple(ids),
        )
        history: dict[int, list[AdvanceDeduction]] = defaultdict(list)
        for d in fetchall(cur):
            history[int(d["advance_id"])].append(
                AdvanceDeduction(
                    month=d["month"],
                    amount=as_float(d["amount"]),
                    deduction_date=normalize_mysql_date(d["deduction_date"]),
                )
            )
        return [_row_to_advance(r, history.get(int(r["advance_id"]), ())) for r in rows]

    def get_by_id(self, advance_id: int) -> Optional[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM advances WHERE advance_id=%s", (advance_id,))
            r = fetchone(cur)
            return self._with_history(cur, [r])[0] if r else None

    def list_all(self, *, employee_code: Optional[str] = None) -> Sequence[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            if employee_code:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM advances WHERE employee_code=%s ORDER BY advance_date, advance_id",
                    (employee_code,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM advances ORDER BY advance_date DESC, advance_id DESC")
            return self._with_history(cur, fetchall(cur))

    def list_active_between(self, employee_code: str, start: date, end: date) -> Sequence[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM advances
                WHERE employee_code=%s AND status=%s AND advance_date<=%s AND final_repayment_date>=%s
                ORDER BY advance_date, advance_id
                """,
                (employee_code, AdvanceStatus.ACTIVE.value, end, start),
            )
            return self._with_history(cur, fetchall(cur))

    def create(self, advance: Advance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO advances(employee_code, employee_name, advance_amount, advance_date, installment_months,
                                     monthly_installment, remaining_amount, final_repayment_date, status,
                                     last_deduction_month, notes, approved_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _advance_params(advance),
            )
            return int(cur.lastrowid)

    def update(self, advance: Advance) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE advances
                SET employee_code=%s, employee_name=%s, advance_amount=%s, advance_date=%s, installment_months=%s,
                    monthly_installment=%s, remaining_amount=%s, final_repayment_date=%s, status=%s,
                    last_deduction_month=%s, notes=%s, approved_by=%s
                WHERE advance_id=%s
                """,
                _advance_params(advance) + (advance.advance_id,),
            )

    def add_deduction(self, advance_id: int, deduction: AdvanceDeduction) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO advance_deductions(advance_id, month, amount, deduction_date)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE amount=VALUES(amount), deduction_date=VALUES(deduction_date)
                """,
                (advance_id, deduction.month, deduction.amount, deduction.deduction_date),
            )

    def delete_by_id(self, advance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM advances WHERE advance_id=%s", (advance_id,))
            return cur.rowcount > 0

    def delete_for_employee(self, employee_code: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM advances WHERE employee_code=%s", (employee_code,))
            return int(cur.rowcount)
