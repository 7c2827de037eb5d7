from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Violation, ViolationAdjustment
from .repository import ViolationAdjustmentRepository, ViolationRepository

_COLUMNS = """
    violation_id, employee_code, employee_name, department, violation_price, violation_date,
    vehicle_code, station, violation_image
"""


def _row_to_violation(r: dict) -> Violation:
    return Violation(
        violation_id=int(r["violation_id"]),
        employee_code=r["employee_code"],
        employee_name=r["employee_name"],
        department=r.get("department"),
        violation_price=as_float(r["violation_price"]),
        violation_date=normalize_mysql_date(r["violation_date"]),
        vehicle_code=r.get("vehicle_code") or "",
        station=r.get("station") or "",
        violation_image=r.get("violation_image"),
    )


def _violation_params(v: Violation) -> tuple:
    return (
        v.employee_code,
        v.employee_name,
        v.department,
        v.violation_price,
        v.violation_date,
        v.vehicle_code,
        v.station,
        v.violation_image,
    )


class MySQLViolationRepository(ViolationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, violation_id: int) -> Optional[Violation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM violations WHERE violation_id=%s", (violation_id,))
            r = fetchone(cur)
            return _row_to_violation(r) if r else None

    def list_all(self, *, employee_code: Optional[str] = None) -> Sequence[Violation]:
        with db_cursor(self._conn_factory) as (_, cur):
            if employee_code:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM violations WHERE employee_code=%s ORDER BY violation_date DESC, violation_id DESC",
                    (employee_code,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM violations ORDER BY violation_date DESC, violation_id DESC")
            return [_row_to_violation(r) for r in fetchall(cur)]

    def list_between(self, employee_code: str, start: date, end: date) -> Sequence[Violation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM violations
                WHERE employee_code=%s AND violation_date BETWEEN %s AND %s
                ORDER BY violation_date, violation_id
                """,
                (employee_code, start, end),
            )
            return [_row_to_violation(r) for r in fetchall(cur)]

    def create(self, violation: Violation) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO violations(employee_code, employee_name, department, violation_price, violation_date,
                                       vehicle_code, station, violation_image)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _violation_params(violation),
            )
            return int(cur.lastrowid)

    def update(self, violation: Violation) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE violations
                SET employee_code=%s, employee_name=%s, department=%s, violation_price=%s, violation_date=%s,
                    vehicle_code=%s, station=%s, violation_image=%s
                WHERE violation_id=%s
                """,
                _violation_params(violation) + (violation.violation_id,),
            )

    def delete_by_id(self, violation_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM violations WHERE violation_id=%s", (violation_id,))
            return cur.rowcount > 0


def _row_to_adjustment(r: dict) -> ViolationAdjustment:
    return ViolationAdjustment(
        employee_code=r["employee_code"],
        month=r["month"],
        total_violations=as_float(r["total_violations"]),
        deduction_violations_installment=as_float(r["deduction_violations_installment"]),
        remaining_violations=as_float(r["remaining_violations"]),
    )


class MySQLViolationAdjustmentRepository(ViolationAdjustmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_code: str, month: str) -> Optional[ViolationAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_code, month, total_violations, deduction_violations_installment, remaining_violations
                FROM violation_adjustments WHERE employee_code=%s AND month=%s
                """,
                (employee_code, month),
            )
            r = fetchone(cur)
            return _row_to_adjustment(r) if r else None

    def list_after(self, employee_code: str, month: str) -> Sequence[ViolationAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_code, month, total_violations, deduction_violations_installment, remaining_violations
                FROM violation_adjustments WHERE employee_code=%s AND month>%s ORDER BY month
                """,
                (employee_code, month),
            )
            return [_row_to_adjustment(r) for r in fetchall(cur)]

    def upsert(self, adjustment: ViolationAdjustment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO violation_adjustments(employee_code, month, total_violations,
                                                  deduction_violations_installment, remaining_violations)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE total_violations=VALUES(total_violations),
                    deduction_violations_installment=VALUES(deduction_violations_installment),
                    remaining_violations=VALUES(remaining_violations)
                """,
                (
                    adjustment.employee_code,
                    adjustment.month,
                    adjustment.total_violations,
                    adjustment.deduction_violations_installment,
                    adjustment.remaining_violations,
                ),
            )
