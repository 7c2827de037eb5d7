from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchone
from .model import BonusAdjustment, SalaryAdjustment
from .repository import BonusAdjustmentRepository, SalaryAdjustmentRepository


class MySQLSalaryAdjustmentRepository(SalaryAdjustmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_code: str, month: str) -> Optional[SalaryAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_code, month, total_advances, deduction_advances_installment, remaining_advances,
                       occasion_bonus, meal_allowance, penalties
                FROM salary_adjustments WHERE employee_code=%s AND month=%s
                """,
                (employee_code, month),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SalaryAdjustment(
                employee_code=r["employee_code"],
                month=r["month"],
                total_advances=as_float(r["total_advances"]),
                deduction_advances_installment=as_float(r["deduction_advances_installment"]),
                remaining_advances=as_float(r["remaining_advances"]),
                occasion_bonus=as_float(r["occasion_bonus"]),
                meal_allowance=as_float(r["meal_allowance"]),
                penalties=as_float(r["penalties"]),
            )

    def upsert(self, adjustment: SalaryAdjustment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_adjustments(employee_code, month, total_advances, deduction_advances_installment,
                                               remaining_advances, occasion_bonus, meal_allowance, penalties)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE total_advances=VALUES(total_advances),
                    deduction_advances_installment=VALUES(deduction_advances_installment),
                    remaining_advances=VALUES(remaining_advances), occasion_bonus=VALUES(occasion_bonus),
                    meal_allowance=VALUES(meal_allowance), penalties=VALUES(penalties)
                """,
                (
                    adjustment.employee_code,
                    adjustment.month,
                    adjustment.total_advances,
                    adjustment.deduction_advances_installment,
                    adjustment.remaining_advances,
                    adjustment.occasion_bonus,
                    adjustment.meal_allowance,
                    adjustment.penalties,
                ),
            )


class MySQLBonusAdjustmentRepository(BonusAdjustmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_code: str, month: str) -> Optional[BonusAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_code, month, binding_value, production_value
                FROM bonus_adjustments WHERE employee_code=%s AND month=%s
                """,
                (employee_code, month),
            )
            r = fetchone(cur)
            if not r:
                return None
            return BonusAdjustment(
                employee_code=r["employee_code"],
                month=r["month"],
                binding_value=as_float(r["binding_value"]),
                production_value=as_float(r["production_value"]),
            )

    def upsert(self, adjustment: BonusAdjustment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO bonus_adjustments(employee_code, month, binding_value, production_value)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE binding_value=VALUES(binding_value), production_value=VALUES(production_value)
                """,
                (adjustment.employee_code, adjustment.month, adjustment.binding_value, adjustment.production_value),
            )
