from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.enums import DeductionType, OvertimeBasis, ShiftType, SickLeaveDeduction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, dump_json, fetchall, fetchone, load_json, normalize_mysql_time
from .model import Shift, ShiftDeduction
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, shift_name, shift_type, start_time, end_time, is_cross_day, base_hours,
    max_overtime_hours, work_days, grace_period, deductions, sick_leave_deduction,
    overtime_basis, overtime_multiplier, friday_overtime_basis, friday_overtime_multiplier
"""


def _row_to_shift(r: dict) -> Shift:
    deductions = tuple(
        ShiftDeduction(
            type=DeductionType(d["type"]),
            start=parse_hhmm(d.get("start")),
            end=parse_hhmm(d.get("end")),
            duration=d.get("duration"),
            deduction_amount=d.get("deductionAmount"),
        )
        for d in load_json(r.get("deductions"), [])
    )
    return Shift(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        shift_type=ShiftType(r["shift_type"]),
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        cross_day=bool(r.get("is_cross_day")),
        base_hours=as_float(r.get("base_hours")),
        max_overtime_hours=as_float(r.get("max_overtime_hours")),
        work_days=tuple(int(d) for d in load_json(r.get("work_days"), [])),
        grace_period=int(r.get("grace_period") or 0),
        deductions=deductions,
        sick_leave_deduction=SickLeaveDeduction(r.get("sick_leave_deduction") or "none"),
        overtime_basis=OvertimeBasis(r["overtime_basis"]),
        overtime_multiplier=as_float(r.get("overtime_multiplier")),
        friday_overtime_basis=OvertimeBasis(r["friday_overtime_basis"]),
        friday_overtime_multiplier=as_float(r.get("friday_overtime_multiplier")),
    )


def _shift_params(shift: Shift) -> tuple:
    return (
        shift.shift_name,
        shift.shift_type.value,
        format_hhmm(shift.start_time),
        format_hhmm(shift.end_time),
        int(shift.cross_day),
        shift.base_hours,
        shift.max_overtime_hours,
        dump_json(list(shift.work_days)),
        shift.grace_period,
        dump_json([d.as_dict() for d in shift.deductions]),
        shift.sick_leave_deduction.value,
        shift.overtime_basis.value,
        shift.overtime_multiplier,
        shift.friday_overtime_basis.value,
        shift.friday_overtime_multiplier,
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts ORDER BY shift_id")
            return [_row_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (shift_id,))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def create(self, shift: Shift) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(shift_name, shift_type, start_time, end_time, is_cross_day, base_hours,
                                   max_overtime_hours, work_days, grace_period, deductions, sick_leave_deduction,
                                   overtime_basis, overtime_multiplier, friday_overtime_basis, friday_overtime_multiplier)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _shift_params(shift),
            )
            return int(cur.lastrowid)

    def update(self, shift: Shift) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET shift_name=%s, shift_type=%s, start_time=%s, end_time=%s, is_cross_day=%s, base_hours=%s,
                    max_overtime_hours=%s, work_days=%s, grace_period=%s, deductions=%s, sick_leave_deduction=%s,
                    overtime_basis=%s, overtime_multiplier=%s, friday_overtime_basis=%s, friday_overtime_multiplier=%s
                WHERE shift_id=%s
                """,
                _shift_params(shift) + (shift.shift_id,),
            )

    def delete_by_id(self, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE shift_id=%s", (shift_id,))
            return cur.rowcount > 0
