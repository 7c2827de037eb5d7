from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus, ShiftType, SickLeaveDeduction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_float,
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    load_json,
    normalize_mysql_date,
)
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_code, employee_name, work_date, check_in, check_out, shift_id,
    shift_name, shift_type, is_cross_day, work_days, delay_minutes, grace_period,
    remaining_grace_period, deducted_hours, overtime_hours, deducted_days, leave_balance,
    status, leave_allowance, sick_leave_deduction, is_official_leave, is_split
"""

_INSERT = """
    INSERT INTO attendance(employee_code, employee_name, work_date, check_in, check_out, shift_id,
                           shift_name, shift_type, is_cross_day, work_days, delay_minutes, grace_period,
                           remaining_grace_period, deducted_hours, overtime_hours, deducted_days,
                           leave_balance, status, leave_allowance, sick_leave_deduction, is_official_leave,
                           is_split)
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_code=r["employee_code"],
        employee_name=r["employee_name"],
        work_date=normalize_mysql_date(r["work_date"]),
        status=AttendanceStatus(r["status"]),
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        shift_id=r.get("shift_id"),
        shift_name=r.get("shift_name"),
        shift_type=ShiftType(r["shift_type"]) if r.get("shift_type") else None,
        is_cross_day=bool(r.get("is_cross_day")),
        work_days=tuple(load_json(r.get("work_days"), [])),
        delay_minutes=int(r.get("delay_minutes") or 0),
        grace_period=int(r.get("grace_period") or 0),
        remaining_grace_period=int(r.get("remaining_grace_period") or 0),
        deducted_hours=as_float(r.get("deducted_hours")),
        overtime_hours=as_float(r.get("overtime_hours")),
        deducted_days=as_float(r.get("deducted_days")),
        leave_balance=as_float(r.get("leave_balance")),
        leave_allowance=bool(r.get("leave_allowance")),
        sick_leave_deduction=SickLeaveDeduction(r.get("sick_leave_deduction") or "none"),
        is_official_leave=bool(r.get("is_official_leave")),
        is_split=bool(r.get("is_split")),
    )


def _record_params(rec: AttendanceRecord) -> tuple:
    return (
        rec.employee_code,
        rec.employee_name,
        rec.work_date,
        rec.check_in,
        rec.check_out,
        rec.shift_id,
        rec.shift_name,
        rec.shift_type.value if rec.shift_type else None,
        int(rec.is_cross_day),
        dump_json(list(rec.work_days)),
        rec.delay_minutes,
        rec.grace_period,
        rec.remaining_grace_period,
        round(rec.deducted_hours, 2),
        round(rec.overtime_hours, 2),
        rec.deducted_days,
        rec.leave_balance,
        rec.status.value,
        int(rec.leave_allowance),
        rec.sick_leave_deduction.value,
        int(rec.is_official_leave),
        int(rec.is_split),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s", (attendance_id,))
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def list_range(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_code: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        where = ["1=1"]
        params: list = []
        if start_date is not None:
            where.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            where.append("work_date <= %s")
            params.append(end_date)
        if employee_code:
            where.append("employee_code = %s")
            params.append(employee_code)

        sql = f"SELECT {_COLUMNS} FROM attendance WHERE {' AND '.join(where)} ORDER BY work_date, employee_code"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_by_status(self, status: AttendanceStatus) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE status=%s ORDER BY work_date", (status.value,))
            return [_row_to_record(r) for r in fetchall(cur)]

    def insert_many(self, records: Iterable[AttendanceRecord]) -> int:
        params = [_record_params(r) for r in records]
        if not params:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(_INSERT, params)
            return len(params)

    def update(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET employee_code=%s, employee_name=%s, work_date=%s, check_in=%s, check_out=%s, shift_id=%s,
                    shift_name=%s, shift_type=%s, is_cross_day=%s, work_days=%s, delay_minutes=%s,
                    grace_period=%s, remaining_grace_period=%s, deducted_hours=%s, overtime_hours=%s,
                    deducted_days=%s, leave_balance=%s, status=%s, leave_allowance=%s,
                    sick_leave_deduction=%s, is_official_leave=%s, is_split=%s
                WHERE attendance_id=%s
                """,
                _record_params(record) + (record.attendance_id,),
            )

    def delete_for(self, *, employee_codes: Iterable[str], dates: Iterable[date]) -> int:
        codes = sorted(set(employee_codes))
        days = sorted(set(dates))
        if not codes or not days:
            return 0
        code_marks = ",".join(["%s"] * len(codes))
        day_marks = ",".join(["%s"] * len(days))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM attendance WHERE employee_code IN ({code_marks}) AND work_date IN ({day_marks})",
                tuple(codes) + tuple(days),
            )
            return cur.rowcount

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance")
            return cur.rowcount
