from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

from werkzeug.security import generate_password_hash

from payroll_system.advances.model import Advance, AdvanceDeduction
from payroll_system.attendance.model import AttendanceRecord
from payroll_system.core.enums import AdvanceStatus, AttendanceStatus, Role
from payroll_system.payroll.model import BonusAdjustment, SalaryAdjustment
from payroll_system.shifts.model import Shift
from payroll_system.users.model import User
from payroll_system.violations.model import Violation, ViolationAdjustment


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryUsers:
    def __init__(self, users: Iterable[User] = ()):
        self.users: dict[int, User] = {u.user_id: u for u in users}

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.employee_code == employee_code), None)

    def list_all(self, *, shift_id: Optional[int] = None):
        users = sorted(self.users.values(), key=lambda u: u.employee_code)
        if shift_id is not None:
            users = [u for u in users if u.shift_id == shift_id]
        return users

    def create(self, user: User) -> int:
        user_id = max(self.users, default=0) + 1
        self.users[user_id] = replace(user, user_id=user_id)
        return user_id

    def update(self, user: User) -> None:
        self.users[user.user_id] = user

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(user_id, None) is not None

    def set_remaining_grace(self, employee_code: str, minutes: int) -> None:
        user = self.get_by_employee_code(employee_code)
        self.users[user.user_id] = replace(user, remaining_grace_period=minutes)

    def set_leave_balance(self, employee_code: str, balance: float) -> None:
        user = self.get_by_employee_code(employee_code)
        self.users[user.user_id] = replace(user, annual_leave_balance=balance)


class InMemoryShifts:
    def __init__(self, shifts: Iterable[Shift] = ()):
        self.shifts: dict[int, Shift] = {s.shift_id: s for s in shifts}

    def list_all(self):
        return [self.shifts[k] for k in sorted(self.shifts)]

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.shifts.get(shift_id)

    def create(self, shift: Shift) -> int:
        shift_id = max(self.shifts, default=0) + 1
        self.shifts[shift_id] = replace(shift, shift_id=shift_id)
        return shift_id

    def update(self, shift: Shift) -> None:
        self.shifts[shift.shift_id] = shift

    def delete_by_id(self, shift_id: int) -> bool:
        return self.shifts.pop(shift_id, None) is not None


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def list_range(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_code: Optional[str] = None,
    ):
        items = [
            r
            for r in self.records.values()
            if (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
            and (employee_code is None or r.employee_code == employee_code)
        ]
        return sorted(items, key=lambda r: (r.work_date, r.employee_code))

    def list_by_status(self, status: AttendanceStatus):
        return [r for r in self.records.values() if r.status == status]

    def insert_many(self, records: Iterable[AttendanceRecord]) -> int:
        count = 0
        for rec in records:
            self._id += 1
            self.records[self._id] = replace(rec, attendance_id=self._id)
            count += 1
        return count

    def update(self, record: AttendanceRecord) -> None:
        self.records[record.attendance_id] = record

    def delete_for(self, *, employee_codes: Iterable[str], dates: Iterable[date]) -> int:
        codes, days = set(employee_codes), set(dates)
        doomed = [k for k, r in self.records.items() if r.employee_code in codes and r.work_date in days]
        for key in doomed:
            del self.records[key]
        return len(doomed)

    def delete_all(self) -> int:
        count = len(self.records)
        self.records.clear()
        return count

    def on(self, employee_code: str, day: date) -> AttendanceRecord:
        return next(r for r in self.records.values() if r.employee_code == employee_code and r.work_date == day)


class InMemoryAdvances:
    def __init__(self):
        self.advances: dict[int, Advance] = {}

    def get_by_id(self, advance_id: int) -> Optional[Advance]:
        return self.advances.get(advance_id)

    def list_all(self, *, employee_code: Optional[str] = None):
        return [a for a in self.advances.values() if employee_code is None or a.employee_code == employee_code]

    def list_active_between(self, employee_code: str, start: date, end: date):
        return [
            a
            for a in self.advances.values()
            if a.employee_code == employee_code
            and a.status == AdvanceStatus.ACTIVE
            and a.advance_date <= end
            and a.final_repayment_date >= start
        ]

    def create(self, advance: Advance) -> int:
        advance_id = max(self.advances, default=0) + 1
        self.advances[advance_id] = replace(advance, advance_id=advance_id)
        return advance_id

    def update(self, advance: Advance) -> None:
        self.advances[advance.advance_id] = advance

    def add_deduction(self, advance_id: int, deduction: AdvanceDeduction) -> None:
        advance = self.advances[advance_id]
        history = tuple(d for d in advance.deduction_history if d.month != deduction.month) + (deduction,)
        self.advances[advance_id] = replace(advance, deduction_history=history)

    def delete_by_id(self, advance_id: int) -> bool:
        return self.advances.pop(advance_id, None) is not None

    def delete_for_employee(self, employee_code: str) -> int:
        doomed = [k for k, a in self.advances.items() if a.employee_code == employee_code]
        for key in doomed:
            del self.advances[key]
        return len(doomed)


class InMemoryViolations:
    def __init__(self):
        self.violations: dict[int, Violation] = {}

    def get_by_id(self, violation_id: int) -> Optional[Violation]:
        return self.violations.get(violation_id)

    def list_all(self, *, employee_code: Optional[str] = None):
        return [v for v in self.violations.values() if employee_code is None or v.employee_code == employee_code]

    def list_between(self, employee_code: str, start: date, end: date):
        return [
            v
            for v in self.violations.values()
            if v.employee_code == employee_code and start <= v.violation_date <= end
        ]

    def create(self, violation: Violation) -> int:
        violation_id = max(self.violations, default=0) + 1
        self.violations[violation_id] = replace(violation, violation_id=violation_id)
        return violation_id

    def update(self, violation: Violation) -> None:
        self.violations[violation.violation_id] = violation

    def delete_by_id(self, violation_id: int) -> bool:
        return self.violations.pop(violation_id, None) is not None


class InMemoryMonthly:
    """Keyed by (employee code, YYYY-MM); serves every per-month adjustment table."""

    def __init__(self):
        self.rows: dict[tuple[str, str], object] = {}

    def get(self, employee_code: str, month: str):
        return self.rows.get((employee_code, month))

    def upsert(self, adjustment) -> None:
        self.rows[(adjustment.employee_code, adjustment.month)] = adjustment

    def list_after(self, employee_code: str, month: str):
        return [self.rows[k] for k in sorted(self.rows) if k[0] == employee_code and k[1] > month]


class InMemoryViolationAdjustments(InMemoryMonthly):
    def get(self, employee_code: str, month: str) -> Optional[ViolationAdjustment]:
        return super().get(employee_code, month)


class InMemorySalaryAdjustments(InMemoryMonthly):
    def get(self, employee_code: str, month: str) -> Optional[SalaryAdjustment]:
        return super().get(employee_code, month)


class InMemoryBonusAdjustments(InMemoryMonthly):
    def get(self, employee_code: str, month: str) -> Optional[BonusAdjustment]:
        return super().get(employee_code, month)


PASSWORD = "secret1"


def make_user(user_id: int, employee_code: str, *, shift_id=1, role=Role.EMPLOYEE, **fields) -> User:
    defaults = dict(
        name=f"Employee {employee_code}",
        department="Operations",
        total_salary_with_allowances=6000.0,
        basic_salary=3000.0,
        annual_leave_balance=21.0,
    )
    defaults.update(fields)
    return User(
        user_id=user_id,
        employee_code=employee_code,
        password_hash=generate_password_hash(PASSWORD),
        role=role,
        shift_id=shift_id,
        **defaults,
    )
