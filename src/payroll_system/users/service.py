from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.auth import TokenUser, issue_token
from ..common.validators import lenient_number, parse_number, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..shifts.repository import ShiftRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

# API field -> User attribute for salary settings.
SALARY_FIELDS = {
    "totalSalaryWithAllowances": "total_salary_with_allowances",
    "basicSalary": "basic_salary",
    "basicBonus": "basic_bonus",
    "bonusPercentage": "bonus_percentage",
    "mealAllowance": "meal_allowance",
    "medicalInsurance": "medical_insurance",
    "socialInsurance": "social_insurance",
    "annualLeaveBalance": "annual_leave_balance",
}

BULK_FIELDS = ("bonusPercentage", "basicBonus", "mealAllowance", "medicalInsurance", "socialInsurance", "annualLeaveBalance")


def _parse_role(value: Any) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Role must be admin or employee")


class AuthService:
    """Use case: authenticate user (login) and issue a bearer token."""

    def __init__(self, users: UserRepository, *, jwt_secret: str, expires_minutes: int = 60):
        self._users = users
        self._jwt_secret = jwt_secret
        self._expires_minutes = expires_minutes

    def login(self, employee_code: str, password: str, *, now: Optional[datetime] = None) -> tuple[str, User]:
        if not employee_code or not password:
            raise ValidationError("Employee code and password are required")

        user = self._users.get_by_employee_code(employee_code.strip())
        if not user:
            raise AuthenticationError("Invalid employee code")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Invalid password")

        claims = TokenUser(
            user_id=user.user_id,
            employee_code=user.employee_code,
            name=user.name,
            department=user.department,
            role=user.role,
        )
        token = issue_token(claims, secret=self._jwt_secret, expires_minutes=self._expires_minutes, now=now)
        logger.info("User %s logged in", user.employee_code)
        return token, user


class UserService:
    """Use case: manage employees and their salary settings (admin)."""

    def __init__(self, users: UserRepository, shifts: ShiftRepository):
        self._users = users
        self._shifts = shifts

    def list_users(self) -> list[dict]:
        shift_names = {s.shift_id: s.shift_name for s in self._shifts.list_all()}
        return [u.as_dict(shift_name=shift_names.get(u.shift_id)) for u in self._users.list_all()]

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def find_employee(self, employee_code: str) -> User:
        user = self._users.get_by_employee_code((employee_code or "").strip())
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def create_user(self, payload: dict) -> int:
        employee_code = require_non_empty(payload.get("employeeCode"), "Employee code")
        name = require_non_empty(payload.get("name"), "Name")
        password = require_min_length(payload.get("password"), "Password", MIN_PASSWORD_LENGTH)
        role = _parse_role(payload.get("role") or Role.EMPLOYEE.value)

        if self._users.get_by_employee_code(employee_code):
            raise ValidationError("Employee code already exists")

        user = User(
            user_id=0,
            employee_code=employee_code,
            password_hash=generate_password_hash(password),
            name=name,
            department=(payload.get("department") or "").strip() or None,
            role=role,
            shift_id=self._shift_id(payload.get("shiftId")),
            work_days=int(lenient_number(payload.get("workDays"))),
        )
        user = self._apply_salary_fields(user, payload)
        user_id = self._users.create(user)
        logger.info("Created user %s (%s)", employee_code, role.value)
        return user_id

    def update_user(self, user_id: int, payload: dict) -> User:
        user = self.get_user(user_id)

        if payload.get("role"):
            user = replace(user, role=_parse_role(payload["role"]))
        if payload.get("password"):
            password = require_min_length(payload["password"], "Password", MIN_PASSWORD_LENGTH)
            user = replace(user, password_hash=generate_password_hash(password))
        if payload.get("name") is not None:
            user = replace(user, name=require_non_empty(payload["name"], "Name"))
        if "department" in payload:
            user = replace(user, department=(payload.get("department") or "").strip() or None)
        if "shiftId" in payload:
            user = replace(user, shift_id=self._shift_id(payload.get("shiftId")))
        if "workDays" in payload:
            user = replace(user, work_days=int(lenient_number(payload.get("workDays"))))
        if payload.get("employeeCode") and payload["employeeCode"].strip() != user.employee_code:
            code = payload["employeeCode"].strip()
            if self._users.get_by_employee_code(code):
                raise ValidationError("Employee code already exists")
            user = replace(user, employee_code=code)

        user = self._apply_salary_fields(user, payload)
        self._users.update(user)
        return user

    def update_many(
        self,
        *,
        shift_id: Optional[int] = None,
        excluded_user_ids: Iterable[int] = (),
        annual_increase_percentage: Any = None,
        basic_increase_percentage: Any = None,
        updates: Optional[dict] = None,
    ) -> int:
        """Bulk salary change over all users (optionally one shift), minus exclusions.

        An annual increase raises total salary, a basic increase raises basic
        salary; otherwise the given fields are set on every selected user.
        """
        excluded = {int(i) for i in excluded_user_ids}
        targets = [u for u in self._users.list_all(shift_id=shift_id) if u.user_id not in excluded]

        if annual_increase_percentage not in (None, ""):
            pct = parse_number(annual_increase_percentage, "Annual increase percentage")
            changed = [
                self._with_net(replace(u, total_salary_with_allowances=round(u.total_salary_with_allowances * (1 + pct / 100), 2)))
                for u in targets
            ]
        elif basic_increase_percentage not in (None, ""):
            pct = parse_number(basic_increase_percentage, "Basic increase percentage")
            changed = [replace(u, basic_salary=round(u.basic_salary * (1 + pct / 100), 2)) for u in targets]
        else:
            fields = {k: v for k, v in (updates or {}).items() if k in BULK_FIELDS}
            if not fields:
                raise ValidationError("Nothing to update")
            changed = [self._apply_salary_fields(u, fields) for u in targets]

        for user in changed:
            self._users.update(user)
        logger.info("Bulk-updated %d users", len(changed))
        return len(changed)

    def delete_user(self, user_id: int, *, acting_user_id: int) -> None:
        if int(user_id) == int(acting_user_id):
            raise ValidationError("You cannot delete your own account")
        self.get_user(user_id)
        if not self._users.delete_by_id(user_id):
            raise ValidationError("Failed to delete user")
        logger.info("Deleted user %s", user_id)

    def _shift_id(self, value: Any) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            shift_id = int(value)
        except (TypeError, ValueError):
            raise ValidationError("Invalid shift")
        if not self._shifts.get_by_id(shift_id):
            raise ValidationError("Shift not found")
        return shift_id

    def _apply_salary_fields(self, user: User, payload: dict) -> User:
        changes = {attr: lenient_number(payload.get(key)) for key, attr in SALARY_FIELDS.items() if key in payload}
        return self._with_net(replace(user, **changes))

    @staticmethod
    def _with_net(user: User) -> User:
        return replace(user, net_salary=user.computed_net_salary())
