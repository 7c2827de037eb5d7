from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class TokenUser:
    """Claims carried by a bearer token."""

    user_id: int
    employee_code: str
    name: str
    department: Optional[str]
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def issue_token(user: TokenUser, *, secret: str, expires_minutes: int = 60, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "user_id": user.user_id,
        "employee_code": user.employee_code,
        "name": user.name,
        "department": user.department,
        "role": user.role.value,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_token(token: str, *, secret: str) -> TokenUser:
    try:
        data = jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired, please log in again")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    try:
        return TokenUser(
            user_id=int(data["user_id"]),
            employee_code=str(data["employee_code"]),
            name=str(data.get("name") or ""),
            department=data.get("department"),
            role=Role(data["role"]),
        )
    except (KeyError, ValueError):
        raise AuthenticationError("Invalid token")


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def token_required(view):
    """Require a valid bearer token; the caller is exposed as `g.current_user`."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"success": False, "message": "Authentication token is missing"}), 401
        try:
            g.current_user = decode_token(token, secret=current_app.config["JWT_SECRET"])
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @token_required
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not g.current_user.is_admin:
            raise AuthorizationError("Admin access required")
        return view(*args, **kwargs)

    return wrapper
