from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import admin_required
from ..common.responses import json_errors, ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/user/login", methods=["POST"], endpoint="user_login")
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @json_errors
    def login():
        body = request.get_json(silent=True) or {}
        token, user = container.auth_service.login(body.get("employeeCode") or "", body.get("password") or "")
        return ok({"token": token, "user": user.as_dict()}, "Logged in successfully")

    @app.route("/api/user", methods=["GET"], endpoint="user_list")
    @admin_required
    @json_errors
    def list_users():
        return ok(container.user_service.list_users())

    @app.route("/api/user/shifts", methods=["GET"], endpoint="user_shifts")
    @admin_required
    @json_errors
    def list_shifts():
        return ok([s.as_dict() for s in container.shift_service.list_shifts()])

    @app.route("/api/user/create", methods=["POST"], endpoint="user_create")
    @admin_required
    @json_errors
    def create_user():
        user_id = container.user_service.create_user(request.get_json(silent=True) or {})
        return ok({"id": user_id}, "User created", 201)

    @app.route("/api/user/update/<int:user_id>", methods=["PUT"], endpoint="user_update")
    @admin_required
    @json_errors
    def update_user(user_id: int):
        user = container.user_service.update_user(user_id, request.get_json(silent=True) or {})
        return ok(user.as_dict(), "User updated")

    @app.route("/api/user/update-many", methods=["PUT"], endpoint="user_update_many")
    @admin_required
    @json_errors
    def update_many():
        body = request.get_json(silent=True) or {}
        shift_id = body.get("shiftId") or body.get("shiftType")
        try:
            shift_id = int(shift_id) if shift_id not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("Invalid shift")
        count = container.user_service.update_many(
            shift_id=shift_id,
            excluded_user_ids=body.get("excludedUsers") or [],
            annual_increase_percentage=body.get("annualIncreasePercentage"),
            basic_increase_percentage=body.get("basicIncreasePercentage"),
            updates=body.get("updates"),
        )
        return ok({"updated": count}, "Users updated")

    @app.route("/api/user/delete/<int:user_id>", methods=["DELETE"], endpoint="user_delete")
    @admin_required
    @json_errors
    def delete_user(user_id: int):
        container.user_service.delete_user(user_id, acting_user_id=g.current_user.user_id)
        return ok(message="User deleted")
