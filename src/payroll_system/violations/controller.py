from __future__ import annotations

from flask import Flask, g, request

from ..common.auth import admin_required, token_required
from ..common.responses import json_errors, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.violation_service

    def _form() -> dict:
        # multipart when an image is attached, JSON otherwise
        return request.form.to_dict() or request.get_json(silent=True) or {}

    @app.route("/api/violations", methods=["GET"], endpoint="violations_list")
    @token_required
    @json_errors
    def list_violations():
        user = g.current_user
        code = (request.args.get("employeeCode") or None) if user.is_admin else user.employee_code
        return ok([v.as_dict() for v in service.list_violations(code)])

    @app.route("/api/violations/employee/<employee_code>", methods=["GET"], endpoint="violations_employee")
    @admin_required
    @json_errors
    def employee_info(employee_code: str):
        user = service.employee_info(employee_code)
        return ok({"employeeCode": user.employee_code, "name": user.name, "department": user.department})

    @app.route("/api/violations", methods=["POST"], endpoint="violations_create")
    @admin_required
    @json_errors
    def create_violation():
        violation = service.create_violation(_form(), request.files.get("violationImage"))
        return ok(violation.as_dict(), "Violation added", 201)

    @app.route("/api/violations/<int:violation_id>", methods=["PUT"], endpoint="violations_update")
    @admin_required
    @json_errors
    def update_violation(violation_id: int):
        violation = service.update_violation(violation_id, _form(), request.files.get("violationImage"))
        return ok(violation.as_dict(), "Violation updated")

    @app.route("/api/violations/<int:violation_id>", methods=["DELETE"], endpoint="violations_delete")
    @admin_required
    @json_errors
    def delete_violation(violation_id: int):
        service.delete_violation(violation_id)
        return ok(message="Violation deleted")
