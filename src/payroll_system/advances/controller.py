from __future__ import annotations

from flask import Flask, g, request, send_file

from ..common.auth import admin_required
from ..common.exporting import XLSX_MIMETYPE
from ..common.responses import json_errors, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.advance_service

    @app.route("/api/advance/search-employee", methods=["GET"], endpoint="advance_search_employee")
    @admin_required
    @json_errors
    def search_employee():
        user = service.search_employee(request.args.get("employeeCode", ""))
        return ok({"employeeCode": user.employee_code, "name": user.name, "department": user.department})

    @app.route("/api/advance/create", methods=["POST"], endpoint="advance_create")
    @admin_required
    @json_errors
    def create_advance():
        advance = service.create_advance(request.get_json(silent=True) or {}, approved_by=g.current_user.employee_code)
        return ok(advance.as_dict(), "Advance recorded", 201)

    @app.route("/api/advance/advances", methods=["GET"], endpoint="advance_list")
    @admin_required
    @json_errors
    def list_advances():
        advances = service.list_advances(request.args.get("employeeCode") or None)
        return ok([a.as_dict() for a in advances])

    @app.route("/api/advance/update/<int:advance_id>", methods=["PUT"], endpoint="advance_update")
    @admin_required
    @json_errors
    def update_advance(advance_id: int):
        advance = service.update_advance(advance_id, request.get_json(silent=True) or {})
        return ok(advance.as_dict(), "Advance updated")

    @app.route("/api/advance/delete/<int:advance_id>", methods=["DELETE"], endpoint="advance_delete")
    @admin_required
    @json_errors
    def delete_advance(advance_id: int):
        service.delete_advance(advance_id)
        return ok(message="Advance deleted")

    @app.route("/api/advance/employee/<employee_code>", methods=["DELETE"], endpoint="advance_delete_for_employee")
    @admin_required
    @json_errors
    def delete_for_employee(employee_code: str):
        deleted = service.delete_for_employee(employee_code)
        return ok({"deleted": deleted}, "Employee advances deleted")

    @app.route("/api/advance/export", methods=["GET"], endpoint="advance_export")
    @admin_required
    @json_errors
    def export_advances():
        return send_file(service.export_advances(), download_name="advances.xlsx", as_attachment=True, mimetype=XLSX_MIMETYPE)
