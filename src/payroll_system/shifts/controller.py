from __future__ import annotations

from flask import Flask, request

from ..common.auth import admin_required
from ..common.responses import json_errors, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.shift_service

    @app.route("/api/shift", methods=["GET"], endpoint="shift_list")
    @admin_required
    @json_errors
    def list_shifts():
        return ok([s.as_dict() for s in service.list_shifts()])

    @app.route("/api/shift/<int:shift_id>", methods=["GET"], endpoint="shift_get")
    @admin_required
    @json_errors
    def get_shift(shift_id: int):
        return ok(service.get_shift(shift_id).as_dict())

    @app.route("/api/shift/create", methods=["POST"], endpoint="shift_create")
    @admin_required
    @json_errors
    def create_shift():
        shift_id = service.create_shift(request.get_json(silent=True) or {})
        return ok({"id": shift_id}, "Shift created", 201)

    @app.route("/api/shift/update/<int:shift_id>", methods=["PUT"], endpoint="shift_update")
    @admin_required
    @json_errors
    def update_shift(shift_id: int):
        shift = service.update_shift(shift_id, request.get_json(silent=True) or {})
        return ok(shift.as_dict(), "Shift updated")

    @app.route("/api/shift/delete/<int:shift_id>", methods=["DELETE"], endpoint="shift_delete")
    @admin_required
    @json_errors
    def delete_shift(shift_id: int):
        service.delete_shift(shift_id)
        return ok(message="Shift deleted")
