from __future__ import annotations

from flask import Flask, g, request, send_file

from ..common.auth import admin_required, token_required
from ..common.exporting import XLSX_MIMETYPE
from ..common.responses import ok, json_errors
from ..core.exceptions import ValidationError
from ..container import Container
from .service import parse_flag


def register(app: Flask, container: Container) -> None:
    def _leave_args() -> dict:
        body = request.get_json(silent=True) or {}
        return {
            "start": body.get("startDate"),
            "end": body.get("endDate"),
            "employee_code": body.get("employeeCode"),
            "apply_to_all": parse_flag(body.get("applyToAll")),
        }

    def _range_args() -> tuple[str, str, str | None]:
        start, end = request.args.get("startDate"), request.args.get("endDate")
        if not start or not end:
            raise ValidationError("startDate and endDate are required")
        employee_code = request.args.get("employeeCode") or None
        # Employees only ever see their own attendance.
        if not g.current_user.is_admin:
            employee_code = g.current_user.employee_code
        return start, end, employee_code

    @app.route("/api/attendance/upload", methods=["POST"], endpoint="attendance_upload")
    @admin_required
    @json_errors
    def upload():
        file = request.files.get("file")
        if file is None or not file.filename:
            raise ValidationError("No file uploaded")
        summary = container.attendance_service.import_punches(file.stream, file.filename)
        return ok(summary, "Attendance records uploaded successfully")

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @token_required
    @json_errors
    def list_attendance():
        start, end, employee_code = _range_args()
        return ok(container.attendance_service.get_attendance(start, end, employee_code))

    @app.route("/api/attendance/export", methods=["GET"], endpoint="attendance_export")
    @token_required
    @json_errors
    def export_attendance():
        start, end, employee_code = _range_args()
        output = container.attendance_service.export_attendance(start, end, employee_code)
        return send_file(
            output,
            download_name=f"attendance_{start}_{end}.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    @app.route("/api/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_update")
    @admin_required
    @json_errors
    def update_attendance(attendance_id: int):
        record = container.attendance_service.update_record(attendance_id, request.get_json(silent=True) or {})
        return ok(record.as_dict(), "Attendance record updated")

    @app.route("/api/attendance/delete-all", methods=["DELETE"], endpoint="attendance_delete_all")
    @admin_required
    @json_errors
    def delete_all():
        deleted = container.attendance_service.delete_all()
        return ok({"deleted": deleted}, "All attendance records deleted")

    @app.route("/api/attendance/official-leave", methods=["POST"], endpoint="attendance_official_leave")
    @admin_required
    @json_errors
    def official_leave():
        return ok(container.leave_service.apply_official_leave(**_leave_args()), "Official leave applied")

    @app.route("/api/attendance/annual-leave", methods=["POST"], endpoint="attendance_annual_leave")
    @admin_required
    @json_errors
    def annual_leave():
        return ok(container.leave_service.apply_annual_leave(**_leave_args()), "Annual leave applied")

    @app.route("/api/attendance/sick-leave", methods=["POST"], endpoint="attendance_sick_leave")
    @admin_required
    @json_errors
    def sick_leave():
        return ok(container.leave_service.apply_sick_leave(**_leave_args()), "Sick leave applied")
