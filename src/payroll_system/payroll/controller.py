from __future__ import annotations

from typing import Optional

from flask import Flask, g, request, send_file

from ..common.auth import admin_required, token_required
from ..common.exporting import XLSX_MIMETYPE
from ..common.responses import json_errors, ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    def _report_args() -> tuple[str, dict]:
        year_month = request.args.get("yearMonth") or request.args.get("month")
        if not year_month:
            raise ValidationError("yearMonth is required")
        shift_id: Optional[int] = None
        if request.args.get("shiftId"):
            try:
                shift_id = int(request.args["shiftId"])
            except ValueError:
                raise ValidationError("Invalid shift")
        return year_month, {
            "acting": g.current_user,
            "employee_code": request.args.get("employeeCode") or None,
            "shift_id": shift_id,
        }

    @app.route("/api/user/monthly-salary-report", methods=["GET"], endpoint="payroll_salary_report")
    @token_required
    @json_errors
    def salary_report():
        year_month, filters = _report_args()
        return ok(service.salary_report(year_month, **filters))

    @app.route("/api/user/monthly-salary-report/export", methods=["GET"], endpoint="payroll_salary_export")
    @token_required
    @json_errors
    def salary_export():
        year_month, filters = _report_args()
        if request.args.get("format", "xlsx").lower() == "pdf":
            return send_file(
                service.export_salary_pdf(year_month, **filters),
                download_name=f"salary_report_{year_month}.pdf",
                as_attachment=True,
                mimetype="application/pdf",
            )
        return send_file(
            service.export_salary_xlsx(year_month, **filters),
            download_name=f"salary_report_{year_month}.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    @app.route(
        "/api/user/update-salary-adjustment/<employee_code>/<year_month>",
        methods=["PUT"],
        endpoint="payroll_update_salary_adjustment",
    )
    @admin_required
    @json_errors
    def update_salary_adjustment(employee_code: str, year_month: str):
        data = service.update_salary_adjustment(employee_code, year_month, request.get_json(silent=True) or {})
        return ok(data, "Salary adjustment updated")

    @app.route("/api/user/monthly-bonus-report", methods=["GET"], endpoint="payroll_bonus_report")
    @token_required
    @json_errors
    def bonus_report():
        year_month, filters = _report_args()
        return ok(service.bonus_report(year_month, **filters))

    @app.route("/api/user/monthly-bonus-report/export", methods=["GET"], endpoint="payroll_bonus_export")
    @token_required
    @json_errors
    def bonus_export():
        year_month, filters = _report_args()
        return send_file(
            service.export_bonus_xlsx(year_month, **filters),
            download_name=f"bonus_report_{year_month}.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    @app.route(
        "/api/user/update-bonus-adjustment/<employee_code>/<year_month>",
        methods=["PUT"],
        endpoint="payroll_update_bonus_adjustment",
    )
    @admin_required
    @json_errors
    def update_bonus_adjustment(employee_code: str, year_month: str):
        adjustment = service.update_bonus_adjustment(employee_code, year_month, request.get_json(silent=True) or {})
        return ok(adjustment.as_dict(), "Bonus adjustment updated")
