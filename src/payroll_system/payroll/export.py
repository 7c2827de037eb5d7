from __future__ import annotations

import io
from typing import Iterable, Mapping

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..common.exporting import rows_to_xlsx

SALARY_COLUMNS = {
    "employeeCode": "Code",
    "employeeName": "Name",
    "shiftName": "Shift",
    "totalSalaryWithAllowances": "Total salary",
    "mealAllowance": "Meal allowance",
    "totalAttendanceDays": "Attendance days",
    "totalAbsentDays": "Absent days",
    "totalDeductedDays": "Deducted days",
    "totalDeductedHours": "Deducted hours",
    "totalOvertimeHours": "Overtime hours",
    "overtimeAmount": "Overtime amount",
    "mealDeduction": "Meal deduction",
    "violationDeduction": "Violations",
    "loanDeduction": "Advances",
    "penalties": "Penalties",
    "occasionBonus": "Occasion bonus",
    "totalDeductions": "Total deductions",
    "totalAdditions": "Total additions",
    "netSalary": "Net salary",
}

# The PDF page only fits a subset of the workbook columns.
SALARY_PDF_COLUMNS = (
    "employeeCode",
    "employeeName",
    "shiftName",
    "totalSalaryWithAllowances",
    "totalAttendanceDays",
    "totalDeductedDays",
    "overtimeAmount",
    "violationDeduction",
    "loanDeduction",
    "totalDeductions",
    "totalAdditions",
    "netSalary",
)

BONUS_COLUMNS = {
    "employeeCode": "Code",
    "name": "Name",
    "shiftType": "Shift",
    "basicBonus": "Basic bonus",
    "bonusPercentage": "Percentage",
    "bonusValue": "Bonus",
    "totalAttendanceDays": "Attendance days",
    "totalDeductedDays": "Deducted days",
    "totalDeductions": "Deductions",
    "bindingValue": "Binding",
    "productionValue": "Production",
    "netBonus": "Net bonus",
}


def salary_report_xlsx(rows: Iterable[Mapping], year_month: str) -> io.BytesIO:
    return rows_to_xlsx(rows, columns=SALARY_COLUMNS, sheet_name=f"Salaries {year_month}")


def bonus_report_xlsx(rows: Iterable[Mapping], year_month: str) -> io.BytesIO:
    return rows_to_xlsx(rows, columns=BONUS_COLUMNS, sheet_name=f"Bonus {year_month}")


def _cell(value) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    return "" if value is None else str(value)


def salary_report_pdf(rows: Iterable[Mapping], year_month: str) -> io.BytesIO:
    buff = io.BytesIO()
    doc = SimpleDocTemplate(buff, pagesize=landscape(A4), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18)
    styles = getSampleStyleSheet()

    data = [[SALARY_COLUMNS[key] for key in SALARY_PDF_COLUMNS]]
    data.extend([_cell(row.get(key)) for key in SALARY_PDF_COLUMNS] for row in rows)

    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 8),
                ("FONTSIZE", (0, 1), (-1, -1), 7),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.Color(0.98, 0.99, 1)]),
            ]
        )
    )
    story = [
        Paragraph("<b>Monthly Salary Report</b>", styles["Title"]),
        Paragraph(f"Month: <b>{year_month}</b>", styles["Normal"]),
        Spacer(1, 10),
        table,
    ]
    doc.build(story)
    buff.seek(0)
    return buff
