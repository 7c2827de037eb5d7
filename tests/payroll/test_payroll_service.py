import pytest

from payroll_system.core.exceptions import NotFoundError, ValidationError


@pytest.fixture
def advance(container):
    return container.advance_service.create_advance(
        {"employeeCode": "1001", "advanceAmount": 600, "installmentMonths": 2, "advanceDate": "2025-02-01"}
    )


def _row(rows, code="1001"):
    return next(r for r in rows if r["employeeCode"] == code)


def test_salary_report_counts_materialized_days(container, admin):
    rows = container.payroll_service.salary_report("2025-02", acting=admin, employee_code="1001")

    row = _row(rows)
    assert row["totalAbsentDays"] == 24
    assert row["totalWeeklyOffDays"] == 4
    assert row["totalDeductedDays"] == 24
    assert row["mealDeduction"] == 1200
    assert row["deductedDaysAmount"] == 4800


def test_salary_report_freezes_the_advance_snapshot(container, repos, admin, advance):
    service = container.payroll_service

    first = _row(service.salary_report("2025-02", acting=admin, employee_code="1001"))
    second = _row(service.salary_report("2025-02", acting=admin, employee_code="1001"))

    assert first["loanDeduction"] == 300
    assert first["totalLoansFull"] == 600
    assert first["totalLoans"] == 300
    assert second["loanDeduction"] == 300
    assert len(repos.advances.get_by_id(advance.advance_id).deduction_history) == 1
    assert repos.salary_adjustments.get("1001", "2025-02").deduction_advances_installment == 300


def test_employees_only_see_themselves(container, employee):
    rows = container.payroll_service.salary_report("2025-02", acting=employee, employee_code="1002")

    assert [r["employeeCode"] for r in rows] == ["1001"]


def test_admin_report_covers_everyone_with_a_shift(container, admin):
    everyone = container.payroll_service.salary_report("2025-02", acting=admin)
    night = container.payroll_service.salary_report("2025-02", acting=admin, shift_id=2)

    assert sorted(r["employeeCode"] for r in everyone) == ["1001", "1002"]
    assert [r["employeeCode"] for r in night] == ["1002"]


def test_report_without_targets(container, admin):
    with pytest.raises(NotFoundError):
        container.payroll_service.salary_report("2025-02", acting=admin, employee_code="admin")


def test_report_month_format(container, admin):
    with pytest.raises(ValidationError):
        container.payroll_service.salary_report("2025-2", acting=admin)


def test_violation_installment_reaches_the_report(container, admin):
    container.violation_service.create_violation(
        {"employeeCode": "1001", "violationPrice": "100", "date": "2025-02-10", "vehicleCode": "V1", "station": "S1"}
    )
    service = container.payroll_service

    result = service.update_salary_adjustment(
        "1001", "2025-02", {"totalViolations": 100, "deductionViolationsInstallment": 40}
    )
    row = _row(service.salary_report("2025-02", acting=admin, employee_code="1001"))

    assert result["violations"]["remainingViolations"] == 60
    assert row["totalViolationsFull"] == 100
    assert row["violationDeduction"] == 40
    assert row["totalViolations"] == 60


def test_manual_advance_adjustment_overrides_the_snapshot(container, admin, advance):
    service = container.payroll_service

    result = service.update_salary_adjustment(
        "1001",
        "2025-02",
        {"totalAdvances": 600, "deductionAdvancesInstallment": 200, "occasionBonus": "50", "penalties": 10},
    )
    row = _row(service.salary_report("2025-02", acting=admin, employee_code="1001"))

    assert result["salary"]["remainingAdvances"] == 400
    assert row["loanDeduction"] == 200
    assert row["occasionBonus"] == 50
    assert row["penalties"] == 10


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"totalAdvances": 600, "deductionAdvancesInstallment": 700},
        {"totalAdvances": 600},
        {"totalViolations": 100},
    ],
)
def test_salary_adjustment_validation(container, payload):
    with pytest.raises(ValidationError):
        container.payroll_service.update_salary_adjustment("1001", "2025-02", payload)


def test_bonus_report_deducts_absent_days(container, admin):
    service = container.payroll_service

    before = _row(service.bonus_report("2025-02", acting=admin, employee_code="1001"))
    service.update_bonus_adjustment("1001", "2025-02", {"bindingValue": "100"})
    after = _row(service.bonus_report("2025-02", acting=admin, employee_code="1001"))

    assert before["bonusValue"] == 1000
    assert before["totalDeductedDays"] == 24
    assert before["netBonus"] == pytest.approx(200.08)
    assert after["bindingValue"] == 100
    assert after["netBonus"] == pytest.approx(300.08)


def test_bonus_adjustment_for_unknown_employee(container):
    with pytest.raises(NotFoundError):
        container.payroll_service.update_bonus_adjustment("nobody", "2025-02", {"bindingValue": 1})


def test_exports(container, admin):
    service = container.payroll_service

    assert service.export_salary_xlsx("2025-02", acting=admin).getvalue()[:2] == b"PK"
    assert service.export_bonus_xlsx("2025-02", acting=admin).getvalue()[:2] == b"PK"
    assert service.export_salary_pdf("2025-02", acting=admin).getvalue()[:4] == b"%PDF"
