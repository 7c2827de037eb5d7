from datetime import datetime, timezone

import pytest

from fakes import PASSWORD
from payroll_system.common.auth import decode_token
from payroll_system.core.enums import Role
from payroll_system.core.exceptions import AuthenticationError, NotFoundError, ValidationError

JWT_SECRET = "test-jwt-secret"


def test_login_issues_a_token_with_the_role(container):
    token, user = container.auth_service.login("1001", PASSWORD)

    claims = decode_token(token, secret=JWT_SECRET)
    assert user.employee_code == "1001"
    assert claims.employee_code == "1001"
    assert claims.role == Role.EMPLOYEE


def test_login_failures(container):
    with pytest.raises(ValidationError):
        container.auth_service.login("", "")
    with pytest.raises(AuthenticationError, match="employee code"):
        container.auth_service.login("nobody", PASSWORD)
    with pytest.raises(AuthenticationError, match="password"):
        container.auth_service.login("1001", "not-it")


def test_expired_token_is_rejected(container):
    token, _ = container.auth_service.login("1001", PASSWORD, now=datetime(2020, 1, 1, tzinfo=timezone.utc))

    with pytest.raises(AuthenticationError, match="expired"):
        decode_token(token, secret=JWT_SECRET)


def test_create_computes_net_salary(container, repos):
    user_id = container.user_service.create_user(
        {
            "employeeCode": "2001",
            "name": "New Hire",
            "password": "longpass",
            "shiftId": 1,
            "totalSalaryWithAllowances": "5000",
            "mealAllowance": "1000",
            "medicalInsurance": "100",
        }
    )

    user = repos.users.get_by_id(user_id)
    # 5000 + 2000 x 50% + 1000 - 100
    assert user.net_salary == 6900
    assert user.role == Role.EMPLOYEE
    assert user.password_hash != "longpass"


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "X", "password": "longpass"},
        {"employeeCode": "2002", "password": "longpass"},
        {"employeeCode": "2002", "name": "X", "password": "short"},
        {"employeeCode": "2002", "name": "X", "password": "longpass", "role": "boss"},
        {"employeeCode": "2002", "name": "X", "password": "longpass", "shiftId": 42},
        {"employeeCode": "1001", "name": "X", "password": "longpass"},
    ],
)
def test_create_validation(container, payload):
    with pytest.raises(ValidationError):
        container.user_service.create_user(payload)


def test_update_recomputes_net_from_merged_values(container):
    user = container.user_service.update_user(2, {"socialInsurance": 250})

    assert user.social_insurance == 250
    assert user.net_salary == pytest.approx(6000 + 1000 + 1500 - 250)


def test_update_rejects_taken_employee_code(container):
    with pytest.raises(ValidationError):
        container.user_service.update_user(2, {"employeeCode": "1002"})


def test_bulk_update_respects_exclusions(container, repos):
    count = container.user_service.update_many(excluded_user_ids=[1, 3], updates={"mealAllowance": 900, "name": "ignored"})

    assert count == 1
    assert repos.users.get_by_id(2).meal_allowance == 900
    assert repos.users.get_by_id(3).meal_allowance == 1500


def test_bulk_basic_increase(container, repos):
    container.user_service.update_many(shift_id=2, basic_increase_percentage="5")

    assert repos.users.get_by_id(3).basic_salary == 3150
    assert repos.users.get_by_id(2).basic_salary == 3000


def test_bulk_update_needs_something_to_change(container):
    with pytest.raises(ValidationError):
        container.user_service.update_many(updates={"name": "nope"})


def test_delete_user(container, repos):
    container.user_service.delete_user(3, acting_user_id=1)

    assert repos.users.get_by_id(3) is None
    with pytest.raises(NotFoundError):
        container.user_service.delete_user(3, acting_user_id=1)
