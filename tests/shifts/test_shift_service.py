import pytest

from payroll_system.core.enums import ShiftType
from payroll_system.core.exceptions import NotFoundError, ValidationError

MORNING = {
    "shiftName": "Morning",
    "shiftType": "morning",
    "startTime": "08:00",
    "endTime": "17:00",
    "baseHours": 9,
    "workDays": [0, 1, 2, 3, 4, 6],
}


def test_defaults_for_optional_rules(container):
    shift = container.shift_service.build_shift(MORNING)

    assert shift.max_overtime_hours == 5
    assert shift.grace_period == 0
    assert shift.overtime_multiplier == 1
    assert shift.is_cross_day is False


def test_evening_shift_wraps_midnight(container):
    shift = container.shift_service.build_shift(
        {**MORNING, "shiftType": "evening", "startTime": "20:00", "endTime": "05:00"}
    )

    assert shift.is_cross_day
    assert shift.base_hours == 9


def test_full_day_shift_uses_duration_deductions(container):
    shift = container.shift_service.build_shift(
        {
            "shiftName": "Guards",
            "shiftType": "24/24",
            "baseHours": 24,
            "workDays": [0, 2, 4],
            "deductions": [{"type": "minutes", "duration": 30, "deductionAmount": 50}],
        }
    )

    assert shift.shift_type == ShiftType.FULL_DAY
    assert shift.max_overtime_hours == 20
    assert shift.start_time is None
    assert shift.deductions[0].duration == 30


@pytest.mark.parametrize(
    "changes",
    [
        {"shiftName": ""},
        {"shiftType": "weekend"},
        {"baseHours": 8},
        {"baseHours": 0},
        {"workDays": []},
        {"workDays": [7]},
        {"gracePeriod": -5},
        {"overtimeMultiplier": 3},
        {"sickLeaveDeduction": "most"},
        {"startTime": "8am"},
        {"deductions": [{"type": "quarter", "start": "09:00", "end": "08:30"}]},
        {"deductions": [{"type": "half", "start": "09:00", "end": "10:00", "duration": 20}]},
    ],
)
def test_invalid_payloads(container, changes):
    with pytest.raises(ValidationError):
        container.shift_service.build_shift({**MORNING, **changes})


def test_full_day_deduction_must_fit_base_hours(container):
    with pytest.raises(ValidationError):
        container.shift_service.build_shift(
            {
                "shiftName": "Guards",
                "shiftType": "24/24",
                "baseHours": 24,
                "workDays": [0],
                "deductions": [{"type": "minutes", "duration": 2000, "deductionAmount": 50}],
            }
        )


def test_update_and_delete_missing_shift(container):
    with pytest.raises(NotFoundError):
        container.shift_service.update_shift(99, MORNING)
    with pytest.raises(NotFoundError):
        container.shift_service.delete_shift(99)
