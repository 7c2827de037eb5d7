import io
from datetime import date, datetime

import pytest

from fakes import make_user
from payroll_system.attendance.importer import group_punches, read_punches
from payroll_system.core.exceptions import ValidationError

CSV = b"""No.,Date/Time
1001,2025-03-02 08:05
1001,2025-03-02 17:10
1001,2025-03-02 08:30
9999,2025-03-02 08:00
,2025-03-02 09:00
1001,not a date
"""


def test_read_punches_drops_unreadable_rows_and_sorts():
    punches = read_punches(io.BytesIO(CSV), "punches.csv")

    assert [p.employee_code for p in punches] == ["9999", "1001", "1001", "1001"]
    assert punches[0].at == datetime(2025, 3, 2, 8, 0)
    assert punches[-1].at == datetime(2025, 3, 2, 17, 10)


def test_read_punches_rejects_other_formats():
    with pytest.raises(ValidationError):
        read_punches(io.BytesIO(b"whatever"), "punches.txt")


def test_read_punches_requires_device_columns():
    with pytest.raises(ValidationError, match="missing column"):
        read_punches(io.BytesIO(b"Code,Time\n1001,2025-03-02 08:00\n"), "punches.csv")


def test_day_shift_pairs_earliest_check_in_and_latest_check_out(morning_shift):
    punches = read_punches(io.BytesIO(CSV), "punches.csv")
    users = {"1001": make_user(2, "1001")}

    grouped = group_punches(punches, users, {1: morning_shift})

    draft = grouped.drafts[("1001", date(2025, 3, 2))]
    assert draft.check_in == datetime(2025, 3, 2, 8, 5)
    assert draft.check_out == datetime(2025, 3, 2, 17, 10)
    assert grouped.unknown_codes == {"9999"}


def test_cross_day_shift_closes_previous_days_check_in(evening_shift):
    csv = b"No.,Date/Time\n2002,2025-03-02 20:00\n2002,2025-03-03 05:30\n2002,2025-03-03 20:05\n"
    punches = read_punches(io.BytesIO(csv), "night.csv")
    users = {"2002": make_user(5, "2002", shift_id=2)}

    grouped = group_punches(punches, users, {2: evening_shift})

    first = grouped.drafts[("2002", date(2025, 3, 2))]
    second = grouped.drafts[("2002", date(2025, 3, 3))]
    assert first.check_out == datetime(2025, 3, 3, 5, 30)
    assert second.check_in == datetime(2025, 3, 3, 20, 5)
    assert second.check_out is None


def test_cross_day_punch_past_the_overtime_cap_splits_the_shift(evening_shift):
    csv = b"No.,Date/Time\n2002,2025-03-02 20:00\n2002,2025-03-03 20:00\n2002,2025-03-04 05:00\n"
    punches = read_punches(io.BytesIO(csv), "night.csv")
    users = {"2002": make_user(5, "2002", shift_id=2)}

    grouped = group_punches(punches, users, {2: evening_shift})

    first = grouped.drafts[("2002", date(2025, 3, 2))]
    second = grouped.drafts[("2002", date(2025, 3, 3))]
    assert first.split
    assert first.check_out is None
    assert second.check_in == datetime(2025, 3, 3, 20, 0)
    assert second.check_out == datetime(2025, 3, 4, 5, 0)
    assert not second.split


def test_repeated_closing_punch_moves_the_check_out(evening_shift):
    csv = b"No.,Date/Time\n2002,2025-03-02 20:00\n2002,2025-03-03 05:00\n2002,2025-03-03 05:05\n"
    punches = read_punches(io.BytesIO(csv), "night.csv")
    users = {"2002": make_user(5, "2002", shift_id=2)}

    grouped = group_punches(punches, users, {2: evening_shift})

    assert list(grouped.drafts) == [("2002", date(2025, 3, 2))]
    assert grouped.drafts[("2002", date(2025, 3, 2))].check_out == datetime(2025, 3, 3, 5, 5)
