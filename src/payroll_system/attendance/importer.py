from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import BinaryIO, Iterable, Optional

import pandas as pd

from ..common.datetime_utils import hours_between
from ..core.constants import CHECKIN_WINDOW_HOURS
from ..core.exceptions import ValidationError
from ..shifts.model import Shift
from ..users.model import User
from .model import Punch

logger = logging.getLogger(__name__)

CODE_COLUMN = "No."
TIME_COLUMN = "Date/Time"


def read_punches(stream: BinaryIO, filename: str) -> list[Punch]:
    """Read a fingerprint-device export (xlsx or csv) into punches sorted by time.

    Rows without an employee code or with an unparseable timestamp are dropped.
    """
    name = (filename or "").lower()
    data = stream.read()
    try:
        if name.endswith(".csv"):
            df = pd.read_csv(io.BytesIO(data), dtype={CODE_COLUMN: str})
        elif name.endswith(".xlsx"):
            df = pd.read_excel(io.BytesIO(data), engine="openpyxl", dtype={CODE_COLUMN: str})
        else:
            raise ValidationError("Upload an .xlsx or .csv file")
    except (ValueError, KeyError) as e:
        raise ValidationError(f"Could not read the attendance file: {e}")

    missing = [c for c in (CODE_COLUMN, TIME_COLUMN) if c not in df.columns]
    if missing:
        raise ValidationError(f"Attendance file is missing column(s): {', '.join(missing)}")

    codes = df[CODE_COLUMN].map(_normalize_code)
    stamps = pd.to_datetime(df[TIME_COLUMN], errors="coerce", format="mixed")

    punches = [
        Punch(employee_code=code, at=stamp.to_pydatetime().replace(second=0, microsecond=0))
        for code, stamp in zip(codes, stamps)
        if code and not pd.isna(stamp)
    ]
    dropped = len(df) - len(punches)
    if dropped:
        logger.warning("Dropped %d unreadable rows from %s", dropped, filename)
    punches.sort(key=lambda p: p.at)
    return punches


def _normalize_code(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    if text.endswith(".0") and text[:-2].isdigit():
        text = text[:-2]
    return text or None


@dataclass
class PunchDraft:
    employee_code: str
    work_date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    split: bool = False


@dataclass
class GroupedPunches:
    drafts: dict[tuple[str, date], PunchDraft] = field(default_factory=dict)
    unknown_codes: set[str] = field(default_factory=set)


def group_punches(punches: Iterable[Punch], users: dict[str, User], shifts: dict[int, Shift]) -> GroupedPunches:
    """Pair raw punches into per-day check-in/check-out drafts.

    Day shifts: a punch up to CHECKIN_WINDOW_HOURS after the shift start is a
    check-in (earliest wins), anything later is a check-out (latest wins).

    Cross-day shifts: a punch closes the most recent open check-in (today's,
    then yesterday's) when it lands within base hours plus the overtime cap.
    A punch beyond that limit splits the open shift: the earlier day is kept
    without a check-out and paid the overtime cap, and the punch becomes the
    check-in of a new day.
    """
    out = GroupedPunches()
    drafts = out.drafts

    for punch in sorted(punches, key=lambda p: p.at):
        user = users.get(punch.employee_code)
        shift = shifts.get(user.shift_id) if user and user.shift_id is not None else None
        if not user or not shift:
            out.unknown_codes.add(punch.employee_code)
            continue

        day = punch.at.date()
        key = (punch.employee_code, day)

        if shift.is_cross_day:
            limit = float(shift.base_hours) + shift.overtime_cap
            open_draft = _open_draft(drafts, punch.employee_code, day, punch.at)
            if open_draft and hours_between(open_draft.check_in, punch.at) <= limit:
                open_draft.check_out = punch.at
                continue
            if open_draft and open_draft.check_out is None and key not in drafts:
                open_draft.split = True
            if key in drafts:
                logger.debug("Ignoring unpaired punch %s for %s", punch.at, punch.employee_code)
                continue
            drafts[key] = PunchDraft(employee_code=punch.employee_code, work_date=day, check_in=punch.at)
        else:
            draft = drafts.setdefault(key, PunchDraft(employee_code=punch.employee_code, work_date=day))
            is_check_in = shift.start_time is None or punch.at.hour <= shift.start_time.hour + CHECKIN_WINDOW_HOURS
            if is_check_in:
                if draft.check_in is None:
                    draft.check_in = punch.at
            else:
                draft.check_out = punch.at

    if out.unknown_codes:
        logger.warning("Skipped punches for unknown employees or employees without a shift: %s", sorted(out.unknown_codes))
    return out


def _open_draft(drafts: dict[tuple[str, date], PunchDraft], code: str, day: date, at: datetime) -> Optional[PunchDraft]:
    for candidate_day in (day, day - timedelta(days=1)):
        draft = drafts.get((code, candidate_day))
        if draft and draft.check_in and not draft.split and at > draft.check_in:
            return draft
    return None
