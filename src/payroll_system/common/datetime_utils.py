from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_hhmm(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    return datetime.strptime(value.strip()[:5], "%H:%M").time()


def format_hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it easily.
    """
    return datetime.now()


def js_weekday(day: date) -> int:
    """Weekday with Sunday = 0, the numbering shifts store their work days in."""
    return (day.weekday() + 1) % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year_month: str) -> tuple[date, date]:
    year, month = (int(p) for p in year_month.split("-"))
    first = date(year, month, 1)
    next_first = date(year + (month == 12), month % 12 + 1, 1)
    return first, next_first - timedelta(days=1)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def add_months(day: date, months: int) -> date:
    """First day of the month `months` after `day`'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def months_between(start: date, year_month: str) -> int:
    year, month = (int(p) for p in year_month.split("-"))
    return (year - start.year) * 12 + (month - start.month)


def previous_month(year_month: str) -> str:
    first, _ = month_bounds(year_month)
    return month_key(first - timedelta(days=1))


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600
