"""Date, month and time-of-day helpers.

Day-of-week numbering throughout the engine is ``0 = Sunday … 6 = Saturday``
(the numbering stored in work calendars and schedules), which differs from
``date.weekday()``.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from attendance_engine.common.constants import DATE_FORMAT, MONTH_FORMAT
from attendance_engine.common.exceptions import ValidationException


def day_of_week(value: date) -> int:
    """Sunday-based weekday index (0..6)."""
    return (value.weekday() + 1) % 7


def validate_day_of_week(value: int) -> int:
    if not 0 <= value <= 6:
        raise ValidationException(
            {"day_of_week": [f"Day of week must be 0..6, got {value}."]}
        )
    return value


def parse_date(value: date | str, *, field: str = "date") -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationException({field: [f"Invalid date '{value}', expected YYYY-MM-DD."]})


def parse_year_month(value: str, *, field: str = "month") -> tuple[int, int]:
    """Parse ``YYYY-MM`` into ``(year, month)``."""
    try:
        parsed = datetime.strptime(value, MONTH_FORMAT)
    except (TypeError, ValueError):
        raise ValidationException({field: [f"Invalid month '{value}', expected YYYY-MM."]})
    if len(value) != 7:
        raise ValidationException({field: [f"Invalid month '{value}', expected YYYY-MM."]})
    return parsed.year, parsed.month


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from *start* to *end*, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_dates(year_month: str) -> list[date]:
    year, month = parse_year_month(year_month)
    start, end = month_bounds(year, month)
    return list(iter_dates(start, end))


def resolve_timezone(name: str | None, default: str) -> tzinfo:
    """Company timezone, falling back to *default* when unset or unknown."""
    for candidate in (name, default):
        if not candidate:
            continue
        if candidate.upper() == "UTC":
            return timezone.utc
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            continue
    return timezone.utc


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Express *value* in *tz*. Naive values are UTC instants."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Elapsed time from *start* to *end*, measured between UTC instants."""
    return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)


def minutes_of(value: time) -> int:
    return value.hour * 60 + value.minute
