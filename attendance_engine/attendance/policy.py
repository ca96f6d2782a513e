"""Attendance policy knobs, resolved once per call from settings."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from attendance_engine.common.constants import (
    DEFAULT_HOURS_TOLERANCE,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_TIMEZONE,
    DEFAULT_WEEKDAY_IS_WORK_DAY,
    HolidayPrecedence,
)
from attendance_engine.config import Settings, settings


@dataclass(frozen=True)
class AttendancePolicy:
    """Business rules that shape every verdict.

    Attributes:
        late_grace_minutes: minutes after shift start before a clock-in is late,
            unless the shift carries its own tolerance.
        hours_tolerance: allowed gap, in hours, between recorded and derived hours.
        default_weekday_is_work_day: answer when no calendar covers a weekday.
        holiday_precedence: whether an explicit weekly work day beats a holiday.
        default_timezone: zone used when the company has none configured.
    """

    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    hours_tolerance: float = DEFAULT_HOURS_TOLERANCE
    default_weekday_is_work_day: bool = DEFAULT_WEEKDAY_IS_WORK_DAY
    holiday_precedence: HolidayPrecedence = HolidayPrecedence.schedule_wins
    default_timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> AttendancePolicy:
        source = source or settings
        return cls(
            late_grace_minutes=source.LATE_GRACE_MINUTES,
            hours_tolerance=source.HOURS_TOLERANCE,
            default_weekday_is_work_day=source.DEFAULT_WEEKDAY_IS_WORK_DAY,
            holiday_precedence=source.HOLIDAY_PRECEDENCE,
            default_timezone=source.DEFAULT_TIMEZONE,
        )

    def with_overrides(self, **changes) -> AttendancePolicy:
        return replace(self, **changes)
