"""Enums and constants for the attendance engine: matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Core HR ─────────────────────────────────────────────────────────

class EmployeeStatus(str, enum.Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    suspended = "SUSPENDED"


# ── Scheduling ──────────────────────────────────────────────────────

class SpecialDayType(str, enum.Enum):
    guard = "GUARD"
    holiday = "HOLIDAY"
    weekend = "WEEKEND"
    emergency = "EMERGENCY"
    overtime = "OVERTIME"


# Special-day types that make the date a work day unconditionally.
WORKING_SPECIAL_DAY_TYPES = frozenset(
    {SpecialDayType.guard, SpecialDayType.emergency, SpecialDayType.overtime}
)


class ResolutionSource(str, enum.Enum):
    special = "special"
    holiday = "holiday"
    weekly = "weekly"
    calendar_default = "calendar-default"


class HolidayPrecedence(str, enum.Enum):
    """Who wins when a holiday falls on an explicitly scheduled work day."""

    schedule_wins = "schedule_wins"
    holiday_wins = "holiday_wins"


# ── Time tracking ───────────────────────────────────────────────────

class TimeEntrySource(str, enum.Enum):
    manual = "MANUAL"
    biometric = "BIOMETRIC"
    imported = "IMPORT"


class TimeEntryStatus(str, enum.Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"
    corrected = "CORRECTED"


# ── Attendance ──────────────────────────────────────────────────────

class DayStatus(str, enum.Enum):
    not_scheduled = "not_scheduled"
    present = "present"
    late = "late"
    absent = "absent"


class IncidentKind(str, enum.Enum):
    missing_clock_in = "missing_clock_in"
    missing_clock_out = "missing_clock_out"
    clock_out_before_clock_in = "clock_out_before_clock_in"
    hours_mismatch = "hours_mismatch"
    duplicate_entry = "duplicate_entry"
    unscheduled_clock_in = "unscheduled_clock_in"


# ── Misc constants ──────────────────────────────────────────────────

# Fail-open convention when a company has no default calendar or the
# calendar has no row for a weekday.
DEFAULT_WEEKDAY_IS_WORK_DAY = True

DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_HOURS_TOLERANCE = 0.1

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"
DEFAULT_TIMEZONE = "UTC"

# 0 = Sunday ... 6 = Saturday
WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
