"""Common module: shared utilities for the attendance engine."""

from attendance_engine.common.constants import (
    DATE_FORMAT,
    DEFAULT_TIMEZONE,
    DEFAULT_WEEKDAY_IS_WORK_DAY,
    MONTH_FORMAT,
    WEEKDAY_NAMES,
    DayStatus,
    EmployeeStatus,
    HolidayPrecedence,
    IncidentKind,
    ResolutionSource,
    SpecialDayType,
    TimeEntrySource,
    TimeEntryStatus,
)
from attendance_engine.common.exceptions import (
    AppException,
    DataSourceTimeoutError,
    NotFoundException,
    TenantIsolationError,
    ValidationException,
)
from attendance_engine.common.keys import TenantKey

__all__ = [
    # Constants / Enums
    "DayStatus",
    "EmployeeStatus",
    "HolidayPrecedence",
    "IncidentKind",
    "ResolutionSource",
    "SpecialDayType",
    "TimeEntrySource",
    "TimeEntryStatus",
    "DATE_FORMAT",
    "MONTH_FORMAT",
    "DEFAULT_TIMEZONE",
    "DEFAULT_WEEKDAY_IS_WORK_DAY",
    "WEEKDAY_NAMES",
    # Exceptions
    "AppException",
    "DataSourceTimeoutError",
    "NotFoundException",
    "TenantIsolationError",
    "ValidationException",
    # Keys
    "TenantKey",
]
