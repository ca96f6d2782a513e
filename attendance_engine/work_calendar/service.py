"""Holiday and default work-calendar resolution.

Both resolvers are built once per company from batch-fetched rows and are
pure afterwards: no I/O, no mutation of the rows they were given.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterable, Optional

from attendance_engine.common.constants import DEFAULT_WEEKDAY_IS_WORK_DAY
from attendance_engine.common.dates import validate_day_of_week
from attendance_engine.common.exceptions import TenantIsolationError
from attendance_engine.work_calendar.models import Holiday, WorkCalendar

logger = logging.getLogger(__name__)


def _check_tenant(expected: uuid.UUID, actual: uuid.UUID, entity_type: str) -> None:
    if expected != actual:
        raise TenantIsolationError(entity_type, expected, actual)


class HolidayResolver:
    """Exact-date holidays first, then recurring month/day holidays."""

    def __init__(self, company_id: uuid.UUID, holidays: Iterable[Holiday]) -> None:
        self.company_id = company_id
        self._exact: dict[date, Holiday] = {}
        self._recurring: dict[tuple[int, int], Holiday] = {}

        for holiday in holidays:
            _check_tenant(company_id, holiday.company_id, "Holiday")
            if holiday.is_recurring:
                self._recurring.setdefault((holiday.date.month, holiday.date.day), holiday)
            else:
                self._exact.setdefault(holiday.date, holiday)

    def is_holiday(self, company_id: uuid.UUID, on: date) -> Optional[Holiday]:
        """Return the matching holiday or ``None``. Exact beats recurring."""
        _check_tenant(self.company_id, company_id, "Holiday")
        exact = self._exact.get(on)
        if exact is not None:
            return exact
        return self._recurring.get((on.month, on.day))


class WorkCalendarResolver:
    """Default weekday flags for a company.

    A company without a default calendar, or a calendar without a row for
    some weekday, falls back to ``default_is_work_day`` (fail-open: the
    weekday is a work day unless configured otherwise).
    """

    def __init__(
        self,
        company_id: uuid.UUID,
        calendar: Optional[WorkCalendar],
        *,
        default_is_work_day: bool = DEFAULT_WEEKDAY_IS_WORK_DAY,
    ) -> None:
        self.company_id = company_id
        self.default_is_work_day = default_is_work_day
        self._flags: dict[int, bool] = {}
        self.has_calendar = calendar is not None

        if calendar is not None:
            _check_tenant(company_id, calendar.company_id, "WorkCalendar")
            for work_day in calendar.work_days:
                self._flags[work_day.day_of_week] = bool(work_day.is_work_day)

    def is_default_work_day(self, company_id: uuid.UUID, day_of_week: int) -> bool:
        _check_tenant(self.company_id, company_id, "WorkCalendar")
        validate_day_of_week(day_of_week)
        flag = self._flags.get(day_of_week)
        if flag is None:
            logger.debug(
                "No work-calendar entry for company=%s dow=%d (calendar=%s); using default %s",
                company_id, day_of_week, self.has_calendar, self.default_is_work_day,
            )
            return self.default_is_work_day
        return flag
