"""Schedule resolution: who was expected to work, and on which shift.

Precedence, highest first:
  1. special-day assignment for the exact date
  2. company holiday (an explicit weekly work-day row may override it,
     depending on the configured ``HolidayPrecedence``)
  3. the employee's weekly schedule row for the weekday
  4. the company's default work calendar
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Optional

from attendance_engine.common.constants import (
    WEEKDAY_NAMES,
    WORKING_SPECIAL_DAY_TYPES,
    HolidayPrecedence,
    ResolutionSource,
)
from attendance_engine.common.dates import day_of_week
from attendance_engine.common.exceptions import TenantIsolationError
from attendance_engine.scheduling.models import Schedule, SpecialDayAssignment, WorkShift
from attendance_engine.scheduling.schemas import ExpectedShift, HolidayBrief, ShiftBrief
from attendance_engine.work_calendar.service import HolidayResolver, WorkCalendarResolver

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _written_at(row: Schedule) -> datetime:
    stamp = row.updated_at
    if stamp is None:
        return _EPOCH
    return stamp if stamp.tzinfo else stamp.replace(tzinfo=timezone.utc)


class ScheduleResolver:
    """Resolve ``ExpectedShift`` for any employee of one company."""

    def __init__(
        self,
        company_id: uuid.UUID,
        *,
        holidays: HolidayResolver,
        calendar: WorkCalendarResolver,
        shifts: Mapping[uuid.UUID, WorkShift],
        schedules: Iterable[Schedule],
        special_days: Iterable[SpecialDayAssignment],
        holiday_precedence: HolidayPrecedence = HolidayPrecedence.schedule_wins,
    ) -> None:
        self.company_id = company_id
        self.holidays = holidays
        self.calendar = calendar
        self.holiday_precedence = holiday_precedence

        self._shifts: dict[uuid.UUID, ShiftBrief] = {}
        for shift_id, shift in shifts.items():
            self._check_tenant(shift.company_id, "WorkShift")
            if shift.is_active is False:
                continue
            self._shifts[shift_id] = ShiftBrief.model_validate(shift)

        # Upsert semantics: the latest write for employee+weekday wins.
        self._weekly: dict[tuple[uuid.UUID, int], Schedule] = {}
        for row in schedules:
            self._check_tenant(row.company_id, "Schedule")
            key = (row.employee_id, row.day_of_week)
            current = self._weekly.get(key)
            if current is None or _written_at(row) >= _written_at(current):
                self._weekly[key] = row

        self._special: dict[tuple[uuid.UUID, date], SpecialDayAssignment] = {}
        for assignment in special_days:
            self._check_tenant(assignment.company_id, "SpecialDayAssignment")
            self._special[(assignment.employee_id, assignment.date)] = assignment

    def _check_tenant(self, company_id: uuid.UUID, entity_type: str) -> None:
        if company_id != self.company_id:
            raise TenantIsolationError(entity_type, self.company_id, company_id)

    def _shift_for(self, row: Optional[Schedule]) -> Optional[ShiftBrief]:
        if row is None or row.work_shift_id is None:
            return None
        shift = self._shifts.get(row.work_shift_id)
        if shift is None:
            logger.debug("Schedule %s references unknown or inactive shift %s", row.id, row.work_shift_id)
        return shift

    # ── Company-level view ──────────────────────────────────────────

    def company_work_day(self, on: date) -> tuple[bool, Optional[str]]:
        """Whether *on* is a work day for the company as a whole, with a reason."""
        holiday = self.holidays.is_holiday(self.company_id, on)
        if holiday is not None:
            return False, f"Holiday: {holiday.name}"
        dow = day_of_week(on)
        if self.calendar.is_default_work_day(self.company_id, dow):
            return True, None
        return False, f"Non-working day: {WEEKDAY_NAMES[dow]}"

    # ── Per-employee resolution ─────────────────────────────────────

    def resolve_expected_shift(
        self,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        on: date,
    ) -> ExpectedShift:
        self._check_tenant(company_id, "Employee")
        dow = day_of_week(on)
        weekly = self._weekly.get((employee_id, dow))
        base = dict(employee_id=employee_id, date=on, day_of_week=dow)

        # 1. Special-day assignment
        special = self._special.get((employee_id, on))
        if special is not None:
            is_work_day = special.type in WORKING_SPECIAL_DAY_TYPES or bool(special.is_mandatory)
            return ExpectedShift(
                **base,
                is_work_day=is_work_day,
                shift=self._shift_for(weekly) if is_work_day else None,
                source=ResolutionSource.special,
                reason=f"Special day: {special.type.value}",
                special_day_type=special.type,
            )

        # 2. Holiday
        holiday = self.holidays.is_holiday(company_id, on)
        if holiday is not None:
            brief = HolidayBrief.model_validate(holiday)
            explicit_work = weekly is not None and bool(weekly.is_work_day)
            if explicit_work and self.holiday_precedence == HolidayPrecedence.schedule_wins:
                return ExpectedShift(
                    **base,
                    is_work_day=True,
                    shift=self._shift_for(weekly),
                    source=ResolutionSource.weekly,
                    reason=f"Scheduled on holiday: {holiday.name}",
                    holiday=brief,
                )
            return ExpectedShift(
                **base,
                is_work_day=False,
                source=ResolutionSource.holiday,
                reason=f"Holiday: {holiday.name}",
                holiday=brief,
            )

        # 3. Weekly schedule
        if weekly is not None:
            is_work_day = bool(weekly.is_work_day)
            return ExpectedShift(
                **base,
                is_work_day=is_work_day,
                shift=self._shift_for(weekly) if is_work_day else None,
                source=ResolutionSource.weekly,
                reason=None if is_work_day else f"Day off: {WEEKDAY_NAMES[dow]}",
            )

        # 4. Company default calendar
        is_work_day = self.calendar.is_default_work_day(company_id, dow)
        return ExpectedShift(
            **base,
            is_work_day=is_work_day,
            source=ResolutionSource.calendar_default,
            reason=None if is_work_day else f"Non-working day: {WEEKDAY_NAMES[dow]}",
        )
