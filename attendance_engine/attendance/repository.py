"""Batch data access for the engine.

Everything a company/date-range computation needs is fetched up front into
an immutable ``CompanySnapshot``: one query per entity type, never one per
date. Every fetch runs under ``settings.FETCH_TIMEOUT_SECONDS`` and surfaces
``DataSourceTimeoutError`` instead of hanging.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Awaitable, Optional, Sequence, TypeVar

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from attendance_engine.attendance.classifier import AttendanceClassifier
from attendance_engine.attendance.policy import AttendancePolicy
from attendance_engine.common.constants import EmployeeStatus
from attendance_engine.common.dates import resolve_timezone
from attendance_engine.common.exceptions import DataSourceTimeoutError, NotFoundException
from attendance_engine.common.keys import TenantKey
from attendance_engine.config import settings
from attendance_engine.core_hr.models import Company, Employee
from attendance_engine.scheduling.models import Schedule, SpecialDayAssignment, WorkShift
from attendance_engine.scheduling.service import ScheduleResolver
from attendance_engine.timekeeping.models import TimeEntry
from attendance_engine.work_calendar.models import Holiday, WorkCalendar
from attendance_engine.work_calendar.service import HolidayResolver, WorkCalendarResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ═════════════════════════════════════════════════════════════════════
# Snapshot
# ═════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CompanySnapshot:
    """Read-only records for one company over ``[start, end]``."""

    company: Company
    start: date
    end: date
    employees: tuple[Employee, ...]
    holidays: tuple[Holiday, ...]
    default_calendar: Optional[WorkCalendar]
    shifts: dict[uuid.UUID, WorkShift]
    schedules: tuple[Schedule, ...]
    special_days: tuple[SpecialDayAssignment, ...]
    time_entries: dict[tuple[uuid.UUID, date], tuple[TimeEntry, ...]] = field(default_factory=dict)

    @property
    def company_id(self) -> uuid.UUID:
        return self.company.id

    def timezone(self, policy: AttendancePolicy) -> tzinfo:
        return resolve_timezone(self.company.timezone, policy.default_timezone)

    def active_employees(self) -> list[Employee]:
        return [e for e in self.employees if e.status == EmployeeStatus.active]

    def entries_for(self, employee_id: uuid.UUID, on: date) -> tuple[TimeEntry, ...]:
        return self.time_entries.get((employee_id, on), ())

    def schedule_resolver(self, policy: AttendancePolicy) -> ScheduleResolver:
        company_id = self.company_id
        return ScheduleResolver(
            company_id,
            holidays=HolidayResolver(company_id, self.holidays),
            calendar=WorkCalendarResolver(
                company_id,
                self.default_calendar,
                default_is_work_day=policy.default_weekday_is_work_day,
            ),
            shifts=self.shifts,
            schedules=self.schedules,
            special_days=self.special_days,
            holiday_precedence=policy.holiday_precedence,
        )

    def classifier(self, policy: AttendancePolicy) -> AttendanceClassifier:
        return AttendanceClassifier(policy, self.timezone(policy))


# ═════════════════════════════════════════════════════════════════════
# AttendanceRepository
# ═════════════════════════════════════════════════════════════════════


class AttendanceRepository:
    """Async, tenant-scoped reads. Every query filters on ``company_id``."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _with_timeout(
        awaitable: Awaitable[T],
        operation: str,
        timeout: Optional[float] = None,
    ) -> T:
        limit = settings.FETCH_TIMEOUT_SECONDS if timeout is None else timeout
        try:
            return await asyncio.wait_for(awaitable, timeout=limit)
        except asyncio.TimeoutError as exc:
            logger.warning("Fetch '%s' timed out after %.1fs", operation, limit)
            raise DataSourceTimeoutError(operation, limit) from exc

    # ── Single-entity lookups ───────────────────────────────────────

    @staticmethod
    async def get_company(
        db: AsyncSession,
        company_id: uuid.UUID,
        *,
        timeout: Optional[float] = None,
    ) -> Company:
        result = await AttendanceRepository._with_timeout(
            db.execute(select(Company).where(Company.id == company_id)),
            "get_company",
            timeout,
        )
        company = result.scalars().first()
        if company is None:
            raise NotFoundException("Company", str(company_id))
        return company

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        key: TenantKey,
        *,
        timeout: Optional[float] = None,
    ) -> Employee:
        """Resolve an employee by ``(company_id, employee_id)``, never by id alone."""
        result = await AttendanceRepository._with_timeout(
            db.execute(
                select(Employee).where(
                    Employee.id == key.entity_id,
                    Employee.company_id == key.company_id,
                )
            ),
            "get_employee",
            timeout,
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(key))
        return employee

    # ── Snapshot ────────────────────────────────────────────────────

    @staticmethod
    async def _fetch_snapshot(
        db: AsyncSession,
        company: Company,
        start: date,
        end: date,
        employee_ids: Optional[Sequence[uuid.UUID]],
    ) -> CompanySnapshot:
        company_id = company.id

        emp_query = select(Employee).where(Employee.company_id == company_id)
        if employee_ids is not None:
            emp_query = emp_query.where(Employee.id.in_(employee_ids))
        employees = (await db.execute(emp_query.order_by(Employee.first_name, Employee.id))).scalars().all()
        emp_ids = [e.id for e in employees]

        holidays = (await db.execute(
            select(Holiday).where(
                Holiday.company_id == company_id,
                or_(
                    Holiday.is_recurring.is_(True),
                    Holiday.date.between(start, end),
                ),
            ).order_by(Holiday.date)
        )).scalars().all()

        calendars = (await db.execute(
            select(WorkCalendar)
            .where(
                WorkCalendar.company_id == company_id,
                WorkCalendar.is_default.is_(True),
            )
            .options(selectinload(WorkCalendar.work_days))
            .order_by(WorkCalendar.created_at, WorkCalendar.id)
        )).scalars().all()
        if len(calendars) > 1:
            logger.warning(
                "Company %s has %d default calendars; using %s",
                company_id, len(calendars), calendars[0].id,
            )

        shifts = (await db.execute(
            select(WorkShift).where(WorkShift.company_id == company_id)
        )).scalars().all()

        schedules: Sequence[Schedule] = ()
        special_days: Sequence[SpecialDayAssignment] = ()
        entries: Sequence[TimeEntry] = ()
        if emp_ids:
            schedules = (await db.execute(
                select(Schedule).where(
                    Schedule.company_id == company_id,
                    Schedule.employee_id.in_(emp_ids),
                )
            )).scalars().all()

            special_days = (await db.execute(
                select(SpecialDayAssignment).where(
                    SpecialDayAssignment.company_id == company_id,
                    SpecialDayAssignment.employee_id.in_(emp_ids),
                    SpecialDayAssignment.date.between(start, end),
                )
            )).scalars().all()

            entries = (await db.execute(
                select(TimeEntry).where(
                    TimeEntry.company_id == company_id,
                    TimeEntry.employee_id.in_(emp_ids),
                    TimeEntry.date.between(start, end),
                )
            )).scalars().all()

        grouped: dict[tuple[uuid.UUID, date], list[TimeEntry]] = defaultdict(list)
        for entry in entries:
            grouped[(entry.employee_id, entry.date)].append(entry)

        return CompanySnapshot(
            company=company,
            start=start,
            end=end,
            employees=tuple(employees),
            holidays=tuple(holidays),
            default_calendar=calendars[0] if calendars else None,
            shifts={s.id: s for s in shifts},
            schedules=tuple(schedules),
            special_days=tuple(special_days),
            time_entries={key: tuple(rows) for key, rows in grouped.items()},
        )

    @staticmethod
    async def load_snapshot(
        db: AsyncSession,
        company_id: uuid.UUID,
        start: date,
        end: date,
        *,
        employee_ids: Optional[Sequence[uuid.UUID]] = None,
        timeout: Optional[float] = None,
    ) -> CompanySnapshot:
        """Batch-fetch every record needed for *company_id* over ``[start, end]``.

        ``employee_ids`` narrows the employee-owned rows; ``None`` loads the
        whole company.
        """
        company = await AttendanceRepository.get_company(db, company_id, timeout=timeout)
        snapshot = await AttendanceRepository._with_timeout(
            AttendanceRepository._fetch_snapshot(db, company, start, end, employee_ids),
            "load_snapshot",
            timeout,
        )
        logger.debug(
            "Loaded snapshot company=%s %s..%s employees=%d entries=%d",
            company_id, start, end, len(snapshot.employees), len(snapshot.time_entries),
        )
        return snapshot
