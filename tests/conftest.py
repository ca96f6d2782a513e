"""Shared test fixtures: async DB session, factories, seeding helpers.

Reusable across all test modules (calendar, scheduling, classifier,
aggregation, service). Uses SQLite + aiosqlite for fast isolated tests
without PostgreSQL.
"""

from __future__ import annotations

import os

# Pin the engine-wide policy before anything touches pydantic-settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")

import uuid
from datetime import date, datetime, time, timezone
from typing import AsyncGenerator, Optional

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from attendance_engine.common.constants import (
    EmployeeStatus,
    SpecialDayType,
    TimeEntrySource,
    TimeEntryStatus,
)
from attendance_engine.database import Base

# Import ALL model modules so SQLAlchemy can resolve cross-module foreign keys
# (e.g. Schedule → employees, work_shifts)
import attendance_engine.core_hr.models  # noqa: F401
import attendance_engine.work_calendar.models  # noqa: F401
import attendance_engine.scheduling.models  # noqa: F401
import attendance_engine.timekeeping.models  # noqa: F401

from attendance_engine.core_hr.models import Company, Employee
from attendance_engine.scheduling.models import Schedule, WorkShift
from attendance_engine.work_calendar.models import WorkCalendar, WorkDay

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _make_company(*, name: str = "Workify Test Co", tz: Optional[str] = None) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        timezone=tz,
        is_active=True,
        created_at=_now(),
    )


def _make_employee(
    *,
    company_id: uuid.UUID,
    first_name: str = "Test",
    last_name: str = "User",
    status: EmployeeStatus = EmployeeStatus.active,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        company_id=company_id,
        employee_code=f"WF-{uuid.uuid4().hex[:6].upper()}",
        first_name=first_name,
        last_name=last_name,
        status=status,
        date_joined=date(2023, 1, 9),
        created_at=_now(),
        updated_at=_now(),
    )


def _make_shift(
    *,
    company_id: uuid.UUID,
    name: str = "Day Shift",
    start: time = time(9, 0),
    end: time = time(17, 0),
    break_start: Optional[time] = None,
    break_end: Optional[time] = None,
    tolerance: Optional[int] = None,
    night: bool = False,
    active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        company_id=company_id,
        name=name,
        start_time=start,
        end_time=end,
        break_start=break_start,
        break_end=break_end,
        tolerance_minutes=tolerance,
        is_night_shift=night,
        is_active=active,
        created_at=_now(),
    )


def _make_holiday(
    *,
    company_id: uuid.UUID,
    on: date,
    name: str = "Holiday",
    recurring: bool = False,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        company_id=company_id,
        name=name,
        date=on,
        is_recurring=recurring,
        created_at=_now(),
    )


def _make_schedule(
    *,
    employee_id: uuid.UUID,
    company_id: uuid.UUID,
    day_of_week: int,
    work_shift_id: Optional[uuid.UUID] = None,
    is_work_day: bool = True,
    updated_at: Optional[datetime] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        company_id=company_id,
        day_of_week=day_of_week,
        work_shift_id=work_shift_id,
        is_work_day=is_work_day,
        updated_at=updated_at or _now(),
    )


def _make_special_day(
    *,
    employee_id: uuid.UUID,
    company_id: uuid.UUID,
    on: date,
    type: SpecialDayType,
    mandatory: bool = False,
    notes: Optional[str] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        company_id=company_id,
        date=on,
        type=type,
        is_mandatory=mandatory,
        notes=notes,
        created_at=_now(),
    )


def _make_time_entry(
    *,
    employee_id: uuid.UUID,
    company_id: uuid.UUID,
    on: date,
    clock_in: Optional[datetime] = None,
    clock_out: Optional[datetime] = None,
    total_hours: Optional[float] = None,
    break_time: Optional[float] = None,
    status: TimeEntryStatus = TimeEntryStatus.approved,
    updated_at: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> dict:
    stamp = updated_at or _now()
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        company_id=company_id,
        date=on,
        clock_in=clock_in,
        clock_out=clock_out,
        total_hours=total_hours,
        break_time=break_time,
        source=TimeEntrySource.biometric,
        status=status,
        notes=notes,
        created_at=stamp,
        updated_at=stamp,
    )


def _make_calendar(
    *,
    company_id: uuid.UUID,
    work_days: tuple[int, ...] = (1, 2, 3, 4, 5),
    days: tuple[int, ...] = tuple(range(7)),
) -> WorkCalendar:
    """Default calendar with a row for each of *days*; *work_days* are working."""
    return WorkCalendar(
        id=uuid.uuid4(),
        company_id=company_id,
        name="Default",
        is_default=True,
        created_at=_now(),
        work_days=[
            WorkDay(id=uuid.uuid4(), day_of_week=dow, is_work_day=dow in work_days)
            for dow in days
        ],
    )


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


# ── Seeding helpers ─────────────────────────────────────────────────

async def seed_weekly(
    db: AsyncSession,
    employee: Employee,
    shift: Optional[WorkShift],
    *,
    work_days: tuple[int, ...] = (1, 2, 3, 4, 5),
) -> list[Schedule]:
    """Give *employee* a row for all seven weekdays; *work_days* are on *shift*."""
    rows = []
    for dow in range(7):
        working = dow in work_days
        row = Schedule(**_make_schedule(
            employee_id=employee.id,
            company_id=employee.company_id,
            day_of_week=dow,
            work_shift_id=shift.id if (shift is not None and working) else None,
            is_work_day=working,
        ))
        db.add(row)
        rows.append(row)
    await db.flush()
    return rows


@pytest.fixture
async def test_company(db) -> Company:
    company = Company(**_make_company())
    db.add(company)
    await db.flush()
    return company


@pytest.fixture
async def test_employee(db, test_company) -> Employee:
    """Insert an active employee of ``test_company``."""
    employee = Employee(**_make_employee(company_id=test_company.id))
    db.add(employee)
    await db.flush()
    return employee


@pytest.fixture
async def day_shift(db, test_company) -> WorkShift:
    """09:00-17:00, no per-shift tolerance."""
    shift = WorkShift(**_make_shift(company_id=test_company.id))
    db.add(shift)
    await db.flush()
    return shift


@pytest.fixture
async def office_week(db, test_employee, day_shift) -> list[Schedule]:
    """Mon-Fri on the day shift, weekends off."""
    return await seed_weekly(db, test_employee, day_shift)

