"""Scheduling ORM models: WorkShift, Schedule, SpecialDayAssignment."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from attendance_engine.common.constants import SpecialDayType
from attendance_engine.database import Base, UTCDateTime


class WorkShift(Base):
    __tablename__ = "work_shifts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    start_time: Mapped[time] = mapped_column(sa.Time, nullable=False)
    end_time: Mapped[time] = mapped_column(sa.Time, nullable=False)
    break_start: Mapped[Optional[time]] = mapped_column(sa.Time)
    break_end: Mapped[Optional[time]] = mapped_column(sa.Time)
    # Per-shift grace period; None falls back to the engine-wide setting.
    tolerance_minutes: Mapped[Optional[int]] = mapped_column(sa.Integer)
    # end_time falls on the calendar day after start_time
    is_night_shift: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<WorkShift {self.name!r} {self.start_time}-{self.end_time}>"


class Schedule(Base):
    """Recurring weekly assignment, one row per employee per weekday."""

    __tablename__ = "schedules"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "day_of_week", name="uq_schedule_emp_dow"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedule_dow"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week: Mapped[int] = mapped_column(sa.SmallInteger, nullable=False)
    work_shift_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("work_shifts.id")
    )
    is_work_day: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    work_shift: Mapped[Optional[WorkShift]] = relationship()


class SpecialDayAssignment(Base):
    """One-off override of an employee's weekly schedule for a single date."""

    __tablename__ = "special_day_assignments"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_special_day_emp_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    type: Mapped[SpecialDayType] = mapped_column(
        sa.Enum(
            SpecialDayType,
            name="special_day_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    is_mandatory: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )
