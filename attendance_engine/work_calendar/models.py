"""Calendar ORM models: Holiday, WorkCalendar, WorkDay."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from attendance_engine.database import Base, UTCDateTime


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        sa.Index("ix_holidays_company_date", "company_id", "date"),
    )

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
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    # Recurring holidays match on month/day only; the stored year is ignored.
    is_recurring: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        kind = "recurring" if self.is_recurring else "one-off"
        return f"<Holiday {self.name!r} {self.date.isoformat()} ({kind})>"


class WorkCalendar(Base):
    __tablename__ = "work_calendars"

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
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False, default="Default")
    is_default: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    work_days: Mapped[list[WorkDay]] = relationship(
        back_populates="calendar",
        cascade="all, delete-orphan",
        order_by="WorkDay.day_of_week",
    )


class WorkDay(Base):
    __tablename__ = "work_days"
    __table_args__ = (
        sa.UniqueConstraint("calendar_id", "day_of_week", name="uq_work_day_calendar_dow"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_work_day_dow"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    calendar_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("work_calendars.id", ondelete="CASCADE"),
        nullable=False,
    )
    # 0 = Sunday ... 6 = Saturday
    day_of_week: Mapped[int] = mapped_column(sa.SmallInteger, nullable=False)
    is_work_day: Mapped[bool] = mapped_column(sa.Boolean, default=True)

    # Relationships
    calendar: Mapped[WorkCalendar] = relationship(back_populates="work_days")
