"""Time-tracking ORM model: TimeEntry."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from attendance_engine.common.constants import TimeEntrySource, TimeEntryStatus
from attendance_engine.database import Base, UTCDateTime


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        # Not unique: duplicates are tolerated and reported as incidents.
        sa.Index("ix_time_entries_company_date", "company_id", "date"),
        sa.Index("ix_time_entries_employee_date", "employee_id", "date"),
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
    clock_in: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    clock_out: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    # Hours, as entered by the time-tracking front end.
    total_hours: Mapped[Optional[float]] = mapped_column(sa.Float)
    break_time: Mapped[Optional[float]] = mapped_column(sa.Float)
    overtime: Mapped[Optional[float]] = mapped_column(sa.Float)
    source: Mapped[TimeEntrySource] = mapped_column(
        sa.Enum(
            TimeEntrySource,
            name="time_entry_source",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=TimeEntrySource.manual,
    )
    status: Mapped[TimeEntryStatus] = mapped_column(
        sa.Enum(
            TimeEntryStatus,
            name="time_entry_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=TimeEntryStatus.pending,
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )
