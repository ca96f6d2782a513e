"""Core HR ORM models: Company, Employee.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations. The
engine only reads these rows; they are maintained by the HR application.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from attendance_engine.common.constants import EmployeeStatus
from attendance_engine.database import Base, UTCDateTime


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


# ═════════════════════════════════════════════════════════════════════
# Company
# ═════════════════════════════════════════════════════════════════════


class Company(Base):
    """Tenant boundary: every other row is scoped by ``company_id``."""

    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    timezone: Mapped[Optional[str]] = mapped_column(sa.String(50))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )

    # ── Relationships ───────────────────────────────────────────────
    employees: Mapped[list[Employee]] = relationship(back_populates="company")

    def __repr__(self) -> str:
        return f"<Company {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Employee master record. Only ``ACTIVE`` employees are scheduled."""

    __tablename__ = "employees"
    __table_args__ = (
        sa.Index("ix_employees_company_status", "company_id", "status"),
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
    employee_code: Mapped[Optional[str]] = mapped_column(sa.String(20))
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), default="")
    status: Mapped[EmployeeStatus] = mapped_column(
        sa.Enum(
            EmployeeStatus,
            name="employee_status",
            values_callable=_enum_values,
        ),
        nullable=False,
        default=EmployeeStatus.active,
    )
    # Positions and departments live in the HR application.
    position_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    department_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True))
    date_joined: Mapped[Optional[date]] = mapped_column(sa.Date)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(timezone.utc)
    )

    # ── Relationships ───────────────────────────────────────────────
    company: Mapped[Company] = relationship(back_populates="employees")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.active

    def __repr__(self) -> str:
        return f"<Employee {self.display_name!r} ({self.status.value})>"
