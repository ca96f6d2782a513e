"""Attendance Pydantic v2 schemas: per-day verdicts and monthly KPIs.

Naming conventions:
  - *Result  → one employee, one date
  - *KPIs    → reduced totals
  - *Report  → what the service façade returns
"""

import uuid
from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from attendance_engine.common.constants import (
    DayStatus,
    EmployeeStatus,
    IncidentKind,
    ResolutionSource,
)


# ═════════════════════════════════════════════════════════════════════
# Per-day
# ═════════════════════════════════════════════════════════════════════


class Incident(BaseModel):
    """A recorded inconsistency between expectation and fact. Never raised."""

    model_config = ConfigDict(frozen=True)

    kind: IncidentKind
    detail: str
    time_entry_id: Optional[uuid.UUID] = None


class DayResult(BaseModel):
    """Attendance verdict for one employee on one date."""

    model_config = ConfigDict(frozen=True)

    employee_id: uuid.UUID
    date: date
    day_of_week: int
    is_work_day: bool
    source: ResolutionSource
    reason: Optional[str] = None
    status: DayStatus
    is_late: bool = False
    late_minutes: int = 0
    has_incident: bool = False
    hours_worked: float = 0.0
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    time_entry_id: Optional[uuid.UUID] = None
    incidents: list[Incident] = Field(default_factory=list)
    notes: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Monthly
# ═════════════════════════════════════════════════════════════════════


class MonthlyKPIs(BaseModel):
    """Reduced totals for a month.

    ``present_days + late_days + absent_days + not_scheduled_days`` always
    equals ``total_days``. Late days are worked days, not absences.
    """

    model_config = ConfigDict(frozen=True)

    total_days: int = 0
    work_days: int = 0
    present_days: int = 0
    late_days: int = 0
    absent_days: int = 0
    not_scheduled_days: int = 0
    incidents: int = 0
    total_hours: float = 0.0

    @computed_field
    @property
    def attendance_rate(self) -> float:
        """``present_days / work_days``; 0 when there were no work days."""
        if self.work_days == 0:
            return 0.0
        return round(self.present_days / self.work_days, 4)

    @computed_field
    @property
    def average_hours_per_day(self) -> float:
        """``total_hours / present_days``; 0 when nobody was present."""
        if self.present_days == 0:
            return 0.0
        return round(self.total_hours / self.present_days, 2)


class EmployeeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company_id: uuid.UUID
    first_name: str
    last_name: str = ""
    status: EmployeeStatus
    position_id: Optional[uuid.UUID] = None
    department_id: Optional[uuid.UUID] = None


class EmployeeMonthlyReport(BaseModel):
    """One employee's month: every day plus the reduced KPIs."""

    employee: EmployeeBrief
    month: str
    days: list[DayResult]
    kpis: MonthlyKPIs


# ═════════════════════════════════════════════════════════════════════
# Company-wide
# ═════════════════════════════════════════════════════════════════════


class AggregationFailure(BaseModel):
    """A subject whose computation failed without aborting its siblings."""

    subject_id: uuid.UUID
    error_type: str
    detail: str
    retryable: bool = False


class DailySummary(BaseModel):
    """Head counts for one company day."""

    working: int = 0
    present: int = 0
    late: int = 0
    absent: int = 0
    not_scheduled: int = 0
    incidents: int = 0


class CompanyDayReport(BaseModel):
    company_id: uuid.UUID
    date: date
    is_work_day: bool
    work_day_reason: Optional[str] = None
    active: int
    scheduled: int
    summary: DailySummary
    per_employee: list[DayResult]
    failures: list[AggregationFailure] = Field(default_factory=list)


class EmployeeMonthSummary(BaseModel):
    employee: EmployeeBrief
    kpis: MonthlyKPIs


class CompanyMonthReport(BaseModel):
    """Company month rollup. ``totals`` counts employee-days."""

    company_id: uuid.UUID
    month: str
    employees: list[EmployeeMonthSummary]
    totals: MonthlyKPIs
    failures: list[AggregationFailure] = Field(default_factory=list)
