"""Scheduling Pydantic v2 schemas: immutable resolution results."""

import uuid
from datetime import date, time
from typing import Optional

from pydantic import BaseModel, ConfigDict

from attendance_engine.common.constants import ResolutionSource, SpecialDayType


class ShiftBrief(BaseModel):
    """Shift fields the classifier needs, detached from the ORM session."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    name: str
    start_time: time
    end_time: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    tolerance_minutes: Optional[int] = None
    is_night_shift: bool = False


class HolidayBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    name: str
    date: date
    is_recurring: bool = False
    description: Optional[str] = None


class ExpectedShift(BaseModel):
    """What was expected of one employee on one date.

    ``source`` and ``reason`` explain which rule decided; callers must not
    branch on them.
    """

    model_config = ConfigDict(frozen=True)

    employee_id: uuid.UUID
    date: date
    day_of_week: int
    is_work_day: bool
    shift: Optional[ShiftBrief] = None
    source: ResolutionSource
    reason: Optional[str] = None
    holiday: Optional[HolidayBrief] = None
    special_day_type: Optional[SpecialDayType] = None
