"""Scheduling module: work shifts, weekly schedules and special days."""

from attendance_engine.scheduling.models import Schedule, SpecialDayAssignment, WorkShift

__all__ = ["Schedule", "SpecialDayAssignment", "WorkShift"]
