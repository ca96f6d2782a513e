"""Timekeeping module: recorded clock events."""

from attendance_engine.timekeeping.models import TimeEntry

__all__ = ["TimeEntry"]
