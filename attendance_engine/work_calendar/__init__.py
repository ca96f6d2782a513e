"""Work calendar module: holidays and the company default week."""

from attendance_engine.work_calendar.models import Holiday, WorkCalendar, WorkDay

__all__ = ["Holiday", "WorkCalendar", "WorkDay"]
