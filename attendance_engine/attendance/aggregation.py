"""Monthly reduction of per-day verdicts into KPIs.

Each day's verdict depends only on its own inputs, so the reduction is a
plain fold: nothing here reads storage or shared state.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Callable, Iterable, Sequence

from attendance_engine.attendance.classifier import AttendanceClassifier
from attendance_engine.attendance.schemas import DayResult, MonthlyKPIs
from attendance_engine.common.constants import DayStatus
from attendance_engine.common.dates import month_dates
from attendance_engine.scheduling.service import ScheduleResolver
from attendance_engine.timekeeping.models import TimeEntry

EntryLookup = Callable[[uuid.UUID, date], Sequence[TimeEntry]]


class MonthlyAggregator:
    """Run resolution + classification over a month and reduce the results."""

    def __init__(self, resolver: ScheduleResolver, classifier: AttendanceClassifier) -> None:
        self.resolver = resolver
        self.classifier = classifier

    def classify_month(
        self,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        year_month: str,
        entries_for: EntryLookup,
    ) -> list[DayResult]:
        results: list[DayResult] = []
        for day in month_dates(year_month):
            expected = self.resolver.resolve_expected_shift(employee_id, company_id, day)
            results.append(
                self.classifier.classify_day(employee_id, day, expected, entries_for(employee_id, day))
            )
        return results

    def aggregate_month(
        self,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        year_month: str,
        entries_for: EntryLookup,
    ) -> tuple[list[DayResult], MonthlyKPIs]:
        days = self.classify_month(employee_id, company_id, year_month, entries_for)
        return days, self.reduce(days)

    # ── Reduction ───────────────────────────────────────────────────

    @staticmethod
    def reduce(days: Iterable[DayResult]) -> MonthlyKPIs:
        total = work = present = late = absent = not_scheduled = incidents = 0
        hours = 0.0

        for day in days:
            total += 1
            if day.is_work_day:
                work += 1
            if day.status == DayStatus.present:
                present += 1
            elif day.status == DayStatus.late:
                late += 1
            elif day.status == DayStatus.absent:
                absent += 1
            else:
                not_scheduled += 1
            if day.has_incident:
                incidents += 1
            hours += day.hours_worked

        return MonthlyKPIs(
            total_days=total,
            work_days=work,
            present_days=present,
            late_days=late,
            absent_days=absent,
            not_scheduled_days=not_scheduled,
            incidents=incidents,
            total_hours=round(hours, 2),
        )

    @staticmethod
    def combine(kpis: Iterable[MonthlyKPIs]) -> MonthlyKPIs:
        """Sum several employees' KPIs; day counts become employee-days."""
        fields = (
            "total_days", "work_days", "present_days", "late_days",
            "absent_days", "not_scheduled_days", "incidents",
        )
        totals = dict.fromkeys(fields, 0)
        hours = 0.0
        for item in kpis:
            for name in fields:
                totals[name] += getattr(item, name)
            hours += item.total_hours
        return MonthlyKPIs(**totals, total_hours=round(hours, 2))
