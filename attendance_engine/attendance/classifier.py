"""Attendance classification for a single employee-day.

Business logic:
  - Non-work day → not_scheduled, 0 hours; a clock-in is an incident only
  - Work day without a clock-in → absent
  - Work day with a clock-in → present or late against shift start + grace
  - Hours from the recorded total when it agrees with the clock events,
    otherwise derived from them; inconsistencies become incidents
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Sequence

from attendance_engine.attendance.policy import AttendancePolicy
from attendance_engine.attendance.schemas import DayResult, Incident
from attendance_engine.common.constants import DayStatus, IncidentKind
from attendance_engine.common.dates import elapsed, localize
from attendance_engine.scheduling.schemas import ExpectedShift
from attendance_engine.scheduling.windows import ShiftWindow
from attendance_engine.timekeeping.models import TimeEntry
from attendance_engine.timekeeping.service import pick_canonical_entry

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def _hours(delta: timedelta) -> float:
    return delta.total_seconds() / SECONDS_PER_HOUR


class AttendanceClassifier:
    """Pure per-day classifier bound to one policy and one timezone."""

    def __init__(self, policy: AttendancePolicy, tz: tzinfo) -> None:
        self.policy = policy
        self.tz = tz

    # ── Helpers ─────────────────────────────────────────────────────

    def _grace(self, expected: ExpectedShift) -> timedelta:
        shift = expected.shift
        if shift is not None and shift.tolerance_minutes is not None:
            return timedelta(minutes=shift.tolerance_minutes)
        return timedelta(minutes=self.policy.late_grace_minutes)

    @staticmethod
    def _duplicate_incident(entries: Sequence[TimeEntry], chosen: TimeEntry) -> Incident:
        return Incident(
            kind=IncidentKind.duplicate_entry,
            detail=f"{len(entries)} time entries recorded for the same day; using {chosen.id}.",
            time_entry_id=chosen.id,
        )

    def _hours_worked(
        self,
        entry: TimeEntry,
        clock_in: datetime,
        clock_out: Optional[datetime],
        incidents: list[Incident],
        scheduled_break: timedelta = timedelta(0),
    ) -> float:
        """Recorded hours when consistent with clock events, else derived hours.

        The entry's own break time is deducted; without one, the shift's
        scheduled break is.
        """
        if clock_out is None:
            incidents.append(Incident(
                kind=IncidentKind.missing_clock_out,
                detail="Clock-in without a matching clock-out.",
                time_entry_id=entry.id,
            ))
            return 0.0

        worked = elapsed(clock_in, clock_out)
        if worked < timedelta(0):
            incidents.append(Incident(
                kind=IncidentKind.clock_out_before_clock_in,
                detail=f"Clock-out {clock_out.isoformat()} precedes clock-in {clock_in.isoformat()}.",
                time_entry_id=entry.id,
            ))

        if entry.break_time is not None:
            break_hours = max(entry.break_time, 0.0)
        else:
            break_hours = _hours(scheduled_break)
        derived = max(_hours(worked) - break_hours, 0.0)

        recorded = entry.total_hours
        if recorded is None:
            return round(derived, 2)

        if recorded < 0 or abs(recorded - derived) > self.policy.hours_tolerance:
            incidents.append(Incident(
                kind=IncidentKind.hours_mismatch,
                detail=f"Recorded {recorded:.2f}h but clock events give {derived:.2f}h.",
                time_entry_id=entry.id,
            ))
            return round(derived, 2)
        return round(recorded, 2)

    # ── Classification ──────────────────────────────────────────────

    def classify_day(
        self,
        employee_id: uuid.UUID,
        on: date,
        expected: ExpectedShift,
        entries: Sequence[TimeEntry] = (),
    ) -> DayResult:
        incidents: list[Incident] = []
        entry = pick_canonical_entry(entries)
        if len(entries) > 1:
            incidents.append(self._duplicate_incident(entries, entry))

        shift = expected.shift
        base = dict(
            employee_id=employee_id,
            date=on,
            day_of_week=expected.day_of_week,
            is_work_day=expected.is_work_day,
            source=expected.source,
            reason=expected.reason,
            scheduled_start=shift.start_time if shift else None,
            scheduled_end=shift.end_time if shift else None,
            time_entry_id=entry.id if entry else None,
            notes=entry.notes if entry else None,
        )
        clock_in = localize(entry.clock_in, self.tz) if entry and entry.clock_in else None
        clock_out = localize(entry.clock_out, self.tz) if entry and entry.clock_out else None

        # 1. Not a work day: record stray clock events, never count them
        if not expected.is_work_day:
            if clock_in is not None:
                incidents.append(Incident(
                    kind=IncidentKind.unscheduled_clock_in,
                    detail=f"Clock-in recorded on a non-work day ({expected.reason or expected.source.value}).",
                    time_entry_id=entry.id,
                ))
            return DayResult(
                **base,
                status=DayStatus.not_scheduled,
                has_incident=bool(incidents),
                hours_worked=0.0,
                clock_in=clock_in,
                clock_out=clock_out,
                incidents=incidents,
            )

        # 2. Work day without a clock-in
        if clock_in is None:
            incidents.append(Incident(
                kind=IncidentKind.missing_clock_in,
                detail="Scheduled work day with no clock-in.",
                time_entry_id=entry.id if entry else None,
            ))
            return DayResult(
                **base,
                status=DayStatus.absent,
                has_incident=True,
                clock_out=clock_out,
                incidents=incidents,
            )

        # 3. Work day with a clock-in
        late_by = timedelta(0)
        scheduled_break = timedelta(0)
        if shift is not None:
            window = ShiftWindow.for_date(shift, on, self.tz)
            late_by = window.lateness(clock_in, self._grace(expected))
            scheduled_break = window.break_duration
            if clock_out is not None:
                clock_out = window.resolve_clock_out(clock_in, clock_out)

        hours_worked = self._hours_worked(entry, clock_in, clock_out, incidents, scheduled_break)
        is_late = late_by > timedelta(0)

        if incidents:
            logger.debug(
                "employee=%s date=%s incidents=%s",
                employee_id, on.isoformat(), [i.kind.value for i in incidents],
            )

        return DayResult(
            **base,
            status=DayStatus.late if is_late else DayStatus.present,
            is_late=is_late,
            late_minutes=math.ceil(late_by.total_seconds() / 60),
            has_incident=bool(incidents),
            hours_worked=hours_worked,
            clock_in=clock_in,
            clock_out=clock_out,
            incidents=incidents,
        )
