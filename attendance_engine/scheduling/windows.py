"""Shift windows: a shift on a given date as an interval from its start anchor.

Every shift time is an offset from the anchor (the zone-aware datetime the
shift starts at), so a night shift crossing midnight is just a longer
interval and no caller has to roll dates over.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from attendance_engine.common.dates import elapsed, localize, minutes_of
from attendance_engine.scheduling.schemas import ShiftBrief

MINUTES_PER_DAY = 24 * 60


def shift_duration_minutes(start: time, end: time, is_night_shift: bool) -> int:
    """Scheduled length of a shift in minutes.

    A night shift whose end is before its start ends on the next day.
    Equal start and end, or a day shift ending before it starts, has no
    length.
    """
    duration = minutes_of(end) - minutes_of(start)
    if is_night_shift and duration < 0:
        duration += MINUTES_PER_DAY
    return max(duration, 0)


def _offset_after(anchor_minutes: int, value: time) -> int:
    """Minutes from the anchor to the next occurrence of *value* (0..1439)."""
    return (minutes_of(value) - anchor_minutes) % MINUTES_PER_DAY


@dataclass(frozen=True)
class ShiftWindow:
    anchor: datetime
    duration: timedelta
    break_offset: Optional[timedelta] = None
    break_duration: timedelta = timedelta(0)

    @classmethod
    def for_date(cls, shift: ShiftBrief, work_date: date, tz: tzinfo) -> ShiftWindow:
        anchor = datetime.combine(work_date, shift.start_time, tzinfo=tz)
        duration = timedelta(
            minutes=shift_duration_minutes(shift.start_time, shift.end_time, shift.is_night_shift)
        )

        break_offset = None
        break_duration = timedelta(0)
        if shift.break_start is not None and shift.break_end is not None:
            start_minutes = minutes_of(shift.start_time)
            begin = _offset_after(start_minutes, shift.break_start)
            end = _offset_after(start_minutes, shift.break_end)
            if end > begin:
                break_offset = timedelta(minutes=begin)
                break_duration = timedelta(minutes=end - begin)

        return cls(
            anchor=anchor,
            duration=duration,
            break_offset=break_offset,
            break_duration=break_duration,
        )

    @property
    def start(self) -> datetime:
        return self.anchor

    @property
    def end(self) -> datetime:
        return self.anchor + self.duration

    def offset_of(self, moment: datetime) -> timedelta:
        """Elapsed time from shift start to *moment* (negative if before)."""
        return elapsed(self.anchor, localize(moment, self.anchor.tzinfo))

    def lateness(self, clock_in: datetime, grace: timedelta) -> timedelta:
        """How far past ``start + grace`` the clock-in is; zero when on time."""
        overshoot = self.offset_of(clock_in) - grace
        return overshoot if overshoot > timedelta(0) else timedelta(0)

    def resolve_clock_out(self, clock_in: datetime, clock_out: datetime) -> datetime:
        """Place a clock-out on the right side of midnight for a night shift.

        Entry forms often stamp a night shift's clock-out with the shift's
        start date. When the recorded clock-out precedes the clock-in but
        the next-day reading still lies within a day of it, the next-day
        reading is the one meant.
        """
        clock_in = localize(clock_in, self.anchor.tzinfo)
        clock_out = localize(clock_out, self.anchor.tzinfo)
        if self.duration <= timedelta(0) or self.end.date() == self.anchor.date():
            return clock_out
        if elapsed(clock_in, clock_out) < timedelta(0):
            shifted = clock_out + timedelta(days=1)
            if elapsed(clock_in, shifted) <= timedelta(days=1):
                return shifted
        return clock_out
