"""Time-entry selection.

Lookups return every entry recorded for an employee/date; exactly one of
them is treated as canonical, chosen deterministically:
  1. the latest ``APPROVED`` entry
  2. else the latest entry that was not ``REJECTED``
  3. else the latest entry
"Latest" orders by ``updated_at``, then ``created_at``, then id.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from attendance_engine.common.constants import TimeEntryStatus
from attendance_engine.timekeeping.models import TimeEntry

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _aware(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _recency(entry: TimeEntry) -> tuple[datetime, datetime, str]:
    return (_aware(entry.updated_at), _aware(entry.created_at), str(entry.id))


def order_entries(entries: Sequence[TimeEntry]) -> list[TimeEntry]:
    """Most recent first."""
    return sorted(entries, key=_recency, reverse=True)


def pick_canonical_entry(entries: Sequence[TimeEntry]) -> Optional[TimeEntry]:
    if not entries:
        return None
    ordered = order_entries(entries)
    for entry in ordered:
        if entry.status == TimeEntryStatus.approved:
            return entry
    for entry in ordered:
        if entry.status != TimeEntryStatus.rejected:
            return entry
    return ordered[0]
