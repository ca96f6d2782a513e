"""Scheduling test suite: expected-shift precedence and shift windows.

Covers: special days, holidays vs explicit schedules (both precedence
modes), weekly rows, calendar fallback, inactive shifts, night shifts.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from attendance_engine.common.constants import (
    HolidayPrecedence,
    ResolutionSource,
    SpecialDayType,
)
from attendance_engine.common.exceptions import TenantIsolationError
from attendance_engine.scheduling.models import Schedule, SpecialDayAssignment, WorkShift
from attendance_engine.scheduling.schemas import ShiftBrief
from attendance_engine.scheduling.service import ScheduleResolver
from attendance_engine.scheduling.windows import ShiftWindow, shift_duration_minutes
from attendance_engine.work_calendar.models import Holiday
from attendance_engine.work_calendar.service import HolidayResolver, WorkCalendarResolver
from tests.conftest import (
    _make_calendar,
    _make_holiday,
    _make_schedule,
    _make_shift,
    _make_special_day,
    utc,
)

COMPANY = uuid.uuid4()
EMPLOYEE = uuid.uuid4()

MONDAY = date(2024, 3, 4)
SATURDAY = date(2024, 3, 9)
CHRISTMAS = date(2024, 12, 25)  # Wednesday


# ── Helpers ─────────────────────────────────────────────────────────


def _shift(**kwargs) -> WorkShift:
    return WorkShift(**_make_shift(company_id=COMPANY, **kwargs))


def _week(shift: WorkShift | None, work_days=(1, 2, 3, 4, 5)) -> list[Schedule]:
    return [
        Schedule(**_make_schedule(
            employee_id=EMPLOYEE,
            company_id=COMPANY,
            day_of_week=dow,
            work_shift_id=shift.id if (shift and dow in work_days) else None,
            is_work_day=dow in work_days,
        ))
        for dow in range(7)
    ]


def _resolver(
    *,
    shifts=(),
    schedules=(),
    holidays=(),
    special_days=(),
    calendar=None,
    precedence=HolidayPrecedence.schedule_wins,
) -> ScheduleResolver:
    return ScheduleResolver(
        COMPANY,
        holidays=HolidayResolver(COMPANY, [Holiday(**h) for h in holidays]),
        calendar=WorkCalendarResolver(COMPANY, calendar),
        shifts={s.id: s for s in shifts},
        schedules=schedules,
        special_days=[SpecialDayAssignment(**s) for s in special_days],
        holiday_precedence=precedence,
    )


def _special(on: date, type: SpecialDayType, mandatory: bool = False) -> dict:
    return _make_special_day(
        employee_id=EMPLOYEE, company_id=COMPANY, on=on, type=type, mandatory=mandatory,
    )


# ═════════════════════════════════════════════════════════════════════
# 1. PRECEDENCE
# ═════════════════════════════════════════════════════════════════════


def test_weekly_row_decides_when_nothing_overrides_it():
    shift = _shift()
    resolver = _resolver(shifts=[shift], schedules=_week(shift))

    monday = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY)
    saturday = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, SATURDAY)

    assert monday.is_work_day is True
    assert monday.source == ResolutionSource.weekly
    assert monday.shift.id == shift.id
    assert monday.day_of_week == 1
    assert saturday.is_work_day is False
    assert saturday.shift is None
    assert saturday.reason == "Day off: Saturday"


def test_no_rows_fall_back_to_calendar_default():
    resolver = _resolver(calendar=_make_calendar(company_id=COMPANY))

    monday = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY)
    saturday = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, SATURDAY)

    assert monday.source == ResolutionSource.calendar_default
    assert monday.is_work_day is True
    assert monday.shift is None
    assert saturday.is_work_day is False
    assert saturday.reason == "Non-working day: Saturday"


def test_no_rows_and_no_calendar_is_a_work_day():
    resolver = _resolver()

    for offset in range(7):
        expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY + timedelta(days=offset))
        assert expected.is_work_day is True
        assert expected.source == ResolutionSource.calendar_default


def test_holiday_makes_calendar_work_day_a_day_off():
    resolver = _resolver(
        holidays=[_make_holiday(company_id=COMPANY, on=date(2000, 12, 25), name="Christmas", recurring=True)],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, CHRISTMAS)

    assert expected.is_work_day is False
    assert expected.source == ResolutionSource.holiday
    assert expected.reason == "Holiday: Christmas"
    assert expected.holiday.name == "Christmas"
    assert expected.shift is None


def test_explicit_schedule_wins_over_holiday_by_default():
    shift = _shift()
    resolver = _resolver(
        shifts=[shift],
        schedules=_week(shift),
        holidays=[_make_holiday(company_id=COMPANY, on=CHRISTMAS, name="Christmas")],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, CHRISTMAS)

    assert expected.is_work_day is True
    assert expected.source == ResolutionSource.weekly
    assert expected.shift.id == shift.id
    assert expected.reason == "Scheduled on holiday: Christmas"
    assert expected.holiday is not None


def test_holiday_wins_when_configured():
    shift = _shift()
    resolver = _resolver(
        shifts=[shift],
        schedules=_week(shift),
        holidays=[_make_holiday(company_id=COMPANY, on=CHRISTMAS, name="Christmas")],
        precedence=HolidayPrecedence.holiday_wins,
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, CHRISTMAS)

    assert expected.is_work_day is False
    assert expected.source == ResolutionSource.holiday


def test_holiday_on_scheduled_day_off_stays_a_holiday():
    shift = _shift()
    resolver = _resolver(
        shifts=[shift],
        schedules=_week(shift, work_days=(1, 2)),  # Wednesday off
        holidays=[_make_holiday(company_id=COMPANY, on=CHRISTMAS, name="Christmas")],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, CHRISTMAS)

    assert expected.source == ResolutionSource.holiday
    assert expected.is_work_day is False


@pytest.mark.parametrize("kind", [SpecialDayType.guard, SpecialDayType.emergency, SpecialDayType.overtime])
def test_working_special_day_overrides_weekend(kind):
    shift = _shift()
    resolver = _resolver(
        shifts=[shift],
        schedules=_week(shift),
        special_days=[_special(SATURDAY, kind)],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, SATURDAY)

    assert expected.is_work_day is True
    assert expected.source == ResolutionSource.special
    assert expected.special_day_type == kind
    assert expected.reason == f"Special day: {kind.value}"
    # Saturday has no weekly shift, so there is nothing to fall back to.
    assert expected.shift is None


@pytest.mark.parametrize("kind", [SpecialDayType.holiday, SpecialDayType.weekend])
def test_day_off_special_day_overrides_weekly_work_day(kind):
    shift = _shift()
    resolver = _resolver(
        shifts=[shift],
        schedules=_week(shift),
        special_days=[_special(MONDAY, kind)],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY)

    assert expected.is_work_day is False
    assert expected.source == ResolutionSource.special
    assert expected.shift is None


def test_mandatory_weekend_special_day_is_worked_on_the_weekly_shift():
    shift = _shift()
    resolver = _resolver(
        shifts=[shift],
        schedules=_week(shift),
        special_days=[_special(MONDAY, SpecialDayType.weekend, mandatory=True)],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY)

    assert expected.is_work_day is True
    assert expected.shift.id == shift.id


def test_special_day_beats_holiday():
    resolver = _resolver(
        holidays=[_make_holiday(company_id=COMPANY, on=CHRISTMAS, name="Christmas")],
        special_days=[_special(CHRISTMAS, SpecialDayType.guard)],
    )

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, CHRISTMAS)

    assert expected.source == ResolutionSource.special
    assert expected.is_work_day is True


def test_special_day_applies_to_its_date_only():
    resolver = _resolver(special_days=[_special(MONDAY, SpecialDayType.weekend)])

    assert resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY).is_work_day is False
    assert resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY + timedelta(days=7)).is_work_day is True


def test_latest_weekly_row_wins():
    early, late = _shift(name="Early"), _shift(name="Late")
    stale = Schedule(**_make_schedule(
        employee_id=EMPLOYEE, company_id=COMPANY, day_of_week=1,
        work_shift_id=early.id, updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ))
    fresh = Schedule(**_make_schedule(
        employee_id=EMPLOYEE, company_id=COMPANY, day_of_week=1,
        work_shift_id=late.id, updated_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
    ))
    resolver = _resolver(shifts=[early, late], schedules=[fresh, stale])

    assert resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY).shift.name == "Late"


def test_inactive_shift_is_treated_as_no_shift():
    shift = _shift(active=False)
    resolver = _resolver(shifts=[shift], schedules=_week(shift))

    expected = resolver.resolve_expected_shift(EMPLOYEE, COMPANY, MONDAY)

    assert expected.is_work_day is True
    assert expected.shift is None


def test_resolution_for_another_company_is_rejected():
    resolver = _resolver()
    with pytest.raises(TenantIsolationError):
        resolver.resolve_expected_shift(EMPLOYEE, uuid.uuid4(), MONDAY)


def test_company_work_day_reports_reason():
    resolver = _resolver(
        calendar=_make_calendar(company_id=COMPANY),
        holidays=[_make_holiday(company_id=COMPANY, on=CHRISTMAS, name="Christmas")],
    )

    assert resolver.company_work_day(MONDAY) == (True, None)
    assert resolver.company_work_day(SATURDAY) == (False, "Non-working day: Saturday")
    assert resolver.company_work_day(CHRISTMAS) == (False, "Holiday: Christmas")


# ═════════════════════════════════════════════════════════════════════
# 2. SHIFT WINDOWS
# ═════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "start, end, night, minutes",
    [
        (time(9, 0), time(17, 0), False, 480),
        (time(22, 0), time(6, 0), True, 480),
        (time(18, 30), time(2, 15), True, 465),
        (time(0, 0), time(0, 0), True, 0),
        (time(22, 0), time(22, 0), True, 0),
        (time(17, 0), time(9, 0), False, 0),
    ],
)
def test_shift_duration_minutes(start, end, night, minutes):
    assert shift_duration_minutes(start, end, night) == minutes


def _brief(**kwargs) -> ShiftBrief:
    return ShiftBrief.model_validate(_shift(**kwargs))


def test_night_shift_window_ends_next_day():
    window = ShiftWindow.for_date(_brief(start=time(22, 0), end=time(6, 0), night=True), MONDAY, timezone.utc)

    assert window.start == utc(2024, 3, 4, 22, 0)
    assert window.end == utc(2024, 3, 5, 6, 0)


def test_break_after_midnight_is_an_offset_from_the_anchor():
    shift = _brief(
        start=time(22, 0), end=time(6, 0), night=True,
        break_start=time(1, 0), break_end=time(1, 30),
    )
    window = ShiftWindow.for_date(shift, MONDAY, timezone.utc)

    assert window.break_offset == timedelta(hours=3)
    assert window.break_duration == timedelta(minutes=30)


def test_lateness_respects_grace():
    window = ShiftWindow.for_date(_brief(), MONDAY, timezone.utc)

    assert window.lateness(utc(2024, 3, 4, 9, 10), timedelta(minutes=15)) == timedelta(0)
    assert window.lateness(utc(2024, 3, 4, 9, 20), timedelta(minutes=15)) == timedelta(minutes=5)
    assert window.lateness(utc(2024, 3, 4, 8, 45), timedelta(0)) == timedelta(0)


def test_lateness_after_midnight_on_night_shift():
    window = ShiftWindow.for_date(_brief(start=time(22, 0), end=time(6, 0), night=True), MONDAY, timezone.utc)

    assert window.lateness(utc(2024, 3, 5, 0, 30), timedelta(0)) == timedelta(hours=2, minutes=30)


def test_clock_out_stamped_with_start_date_moves_to_next_day():
    window = ShiftWindow.for_date(_brief(start=time(22, 0), end=time(6, 0), night=True), MONDAY, timezone.utc)

    fixed = window.resolve_clock_out(utc(2024, 3, 4, 22, 0), utc(2024, 3, 4, 6, 0))

    assert fixed == utc(2024, 3, 5, 6, 0)


def test_day_shift_clock_out_is_never_moved():
    window = ShiftWindow.for_date(_brief(), MONDAY, timezone.utc)

    clock_out = utc(2024, 3, 4, 8, 0)
    assert window.resolve_clock_out(utc(2024, 3, 4, 9, 0), clock_out) == clock_out


def test_window_is_anchored_in_company_timezone():
    kolkata = ZoneInfo("Asia/Kolkata")
    window = ShiftWindow.for_date(_brief(), MONDAY, kolkata)

    # 09:00 IST == 03:30 UTC
    assert window.start == datetime(2024, 3, 4, 3, 30, tzinfo=timezone.utc)
    assert window.lateness(datetime(2024, 3, 4, 3, 45, tzinfo=timezone.utc), timedelta(0)) == timedelta(minutes=15)


def test_offsets_are_elapsed_time_across_dst():
    new_york = ZoneInfo("America/New_York")
    window = ShiftWindow.for_date(_brief(start=time(22, 0), end=time(6, 0), night=True), date(2024, 3, 9), new_york)

    # 22:00 EST is 03:00Z; clocks spring forward at 02:00 local
    assert window.offset_of(datetime(2024, 3, 10, 10, 0, tzinfo=timezone.utc)) == timedelta(hours=7)
    assert window.lateness(datetime(2024, 3, 10, 3, 10, tzinfo=timezone.utc), timedelta(0)) == timedelta(minutes=10)
