from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytz

from src.timeclock.timeclock.departments.model import Department
from src.timeclock.timeclock.schedules.model import Schedule
from src.timeclock.timeclock.schedules.resolver import ScheduleResolver


def _dept(tz: str = "UTC") -> Department:
    return Department(
        department_id="ops",
        name="Operations",
        timezone=tz,
        schedule=Schedule(clock_in=time(9, 0), clock_out=time(17, 0), grace_period=15, overtime_threshold=30),
    )


def test_window_contains_only_scheduled_span():
    resolver = ScheduleResolver(default_timezone="UTC")
    dept = _dept()

    assert resolver.is_within_schedule(datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc), dept)
    assert resolver.is_within_schedule(datetime(2025, 3, 3, 16, 59, tzinfo=timezone.utc), dept)
    assert not resolver.is_within_schedule(datetime(2025, 3, 3, 8, 59, tzinfo=timezone.utc), dept)
    assert not resolver.is_within_schedule(datetime(2025, 3, 3, 17, 1, tzinfo=timezone.utc), dept)


def test_no_department_is_always_within_schedule():
    resolver = ScheduleResolver(default_timezone="UTC")

    assert resolver.is_within_schedule(datetime(2025, 3, 3, 3, 0, tzinfo=timezone.utc), None)
    assert resolver.window_at(datetime(2025, 3, 3, 3, 0, tzinfo=timezone.utc), None) is None


def test_late_and_overtime_minutes_floor():
    resolver = ScheduleResolver(default_timezone="UTC")
    window = resolver.window_for(date(2025, 3, 3), _dept())

    assert window.late_minutes(datetime(2025, 3, 3, 9, 20, 59, tzinfo=timezone.utc)) == 20
    assert window.late_minutes(datetime(2025, 3, 3, 8, 59, 30, tzinfo=timezone.utc)) == -1
    assert window.overtime_minutes(datetime(2025, 3, 3, 17, 31, tzinfo=timezone.utc)) == 31


def test_window_uses_department_timezone():
    resolver = ScheduleResolver(default_timezone="UTC")
    dept = _dept("America/New_York")
    # 14:30 UTC on 2025-03-03 is 09:30 EST
    instant = datetime(2025, 3, 3, 14, 30, tzinfo=timezone.utc)

    window = resolver.window_at(instant, dept)

    assert window.start == pytz.timezone("America/New_York").localize(datetime(2025, 3, 3, 9, 0))
    assert resolver.local_minute(instant, dept) == "09:30"
    assert resolver.is_within_schedule(instant, dept)


def test_day_bounds_are_local_midnights():
    resolver = ScheduleResolver(default_timezone="UTC")
    dept = _dept("America/New_York")
    # 03:00 UTC on the 4th is still the 3rd in New York
    start, end = resolver.day_bounds(datetime(2025, 3, 4, 3, 0, tzinfo=timezone.utc), dept)

    assert start == datetime(2025, 3, 3, 5, 0, tzinfo=timezone.utc)
    assert end == datetime(2025, 3, 4, 5, 0, tzinfo=timezone.utc)


def test_unknown_timezone_falls_back_to_default():
    resolver = ScheduleResolver(default_timezone="UTC")
    dept = _dept("Mars/Olympus_Mons")

    assert resolver.local_day(datetime(2025, 3, 3, 23, 30, tzinfo=timezone.utc), dept) == date(2025, 3, 3)


def test_boundary_minutes():
    resolver = ScheduleResolver(default_timezone="UTC")
    dept = _dept()

    assert resolver.is_clock_in_minute(datetime(2025, 3, 3, 9, 0, 42, tzinfo=timezone.utc), dept)
    assert resolver.is_clock_out_minute(datetime(2025, 3, 3, 17, 0, 5, tzinfo=timezone.utc), dept)
    assert not resolver.is_clock_out_minute(datetime(2025, 3, 3, 17, 1, tzinfo=timezone.utc), dept)
