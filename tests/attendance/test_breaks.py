from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.timeclock.timeclock.attendance.breaks import BreakAccumulator
from src.timeclock.timeclock.attendance.model import EmployeeStatus


def test_total_is_sum_of_sessions(clock):
    breaks = BreakAccumulator(clock)

    assert breaks.start() is True
    clock.advance(minutes=10)
    assert breaks.stop() == 10 * 60 * 1000

    clock.advance(hours=1)
    breaks.start()
    clock.advance(minutes=5, seconds=30)
    breaks.stop()

    assert breaks.total() == (15 * 60 + 30) * 1000


def test_only_one_session_open(clock):
    breaks = BreakAccumulator(clock)
    breaks.start()
    first = breaks.session_start

    clock.advance(minutes=3)
    assert breaks.start() is False
    assert breaks.session_start == first


def test_stop_without_start_adds_nothing(clock):
    breaks = BreakAccumulator(clock, total_ms=5000)

    assert breaks.stop() == 0
    assert breaks.total() == 5000


def test_reset_clears_total_and_session(clock):
    breaks = BreakAccumulator(clock, total_ms=5000)
    breaks.start()

    breaks.reset()

    assert breaks.total() == 0
    assert not breaks.is_open


def test_recovers_open_break_from_status(clock):
    started = clock() - timedelta(minutes=7)
    status = EmployeeStatus(
        employee_id="alice",
        status="Lunch",
        state_start_time=started,
        clock_in_time=started - timedelta(hours=3),
        accumulated_break=60_000,
    )

    breaks = BreakAccumulator.from_status(clock, status)

    assert breaks.is_open
    assert breaks.current() == 7 * 60 * 1000
    breaks.stop()
    assert breaks.total() == 60_000 + 7 * 60 * 1000


def test_not_on_break_status_has_no_open_session(clock):
    status = EmployeeStatus(
        employee_id="alice",
        status="Working",
        state_start_time=datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc),
        clock_in_time=datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc),
    )

    assert not BreakAccumulator.from_status(clock, status).is_open
