from __future__ import annotations

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from src.timeclock.timeclock.core.enums import Role


@pytest.fixture
def paused_scheduler():
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.start(paused=True)
    yield scheduler
    scheduler.shutdown(wait=False)


@pytest.fixture
def open_session(container, paused_scheduler, executor):
    sessions = []

    def _open(employee_id, **kwargs):
        session = container.open_session(employee_id, executor=executor, scheduler=paused_scheduler, **kwargs)
        sessions.append(session)
        return session

    yield _open
    for session in sessions:
        session.close()


def test_clocked_out_session_ticks_zero(open_session, clock):
    session = open_session("alice")

    snapshot = session.tick()

    assert not snapshot.clocked_in
    assert snapshot.status == "Clocked Out"
    assert snapshot.shift_timer == "00:00:00"


def test_session_follows_own_clock_in(open_session, service, clock):
    session = open_session("alice")
    clock.at(9, 0)
    service.clock_in("alice")

    clock.at(10, 30, 15)
    snapshot = session.tick()

    assert session.status.status == "Working"
    assert snapshot.shift_timer == "01:30:15"
    assert snapshot.state_timer == "01:30:15"


def test_session_recovers_break_in_progress(open_session, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    clock.at(10, 0)
    service.toggle_break("alice", "BIO 1")
    clock.at(10, 10)
    service.toggle_break("alice", "BIO 1")
    clock.at(12, 0)
    service.toggle_break("alice", "Lunch")

    clock.at(12, 20)
    session = open_session("alice")
    snapshot = session.tick()

    assert snapshot.status == "Lunch"
    assert snapshot.break_timer == "00:20:00"
    assert snapshot.accumulated_break == "00:30:00"


def test_tick_hands_schedule_guard_to_executor(open_session, service, clock, executor):
    clock.at(16, 0)
    service.clock_in("alice")
    session = open_session("alice")

    clock.at(17, 5)
    session.tick()

    assert executor.submitted == 1
    assert session.status.status == "Standby"

    clock.at(17, 6)
    session.tick()
    assert executor.submitted == 1


def test_tick_inside_window_needs_no_write(open_session, service, clock, executor):
    clock.at(9, 0)
    service.clock_in("alice")
    session = open_session("alice")

    clock.at(11, 0)
    session.tick()

    assert executor.submitted == 0


def test_buzz_rings_once_and_clears(open_session, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    rings = []
    session = open_session("alice", on_buzz=rings.append)

    service.buzz("alice", current_role=Role.ADMIN)

    assert len(rings) == 1
    assert service.get_status("alice").should_buzz is False
    assert session.status.should_buzz is False


def test_forced_clock_out_reaches_session(open_session, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    session = open_session("alice")

    service.force_clock_out("alice", current_role=Role.ADMIN)

    assert session.status is None
    assert session.tick().status == "Clocked Out"


def test_late_flag_is_scoped_to_its_day(open_session, service, clock):
    clock.at(9, 20)
    service.clock_in("alice")
    session = open_session("alice")

    assert session.tick().is_late is True

    clock.advance(days=1)
    assert session.tick().is_late is False


def test_closed_session_stops_listening(open_session, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    session = open_session("alice")

    session.close()
    service.toggle_standby("alice")

    assert not session.is_open
    assert session.status.status == "Working"
