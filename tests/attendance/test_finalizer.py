from __future__ import annotations

from datetime import timedelta

import pytest

from src.timeclock.timeclock.attendance.model import EmployeeStatus, ShiftSummary
from src.timeclock.timeclock.core.enums import ClockOutReason, Role
from src.timeclock.timeclock.departments.service import build_schedule

HOUR = 60 * 60 * 1000
MINUTE = 60 * 1000


def test_end_to_end_shift_summary(container, service, clock):
    schedule = build_schedule(clock_in="09:15", clock_out="17:00", grace_period=15, overtime_threshold=30)
    support = container.department_service.create(current_role=Role.ADMIN, name="Support", timezone="UTC", schedule=schedule)
    container.employee_service.update_employee(current_role=Role.ADMIN, employee_id="bob", department_id=support.department_id)

    clock.at(9, 20)
    assert service.clock_in("bob").is_late is False
    clock.at(12, 0)
    service.toggle_break("bob", "Lunch")
    clock.at(12, 30)
    service.toggle_break("bob", "Lunch")
    clock.at(17, 0)
    summary = service.clock_out("bob")

    assert summary.total_clock_time == 7 * HOUR + 40 * MINUTE
    assert summary.accumulated_break == 30 * MINUTE
    assert summary.is_late is False
    assert summary.is_overtime is False
    assert summary.department_id == support.department_id
    assert summary.reason == ClockOutReason.MANUAL


def test_clock_out_writes_event_and_summary_then_deletes_status(container, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    clock.at(15, 0)

    summary = service.clock_out("alice")

    assert service.get_status("alice") is None
    last = service.get_history("alice")[0]
    assert last.event_type == "clockOut"
    assert last.summary == summary
    assert service.get_summaries("alice") == [summary]


def test_open_break_is_flushed_on_clock_out(service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    clock.at(12, 0)
    service.toggle_break("alice", "Lunch")

    clock.at(12, 45)
    summary = service.clock_out("alice")

    assert summary.accumulated_break == 45 * MINUTE
    assert summary.total_clock_time == 3 * HOUR + 45 * MINUTE


def test_auto_finalize_twice_writes_one_clock_out(container, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    clock.at(17, 0)

    first = container.finalizer.finalize("alice", ClockOutReason.AUTO)
    second = container.finalizer.finalize("alice", ClockOutReason.AUTO)

    assert first is not None
    assert first.reason == ClockOutReason.AUTO
    assert second is None
    assert [e.event_type for e in service.get_history("alice")].count("clockOut") == 1
    assert len(service.get_summaries("alice")) == 1


def test_auto_finalize_skips_when_clock_out_exists_today(container, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    clock.at(12, 0)
    service.clock_out("alice")
    clock.at(16, 0)
    service.clock_in("alice")

    clock.at(17, 0)
    assert container.finalizer.finalize("alice", ClockOutReason.AUTO) is None
    assert service.get_status("alice") is not None


def test_already_summarized_shift_is_not_finalized_again(container, service, clock):
    clock.at(9, 0)
    status = service.clock_in("alice")
    clock.at(10, 0)
    racing = ShiftSummary(
        employee_id="alice",
        work_date=clock().date(),
        clock_in_time=status.clock_in_time,
        clock_out_time=clock(),
        total_clock_time=HOUR,
        accumulated_break=0,
    )
    assert container.summary_repo.create_if_absent(racing) is True

    assert service.clock_out("alice") is None
    assert [e.event_type for e in service.get_history("alice")] == ["clockIn"]
    assert container.summary_repo.create_if_absent(racing) is False


def test_break_never_exceeds_total(container, service, clock):
    start = clock.at(9, 0)
    container.status_repo.save(
        EmployeeStatus(
            employee_id="alice",
            status="Working",
            state_start_time=start,
            clock_in_time=start,
            department_id="ops",
            accumulated_break=5 * HOUR,
        )
    )
    clock.at(10, 0)

    summary = service.clock_out("alice")

    assert summary.total_clock_time == HOUR
    assert summary.accumulated_break == HOUR
    assert summary.total_clock_time >= summary.accumulated_break >= 0


def test_lateness_counts_only_on_its_own_day(container, service, clock):
    clock.at(9, 20)
    service.clock_in("alice")
    service.clock_in("bob")

    clock.at(16, 0)
    assert service.clock_out("alice").late_minutes == 20

    clock.advance(days=1)
    summary = container.finalizer.finalize("bob", ClockOutReason.AUTO)
    assert summary.is_late is False
    assert summary.late_minutes == 0


def test_working_past_threshold_is_overtime_at_clock_out(service, clock):
    clock.at(13, 0)
    service.clock_in("alice")

    clock.at(17, 31)
    summary = service.clock_out("alice")

    assert summary.is_overtime is True
    assert summary.overtime_minutes == 31


def test_forced_reason_is_recorded(container, service, clock):
    clock.at(9, 0)
    service.clock_in("alice")
    clock.at(9, 30)

    assert container.finalizer.finalize("alice", ClockOutReason.FORCED).reason == ClockOutReason.FORCED


def test_summary_rejects_break_longer_than_shift(clock):
    with pytest.raises(ValueError):
        ShiftSummary(
            employee_id="alice",
            work_date=clock().date(),
            clock_in_time=clock(),
            clock_out_time=clock() + timedelta(hours=1),
            total_clock_time=HOUR,
            accumulated_break=HOUR + 1,
        )
