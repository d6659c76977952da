from __future__ import annotations

from concurrent.futures import Future
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from src.timeclock.timeclock.container import build_container
from src.timeclock.timeclock.departments.model import Department
from src.timeclock.timeclock.departments.service import build_schedule
from src.timeclock.timeclock.employees.model import Employee
from src.timeclock.timeclock.store.memory import InMemoryDocumentStore
from src.timeclock.timeclock.timesync.source import TimeSource


class FakeClock:
    """Settable local clock (aware UTC)."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def at(self, hour: int, minute: int, second: int = 0) -> datetime:
        self.current = self.current.replace(hour=hour, minute=minute, second=second, microsecond=0)
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class ImmediateExecutor:
    """Runs submitted work inline so session tests stay deterministic."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = True) -> None:
        pass


def make_settings(**overrides) -> SimpleNamespace:
    values = dict(
        STORE_BACKEND="memory",
        TIME_API_URL="",
        TRUSTED_TIMEZONE="UTC",
        TIME_RESYNC_MAX_AGE_SECONDS=3600,
        TIME_RESYNC_INTERVAL_SECONDS=900,
        SWEEP_INTERVAL_SECONDS=60,
        TICK_INTERVAL_SECONDS=1,
        BREAK_KINDS="",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 3, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def container(store, clock):
    """Fully wired app core on the memory store.

    Department "ops" works 09:00-17:00 UTC, grace 15, overtime threshold 30.
    Employees: alice and bob in ops, carol without a department.
    """

    c = build_container(make_settings(), store=store, time_source=TimeSource(local_clock=clock))
    schedule = build_schedule(clock_in="09:00", clock_out="17:00", grace_period=15, overtime_threshold=30)
    c.departments_repo.save(Department(department_id="ops", name="Operations", schedule=schedule))

    for employee_id, name, department_id in (("alice", "Alice", "ops"), ("bob", "Bob", "ops"), ("carol", "Carol", None)):
        c.employees_repo.create(
            Employee(
                employee_id=employee_id,
                name=name,
                password_hash=generate_password_hash("secret123"),
                department_id=department_id,
            )
        )
    return c


@pytest.fixture
def service(container):
    return container.attendance_service


@pytest.fixture
def executor() -> ImmediateExecutor:
    return ImmediateExecutor()
