from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler

from ..common.datetime_utils import elapsed_ms, format_duration
from ..common.scheduling import PeriodicTask
from ..core.constants import TICK_INTERVAL_SECONDS
from ..core.enums import Phase
from ..departments.model import Department
from ..live.channel import LiveStatusChannel, StatusChange
from ..store.document_store import Subscription
from .breaks import BreakAccumulator
from .model import EmployeeStatus
from .service import AttendanceService
from .state import EmployeeState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickSnapshot:
    """What the employee's screen shows at one tick."""

    employee_id: str
    status: str
    shift_timer: str
    state_timer: str
    break_timer: str
    accumulated_break: str
    is_late: bool = False
    late_minutes: int = 0
    is_overtime: bool = False
    overtime_minutes: int = 0
    guard_pending: bool = False

    @property
    def clocked_in(self) -> bool:
        return self.status != Phase.CLOCKED_OUT.value


class EmployeeSession:
    """One connected employee client.

    `open()` recovers the shift from the live status document and starts a
    local tick. `tick()` only reads cached state; when the schedule guard or
    overtime needs a write it hands `evaluate_guards` to the executor and
    returns immediately. Changes made by other actors (sweeper, admin) arrive
    through the LiveStatusChannel.
    """

    def __init__(
        self,
        employee_id: str,
        service: AttendanceService,
        channel: LiveStatusChannel,
        *,
        executor: Optional[Executor] = None,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        scheduler: Optional[BaseScheduler] = None,
        on_buzz: Optional[Callable[[EmployeeStatus], None]] = None,
        on_tick: Optional[Callable[[TickSnapshot], None]] = None,
    ):
        self.employee_id = employee_id
        self._service = service
        self._channel = channel
        self._time = service.time_source
        self._resolver = service.resolver
        self._executor = executor
        self._owns_executor = executor is None
        self._on_buzz = on_buzz
        self._on_tick = on_tick
        self._task = PeriodicTask(
            f"session-tick-{employee_id}", self._scheduled_tick, interval_seconds=tick_interval, scheduler=scheduler
        )

        self._lock = threading.RLock()
        self._status: Optional[EmployeeStatus] = None
        self._department: Optional[Department] = None
        self._subscription: Optional[Subscription] = None
        self._pending: Optional[Future] = None
        self._handled_buzz: Optional[datetime] = None

    @property
    def status(self) -> Optional[EmployeeStatus]:
        with self._lock:
            return self._status

    @property
    def is_open(self) -> bool:
        return self._subscription is not None

    def open(self) -> Optional[EmployeeStatus]:
        if self._subscription is not None:
            return self.status
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"session-{self.employee_id}")

        status = self._service.get_status(self.employee_id)
        with self._lock:
            self._status = status
            self._department = self._service.department_for(self.employee_id, status)
        self._subscription = self._channel.subscribe(self.employee_id, self._on_status_change)
        self._task.start()
        if status is not None:
            logger.info("Session %s resumed shift in %s", self.employee_id, status.status)
            self._maybe_buzz(status)
        return status

    def close(self) -> None:
        self._task.stop()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def _scheduled_tick(self) -> None:
        snapshot = self.tick()
        if self._on_tick is not None:
            self._on_tick(snapshot)

    def tick(self, now: Optional[datetime] = None) -> TickSnapshot:
        now = now or self._time.now()
        with self._lock:
            status = self._status
            department = self._department

        if status is None:
            zero = format_duration(0)
            return TickSnapshot(
                employee_id=self.employee_id,
                status=EmployeeState.clocked_out().label,
                shift_timer=zero,
                state_timer=zero,
                break_timer=zero,
                accumulated_break=zero,
            )

        if self._needs_guard(status, now, department):
            self._submit_guard()

        breaks = BreakAccumulator.from_status(self._time.now, status)
        current_break = breaks.current(now)
        # lateness is keyed to the calendar day of the clock-in
        late = status.is_late and status.late_date == self._resolver.local_day(now, department)
        return TickSnapshot(
            employee_id=self.employee_id,
            status=status.status,
            shift_timer=format_duration(elapsed_ms(status.clock_in_time, now)),
            state_timer=format_duration(elapsed_ms(status.state_start_time, now)),
            break_timer=format_duration(current_break),
            accumulated_break=format_duration(breaks.total() + current_break),
            is_late=late,
            late_minutes=status.late_minutes if late else 0,
            is_overtime=status.is_overtime,
            overtime_minutes=status.overtime_minutes,
            guard_pending=self._pending is not None and not self._pending.done(),
        )

    def _needs_guard(self, status: EmployeeStatus, now: datetime, department: Optional[Department]) -> bool:
        phase = status.state.phase
        if phase not in (Phase.WORKING, Phase.STANDBY):
            return False
        within = self._resolver.is_within_schedule(now, department)
        if phase == Phase.STANDBY:
            return within
        if not within:
            return True
        window = self._resolver.window_at(now, department)
        if window is None:
            return False
        minutes = window.overtime_minutes(now)
        return minutes > window.overtime_threshold and minutes > status.overtime_minutes

    def _submit_guard(self) -> None:
        if self._executor is None:
            return
        if self._pending is not None and not self._pending.done():
            return
        self._pending = self._executor.submit(self._run_guard)

    def _run_guard(self) -> None:
        try:
            status = self._service.evaluate_guards(self.employee_id)
        except Exception:
            logger.exception("Schedule guard failed for %s", self.employee_id)
            return
        if status is not None:
            self._remember(status)

    def _on_status_change(self, change: StatusChange) -> None:
        self._remember(change.status)
        if change.clocked_out:
            logger.info("Session %s: shift closed by %s", self.employee_id, change.kind.value)
            return
        self._maybe_buzz(change.status)

    def _remember(self, status: Optional[EmployeeStatus]) -> None:
        with self._lock:
            if status is not None and (self._status is None or self._status.department_id != status.department_id):
                self._department = self._service.department_for(self.employee_id, status)
            self._status = status

    def _maybe_buzz(self, status: EmployeeStatus) -> None:
        if not status.should_buzz:
            return
        with self._lock:
            # at-least-once delivery: ring once per buzz
            if status.last_buzz_time is not None and status.last_buzz_time == self._handled_buzz:
                return
            self._handled_buzz = status.last_buzz_time

        if self._on_buzz is not None:
            try:
                self._on_buzz(status)
            except Exception:
                logger.exception("Buzz handler failed for %s", self.employee_id)
        if self._executor is not None:
            self._executor.submit(self._service.acknowledge_buzz, self.employee_id)
