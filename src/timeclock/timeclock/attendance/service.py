from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_duration, to_iso
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import BreakKind, ClockOutReason, Phase, Role
from ..core.exceptions import AuthorizationError, DocumentNotFoundError, ValidationError
from ..departments.model import Department
from ..employees.repository import EmployeeRepository
from ..schedules.lookup import DepartmentLookup
from ..schedules.resolver import ScheduleResolver
from ..timesync.source import TimeSource
from .breaks import BreakAccumulator
from .factory import PunctualityStrategyFactory
from .finalizer import ShiftFinalizer
from .model import AttendanceEvent, EmployeeStatus, ShiftSummary
from .repository import AttendanceRepository, StatusRepository, SummaryRepository
from .state import EmployeeState
from .state_machine import Action, AttendanceStateMachine, Transition
from .strategies.base import OvertimeDecision

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases of one employee's attendance, shared by the employee client,
    the admin dashboard and the sweeper.

    Every write re-reads the status document first and patches only the
    fields the transition owns. Guarded no-ops return None.
    """

    def __init__(
        self,
        statuses: StatusRepository,
        attendance: AttendanceRepository,
        summaries: SummaryRepository,
        employees: EmployeeRepository,
        *,
        lookup: DepartmentLookup,
        time_source: TimeSource,
        resolver: ScheduleResolver,
        finalizer: ShiftFinalizer,
        state_machine: Optional[AttendanceStateMachine] = None,
        strategy_factory: Optional[PunctualityStrategyFactory] = None,
    ):
        self._statuses = statuses
        self._attendance = attendance
        self._summaries = summaries
        self._employees = employees
        self._lookup = lookup
        self._time = time_source
        self._resolver = resolver
        self._finalizer = finalizer
        self._machine = state_machine or AttendanceStateMachine()
        self._factory = strategy_factory or PunctualityStrategyFactory()

    @property
    def time_source(self) -> TimeSource:
        return self._time

    @property
    def resolver(self) -> ScheduleResolver:
        return self._resolver

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Administrator access required")

    def department_for(self, employee_id: str, status: Optional[EmployeeStatus] = None) -> Optional[Department]:
        fallback = status.department_id if status else None
        return self._lookup.for_employee(employee_id, fallback_department_id=fallback)

    # ---- transitions ----

    def clock_in(self, employee_id: str) -> Optional[EmployeeStatus]:
        self._time.resync_if_stale()

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise ValidationError("Employee does not exist")
        if employee.disabled:
            raise ValidationError("Employee is disabled")

        current = self._statuses.get(employee_id)
        state = current.state if current else EmployeeState.clocked_out()

        now = self._time.now()
        department = self._lookup.by_id(employee.department_id)
        within = self._resolver.is_within_schedule(now, department)
        transition = self._machine.clock_in(state, within_schedule=within)
        if transition is None:
            return None

        window = self._resolver.window_at(now, department)
        strategy = self._factory.for_clock_in(now=now, window=window)
        lateness = strategy.decide_clock_in(now=now, window=window)

        status = EmployeeStatus(
            employee_id=employee_id,
            status=transition.target.label,
            state_start_time=now,
            clock_in_time=now,
            department_id=department.department_id if department else None,
            is_late=lateness.is_late,
            late_minutes=lateness.late_minutes,
            late_date=self._resolver.local_day(now, department) if lateness.is_late else None,
        )
        self._statuses.save(status)
        self._record(employee_id, transition, now)
        return status

    def toggle_break(self, employee_id: str, kind: "str | BreakKind") -> Optional[EmployeeStatus]:
        try:
            kind = BreakKind.parse(kind)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        return self._transition(employee_id, Action.TOGGLE_BREAK, kind=kind)

    def toggle_standby(self, employee_id: str) -> Optional[EmployeeStatus]:
        return self._transition(employee_id, Action.TOGGLE_STANDBY)

    def resume_working(self, employee_id: str) -> Optional[EmployeeStatus]:
        return self._transition(employee_id, Action.RESUME_WORKING)

    def report_idle(self, employee_id: str) -> Optional[EmployeeStatus]:
        """Called by an external idle detector. Working -> Working Idle."""

        return self._transition(employee_id, Action.REPORT_IDLE)

    def start_scheduled_work(self, employee_id: str) -> Optional[EmployeeStatus]:
        """Schedule start: flip an already clocked-in Standby or Working Idle
        employee back to Working. Never opens a shift."""

        status = self._statuses.get(employee_id)
        if status is None:
            return None
        phase = status.state.phase
        if phase == Phase.STANDBY:
            return self._transition(employee_id, Action.TOGGLE_STANDBY)
        if phase == Phase.WORKING_IDLE:
            return self._transition(employee_id, Action.RESUME_WORKING)
        return None

    def clock_out(self, employee_id: str) -> Optional[ShiftSummary]:
        self._time.resync_if_stale()
        return self._finalizer.finalize(employee_id, ClockOutReason.MANUAL)

    def force_clock_out(self, employee_id: str, *, current_role: Role) -> bool:
        """Admin emergency path: close the shift without producing a summary."""

        self._require_admin(current_role)
        status = self._statuses.get(employee_id)
        if status is None:
            return False
        transition = self._machine.force_clock_out(status.state)
        if transition is None:
            return False

        now = self._time.now()
        self._record(employee_id, transition, now)
        self._statuses.delete(employee_id)
        return True

    def buzz(self, employee_id: str, *, current_role: Role) -> bool:
        self._require_admin(current_role)
        try:
            self._statuses.update(employee_id, {"shouldBuzz": True, "lastBuzzTime": to_iso(self._time.now())})
        except DocumentNotFoundError:
            logger.debug("Not buzzing %s: not clocked in", employee_id)
            return False
        logger.info("Buzzed %s", employee_id)
        return True

    def acknowledge_buzz(self, employee_id: str) -> bool:
        status = self._statuses.get(employee_id)
        if status is None or not status.should_buzz:
            return False
        try:
            self._statuses.update(employee_id, {"shouldBuzz": False})
        except DocumentNotFoundError:
            return False
        return True

    # ---- continuous guards ----

    def evaluate_guards(self, employee_id: str) -> Optional[EmployeeStatus]:
        """One tick of the continuous guard against a fresh read of the status.

        Overtime is evaluated first (only while Working), then the
        Working/Standby schedule correction.
        """

        status = self._statuses.get(employee_id)
        if status is None:
            return None
        now = self._time.now()
        department = self.department_for(employee_id, status)

        status = self.refresh_overtime(status, now=now, department=department)
        if status is None:
            return None
        corrected = self.apply_schedule_correction(status, now=now, department=department)
        return corrected or status

    def refresh_overtime(
        self,
        status: EmployeeStatus,
        *,
        now: Optional[datetime] = None,
        department: Optional[Department] = None,
    ) -> Optional[EmployeeStatus]:
        if status.state.phase != Phase.WORKING:
            return status
        now = now or self._time.now()
        window = self._resolver.window_at(now, department)
        current = OvertimeDecision(status.is_overtime, status.overtime_minutes)
        strategy = self._factory.for_overtime(now=now, window=window)
        decision = strategy.decide_overtime(now=now, window=window, current=current)
        if decision == current:
            return status

        try:
            updated = self._statuses.update(
                status.employee_id,
                {"isOvertime": decision.is_overtime, "overtimeMinutes": decision.overtime_minutes},
            )
        except DocumentNotFoundError:
            return None
        if not current.is_overtime:
            logger.info("%s is in overtime (%d min)", status.employee_id, decision.overtime_minutes)
        return updated

    def apply_schedule_correction(
        self,
        status: EmployeeStatus,
        *,
        now: Optional[datetime] = None,
        department: Optional[Department] = None,
    ) -> Optional[EmployeeStatus]:
        now = now or self._time.now()
        within = self._resolver.is_within_schedule(now, department)
        transition = self._machine.schedule_correction(status.state, within_schedule=within)
        if transition is None:
            return None
        return self._apply(status, transition, now)

    def _transition(self, employee_id: str, action: Action, *, kind: Optional[BreakKind] = None) -> Optional[EmployeeStatus]:
        status = self._statuses.get(employee_id)
        if status is None:
            logger.debug("Ignoring %s for %s: not clocked in", action.value, employee_id)
            return None

        now = self._time.now()
        department = self.department_for(employee_id, status)
        within = self._resolver.is_within_schedule(now, department)
        transition = self._machine.apply(status.state, action, within_schedule=within, kind=kind)
        if transition is None:
            return None
        return self._apply(status, transition, now)

    def _apply(self, status: EmployeeStatus, transition: Transition, now: datetime) -> Optional[EmployeeStatus]:
        fields = {
            "status": transition.target.label,
            "stateStartTime": to_iso(now),
        }
        if transition.starts_break or transition.ends_break:
            breaks = BreakAccumulator.from_status(self._time.now, status)
            if transition.starts_break:
                breaks.start(now)
            else:
                breaks.stop(now)
            fields["accumulatedBreak"] = breaks.total()
            fields["breakStartTime"] = to_iso(breaks.session_start)

        try:
            updated = self._statuses.update(status.employee_id, fields)
        except DocumentNotFoundError:
            # Clocked out by another actor between our read and write.
            logger.info("Dropping %s for %s: shift already closed", transition.action.value, status.employee_id)
            return None
        self._record(status.employee_id, transition, now)
        return updated

    def _record(self, employee_id: str, transition: Transition, now: datetime) -> None:
        logger.info(
            "%s: %s -> %s (%s)",
            employee_id,
            transition.source.label,
            transition.target.label,
            transition.event_type or "no event",
        )
        if transition.event_type is None:
            return
        self._attendance.add(AttendanceEvent(employee_id=employee_id, event_type=transition.event_type, timestamp=now))

    # ---- queries ----

    def get_status(self, employee_id: str) -> Optional[EmployeeStatus]:
        return self._statuses.get(employee_id)

    def get_history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceEvent]:
        return self._attendance.list_for_employee(employee_id, limit=limit)

    def get_summaries(self, employee_id: str) -> Sequence[ShiftSummary]:
        return self._summaries.list_for_employee(employee_id)

    def get_history_ui(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT):
        department = self.department_for(employee_id)
        rows = self.get_history(employee_id, limit=limit)
        return [self._to_ui(r, department) for r in rows]

    def get_summaries_ui(self, employee_id: str):
        department = self.department_for(employee_id)
        return [self._summary_to_ui(s, department) for s in self.get_summaries(employee_id)]

    def _to_ui(self, r: AttendanceEvent, department: Optional[Department]) -> dict:
        local = self._resolver.local_time(r.timestamp, department)
        row = {
            "date": local.strftime("%Y-%m-%d"),
            "time": local.strftime("%H:%M:%S"),
            "event": r.event_type,
        }
        if r.summary is not None:
            row.update(self._summary_to_ui(r.summary, department))
        return row

    def _summary_to_ui(self, s: ShiftSummary, department: Optional[Department]) -> dict:
        return {
            "date": s.work_date.strftime("%Y-%m-%d"),
            "clock_in": self._resolver.local_time(s.clock_in_time, department).strftime("%H:%M:%S"),
            "clock_out": self._resolver.local_time(s.clock_out_time, department).strftime("%H:%M:%S"),
            "total": format_duration(s.total_clock_time),
            "break": format_duration(s.accumulated_break),
            "worked": format_duration(s.worked_time),
            "late": f"{s.late_minutes} min" if s.is_late else "-",
            "overtime": f"{s.overtime_minutes} min" if s.is_overtime else "-",
            "reason": s.reason.value,
        }
