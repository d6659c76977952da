from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..core.enums import BreakKind, EventType, Phase, break_event
from .state import EmployeeState

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CLOCK_IN = "clockIn"
    TOGGLE_BREAK = "toggleBreak"
    TOGGLE_STANDBY = "toggleStandby"
    RESUME_WORKING = "resumeWorking"
    REPORT_IDLE = "reportIdle"
    CLOCK_OUT = "clockOut"
    FORCE_CLOCK_OUT = "forceClockOut"


@dataclass(frozen=True)
class Transition:
    action: Action
    source: EmployeeState
    target: EmployeeState
    event_type: Optional[str]

    @property
    def starts_break(self) -> bool:
        return self.target.is_on_break and not self.source.is_on_break

    @property
    def ends_break(self) -> bool:
        return self.source.is_on_break and not self.target.is_on_break


class AttendanceStateMachine:
    """Transition table for one employee's attendance state.

    Every method returns the Transition to apply, or None when the guard
    rejects it. A rejected transition is a no-op, not an error: it usually
    means two UI triggers raced each other.
    """

    def __init__(self, break_kinds: Optional[Iterable[BreakKind]] = None):
        self._break_kinds = frozenset(break_kinds) if break_kinds else frozenset(BreakKind)

    @property
    def break_kinds(self) -> frozenset:
        return self._break_kinds

    @staticmethod
    def _resolve(within_schedule: bool) -> EmployeeState:
        return EmployeeState.working() if within_schedule else EmployeeState.standby()

    @staticmethod
    def _rejected(action: Action, current: EmployeeState) -> None:
        logger.debug("Ignoring %s from %s", action.value, current.label)
        return None

    def clock_in(self, current: EmployeeState, *, within_schedule: bool) -> Optional[Transition]:
        if current.is_clocked_in:
            return self._rejected(Action.CLOCK_IN, current)
        return Transition(Action.CLOCK_IN, current, self._resolve(within_schedule), EventType.CLOCK_IN.value)

    def toggle_break(self, current: EmployeeState, kind: BreakKind, *, within_schedule: bool) -> Optional[Transition]:
        kind = BreakKind.parse(kind)
        if kind not in self._break_kinds:
            return self._rejected(Action.TOGGLE_BREAK, current)
        if current.phase == Phase.WORKING:
            return Transition(Action.TOGGLE_BREAK, current, EmployeeState.on_break(kind), break_event(kind, start=True))
        if current.is_on_break and current.break_kind == kind:
            return Transition(Action.TOGGLE_BREAK, current, self._resolve(within_schedule), break_event(kind, start=False))
        return self._rejected(Action.TOGGLE_BREAK, current)

    def toggle_standby(self, current: EmployeeState, *, within_schedule: bool) -> Optional[Transition]:
        if current.phase == Phase.WORKING:
            return Transition(Action.TOGGLE_STANDBY, current, EmployeeState.standby(), EventType.START_STANDBY.value)
        if current.phase == Phase.STANDBY and within_schedule:
            return Transition(Action.TOGGLE_STANDBY, current, EmployeeState.working(), EventType.END_STANDBY.value)
        # Standby outside the window resolves back to Standby: nothing to do.
        return self._rejected(Action.TOGGLE_STANDBY, current)

    def resume_working(self, current: EmployeeState, *, within_schedule: bool) -> Optional[Transition]:
        if current.phase != Phase.WORKING_IDLE:
            return self._rejected(Action.RESUME_WORKING, current)
        return Transition(Action.RESUME_WORKING, current, self._resolve(within_schedule), EventType.RESUME_WORKING.value)

    def report_idle(self, current: EmployeeState) -> Optional[Transition]:
        """Entry into WorkingIdle from an external idle detector. Writes no event."""

        if current.phase != Phase.WORKING:
            return self._rejected(Action.REPORT_IDLE, current)
        return Transition(Action.REPORT_IDLE, current, EmployeeState.working_idle(), None)

    def clock_out(self, current: EmployeeState) -> Optional[Transition]:
        if not current.is_clocked_in:
            return self._rejected(Action.CLOCK_OUT, current)
        return Transition(Action.CLOCK_OUT, current, EmployeeState.clocked_out(), EventType.CLOCK_OUT.value)

    def force_clock_out(self, current: EmployeeState) -> Optional[Transition]:
        if not current.is_clocked_in:
            return self._rejected(Action.FORCE_CLOCK_OUT, current)
        return Transition(Action.FORCE_CLOCK_OUT, current, EmployeeState.clocked_out(), EventType.FORCE_CLOCK_OUT.value)

    def schedule_correction(self, current: EmployeeState, *, within_schedule: bool) -> Optional[Transition]:
        """Continuous guard: Working outside the window -> Standby, Standby inside -> Working."""

        if current.phase == Phase.WORKING and not within_schedule:
            return self.toggle_standby(current, within_schedule=within_schedule)
        if current.phase == Phase.STANDBY and within_schedule:
            return self.toggle_standby(current, within_schedule=within_schedule)
        return None

    def apply(
        self,
        current: EmployeeState,
        action: Action,
        *,
        within_schedule: bool = True,
        kind: Optional[BreakKind] = None,
    ) -> Optional[Transition]:
        if action == Action.CLOCK_IN:
            return self.clock_in(current, within_schedule=within_schedule)
        if action == Action.TOGGLE_BREAK:
            if kind is None:
                raise ValueError("toggle_break requires a break kind")
            return self.toggle_break(current, kind, within_schedule=within_schedule)
        if action == Action.TOGGLE_STANDBY:
            return self.toggle_standby(current, within_schedule=within_schedule)
        if action == Action.RESUME_WORKING:
            return self.resume_working(current, within_schedule=within_schedule)
        if action == Action.REPORT_IDLE:
            return self.report_idle(current)
        if action == Action.CLOCK_OUT:
            return self.clock_out(current)
        if action == Action.FORCE_CLOCK_OUT:
            return self.force_clock_out(current)
        raise ValueError(f"Unsupported action: {action!r}")
