from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import elapsed_ms
from ..core.enums import ClockOutReason, EventType, Phase
from ..departments.model import Department
from ..schedules.lookup import DepartmentLookup
from ..schedules.resolver import ScheduleResolver
from ..timesync.source import TimeSource
from .breaks import BreakAccumulator
from .factory import PunctualityStrategyFactory
from .model import AttendanceEvent, EmployeeStatus, ShiftSummary
from .repository import AttendanceRepository, StatusRepository, SummaryRepository
from .strategies.base import OvertimeDecision

logger = logging.getLogger(__name__)


class ShiftFinalizer:
    """Closes a shift and writes its summary exactly once.

    1. flush any open break into the accumulated total
    2. totalClockTime = now - clockInTime
    3. collect break total, lateness and overtime from the status document
    4. insert the summary keyed by the shift (insert-if-absent), then the
       clockOut event carrying the same fields
    5. delete the live status document (the employee is now Clocked Out)

    For automatic clock-outs an existing clockOut event on the same calendar
    day also skips the shift.
    """

    def __init__(
        self,
        statuses: StatusRepository,
        attendance: AttendanceRepository,
        summaries: SummaryRepository,
        *,
        time_source: TimeSource,
        resolver: ScheduleResolver,
        lookup: DepartmentLookup,
        strategy_factory: Optional[PunctualityStrategyFactory] = None,
    ):
        self._statuses = statuses
        self._attendance = attendance
        self._summaries = summaries
        self._time = time_source
        self._resolver = resolver
        self._lookup = lookup
        self._factory = strategy_factory or PunctualityStrategyFactory()

    def finalize(self, employee_id: str, reason: ClockOutReason = ClockOutReason.MANUAL) -> Optional[ShiftSummary]:
        status = self._statuses.get(employee_id)
        if status is None:
            logger.debug("No open shift for %s; nothing to finalize", employee_id)
            return None

        now = self._time.now()
        department = self._lookup.for_employee(employee_id, fallback_department_id=status.department_id)

        if reason == ClockOutReason.AUTO and self.has_clock_out_on_day(employee_id, now, department):
            logger.info("Skipping auto clock-out for %s: a clock-out already exists today", employee_id)
            return None

        summary = self.build_summary(status, now=now, department=department, reason=reason)
        if not self._summaries.create_if_absent(summary):
            logger.info("Shift %s was already finalized; skipping", summary.shift_key)
            return None

        self._attendance.add(
            AttendanceEvent(employee_id=employee_id, event_type=EventType.CLOCK_OUT.value, timestamp=now, summary=summary)
        )
        self._statuses.delete(employee_id)
        logger.info(
            "Clocked out %s (%s): total=%dms break=%dms late=%s overtime=%s",
            employee_id,
            reason.value,
            summary.total_clock_time,
            summary.accumulated_break,
            summary.is_late,
            summary.is_overtime,
        )
        return summary

    def has_clock_out_on_day(self, employee_id: str, instant: datetime, department: Optional[Department]) -> bool:
        start, end = self._resolver.day_bounds(instant, department)
        existing = self._attendance.find(
            employee_id=employee_id,
            event_type=EventType.CLOCK_OUT.value,
            start=start,
            end=end,
        )
        return bool(existing)

    def build_summary(
        self,
        status: EmployeeStatus,
        *,
        now: datetime,
        department: Optional[Department],
        reason: ClockOutReason,
    ) -> ShiftSummary:
        breaks = BreakAccumulator.from_status(self._time.now, status)
        breaks.stop(now)

        total = max(elapsed_ms(status.clock_in_time, now), 0)
        accumulated = min(breaks.total(), total)

        today = self._resolver.local_day(now, department)
        is_late = status.is_late and status.late_date == today

        overtime = OvertimeDecision(status.is_overtime, status.overtime_minutes)
        if status.state.phase == Phase.WORKING:
            window = self._resolver.window_at(now, department)
            strategy = self._factory.for_overtime(now=now, window=window)
            overtime = strategy.decide_overtime(now=now, window=window, current=overtime)

        return ShiftSummary(
            employee_id=status.employee_id,
            work_date=self._resolver.local_day(status.clock_in_time, department),
            clock_in_time=status.clock_in_time,
            clock_out_time=now,
            total_clock_time=total,
            accumulated_break=accumulated,
            is_late=is_late,
            late_minutes=status.late_minutes if is_late else 0,
            is_overtime=overtime.is_overtime,
            overtime_minutes=overtime.overtime_minutes,
            department_id=department.department_id if department else status.department_id,
            reason=reason,
        )
