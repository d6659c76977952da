from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import date_from_iso, date_to_iso, from_iso, to_iso
from ..core.enums import ClockOutReason
from .state import EmployeeState


@dataclass(frozen=True)
class EmployeeStatus:
    """Live status document of one clocked-in employee.

    The document exists only while a shift is open; its absence is the
    Clocked Out state. Break and lateness bookkeeping lives here too, so any
    actor (employee client or sweeper) can finalize the shift correctly.
    """

    employee_id: str
    status: str
    state_start_time: datetime
    clock_in_time: datetime
    department_id: Optional[str] = None
    accumulated_break: int = 0
    break_start_time: Optional[datetime] = None
    is_late: bool = False
    late_minutes: int = 0
    late_date: Optional[date] = None
    is_overtime: bool = False
    overtime_minutes: int = 0
    should_buzz: bool = False
    last_buzz_time: Optional[datetime] = None
    last_timer_update: Optional[datetime] = None

    @property
    def state(self) -> EmployeeState:
        return EmployeeState.from_label(self.status)

    def with_changes(self, **changes) -> "EmployeeStatus":
        return replace(self, **changes)

    def to_doc(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "status": self.status,
            "stateStartTime": to_iso(self.state_start_time),
            "clockInTime": to_iso(self.clock_in_time),
            "department": self.department_id,
            "accumulatedBreak": int(self.accumulated_break),
            "breakStartTime": to_iso(self.break_start_time),
            "isLate": bool(self.is_late),
            "lateMinutes": int(self.late_minutes),
            "lateDate": date_to_iso(self.late_date),
            "isOvertime": bool(self.is_overtime),
            "overtimeMinutes": int(self.overtime_minutes),
            "shouldBuzz": bool(self.should_buzz),
            "lastBuzzTime": to_iso(self.last_buzz_time),
            "lastTimerUpdate": to_iso(self.last_timer_update),
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "EmployeeStatus":
        clock_in = from_iso(doc.get("clockInTime"))
        state_start = from_iso(doc.get("stateStartTime")) or clock_in
        return cls(
            employee_id=str(doc.get("employeeId") or doc["id"]),
            status=doc.get("status") or "",
            state_start_time=state_start,
            clock_in_time=clock_in or state_start,
            department_id=doc.get("department") or None,
            accumulated_break=int(doc.get("accumulatedBreak") or 0),
            break_start_time=from_iso(doc.get("breakStartTime")),
            is_late=bool(doc.get("isLate")),
            late_minutes=int(doc.get("lateMinutes") or 0),
            late_date=date_from_iso(doc.get("lateDate")),
            is_overtime=bool(doc.get("isOvertime")),
            overtime_minutes=int(doc.get("overtimeMinutes") or 0),
            should_buzz=bool(doc.get("shouldBuzz")),
            last_buzz_time=from_iso(doc.get("lastBuzzTime")),
            last_timer_update=from_iso(doc.get("lastTimerUpdate")),
        )


@dataclass(frozen=True)
class ShiftSummary:
    """Immutable totals of one closed shift. Durations are milliseconds."""

    employee_id: str
    work_date: date
    clock_in_time: datetime
    clock_out_time: datetime
    total_clock_time: int
    accumulated_break: int
    is_late: bool = False
    late_minutes: int = 0
    is_overtime: bool = False
    overtime_minutes: int = 0
    department_id: Optional[str] = None
    reason: ClockOutReason = ClockOutReason.MANUAL

    def __post_init__(self):
        if not self.total_clock_time >= self.accumulated_break >= 0:
            raise ValueError(
                f"Invalid shift totals: total={self.total_clock_time} break={self.accumulated_break}"
            )

    @property
    def shift_key(self) -> str:
        """Stable id of the shift: employee plus clock-in instant."""

        return f"{self.employee_id}_{self.clock_in_time.strftime('%Y%m%dT%H%M%S%f')}"

    @property
    def worked_time(self) -> int:
        return self.total_clock_time - self.accumulated_break

    def to_doc(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "date": date_to_iso(self.work_date),
            "clockInTime": to_iso(self.clock_in_time),
            "clockOutTime": to_iso(self.clock_out_time),
            "totalClockTime": int(self.total_clock_time),
            "accumulatedBreak": int(self.accumulated_break),
            "isLate": bool(self.is_late),
            "lateMinutes": int(self.late_minutes),
            "isOvertime": bool(self.is_overtime),
            "overtimeMinutes": int(self.overtime_minutes),
            "department": self.department_id,
            "reason": self.reason.value,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "ShiftSummary":
        return cls(
            employee_id=str(doc["employeeId"]),
            work_date=date_from_iso(doc.get("date")),
            clock_in_time=from_iso(doc.get("clockInTime")),
            clock_out_time=from_iso(doc.get("clockOutTime")),
            total_clock_time=int(doc.get("totalClockTime") or 0),
            accumulated_break=int(doc.get("accumulatedBreak") or 0),
            is_late=bool(doc.get("isLate")),
            late_minutes=int(doc.get("lateMinutes") or 0),
            is_overtime=bool(doc.get("isOvertime")),
            overtime_minutes=int(doc.get("overtimeMinutes") or 0),
            department_id=doc.get("department"),
            reason=ClockOutReason(doc.get("reason") or ClockOutReason.MANUAL.value),
        )


@dataclass(frozen=True)
class AttendanceEvent:
    """Append-only attendance log entry. Only clockOut events carry a summary."""

    employee_id: str
    event_type: str
    timestamp: datetime
    summary: Optional[ShiftSummary] = None
    event_id: Optional[str] = field(default=None, compare=False)

    def to_doc(self) -> dict:
        doc = {
            "employeeId": self.employee_id,
            "eventType": self.event_type,
            "timestamp": to_iso(self.timestamp),
        }
        if self.summary is not None:
            doc.update(self.summary.to_doc())
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> "AttendanceEvent":
        summary = ShiftSummary.from_doc(doc) if doc.get("clockOutTime") else None
        return cls(
            employee_id=str(doc["employeeId"]),
            event_type=doc["eventType"],
            timestamp=from_iso(doc["timestamp"]),
            summary=summary,
            event_id=doc.get("id"),
        )
