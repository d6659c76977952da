from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import elapsed_ms, format_duration
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..employees.repository import EmployeeRepository
from ..live.channel import LiveStatusChannel, active, not_working
from ..timesync.source import TimeSource
from .model import EmployeeStatus


@dataclass(frozen=True)
class ActiveEmployeeRow:
    employee_id: str
    name: str
    status: str
    state_time: str
    active_time: str
    is_late: bool
    is_overtime: bool
    should_buzz: bool

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "status": self.status,
            "state_time": self.state_time,
            "active_time": self.active_time,
            "is_late": self.is_late,
            "is_overtime": self.is_overtime,
            "should_buzz": self.should_buzz,
        }


class AdminMonitorService:
    """Use case: the admin dashboard's live view of clocked-in employees."""

    def __init__(self, channel: LiveStatusChannel, employees: EmployeeRepository, *, time_source: TimeSource):
        self._channel = channel
        self._employees = employees
        self._time = time_source

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Administrator access required")

    def active_employees(self, *, current_role: Role) -> list[ActiveEmployeeRow]:
        self._require_admin(current_role)
        return self._rows(self._channel.snapshot(active))

    def break_alerts(self, *, current_role: Role) -> list[ActiveEmployeeRow]:
        """Clocked-in employees who are not Working right now."""

        self._require_admin(current_role)
        return self._rows(self._channel.snapshot(not_working))

    def employee_activity(self, employee_id: str, *, current_role: Role) -> Optional[ActiveEmployeeRow]:
        self._require_admin(current_role)
        rows = self._rows(self._channel.snapshot(lambda s: s.employee_id == employee_id))
        return rows[0] if rows else None

    def _rows(self, statuses) -> list[ActiveEmployeeRow]:
        now = self._time.now()
        names = {e.employee_id: e.name for e in self._employees.list_all()}
        return [self._to_row(s, names.get(s.employee_id, s.employee_id), now) for s in statuses]

    @staticmethod
    def _to_row(s: EmployeeStatus, name: str, now) -> ActiveEmployeeRow:
        return ActiveEmployeeRow(
            employee_id=s.employee_id,
            name=name,
            status=s.status,
            state_time=format_duration(elapsed_ms(s.state_start_time, now)),
            active_time=format_duration(elapsed_ms(s.clock_in_time, now)),
            is_late=s.is_late,
            is_overtime=s.is_overtime,
            should_buzz=s.should_buzz,
        )
