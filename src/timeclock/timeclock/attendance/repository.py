from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceEvent, EmployeeStatus, ShiftSummary


class StatusRepository(Protocol):
    """Live status documents, one per clocked-in employee."""

    def get(self, employee_id: str) -> Optional[EmployeeStatus]:
        raise NotImplementedError

    def list_active(self) -> Sequence[EmployeeStatus]:
        raise NotImplementedError

    def save(self, status: EmployeeStatus) -> None:
        """Create or replace the whole document (clock-in)."""

        raise NotImplementedError

    def update(self, employee_id: str, fields: dict) -> EmployeeStatus:
        """Patch only the given document fields. Raises DocumentNotFoundError."""

        raise NotImplementedError

    def delete(self, employee_id: str) -> bool:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    """Append-only attendance event log."""

    def add(self, event: AttendanceEvent) -> str:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str, *, limit: Optional[int] = None) -> Sequence[AttendanceEvent]:
        """Newest first."""

        raise NotImplementedError

    def find(
        self,
        *,
        employee_id: str,
        event_type: str,
        start: datetime,
        end: datetime,
    ) -> Sequence[AttendanceEvent]:
        """Events of one type with start <= timestamp < end."""

        raise NotImplementedError


class SummaryRepository(Protocol):
    def create_if_absent(self, summary: ShiftSummary) -> bool:
        """Insert keyed by the shift; False when the shift was already summarized."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: str) -> Sequence[ShiftSummary]:
        """Newest first."""

        raise NotImplementedError
