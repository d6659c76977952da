from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_iso
from ..core.constants import ATTENDANCE, ATTENDANCE_SUMMARY, STATUS
from ..store.document_store import DocumentStore
from .model import AttendanceEvent, EmployeeStatus, ShiftSummary
from .repository import AttendanceRepository, StatusRepository, SummaryRepository


class DocumentStatusRepository(StatusRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, employee_id: str) -> Optional[EmployeeStatus]:
        doc = self._store.get(STATUS, employee_id)
        if not doc or not doc.get("status"):
            return None
        return EmployeeStatus.from_doc(doc)

    def list_active(self) -> Sequence[EmployeeStatus]:
        docs = self._store.query(STATUS, lambda d: bool(d.get("employeeId") and d.get("status")))
        return sorted((EmployeeStatus.from_doc(d) for d in docs), key=lambda s: s.employee_id)

    def save(self, status: EmployeeStatus) -> None:
        self._store.set(STATUS, status.employee_id, status.to_doc())

    def update(self, employee_id: str, fields: dict) -> EmployeeStatus:
        return EmployeeStatus.from_doc(self._store.update(STATUS, employee_id, fields))

    def delete(self, employee_id: str) -> bool:
        return self._store.delete(STATUS, employee_id)


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def add(self, event: AttendanceEvent) -> str:
        return self._store.create(ATTENDANCE, event.to_doc())

    def list_for_employee(self, employee_id: str, *, limit: Optional[int] = None) -> Sequence[AttendanceEvent]:
        docs = self._store.query(ATTENDANCE, lambda d: d.get("employeeId") == employee_id)
        # query() yields insertion order, which breaks ties between same-instant events
        ordered = sorted(
            enumerate(AttendanceEvent.from_doc(d) for d in docs), key=lambda p: (p[1].timestamp, p[0]), reverse=True
        )
        events = [e for _, e in ordered]
        return events[:limit] if limit else events

    def find(self, *, employee_id: str, event_type: str, start: datetime, end: datetime) -> Sequence[AttendanceEvent]:
        def matches(d: dict) -> bool:
            if d.get("employeeId") != employee_id or d.get("eventType") != event_type:
                return False
            ts = from_iso(d.get("timestamp"))
            return ts is not None and start <= ts < end

        return [AttendanceEvent.from_doc(d) for d in self._store.query(ATTENDANCE, matches)]


class DocumentSummaryRepository(SummaryRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def create_if_absent(self, summary: ShiftSummary) -> bool:
        return self._store.create_if_absent(ATTENDANCE_SUMMARY, summary.shift_key, summary.to_doc())

    def list_for_employee(self, employee_id: str) -> Sequence[ShiftSummary]:
        docs = self._store.query(ATTENDANCE_SUMMARY, lambda d: d.get("employeeId") == employee_id)
        return sorted((ShiftSummary.from_doc(d) for d in docs), key=lambda s: s.clock_out_time, reverse=True)
