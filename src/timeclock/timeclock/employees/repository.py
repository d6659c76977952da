from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.constants import EMPLOYEES
from ..store.document_store import DocumentStore
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_by_department(self, department_id: str) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, employee: Employee) -> bool:
        """Insert a new employee; False when the employeeId is taken."""

        raise NotImplementedError

    def update(self, employee_id: str, fields: dict) -> Employee:
        raise NotImplementedError

    def delete_by_id(self, employee_id: str) -> bool:
        raise NotImplementedError


class DocumentEmployeeRepository(EmployeeRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        doc = self._store.get(EMPLOYEES, employee_id)
        return Employee.from_doc(doc) if doc else None

    def list_all(self) -> Sequence[Employee]:
        docs = self._store.query(EMPLOYEES)
        return sorted((Employee.from_doc(d) for d in docs), key=lambda e: e.employee_id)

    def list_by_department(self, department_id: str) -> Sequence[Employee]:
        docs = self._store.query(EMPLOYEES, lambda d: d.get("department") == department_id)
        return sorted((Employee.from_doc(d) for d in docs), key=lambda e: e.employee_id)

    def create(self, employee: Employee) -> bool:
        return self._store.create_if_absent(EMPLOYEES, employee.employee_id, employee.to_doc())

    def update(self, employee_id: str, fields: dict) -> Employee:
        return Employee.from_doc(self._store.update(EMPLOYEES, employee_id, fields))

    def delete_by_id(self, employee_id: str) -> bool:
        return self._store.delete(EMPLOYEES, employee_id)
