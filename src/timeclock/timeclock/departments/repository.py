from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from ..core.constants import DEPARTMENTS
from ..store.document_store import DocumentStore
from .model import Department

logger = logging.getLogger(__name__)


class DepartmentRepository(Protocol):
    def get_by_id(self, department_id: str) -> Optional[Department]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def create(self, department: Department) -> str:
        """Store a new department and return its id."""

        raise NotImplementedError

    def save(self, department: Department) -> None:
        raise NotImplementedError

    def delete(self, department_id: str) -> bool:
        raise NotImplementedError


class DocumentDepartmentRepository(DepartmentRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, department_id: str) -> Optional[Department]:
        doc = self._store.get(DEPARTMENTS, department_id)
        return Department.from_doc(department_id, doc) if doc else None

    def list_all(self) -> Sequence[Department]:
        """Every readable department; malformed documents are logged and skipped."""

        departments = []
        for doc in self._store.query(DEPARTMENTS):
            try:
                departments.append(Department.from_doc(doc["id"], doc))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable department %s: %r", doc.get("id"), e)
        return departments

    def create(self, department: Department) -> str:
        return self._store.create(DEPARTMENTS, department.to_doc(), doc_id=department.department_id or None)

    def save(self, department: Department) -> None:
        self._store.set(DEPARTMENTS, department.department_id, department.to_doc())

    def delete(self, department_id: str) -> bool:
        return self._store.delete(DEPARTMENTS, department_id)
