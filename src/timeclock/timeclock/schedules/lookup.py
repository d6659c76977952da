from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import StorageError
from ..departments.model import Department
from ..departments.repository import DepartmentRepository
from ..employees.repository import EmployeeRepository

logger = logging.getLogger(__name__)


class DepartmentLookup:
    """Finds the department whose schedule governs an employee.

    Missing or unreadable data degrades to None ("always within schedule,
    never late") instead of blocking the caller.
    """

    def __init__(self, employees: EmployeeRepository, departments: DepartmentRepository):
        self._employees = employees
        self._departments = departments

    def by_id(self, department_id: Optional[str]) -> Optional[Department]:
        if not department_id:
            return None
        try:
            return self._departments.get_by_id(department_id)
        except StorageError as e:
            logger.warning("Department %s unavailable, ignoring schedule: %s", department_id, e)
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Department %s has an unreadable schedule, ignoring it: %r", department_id, e)
            return None

    def for_employee(self, employee_id: str, *, fallback_department_id: Optional[str] = None) -> Optional[Department]:
        department_id = fallback_department_id
        try:
            employee = self._employees.get_by_id(employee_id)
            if employee and employee.department_id:
                department_id = employee.department_id
        except StorageError as e:
            logger.warning("Employee %s unavailable for schedule lookup: %s", employee_id, e)
        return self.by_id(department_id)
