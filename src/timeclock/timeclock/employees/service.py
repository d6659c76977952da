from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..departments.repository import DepartmentRepository
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    employee_id: str
    name: str
    role: Role
    department_id: Optional[str]


class AuthService:
    """Use case: authenticate employee (login)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, employee_id: str, password: str) -> SessionUser:
        employee = self._employees.get_by_id((employee_id or "").strip())
        if not employee or employee.disabled:
            raise AuthenticationError("Invalid employee ID or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except Exception:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid employee ID or password")

        return SessionUser(
            employee_id=employee.employee_id,
            name=employee.name,
            role=employee.role,
            department_id=employee.department_id,
        )


class EmployeeService:
    """Use case: manage employees (admin)."""

    def __init__(self, employees: EmployeeRepository, departments: Optional[DepartmentRepository] = None):
        self._employees = employees
        self._departments = departments

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Administrator access required")

    def _check_department(self, department_id: Optional[str]) -> Optional[str]:
        if not department_id:
            return None
        if self._departments and not self._departments.get_by_id(department_id):
            raise ValidationError("Department does not exist")
        return department_id

    def get(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get_by_id(employee_id)

    def list_all(self):
        return self._employees.list_all()

    def create_employee(
        self,
        *,
        current_role: Role,
        employee_id: str,
        name: str,
        password: str,
        department_id: Optional[str] = None,
        is_admin: bool = False,
        email: Optional[str] = None,
    ) -> Employee:
        self._require_admin(current_role)
        employee_id = require_non_empty(employee_id, "Employee ID")
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        employee = Employee(
            employee_id=employee_id,
            name=name,
            password_hash=generate_password_hash(password),
            department_id=self._check_department(department_id),
            is_admin=bool(is_admin),
            email=email.strip() if email else None,
        )
        if not self._employees.create(employee):
            raise ValidationError("Employee ID already exists")
        logger.info("Created employee %s", employee_id)
        return employee

    def update_employee(
        self,
        *,
        current_role: Role,
        employee_id: str,
        name: Optional[str] = None,
        password: Optional[str] = None,
        department_id: Optional[str] = None,
        is_admin: Optional[bool] = None,
        email: Optional[str] = None,
    ) -> Employee:
        self._require_admin(current_role)
        if not self._employees.get_by_id(employee_id):
            raise ValidationError("Employee does not exist")

        fields: dict = {}
        if name is not None:
            fields["name"] = require_non_empty(name, "Name")
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            fields["passwordHash"] = generate_password_hash(password)
        if department_id is not None:
            fields["department"] = self._check_department(department_id)
        if is_admin is not None:
            fields["isAdmin"] = bool(is_admin)
        if email is not None:
            fields["email"] = email.strip() or None

        if not fields:
            raise ValidationError("Nothing to update")
        return self._employees.update(employee_id, fields)

    def set_disabled(self, *, current_role: Role, employee_id: str, disabled: bool) -> Employee:
        self._require_admin(current_role)
        if not self._employees.get_by_id(employee_id):
            raise ValidationError("Employee does not exist")
        return self._employees.update(employee_id, {"disabled": bool(disabled)})

    def delete_employee(self, *, current_role: Role, employee_id: str) -> None:
        """Remove the employee document. Attendance history stays as orphan records."""

        self._require_admin(current_role)
        if not self._employees.delete_by_id(employee_id):
            raise ValidationError("Employee does not exist")
        logger.info("Deleted employee %s", employee_id)


def ensure_admin_employee(employees: EmployeeRepository, *, employee_id: str, password: str) -> bool:
    """Seed the first administrator. Returns False when the id already exists."""

    created = employees.create(
        Employee(
            employee_id=employee_id,
            name="Administrator",
            password_hash=generate_password_hash(password),
            is_admin=True,
        )
    )
    if created:
        logger.info("Seeded administrator %s", employee_id)
    return created
