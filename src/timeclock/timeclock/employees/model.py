from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: Plain data object (no storage access code).
    """

    employee_id: str
    name: str
    password_hash: str
    department_id: Optional[str] = None
    is_admin: bool = False
    disabled: bool = False
    email: Optional[str] = None

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.STAFF

    def to_doc(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "passwordHash": self.password_hash,
            "department": self.department_id,
            "isAdmin": bool(self.is_admin),
            "disabled": bool(self.disabled),
            "email": self.email,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "Employee":
        return cls(
            employee_id=str(doc.get("employeeId") or doc["id"]),
            name=doc.get("name") or "",
            password_hash=doc.get("passwordHash") or "",
            department_id=doc.get("department") or None,
            is_admin=bool(doc.get("isAdmin")),
            disabled=bool(doc.get("disabled")),
            email=doc.get("email"),
        )

    def public_view(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "department": self.department_id,
            "isAdmin": self.is_admin,
            "disabled": self.disabled,
            "email": self.email,
        }
