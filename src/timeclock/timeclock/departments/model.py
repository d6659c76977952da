from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_DEPARTMENT_TIMEZONE
from ..schedules.model import Schedule


@dataclass(frozen=True)
class Department:
    """Domain entity: a department and its work schedule."""

    department_id: str
    name: str
    schedule: Schedule
    timezone: str = DEFAULT_DEPARTMENT_TIMEZONE

    def to_doc(self) -> dict:
        return {
            "name": self.name,
            "timezone": self.timezone,
            "schedule": self.schedule.to_doc(),
        }

    @classmethod
    def from_doc(cls, department_id: str, doc: dict) -> "Department":
        return cls(
            department_id=department_id,
            name=doc.get("name") or "",
            timezone=doc.get("timezone") or DEFAULT_DEPARTMENT_TIMEZONE,
            schedule=Schedule.from_doc(doc["schedule"]),
        )
