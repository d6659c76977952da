from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_hhmm, require_non_empty, require_non_negative_int, require_timezone
from ..core.constants import (
    DEFAULT_CLOCK_IN,
    DEFAULT_CLOCK_OUT,
    DEFAULT_DEPARTMENT_TIMEZONE,
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_OVERTIME_THRESHOLD_MINUTES,
)
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..schedules.model import Schedule
from .model import Department
from .repository import DepartmentRepository

logger = logging.getLogger(__name__)


def build_schedule(
    *,
    clock_in: str = DEFAULT_CLOCK_IN,
    clock_out: str = DEFAULT_CLOCK_OUT,
    grace_period=DEFAULT_GRACE_PERIOD_MINUTES,
    overtime_threshold=DEFAULT_OVERTIME_THRESHOLD_MINUTES,
) -> Schedule:
    """Validate raw schedule input. Overnight shifts are not supported."""

    start = require_hhmm(clock_in, "Clock-in time")
    end = require_hhmm(clock_out, "Clock-out time")
    if start >= end:
        raise ValidationError("Clock-in time must be before clock-out time on the same day")
    return Schedule(
        clock_in=start,
        clock_out=end,
        grace_period=require_non_negative_int(grace_period, "Grace period"),
        overtime_threshold=require_non_negative_int(overtime_threshold, "Overtime threshold"),
    )


class DepartmentService:
    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Administrator access required")

    def get(self, department_id: str) -> Optional[Department]:
        return self._departments.get_by_id(department_id)

    def list_all(self):
        return sorted(self._departments.list_all(), key=lambda d: d.name.lower())

    def create(
        self,
        *,
        current_role: Role,
        name: str,
        timezone: str = DEFAULT_DEPARTMENT_TIMEZONE,
        schedule: Schedule,
    ) -> Department:
        self._require_admin(current_role)
        department = Department(
            department_id="",
            name=require_non_empty(name, "Department name"),
            timezone=require_timezone(timezone),
            schedule=schedule,
        )
        department_id = self._departments.create(department)
        logger.info("Created department %s (%s)", department_id, department.name)
        return Department(
            department_id=department_id,
            name=department.name,
            timezone=department.timezone,
            schedule=department.schedule,
        )

    def update(
        self,
        *,
        current_role: Role,
        department_id: str,
        name: Optional[str] = None,
        timezone: Optional[str] = None,
        schedule: Optional[Schedule] = None,
    ) -> Department:
        self._require_admin(current_role)
        current = self._departments.get_by_id(department_id)
        if not current:
            raise ValidationError("Department does not exist")

        updated = Department(
            department_id=department_id,
            name=require_non_empty(name, "Department name") if name is not None else current.name,
            timezone=require_timezone(timezone) if timezone is not None else current.timezone,
            schedule=schedule or current.schedule,
        )
        self._departments.save(updated)
        return updated

    def delete(self, *, current_role: Role, department_id: str) -> None:
        self._require_admin(current_role)
        if not self._departments.delete(department_id):
            raise ValidationError("Department does not exist")
