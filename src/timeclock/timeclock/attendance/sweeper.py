from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.base import BaseScheduler

from ..common.scheduling import PeriodicTask
from ..core.constants import SWEEP_INTERVAL_SECONDS
from ..core.enums import ClockOutReason
from ..core.exceptions import StorageError
from ..departments.model import Department
from ..departments.repository import DepartmentRepository
from ..employees.repository import EmployeeRepository
from ..schedules.resolver import ScheduleResolver
from ..timesync.source import TimeSource
from .finalizer import ShiftFinalizer
from .service import AttendanceService

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    flipped: list = field(default_factory=list)
    finalized: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    failed: list = field(default_factory=list)


class ScheduleSweeper:
    """Enforces schedule boundaries for every department, connected or not.

    At a department's clock-in minute, clocked-in employees idling in Standby
    or Working Idle are flipped to Working. At its clock-out minute every open
    shift in the department is finalized with reason=auto. One employee's
    failure never stops the rest of the sweep.
    """

    def __init__(
        self,
        service: AttendanceService,
        finalizer: ShiftFinalizer,
        departments: DepartmentRepository,
        employees: EmployeeRepository,
        *,
        time_source: TimeSource,
        resolver: ScheduleResolver,
        interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        scheduler: Optional[BaseScheduler] = None,
    ):
        self._service = service
        self._finalizer = finalizer
        self._departments = departments
        self._employees = employees
        self._time = time_source
        self._resolver = resolver
        self._task = PeriodicTask("schedule-sweeper", self.sweep, interval_seconds=interval_seconds, scheduler=scheduler)

    @property
    def running(self) -> bool:
        return self._task.running

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    def sweep(self) -> SweepReport:
        self._time.resync_if_stale()
        now = self._time.now()
        report = SweepReport()

        try:
            departments = self._departments.list_all()
        except StorageError:
            logger.exception("Sweep aborted: departments unavailable")
            return report

        for department in departments:
            try:
                self._sweep_department(department, now, report)
            except Exception:
                logger.exception("Sweep failed for department %s", department.department_id)

        if report.flipped or report.finalized or report.failed:
            logger.info(
                "Sweep at %s: flipped=%s finalized=%s skipped=%s failed=%s",
                now.isoformat(),
                report.flipped,
                report.finalized,
                report.skipped,
                report.failed,
            )
        return report

    def _sweep_department(self, department: Department, now: datetime, report: SweepReport) -> None:
        if self._resolver.is_clock_out_minute(now, department):
            operation = "auto clock-out"
        elif self._resolver.is_clock_in_minute(now, department):
            operation = "schedule start"
        else:
            return

        for employee in self._employees.list_by_department(department.department_id):
            employee_id = employee.employee_id
            try:
                if operation == "auto clock-out":
                    done = self._finalizer.finalize(employee_id, ClockOutReason.AUTO) is not None
                    (report.finalized if done else report.skipped).append(employee_id)
                else:
                    done = self._service.start_scheduled_work(employee_id) is not None
                    (report.flipped if done else report.skipped).append(employee_id)
            except Exception:
                logger.exception("Sweeper %s failed for employee %s", operation, employee_id)
                report.failed.append(employee_id)
