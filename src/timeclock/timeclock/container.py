from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .attendance.admin_service import AdminMonitorService
from .attendance.document_repository import (
    DocumentAttendanceRepository,
    DocumentStatusRepository,
    DocumentSummaryRepository,
)
from .attendance.factory import PunctualityStrategyFactory
from .attendance.finalizer import ShiftFinalizer
from .attendance.service import AttendanceService
from .attendance.session import EmployeeSession
from .attendance.state_machine import AttendanceStateMachine
from .attendance.sweeper import ScheduleSweeper
from .common.scheduling import PeriodicTask
from .core.constants import (
    DEFAULT_TIMEZONE,
    RESYNC_INTERVAL_SECONDS,
    SWEEP_INTERVAL_SECONDS,
    TICK_INTERVAL_SECONDS,
)
from .core.enums import BreakKind
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .departments.repository import DocumentDepartmentRepository
from .departments.service import DepartmentService
from .employees.repository import DocumentEmployeeRepository
from .employees.service import AuthService, EmployeeService
from .live.channel import LiveStatusChannel
from .messages.repository import DocumentMessageRepository
from .messages.service import MessageService
from .schedules.lookup import DepartmentLookup
from .schedules.resolver import ScheduleResolver
from .store.document_store import DocumentStore
from .store.memory import InMemoryDocumentStore
from .store.mysql_store import MySQLDocumentStore
from .timesync.client import WorldTimeClient
from .timesync.source import TimeSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    store: DocumentStore
    time_source: TimeSource
    resolver: ScheduleResolver
    channel: LiveStatusChannel

    employees_repo: DocumentEmployeeRepository
    departments_repo: DocumentDepartmentRepository
    status_repo: DocumentStatusRepository
    attendance_repo: DocumentAttendanceRepository
    summary_repo: DocumentSummaryRepository
    messages_repo: DocumentMessageRepository

    auth_service: AuthService
    employee_service: EmployeeService
    department_service: DepartmentService
    attendance_service: AttendanceService
    admin_monitor_service: AdminMonitorService
    message_service: MessageService
    finalizer: ShiftFinalizer

    sweeper: ScheduleSweeper
    time_resync: PeriodicTask
    tick_interval: float = TICK_INTERVAL_SECONDS

    def start_background_jobs(self) -> None:
        self.time_resync.start()
        self.sweeper.start()

    def stop_background_jobs(self) -> None:
        self.sweeper.stop()
        self.time_resync.stop()

    def open_session(self, employee_id: str, **kwargs) -> EmployeeSession:
        kwargs.setdefault("tick_interval", self.tick_interval)
        session = EmployeeSession(employee_id, self.attendance_service, self.channel, **kwargs)
        session.open()
        return session


def parse_break_kinds(raw: str) -> Optional[list]:
    """'Lunch, BIO 1' -> [BreakKind.LUNCH, BreakKind.BIO_1]; empty means all kinds."""

    labels = [p.strip() for p in (raw or "").split(",") if p.strip()]
    if not labels:
        return None
    try:
        return [BreakKind.parse(label) for label in labels]
    except ValueError as e:
        raise ValidationError(f"BREAK_KINDS: {e}") from None


def build_time_source(settings) -> TimeSource:
    url = getattr(settings, "TIME_API_URL", "")
    fetch = None
    if url:
        client = WorldTimeClient(url, timeout=float(getattr(settings, "TIME_API_TIMEOUT_SECONDS", 10)))
        fetch = client.fetch_trusted_instant
    return TimeSource(
        fetch,
        timezone=getattr(settings, "TRUSTED_TIMEZONE", DEFAULT_TIMEZONE),
        max_age=timedelta(seconds=int(getattr(settings, "TIME_RESYNC_MAX_AGE_SECONDS", 3600))),
    )


def build_store(settings) -> tuple[DocumentStore, Optional[DatabaseConnection]]:
    backend = str(getattr(settings, "STORE_BACKEND", "mysql")).lower()
    if backend == "memory":
        return InMemoryDocumentStore(), None
    if backend != "mysql":
        raise ValidationError(f"Unknown STORE_BACKEND: {backend!r}")
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
    return MySQLDocumentStore(conn), conn


def build_container(
    settings,
    *,
    store: Optional[DocumentStore] = None,
    time_source: Optional[TimeSource] = None,
) -> Container:
    conn = None
    if store is None:
        store, conn = build_store(settings)
    time_source = time_source or build_time_source(settings)
    resolver = ScheduleResolver(default_timezone=getattr(settings, "TRUSTED_TIMEZONE", DEFAULT_TIMEZONE))
    channel = LiveStatusChannel(store)

    employees_repo = DocumentEmployeeRepository(store)
    departments_repo = DocumentDepartmentRepository(store)
    status_repo = DocumentStatusRepository(store)
    attendance_repo = DocumentAttendanceRepository(store)
    summary_repo = DocumentSummaryRepository(store)
    messages_repo = DocumentMessageRepository(store)

    lookup = DepartmentLookup(employees_repo, departments_repo)
    strategy_factory = PunctualityStrategyFactory()
    state_machine = AttendanceStateMachine(parse_break_kinds(getattr(settings, "BREAK_KINDS", "")))

    finalizer = ShiftFinalizer(
        status_repo,
        attendance_repo,
        summary_repo,
        time_source=time_source,
        resolver=resolver,
        lookup=lookup,
        strategy_factory=strategy_factory,
    )
    attendance_service = AttendanceService(
        status_repo,
        attendance_repo,
        summary_repo,
        employees_repo,
        lookup=lookup,
        time_source=time_source,
        resolver=resolver,
        finalizer=finalizer,
        state_machine=state_machine,
        strategy_factory=strategy_factory,
    )
    sweeper = ScheduleSweeper(
        attendance_service,
        finalizer,
        departments_repo,
        employees_repo,
        time_source=time_source,
        resolver=resolver,
        interval_seconds=int(getattr(settings, "SWEEP_INTERVAL_SECONDS", SWEEP_INTERVAL_SECONDS)),
    )
    time_resync = PeriodicTask(
        "time-resync",
        time_source.sync,
        interval_seconds=int(getattr(settings, "TIME_RESYNC_INTERVAL_SECONDS", RESYNC_INTERVAL_SECONDS)),
        run_immediately=True,
    )

    return Container(
        conn=conn,
        store=store,
        time_source=time_source,
        resolver=resolver,
        channel=channel,
        employees_repo=employees_repo,
        departments_repo=departments_repo,
        status_repo=status_repo,
        attendance_repo=attendance_repo,
        summary_repo=summary_repo,
        messages_repo=messages_repo,
        auth_service=AuthService(employees_repo),
        employee_service=EmployeeService(employees_repo, departments_repo),
        department_service=DepartmentService(departments_repo),
        attendance_service=attendance_service,
        admin_monitor_service=AdminMonitorService(channel, employees_repo, time_source=time_source),
        message_service=MessageService(messages_repo, employees_repo, time_source=time_source),
        finalizer=finalizer,
        sweeper=sweeper,
        time_resync=time_resync,
        tick_interval=float(getattr(settings, "TICK_INTERVAL_SECONDS", TICK_INTERVAL_SECONDS)),
    )
