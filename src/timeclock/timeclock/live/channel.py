from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..attendance.model import EmployeeStatus
from ..attendance.state import EmployeeState
from ..core.constants import STATUS
from ..core.enums import Phase
from ..core.exceptions import DomainError
from ..store.document_store import ChangeEvent, ChangeKind, DocumentStore, Subscription

logger = logging.getLogger(__name__)

StatusFilter = Callable[[EmployeeStatus], bool]


@dataclass(frozen=True)
class StatusChange:
    """One live status change. `status` is None once the employee clocked out."""

    employee_id: str
    kind: ChangeKind
    status: Optional[EmployeeStatus]
    previous: Optional[EmployeeStatus] = None

    @property
    def state(self) -> EmployeeState:
        return self.status.state if self.status else EmployeeState.clocked_out()

    @property
    def clocked_out(self) -> bool:
        return self.status is None


StatusObserver = Callable[[StatusChange], None]


def on_break(status: EmployeeStatus) -> bool:
    return status.state.is_on_break


def active(status: EmployeeStatus) -> bool:
    return status.state.is_clocked_in


def not_working(status: EmployeeStatus) -> bool:
    """Clocked in but not Working (break alerts on the dashboard)."""

    return status.state.phase not in (Phase.WORKING, Phase.CLOCKED_OUT)


def _parse(doc: Optional[dict]) -> Optional[EmployeeStatus]:
    if not doc or not doc.get("status"):
        return None
    try:
        return EmployeeStatus.from_doc(doc)
    except (KeyError, TypeError, ValueError):
        logger.warning("Skipping malformed status document %s", doc.get("id"))
        return None


def _matches(status_filter: StatusFilter, status: Optional[EmployeeStatus]) -> bool:
    if status is None:
        return False
    try:
        return bool(status_filter(status))
    except DomainError:
        logger.warning("Status %r of %s does not parse", status.status, status.employee_id)
        return False


class LiveStatusChannel:
    """Broadcasts every status create/update/delete to observers.

    Employee clients subscribe to their own id; dashboards subscribe with a
    filter. Delivery is at-least-once, so observers must tolerate repeats.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    @staticmethod
    def _adapt(on_change: StatusObserver) -> Callable[[ChangeEvent], None]:
        def handler(event: ChangeEvent) -> None:
            on_change(
                StatusChange(
                    employee_id=event.doc_id,
                    kind=event.kind,
                    status=_parse(event.data),
                    previous=_parse(event.previous),
                )
            )

        return handler

    def subscribe(self, employee_id: str, on_change: StatusObserver) -> Subscription:
        return self._store.subscribe(STATUS, self._adapt(on_change), doc_id=employee_id)

    def subscribe_where(self, status_filter: StatusFilter, on_change: StatusObserver) -> Subscription:
        """Observe every employee matching `status_filter`, including the
        change that makes one stop matching."""

        def predicate(doc: dict) -> bool:
            return _matches(status_filter, _parse(doc))

        return self._store.subscribe(STATUS, self._adapt(on_change), predicate=predicate)

    def snapshot(self, status_filter: Optional[StatusFilter] = None) -> Sequence[EmployeeStatus]:
        statuses = [s for s in (_parse(d) for d in self._store.query(STATUS)) if s is not None]
        if status_filter is not None:
            statuses = [s for s in statuses if _matches(status_filter, s)]
        return sorted(statuses, key=lambda s: s.employee_id)
