from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import elapsed_ms
from .model import EmployeeStatus


class BreakAccumulator:
    """Running total of break time within one shift.

    At most one break session is open at a time. Totals are milliseconds.
    The accumulator is rebuilt from the status document on every use, so a
    reconnecting client or the sweeper sees the same total as the client that
    started the break.
    """

    def __init__(self, clock: Callable[[], datetime], *, total_ms: int = 0, session_start: Optional[datetime] = None):
        self._clock = clock
        self._total = max(int(total_ms), 0)
        self._session_start = session_start

    @classmethod
    def from_status(cls, clock: Callable[[], datetime], status: EmployeeStatus) -> "BreakAccumulator":
        session_start = status.break_start_time
        if session_start is None and status.state.is_on_break:
            # Documents written before breakStartTime existed: the break began with the state.
            session_start = status.state_start_time
        return cls(clock, total_ms=status.accumulated_break, session_start=session_start)

    @property
    def session_start(self) -> Optional[datetime]:
        return self._session_start

    @property
    def is_open(self) -> bool:
        return self._session_start is not None

    def start(self, at: Optional[datetime] = None) -> bool:
        if self._session_start is not None:
            return False
        self._session_start = at or self._clock()
        return True

    def stop(self, at: Optional[datetime] = None) -> int:
        """Close the open session and return its elapsed ms (0 if none was open)."""

        if self._session_start is None:
            return 0
        elapsed = max(elapsed_ms(self._session_start, at or self._clock()), 0)
        self._total += elapsed
        self._session_start = None
        return elapsed

    def current(self, at: Optional[datetime] = None) -> int:
        if self._session_start is None:
            return 0
        return max(elapsed_ms(self._session_start, at or self._clock()), 0)

    def total(self) -> int:
        return self._total

    def reset(self) -> None:
        self._total = 0
        self._session_start = None
