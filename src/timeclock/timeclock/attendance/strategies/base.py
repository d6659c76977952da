from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...schedules.resolver import ScheduleWindow


@dataclass(frozen=True)
class LatenessDecision:
    is_late: bool = False
    late_minutes: int = 0


@dataclass(frozen=True)
class OvertimeDecision:
    is_overtime: bool = False
    overtime_minutes: int = 0


class PunctualityStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide lateness and overtime."""

    @abstractmethod
    def decide_clock_in(self, *, now: datetime, window: Optional[ScheduleWindow]) -> LatenessDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_overtime(
        self, *, now: datetime, window: Optional[ScheduleWindow], current: OvertimeDecision
    ) -> OvertimeDecision:
        raise NotImplementedError
