from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...schedules.resolver import ScheduleWindow
from .base import LatenessDecision, OvertimeDecision, PunctualityStrategy


class NormalStrategy(PunctualityStrategy):
    """On-time clock-in; overtime flags left as they are."""

    def decide_clock_in(self, *, now: datetime, window: Optional[ScheduleWindow]) -> LatenessDecision:
        return LatenessDecision()

    def decide_overtime(
        self, *, now: datetime, window: Optional[ScheduleWindow], current: OvertimeDecision
    ) -> OvertimeDecision:
        return current
