from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...schedules.resolver import ScheduleWindow
from .base import LatenessDecision, OvertimeDecision, PunctualityStrategy


class LateStrategy(PunctualityStrategy):
    """Clock-in past the grace period."""

    def decide_clock_in(self, *, now: datetime, window: Optional[ScheduleWindow]) -> LatenessDecision:
        return LatenessDecision(is_late=True, late_minutes=window.late_minutes(now))

    def decide_overtime(
        self, *, now: datetime, window: Optional[ScheduleWindow], current: OvertimeDecision
    ) -> OvertimeDecision:
        return current
