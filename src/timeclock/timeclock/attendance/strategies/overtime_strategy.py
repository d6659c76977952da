from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...schedules.resolver import ScheduleWindow
from .base import LatenessDecision, OvertimeDecision, PunctualityStrategy


class OvertimeStrategy(PunctualityStrategy):
    """Working past the overtime threshold. Flags only ever grow within a shift."""

    def decide_clock_in(self, *, now: datetime, window: Optional[ScheduleWindow]) -> LatenessDecision:
        return LatenessDecision()

    def decide_overtime(
        self, *, now: datetime, window: Optional[ScheduleWindow], current: OvertimeDecision
    ) -> OvertimeDecision:
        minutes = window.overtime_minutes(now)
        return OvertimeDecision(is_overtime=True, overtime_minutes=max(minutes, current.overtime_minutes))
