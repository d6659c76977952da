from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..schedules.resolver import ScheduleWindow
from .strategies.base import PunctualityStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.overtime_strategy import OvertimeStrategy


@dataclass
class PunctualityStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    No window (no department) always yields NormalStrategy: never late, never overtime.
    """

    def for_clock_in(self, *, now: datetime, window: Optional[ScheduleWindow]) -> PunctualityStrategy:
        if not window:
            return NormalStrategy()

        if window.late_minutes(now) > window.grace_period:
            return LateStrategy()
        return NormalStrategy()

    def for_overtime(self, *, now: datetime, window: Optional[ScheduleWindow]) -> PunctualityStrategy:
        if not window:
            return NormalStrategy()

        if window.overtime_minutes(now) > window.overtime_threshold:
            return OvertimeStrategy()
        return NormalStrategy()
