from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..common.datetime_utils import format_hhmm, parse_hhmm


@dataclass(frozen=True)
class Schedule:
    """Department work window: same-day clock-in/clock-out plus tolerances."""

    clock_in: time
    clock_out: time
    grace_period: int = 0
    overtime_threshold: int = 0

    def to_doc(self) -> dict:
        return {
            "clockIn": format_hhmm(self.clock_in),
            "clockOut": format_hhmm(self.clock_out),
            "gracePeriod": int(self.grace_period),
            "overtimeThreshold": int(self.overtime_threshold),
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "Schedule":
        return cls(
            clock_in=parse_hhmm(doc["clockIn"]),
            clock_out=parse_hhmm(doc["clockOut"]),
            grace_period=int(doc.get("gracePeriod") or 0),
            overtime_threshold=int(doc.get("overtimeThreshold") or 0),
        )
