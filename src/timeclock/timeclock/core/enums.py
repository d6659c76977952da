from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role used for permission checks."""

    ADMIN = "admin"
    STAFF = "staff"


class Phase(str, Enum):
    """Top-level attendance phase. Values are the labels stored in status documents."""

    CLOCKED_OUT = "Clocked Out"
    WORKING = "Working"
    STANDBY = "Standby"
    ON_BREAK = "On Break"
    WORKING_IDLE = "Working Idle"


class BreakKind(str, Enum):
    """Closed set of break labels an employee can take."""

    LUNCH = "Lunch"
    LUNCH_2 = "Lunch 2"
    BIO_1 = "BIO 1"
    BIO_2 = "BIO 2"

    @property
    def event_suffix(self) -> str:
        return self.value.replace(" ", "")

    @classmethod
    def parse(cls, value: "str | BreakKind") -> "BreakKind":
        if isinstance(value, BreakKind):
            return value
        for kind in cls:
            if value in (kind.value, kind.name, kind.event_suffix):
                return kind
        raise ValueError(f"Unknown break kind: {value!r}")


class ClockOutReason(str, Enum):
    MANUAL = "manual"
    FORCED = "forced"
    AUTO = "auto"


class EventType(str, Enum):
    """Fixed attendance event types. Break events are built with `break_event`."""

    CLOCK_IN = "clockIn"
    CLOCK_OUT = "clockOut"
    FORCE_CLOCK_OUT = "force_clockOut"
    START_STANDBY = "start_standby"
    END_STANDBY = "end_standby"
    RESUME_WORKING = "resumeWorking"


def break_event(kind: BreakKind, *, start: bool) -> str:
    prefix = "start_" if start else "end_"
    return prefix + kind.event_suffix
