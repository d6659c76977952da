from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def parse_hhmm(value: str) -> time:
    """Parse HH:mm string into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def utc_now() -> datetime:
    """Current uncorrected local clock as an aware UTC datetime.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_aware(value).astimezone(timezone.utc).isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return ensure_aware(datetime.fromisoformat(value))


def date_to_iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def date_from_iso(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def elapsed_ms(start: datetime, end: datetime) -> int:
    return int((end - start) / timedelta(milliseconds=1))


def floor_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded toward negative infinity."""
    return math.floor((end - start).total_seconds() / 60)


def format_duration(ms: int) -> str:
    """Render milliseconds as HH:MM:SS (hours are not wrapped at 24)."""
    ms = max(int(ms), 0)
    seconds = (ms // 1000) % 60
    minutes = (ms // 60000) % 60
    hours = ms // 3600000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
