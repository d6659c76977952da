from __future__ import annotations

from datetime import time

import pytz

from ..core.exceptions import ValidationError
from .datetime_utils import parse_hhmm


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_non_negative_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number") from None
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def require_hhmm(value: str, field_name: str) -> time:
    try:
        return parse_hhmm(value)
    except (AttributeError, TypeError, ValueError):
        raise ValidationError(f"{field_name} must use HH:mm format") from None


def require_timezone(value: str, field_name: str = "Timezone") -> str:
    value = require_non_empty(value, field_name)
    if value not in pytz.all_timezones_set:
        raise ValidationError(f"Unknown timezone: {value}")
    return value
