from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from ..common.datetime_utils import ensure_aware, floor_minutes
from ..core.constants import DEFAULT_TIMEZONE
from ..departments.model import Department

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleWindow:
    """Scheduled start/end instants of one department on one calendar day."""

    day: date
    start: datetime
    end: datetime
    grace_period: int
    overtime_threshold: int

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    def late_minutes(self, clock_in: datetime) -> int:
        return floor_minutes(self.start, clock_in)

    def overtime_minutes(self, instant: datetime) -> int:
        return floor_minutes(self.end, instant)


class ScheduleResolver:
    """Maps instants onto a department's calendar day and work window.

    Employees without a department resolve against `default_timezone` and are
    always "within schedule" (never late, never overtime).
    """

    def __init__(self, *, default_timezone: str = DEFAULT_TIMEZONE):
        self._default_tz = pytz.timezone(default_timezone)

    def tz_for(self, department: Optional[Department]):
        if not department or not department.timezone:
            return self._default_tz
        try:
            return pytz.timezone(department.timezone)
        except pytz.UnknownTimeZoneError:
            logger.warning(
                "Department %s has unknown timezone %r; using %s",
                department.department_id,
                department.timezone,
                self._default_tz.zone,
            )
            return self._default_tz

    def local_time(self, instant: datetime, department: Optional[Department]) -> datetime:
        return ensure_aware(instant).astimezone(self.tz_for(department))

    def local_day(self, instant: datetime, department: Optional[Department]) -> date:
        return self.local_time(instant, department).date()

    def local_minute(self, instant: datetime, department: Optional[Department]) -> str:
        return self.local_time(instant, department).strftime("%H:%M")

    def day_bounds(self, instant: datetime, department: Optional[Department]) -> tuple[datetime, datetime]:
        """[today 00:00, tomorrow 00:00) in the department's timezone."""

        tz = self.tz_for(department)
        day = self.local_day(instant, department)
        start = tz.localize(datetime.combine(day, time(0, 0)))
        end = tz.localize(datetime.combine(day + timedelta(days=1), time(0, 0)))
        return start, end

    def window_for(self, day: date, department: Department) -> ScheduleWindow:
        tz = self.tz_for(department)
        schedule = department.schedule
        return ScheduleWindow(
            day=day,
            start=tz.localize(datetime.combine(day, schedule.clock_in)),
            end=tz.localize(datetime.combine(day, schedule.clock_out)),
            grace_period=int(schedule.grace_period),
            overtime_threshold=int(schedule.overtime_threshold),
        )

    def window_at(self, instant: datetime, department: Optional[Department]) -> Optional[ScheduleWindow]:
        if not department:
            return None
        return self.window_for(self.local_day(instant, department), department)

    def is_within_schedule(self, instant: datetime, department: Optional[Department]) -> bool:
        window = self.window_at(instant, department)
        if window is None:
            return True
        return window.contains(ensure_aware(instant))

    def is_clock_in_minute(self, instant: datetime, department: Department) -> bool:
        return self.local_minute(instant, department) == department.schedule.clock_in.strftime("%H:%M")

    def is_clock_out_minute(self, instant: datetime, department: Department) -> bool:
        return self.local_minute(instant, department) == department.schedule.clock_out.strftime("%H:%M")
