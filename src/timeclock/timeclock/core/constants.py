"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_DEPARTMENT_TIMEZONE = "UTC"

RESYNC_MAX_AGE = timedelta(hours=1)
RESYNC_INTERVAL_SECONDS = 15 * 60
SWEEP_INTERVAL_SECONDS = 60
TICK_INTERVAL_SECONDS = 1

DEFAULT_CLOCK_IN = "09:00"
DEFAULT_CLOCK_OUT = "18:00"
DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_OVERTIME_THRESHOLD_MINUTES = 30

DEFAULT_HISTORY_LIMIT = 50
MIN_PASSWORD_LENGTH = 6

# Document store collections.
EMPLOYEES = "employees"
DEPARTMENTS = "departments"
STATUS = "status"
ATTENDANCE = "attendance"
ATTENDANCE_SUMMARY = "attendanceSummary"
MESSAGES = "messages"

# recipientId of a message addressed to every employee.
BROADCAST_RECIPIENT = ""
