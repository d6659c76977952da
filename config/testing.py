import os

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_test"),
}

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# No network in tests: local clock only
TIME_API_URL = ""
TIME_API_TIMEOUT_SECONDS = 1.0
TRUSTED_TIMEZONE = "America/New_York"
TIME_RESYNC_MAX_AGE_SECONDS = 3600
TIME_RESYNC_INTERVAL_SECONDS = 900

SWEEP_INTERVAL_SECONDS = 60
TICK_INTERVAL_SECONDS = 1.0

BREAK_KINDS = ""

START_BACKGROUND_JOBS = False

ADMIN_EMPLOYEE_ID = "admin"
ADMIN_PASSWORD = "admin123"
