import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock"),
}

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

TIME_API_URL = os.getenv("TIME_API_URL", "http://worldtimeapi.org/api/timezone")
TIME_API_TIMEOUT_SECONDS = float(os.getenv("TIME_API_TIMEOUT_SECONDS", "10"))
TRUSTED_TIMEZONE = os.getenv("TRUSTED_TIMEZONE", "America/New_York")
TIME_RESYNC_MAX_AGE_SECONDS = int(os.getenv("TIME_RESYNC_MAX_AGE_SECONDS", "3600"))
TIME_RESYNC_INTERVAL_SECONDS = int(os.getenv("TIME_RESYNC_INTERVAL_SECONDS", "900"))

SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
TICK_INTERVAL_SECONDS = float(os.getenv("TICK_INTERVAL_SECONDS", "1"))

BREAK_KINDS = os.getenv("BREAK_KINDS", "")

START_BACKGROUND_JOBS = bool(int(os.getenv("START_BACKGROUND_JOBS", "1")))

ADMIN_EMPLOYEE_ID = os.getenv("ADMIN_EMPLOYEE_ID", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
