from __future__ import annotations

import atexit
import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import json_ok, register_error_handlers
from .container import build_container
from .database.bootstrap import apply_schema
from .employees.service import ensure_admin_employee
from .store.document_store import DocumentStore
from .timesync.source import TimeSource

from .attendance.controller import register as register_attendance
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .messages.controller import register as register_messages

logger = logging.getLogger(__name__)


def create_app(*, store: Optional[DocumentStore] = None, time_source: Optional[TimeSource] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Starting timeclock with settings=%s backend=%s", settings_module, getattr(settings, "STORE_BACKEND", "mysql"))

    container = build_container(settings, store=store, time_source=time_source)
    app.extensions["timeclock"] = container

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        if container.conn is not None:
            apply_schema(container.conn)
        admin_id = getattr(settings, "ADMIN_EMPLOYEE_ID", "")
        admin_password = getattr(settings, "ADMIN_PASSWORD", "")
        if admin_id and admin_password:
            ensure_admin_employee(container.employees_repo, employee_id=admin_id, password=admin_password)

    register_error_handlers(app)
    register_employees(app, container)
    register_departments(app, container)
    register_attendance(app, container)
    register_messages(app, container)

    @app.route("/api/health", endpoint="health")
    def health():
        return json_ok(time=container.time_source.now().isoformat(), synced=container.time_source.last_sync is not None)

    if bool(getattr(settings, "START_BACKGROUND_JOBS", False)):
        container.start_background_jobs()
        atexit.register(container.stop_background_jobs)

    return app
