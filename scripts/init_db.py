from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timeclock.timeclock.database.bootstrap import apply_schema
from src.timeclock.timeclock.database.connection import DBConfig, DatabaseConnection
from src.timeclock.timeclock.employees.repository import DocumentEmployeeRepository
from src.timeclock.timeclock.employees.service import ensure_admin_employee
from src.timeclock.timeclock.store.mysql_store import MySQLDocumentStore


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = DBConfig.from_dict(dict(settings.DB_CONFIG))
    conn = DatabaseConnection.get_instance(db_config)

    apply_schema(conn)
    created = ensure_admin_employee(
        DocumentEmployeeRepository(MySQLDocumentStore(conn)),
        employee_id=settings.ADMIN_EMPLOYEE_ID,
        password=settings.ADMIN_PASSWORD,
    )
    print(
        "OK: documents table ready -> "
        f"{db_config.user}@{db_config.host}:{db_config.port}/{db_config.database} "
        f"(admin {settings.ADMIN_EMPLOYEE_ID} {'created' if created else 'already exists'})"
    )


if __name__ == "__main__":
    main()
