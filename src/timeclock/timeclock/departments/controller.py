from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, current_role, json_body, json_error, json_ok, login_required
from ..container import Container
from ..core.constants import (
    DEFAULT_CLOCK_IN,
    DEFAULT_CLOCK_OUT,
    DEFAULT_DEPARTMENT_TIMEZONE,
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_OVERTIME_THRESHOLD_MINUTES,
)
from ..departments.model import Department
from ..departments.service import build_schedule


def _to_json(d: Department) -> dict:
    doc = d.to_doc()
    doc["id"] = d.department_id
    return doc


def register(app: Flask, container: Container) -> None:
    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @login_required
    def departments_list():
        return json_ok(departments=[_to_json(d) for d in container.department_service.list_all()])

    @app.route("/api/departments/<department_id>", methods=["GET"], endpoint="departments_get")
    @login_required
    def departments_get(department_id: str):
        department = container.department_service.get(department_id)
        if not department:
            return json_error("Department does not exist", 404)
        return json_ok(department=_to_json(department))

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @admin_required
    def departments_create():
        data = json_body()
        schedule = build_schedule(
            clock_in=data.get("clock_in", DEFAULT_CLOCK_IN),
            clock_out=data.get("clock_out", DEFAULT_CLOCK_OUT),
            grace_period=data.get("grace_period", DEFAULT_GRACE_PERIOD_MINUTES),
            overtime_threshold=data.get("overtime_threshold", DEFAULT_OVERTIME_THRESHOLD_MINUTES),
        )
        department = container.department_service.create(
            current_role=current_role(),
            name=data.get("name", ""),
            timezone=data.get("timezone") or DEFAULT_DEPARTMENT_TIMEZONE,
            schedule=schedule,
        )
        return json_ok(201, department=_to_json(department))

    @app.route("/api/departments/<department_id>", methods=["PUT"], endpoint="departments_update")
    @admin_required
    def departments_update(department_id: str):
        data = json_body()
        schedule = None
        if any(k in data for k in ("clock_in", "clock_out", "grace_period", "overtime_threshold")):
            current = container.department_service.get(department_id)
            if not current:
                return json_error("Department does not exist", 404)
            base = current.schedule.to_doc()
            schedule = build_schedule(
                clock_in=data.get("clock_in", base["clockIn"]),
                clock_out=data.get("clock_out", base["clockOut"]),
                grace_period=data.get("grace_period", base["gracePeriod"]),
                overtime_threshold=data.get("overtime_threshold", base["overtimeThreshold"]),
            )
        department = container.department_service.update(
            current_role=current_role(),
            department_id=department_id,
            name=data.get("name"),
            timezone=data.get("timezone"),
            schedule=schedule,
        )
        return json_ok(department=_to_json(department))

    @app.route("/api/departments/<department_id>", methods=["DELETE"], endpoint="departments_delete")
    @admin_required
    def departments_delete(department_id: str):
        container.department_service.delete(current_role=current_role(), department_id=department_id)
        return json_ok()
