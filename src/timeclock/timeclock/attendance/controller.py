from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.web import admin_required, current_employee_id, current_role, json_body, json_error, json_ok, login_required
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .model import EmployeeStatus
from .state import EmployeeState


def _status_json(status: Optional[EmployeeStatus]) -> dict:
    if status is None:
        return {"status": EmployeeState.clocked_out().label}
    return status.to_doc()


def _limit() -> int:
    try:
        return max(1, int(request.args.get("limit", DEFAULT_HISTORY_LIMIT)))
    except ValueError:
        return DEFAULT_HISTORY_LIMIT


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def transition_result(status: Optional[EmployeeStatus]):
        # None is a guarded no-op (redundant trigger), not an error
        if status is None:
            return json_ok(changed=False, status=_status_json(service.get_status(current_employee_id())))
        return json_ok(changed=True, status=_status_json(status))

    @app.route("/api/attendance/status", endpoint="attendance_status")
    @login_required
    def attendance_status():
        return json_ok(status=_status_json(service.get_status(current_employee_id())))

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        return transition_result(service.clock_in(current_employee_id()))

    @app.route("/api/attendance/break", methods=["POST"], endpoint="toggle_break")
    @login_required
    def toggle_break():
        kind = json_body().get("kind")
        if not kind:
            return json_error("Break kind is required", 400)
        return transition_result(service.toggle_break(current_employee_id(), kind))

    @app.route("/api/attendance/standby", methods=["POST"], endpoint="toggle_standby")
    @login_required
    def toggle_standby():
        return transition_result(service.toggle_standby(current_employee_id()))

    @app.route("/api/attendance/resume", methods=["POST"], endpoint="resume_working")
    @login_required
    def resume_working():
        return transition_result(service.resume_working(current_employee_id()))

    @app.route("/api/attendance/idle", methods=["POST"], endpoint="report_idle")
    @login_required
    def report_idle():
        return transition_result(service.report_idle(current_employee_id()))

    @app.route("/api/attendance/guards", methods=["POST"], endpoint="evaluate_guards")
    @login_required
    def evaluate_guards():
        status = service.evaluate_guards(current_employee_id())
        return json_ok(status=_status_json(status))

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        summary = service.clock_out(current_employee_id())
        if summary is None:
            return json_ok(changed=False, summary=None)
        return json_ok(changed=True, summary=summary.to_doc())

    @app.route("/api/attendance/buzz/ack", methods=["POST"], endpoint="acknowledge_buzz")
    @login_required
    def acknowledge_buzz():
        return json_ok(changed=service.acknowledge_buzz(current_employee_id()))

    @app.route("/api/attendance/history", endpoint="attendance_history")
    @login_required
    def attendance_history():
        return json_ok(history=service.get_history_ui(current_employee_id(), limit=_limit()))

    @app.route("/api/attendance/summaries", endpoint="attendance_summaries")
    @login_required
    def attendance_summaries():
        return json_ok(summaries=service.get_summaries_ui(current_employee_id()))

    # ---- admin monitoring ----

    @app.route("/api/admin/active", endpoint="admin_active")
    @admin_required
    def admin_active():
        rows = container.admin_monitor_service.active_employees(current_role=current_role())
        return json_ok(employees=[r.to_dict() for r in rows])

    @app.route("/api/admin/break-alerts", endpoint="admin_break_alerts")
    @admin_required
    def admin_break_alerts():
        rows = container.admin_monitor_service.break_alerts(current_role=current_role())
        return json_ok(employees=[r.to_dict() for r in rows])

    @app.route("/api/admin/employees/<employee_id>/activity", endpoint="admin_employee_activity")
    @admin_required
    def admin_employee_activity(employee_id: str):
        row = container.admin_monitor_service.employee_activity(employee_id, current_role=current_role())
        return json_ok(activity=row.to_dict() if row else None)

    @app.route("/api/admin/employees/<employee_id>/history", endpoint="admin_employee_history")
    @admin_required
    def admin_employee_history(employee_id: str):
        return json_ok(
            history=service.get_history_ui(employee_id, limit=_limit()),
            summaries=service.get_summaries_ui(employee_id),
        )

    @app.route("/api/admin/employees/<employee_id>/force-clock-out", methods=["POST"], endpoint="admin_force_clock_out")
    @admin_required
    def admin_force_clock_out(employee_id: str):
        return json_ok(changed=service.force_clock_out(employee_id, current_role=current_role()))

    @app.route("/api/admin/employees/<employee_id>/buzz", methods=["POST"], endpoint="admin_buzz")
    @admin_required
    def admin_buzz(employee_id: str):
        return json_ok(changed=service.buzz(employee_id, current_role=current_role()))
