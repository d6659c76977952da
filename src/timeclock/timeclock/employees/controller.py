from __future__ import annotations

from flask import Flask, session

from ..common.web import admin_required, current_employee_id, current_role, json_body, json_error, json_ok, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("employee_id", ""), data.get("password", ""))

        session.clear()
        session["employee_id"] = s_user.employee_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value
        session["department_id"] = s_user.department_id
        return json_ok(employee_id=s_user.employee_id, name=s_user.name, role=s_user.role.value)

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return json_ok()

    @app.route("/api/me", endpoint="me")
    @login_required
    def me():
        employee = container.employee_service.get(current_employee_id())
        if not employee:
            session.clear()
            return json_error("Employee no longer exists", 401)
        return json_ok(employee=employee.public_view())

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @admin_required
    def employees_list():
        employees = container.employee_service.list_all()
        return json_ok(employees=[e.public_view() for e in employees])

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @admin_required
    def employees_create():
        data = json_body()
        employee = container.employee_service.create_employee(
            current_role=current_role(),
            employee_id=data.get("employee_id", ""),
            name=data.get("name", ""),
            password=data.get("password", ""),
            department_id=data.get("department_id"),
            is_admin=bool(data.get("is_admin", False)),
            email=data.get("email"),
        )
        return json_ok(201, employee=employee.public_view())

    @app.route("/api/employees/<employee_id>", methods=["PUT"], endpoint="employees_update")
    @admin_required
    def employees_update(employee_id: str):
        data = json_body()
        employee = container.employee_service.update_employee(
            current_role=current_role(),
            employee_id=employee_id,
            name=data.get("name"),
            password=data.get("password"),
            department_id=data.get("department_id"),
            is_admin=data.get("is_admin"),
            email=data.get("email"),
        )
        return json_ok(employee=employee.public_view())

    @app.route("/api/employees/<employee_id>/disabled", methods=["POST"], endpoint="employees_disable")
    @admin_required
    def employees_disable(employee_id: str):
        disabled = bool(json_body().get("disabled", True))
        employee = container.employee_service.set_disabled(
            current_role=current_role(), employee_id=employee_id, disabled=disabled
        )
        return json_ok(employee=employee.public_view())

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @admin_required
    def employees_delete(employee_id: str):
        container.employee_service.delete_employee(current_role=current_role(), employee_id=employee_id)
        return json_ok()
