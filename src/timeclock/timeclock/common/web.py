from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, StorageError, ValidationError

logger = logging.getLogger(__name__)


def json_ok(status_code: int = 200, **payload):
    body = {"success": True}
    body.update(payload)
    return jsonify(body), status_code


def json_error(message: str, status_code: int):
    return jsonify({"success": False, "message": message}), status_code


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def current_employee_id() -> str:
    return str(session["employee_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role", Role.STAFF.value))
    except ValueError:
        return Role.STAFF


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return json_error("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return json_error("Please log in to continue", 401)
        if current_role() != Role.ADMIN:
            return json_error("Administrator access required", 403)
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return json_error(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def handle_authentication(e):
        return json_error(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def handle_authorization(e):
        return json_error(str(e), 403)

    @app.errorhandler(StorageError)
    def handle_storage(e):
        logger.error("Storage failure on %s %s: %s", request.method, request.path, e)
        return json_error("Storage is temporarily unavailable, please retry", 503)
