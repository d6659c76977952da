from __future__ import annotations

from flask import Flask, request, session

from ..common.web import admin_required, current_employee_id, current_role, json_body, json_ok, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.message_service

    @app.route("/api/messages", methods=["GET"], endpoint="messages_inbox")
    @login_required
    def messages_inbox():
        employee_id = current_employee_id()
        unread_only = request.args.get("unread_only", "").lower() in ("1", "true", "yes")
        messages = service.inbox(employee_id, unread_only=unread_only)
        return json_ok(
            messages=[m.public_view(employee_id) for m in messages],
            unread_count=service.unread_count(employee_id),
        )

    @app.route("/api/messages/<message_id>/read", methods=["POST"], endpoint="messages_read")
    @login_required
    def messages_read(message_id: str):
        return json_ok(changed=service.mark_read(current_employee_id(), message_id))

    @app.route("/api/messages/read-all", methods=["POST"], endpoint="messages_read_all")
    @login_required
    def messages_read_all():
        return json_ok(marked=service.mark_all_read(current_employee_id()))

    @app.route("/api/messages/<message_id>/reply", methods=["POST"], endpoint="messages_reply")
    @login_required
    def messages_reply(message_id: str):
        employee_id = current_employee_id()
        message = service.reply(
            employee_id, message_id, json_body().get("message", ""), sender=session.get("name") or employee_id
        )
        return json_ok(message=message.public_view(employee_id))

    @app.route("/api/admin/messages", methods=["GET"], endpoint="admin_messages_list")
    @admin_required
    def admin_messages_list():
        return json_ok(messages=[m.public_view() for m in service.list_sent(current_role=current_role())])

    @app.route("/api/admin/messages", methods=["POST"], endpoint="admin_messages_send")
    @admin_required
    def admin_messages_send():
        data = json_body()
        message = service.send(
            current_role=current_role(),
            sender=session.get("name") or "Admin",
            message=data.get("message", ""),
            recipient_id=data.get("recipient_id"),
        )
        return json_ok(201, message=message.public_view())
