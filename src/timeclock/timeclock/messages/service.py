from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import BROADCAST_RECIPIENT
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DocumentNotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..timesync.source import TimeSource
from .model import Message, MessageReply
from .repository import MessageRepository

logger = logging.getLogger(__name__)

# Older clients address broadcasts this way.
_BROADCAST_ALIASES = {BROADCAST_RECIPIENT, "all", "all_employees"}


class MessageService:
    """Use case: admin notes to one employee or to everybody, and the employee inbox."""

    def __init__(self, messages: MessageRepository, employees: EmployeeRepository, *, time_source: TimeSource):
        self._messages = messages
        self._employees = employees
        self._time = time_source

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Administrator access required")

    def send(
        self, *, current_role: Role, sender: str, message: str, recipient_id: Optional[str] = None
    ) -> Message:
        self._require_admin(current_role)
        text = require_non_empty(message, "Message")

        recipient = (recipient_id or "").strip()
        if recipient in _BROADCAST_ALIASES:
            recipient = BROADCAST_RECIPIENT
        elif not self._employees.get_by_id(recipient):
            raise ValidationError("Recipient does not exist")

        draft = Message(sender=sender or "Admin", message=text, timestamp=self._time.now(), recipient_id=recipient)
        message_id = self._messages.add(draft)
        logger.info("Message %s sent to %s", message_id, recipient or "all employees")
        return replace(draft, message_id=message_id)

    def list_sent(self, *, current_role: Role) -> Sequence[Message]:
        self._require_admin(current_role)
        return self._messages.list_all()

    def inbox(self, employee_id: str, *, unread_only: bool = False) -> Sequence[Message]:
        messages = self._messages.list_for_recipient(employee_id)
        if unread_only:
            return [m for m in messages if not m.is_read_by(employee_id)]
        return messages

    def unread_count(self, employee_id: str) -> int:
        return len(self.inbox(employee_id, unread_only=True))

    def mark_read(self, employee_id: str, message_id: str) -> bool:
        """False when the message is unknown, not for this employee or already read."""

        message = self._messages.get(message_id)
        if message is None or not message.is_addressed_to(employee_id) or message.is_read_by(employee_id):
            return False
        try:
            self._messages.update(message_id, {"readBy": list(message.read_by) + [employee_id]})
        except DocumentNotFoundError:
            return False
        return True

    def mark_all_read(self, employee_id: str) -> int:
        return sum(1 for m in self.inbox(employee_id, unread_only=True) if self.mark_read(employee_id, m.message_id))

    def reply(self, employee_id: str, message_id: str, text: str, *, sender: str) -> Message:
        text = require_non_empty(text, "Reply")
        message = self._messages.get(message_id)
        if message is None or not message.is_addressed_to(employee_id):
            raise ValidationError("Message not found")
        if message.is_broadcast:
            raise ValidationError("Broadcast messages cannot be replied to")

        reply = MessageReply(sender=sender or employee_id, message=text, timestamp=self._time.now())
        read_by = list(message.read_by)
        if employee_id not in read_by:
            read_by.append(employee_id)
        updated = self._messages.update(message_id, {"reply": reply.to_doc(), "readBy": read_by})
        logger.info("%s replied to message %s", employee_id, message_id)
        return updated
