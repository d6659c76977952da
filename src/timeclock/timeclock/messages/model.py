from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import from_iso, to_iso
from ..core.constants import BROADCAST_RECIPIENT


@dataclass(frozen=True)
class MessageReply:
    sender: str
    message: str
    timestamp: datetime

    def to_doc(self) -> dict:
        return {"sender": self.sender, "message": self.message, "timestamp": to_iso(self.timestamp)}

    @classmethod
    def from_doc(cls, doc: dict) -> "MessageReply":
        return cls(sender=doc.get("sender") or "", message=doc.get("message") or "", timestamp=from_iso(doc["timestamp"]))


@dataclass(frozen=True)
class Message:
    """Admin-to-employee note.

    A broadcast has an empty recipient and is read per employee, so `read_by`
    holds every employee who has opened it.
    """

    sender: str
    message: str
    timestamp: datetime
    recipient_id: str = BROADCAST_RECIPIENT
    read_by: tuple = ()
    reply: Optional[MessageReply] = None
    message_id: Optional[str] = None

    @property
    def is_broadcast(self) -> bool:
        return self.recipient_id == BROADCAST_RECIPIENT

    def is_addressed_to(self, employee_id: str) -> bool:
        return self.is_broadcast or self.recipient_id == employee_id

    def is_read_by(self, employee_id: str) -> bool:
        return employee_id in self.read_by

    def to_doc(self) -> dict:
        return {
            "sender": self.sender,
            "message": self.message,
            "timestamp": to_iso(self.timestamp),
            "recipientId": self.recipient_id,
            "readBy": list(self.read_by),
            "reply": self.reply.to_doc() if self.reply else None,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> "Message":
        reply = doc.get("reply")
        return cls(
            sender=doc.get("sender") or "",
            message=doc.get("message") or "",
            timestamp=from_iso(doc["timestamp"]),
            recipient_id=doc.get("recipientId") or BROADCAST_RECIPIENT,
            read_by=tuple(doc.get("readBy") or ()),
            reply=MessageReply.from_doc(reply) if reply else None,
            message_id=doc.get("id"),
        )

    def public_view(self, employee_id: Optional[str] = None) -> dict:
        view = {
            "id": self.message_id,
            "sender": self.sender,
            "message": self.message,
            "timestamp": to_iso(self.timestamp),
            "recipient_id": self.recipient_id,
            "broadcast": self.is_broadcast,
            "reply": self.reply.to_doc() if self.reply else None,
        }
        if employee_id is None:
            view["read_by"] = list(self.read_by)
        else:
            view["read"] = self.is_read_by(employee_id)
        return view
