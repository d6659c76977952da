from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.constants import BROADCAST_RECIPIENT, MESSAGES
from ..store.document_store import DocumentStore
from .model import Message


class MessageRepository(Protocol):
    def get(self, message_id: str) -> Optional[Message]:
        raise NotImplementedError

    def add(self, message: Message) -> str:
        raise NotImplementedError

    def list_all(self) -> Sequence[Message]:
        raise NotImplementedError

    def list_for_recipient(self, employee_id: str) -> Sequence[Message]:
        """Direct messages to the employee plus broadcasts, newest first."""

        raise NotImplementedError

    def update(self, message_id: str, fields: dict) -> Message:
        raise NotImplementedError


def _newest_first(docs) -> list:
    ordered = sorted(
        enumerate(Message.from_doc(d) for d in docs), key=lambda p: (p[1].timestamp, p[0]), reverse=True
    )
    return [m for _, m in ordered]


class DocumentMessageRepository(MessageRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, message_id: str) -> Optional[Message]:
        doc = self._store.get(MESSAGES, message_id)
        return Message.from_doc(doc) if doc else None

    def add(self, message: Message) -> str:
        return self._store.create(MESSAGES, message.to_doc())

    def list_all(self) -> Sequence[Message]:
        return _newest_first(self._store.query(MESSAGES))

    def list_for_recipient(self, employee_id: str) -> Sequence[Message]:
        recipients = (employee_id, BROADCAST_RECIPIENT)
        return _newest_first(self._store.query(MESSAGES, lambda d: (d.get("recipientId") or "") in recipients))

    def update(self, message_id: str, fields: dict) -> Message:
        return Message.from_doc(self._store.update(MESSAGES, message_id, fields))
