from __future__ import annotations

import pytest

from src.timeclock.timeclock.core.enums import Role
from src.timeclock.timeclock.core.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def messages(container):
    return container.message_service


def test_only_admins_send(messages):
    with pytest.raises(AuthorizationError):
        messages.send(current_role=Role.STAFF, sender="Alice", message="hi", recipient_id="bob")
    with pytest.raises(AuthorizationError):
        messages.list_sent(current_role=Role.STAFF)


def test_send_validates_recipient_and_text(messages):
    with pytest.raises(ValidationError):
        messages.send(current_role=Role.ADMIN, sender="Admin", message="hi", recipient_id="nobody")
    with pytest.raises(ValidationError):
        messages.send(current_role=Role.ADMIN, sender="Admin", message="   ", recipient_id="alice")


def test_inbox_holds_direct_messages_and_broadcasts_newest_first(messages, clock):
    clock.at(9, 0)
    messages.send(current_role=Role.ADMIN, sender="Admin", message="welcome", recipient_id="all_employees")
    clock.at(10, 0)
    messages.send(current_role=Role.ADMIN, sender="Admin", message="see me", recipient_id="alice")
    messages.send(current_role=Role.ADMIN, sender="Admin", message="for bob", recipient_id="bob")

    alice = [m.message for m in messages.inbox("alice")]
    bob = [m.message for m in messages.inbox("bob")]

    assert alice == ["see me", "welcome"]
    assert bob == ["for bob", "welcome"]
    assert [m.message for m in messages.list_sent(current_role=Role.ADMIN)] == ["for bob", "see me", "welcome"]
    assert messages.inbox("alice")[1].is_broadcast


def test_broadcast_is_read_per_employee(messages, clock):
    clock.at(9, 0)
    sent = messages.send(current_role=Role.ADMIN, sender="Admin", message="fire drill at 3", recipient_id=None)

    assert messages.mark_read("alice", sent.message_id) is True
    assert messages.mark_read("alice", sent.message_id) is False

    assert messages.unread_count("alice") == 0
    assert messages.unread_count("bob") == 1
    assert messages.inbox("bob", unread_only=True)[0].message_id == sent.message_id


def test_cannot_read_someone_elses_message(messages, clock):
    sent = messages.send(current_role=Role.ADMIN, sender="Admin", message="private", recipient_id="alice")

    assert messages.mark_read("bob", sent.message_id) is False
    assert messages.mark_read("bob", "missing") is False
    assert messages.inbox("bob") == []


def test_mark_all_read(messages, clock):
    for text in ("one", "two"):
        messages.send(current_role=Role.ADMIN, sender="Admin", message=text, recipient_id="carol")
    messages.send(current_role=Role.ADMIN, sender="Admin", message="all", recipient_id="")

    assert messages.mark_all_read("carol") == 3
    assert messages.unread_count("carol") == 0
    assert messages.unread_count("alice") == 1


def test_reply_to_direct_message(messages, clock):
    clock.at(9, 0)
    sent = messages.send(current_role=Role.ADMIN, sender="Admin", message="late again?", recipient_id="alice")
    clock.at(9, 5)

    updated = messages.reply("alice", sent.message_id, "bus was late", sender="Alice")

    assert updated.reply.message == "bus was late"
    assert updated.reply.sender == "Alice"
    assert updated.reply.timestamp == clock()
    assert updated.is_read_by("alice")
    assert messages.list_sent(current_role=Role.ADMIN)[0].reply.message == "bus was late"


def test_reply_rejects_broadcasts_and_foreign_messages(messages, clock):
    broadcast = messages.send(current_role=Role.ADMIN, sender="Admin", message="all hands", recipient_id="all")
    direct = messages.send(current_role=Role.ADMIN, sender="Admin", message="just alice", recipient_id="alice")

    with pytest.raises(ValidationError):
        messages.reply("alice", broadcast.message_id, "ok", sender="Alice")
    with pytest.raises(ValidationError):
        messages.reply("bob", direct.message_id, "ok", sender="Bob")
    with pytest.raises(ValidationError):
        messages.reply("alice", direct.message_id, "  ", sender="Alice")
