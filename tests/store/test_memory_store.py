from __future__ import annotations

import pytest

from src.timeclock.timeclock.core.exceptions import DocumentNotFoundError
from src.timeclock.timeclock.store.document_store import ChangeKind
from src.timeclock.timeclock.store.memory import InMemoryDocumentStore


def test_crud(store):
    doc_id = store.create("things", {"name": "a"})

    assert store.get("things", doc_id) == {"name": "a", "id": doc_id}
    assert store.update("things", doc_id, {"size": 2}) == {"name": "a", "size": 2, "id": doc_id}
    assert store.query("things", lambda d: d["size"] == 2)[0]["id"] == doc_id
    assert store.delete("things", doc_id) is True
    assert store.delete("things", doc_id) is False
    assert store.get("things", doc_id) is None


def test_update_of_missing_document_raises(store):
    with pytest.raises(DocumentNotFoundError):
        store.update("things", "ghost", {"x": 1})


def test_create_if_absent_inserts_once(store):
    assert store.create_if_absent("things", "k", {"v": 1}) is True
    assert store.create_if_absent("things", "k", {"v": 2}) is False
    assert store.get("things", "k")["v"] == 1


def test_reads_are_copies(store):
    store.set("things", "k", {"tags": ["a"]})

    store.get("things", "k")["tags"].append("b")

    assert store.get("things", "k")["tags"] == ["a"]


def test_change_events_carry_previous(store):
    events = []
    store.subscribe("things", events.append)

    store.set("things", "k", {"v": 1})
    store.set("things", "k", {"v": 2})
    store.delete("things", "k")

    assert [e.kind for e in events] == [ChangeKind.CREATED, ChangeKind.UPDATED, ChangeKind.DELETED]
    assert events[1].previous["v"] == 1
    assert events[2].data is None
    assert events[2].previous["v"] == 2


def test_doc_and_predicate_subscriptions(store):
    by_id, by_filter = [], []
    store.subscribe("things", by_id.append, doc_id="a")
    store.subscribe("things", by_filter.append, predicate=lambda d: d.get("hot"))

    store.set("things", "a", {"hot": False})
    store.set("things", "b", {"hot": True})
    store.update("things", "b", {"hot": False})
    store.set("other", "a", {"hot": True})

    assert [e.doc_id for e in by_id] == ["a"]
    assert [(e.doc_id, e.data["hot"]) for e in by_filter] == [("b", True), ("b", False)]


def test_failing_observer_does_not_break_writers(store):
    seen = []

    def boom(event):
        raise RuntimeError("observer bug")

    store.subscribe("things", boom)
    store.subscribe("things", seen.append)

    store.set("things", "k", {"v": 1})

    assert len(seen) == 1
    assert store.get("things", "k")["v"] == 1


def test_stores_are_independent():
    a, b = InMemoryDocumentStore(), InMemoryDocumentStore()
    a.set("things", "k", {"v": 1})

    assert b.get("things", "k") is None


def test_query_keeps_insertion_order(store):
    for doc_id in ("b", "c", "a"):
        store.create("attendance", {"n": doc_id}, doc_id=doc_id)
    store.set("attendance", "c", {"n": "c2"})

    assert [d["id"] for d in store.query("attendance")] == ["b", "c", "a"]
