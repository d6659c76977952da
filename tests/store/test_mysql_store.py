from __future__ import annotations

import mysql.connector
import pytest

from src.timeclock.timeclock.core.exceptions import DocumentNotFoundError, StorageError
from src.timeclock.timeclock.database.connection import DBConfig
from src.timeclock.timeclock.store.document_store import ChangeKind
from src.timeclock.timeclock.store.mysql_store import MySQLDocumentStore


class FakeCursor:
    """Understands just the statements the document store issues."""

    def __init__(self, table: dict):
        self._table = table
        self._rows = []
        self.rowcount = 0

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        if sql.startswith("SELECT body"):
            collection, doc_id = params
            body = self._table.get((collection, doc_id))
            self._rows = [{"body": body}] if body is not None else []
        elif sql.startswith("SELECT doc_id, body"):
            assert sql.endswith("ORDER BY seq")
            (collection,) = params
            # dict order stands in for the AUTO_INCREMENT seq column
            self._rows = [{"doc_id": k[1], "body": v} for k, v in self._table.items() if k[0] == collection]
        elif sql.startswith("INSERT IGNORE"):
            collection, doc_id, body = params
            self.rowcount = 0
            if (collection, doc_id) not in self._table:
                self._table[(collection, doc_id)] = body
                self.rowcount = 1
        elif sql.startswith("INSERT INTO") and "ON DUPLICATE KEY" in sql:
            collection, doc_id, body = params
            self._table[(collection, doc_id)] = body
        elif sql.startswith("INSERT INTO"):
            collection, doc_id, body = params
            if (collection, doc_id) in self._table:
                raise mysql.connector.IntegrityError(msg="Duplicate entry")
            self._table[(collection, doc_id)] = body
        elif sql.startswith("UPDATE documents"):
            body, collection, doc_id = params
            self._table[(collection, doc_id)] = body
        elif sql.startswith("DELETE FROM"):
            self._table.pop(tuple(params), None)
        else:
            raise AssertionError(f"unexpected SQL: {sql}")

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, factory):
        self._factory = factory
        self._pending = dict(factory.table)

    def cursor(self, dictionary=True):
        return FakeCursor(self._pending)

    def commit(self):
        self._factory.table = dict(self._pending)
        self._factory.commits += 1

    def rollback(self):
        self._factory.rollbacks += 1

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, available=True):
        self.table = {}
        self.commits = 0
        self.rollbacks = 0
        self.available = available
        self.config = DBConfig.from_dict({})

    def connect(self, *, with_database=True):
        if not self.available:
            raise mysql.connector.InterfaceError(msg="Can't connect to MySQL server")
        return FakeConnection(self)


@pytest.fixture
def factory():
    return FakeConnectionFactory()


@pytest.fixture
def mysql_store(factory):
    return MySQLDocumentStore(factory)


def test_documents_round_trip_as_json(mysql_store):
    doc_id = mysql_store.create("employees", {"name": "Alice", "id": "ignored"}, doc_id="alice")

    assert doc_id == "alice"
    assert mysql_store.get("employees", "alice") == {"name": "Alice", "id": "alice"}
    assert mysql_store.update("employees", "alice", {"disabled": True}) == {"name": "Alice", "disabled": True, "id": "alice"}
    assert [d["id"] for d in mysql_store.query("employees", lambda d: d["disabled"])] == ["alice"]


def test_insert_if_absent(mysql_store):
    assert mysql_store.create_if_absent("attendanceSummary", "shift-1", {"v": 1}) is True
    assert mysql_store.create_if_absent("attendanceSummary", "shift-1", {"v": 2}) is False
    assert mysql_store.get("attendanceSummary", "shift-1")["v"] == 1


def test_update_missing_document_rolls_back(mysql_store, factory):
    with pytest.raises(DocumentNotFoundError):
        mysql_store.update("status", "ghost", {"status": "Working"})

    assert factory.rollbacks == 1


def test_duplicate_create_is_a_storage_error(mysql_store, factory):
    mysql_store.create("employees", {"name": "A"}, doc_id="a")

    with pytest.raises(StorageError):
        mysql_store.create("employees", {"name": "B"}, doc_id="a")
    assert mysql_store.get("employees", "a")["name"] == "A"


def test_unreachable_database_is_a_storage_error():
    store = MySQLDocumentStore(FakeConnectionFactory(available=False))

    with pytest.raises(StorageError):
        store.get("status", "alice")


def test_writes_notify_subscribers(mysql_store):
    events = []
    mysql_store.subscribe("status", events.append, doc_id="alice")

    mysql_store.set("status", "alice", {"status": "Working"})
    mysql_store.set("status", "alice", {"status": "Standby"})
    assert mysql_store.delete("status", "alice") is True
    assert mysql_store.delete("status", "alice") is False

    assert [e.kind for e in events] == [ChangeKind.CREATED, ChangeKind.UPDATED, ChangeKind.DELETED]
    assert events[1].previous["status"] == "Working"
    assert events[2].previous["status"] == "Standby"


def test_query_follows_insertion_order(mysql_store):
    for doc_id in ("b", "c", "a"):
        mysql_store.create("attendance", {"n": doc_id}, doc_id=doc_id)

    assert [d["id"] for d in mysql_store.query("attendance")] == ["b", "c", "a"]
