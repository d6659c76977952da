from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.exceptions import DocumentNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .document_store import ChangeEvent, ChangeKind, DocumentStore, OnChange, Predicate
from .notifier import HubSubscription, SubscriptionHub


class MySQLDocumentStore(DocumentStore):
    """Documents stored as JSON rows in the `documents` table.

    Change notifications cover writes made through this instance (the hosting
    process); other processes sharing the database are not observed.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._hub = SubscriptionHub()

    @staticmethod
    def _out(doc_id: str, body: dict) -> dict:
        out = dict(body)
        out["id"] = doc_id
        return out

    @staticmethod
    def _clean(doc: dict) -> dict:
        data = dict(doc)
        data.pop("id", None)
        return data

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT body FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._out(doc_id, load_json(r["body"]))

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, body FROM documents WHERE collection=%s ORDER BY seq",
                (collection,),
            )
            rows = fetchall(cur)
        docs = [self._out(r["doc_id"], load_json(r["body"])) for r in rows]
        if predicate is None:
            return docs
        return [d for d in docs if predicate(d)]

    def create(self, collection: str, doc: dict, *, doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        data = self._clean(doc)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO documents (collection, doc_id, body) VALUES (%s, %s, %s)",
                (collection, doc_id, dump_json(data)),
            )
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.CREATED, self._out(doc_id, data)))
        return doc_id

    def create_if_absent(self, collection: str, doc_id: str, doc: dict) -> bool:
        data = self._clean(doc)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO documents (collection, doc_id, body) VALUES (%s, %s, %s)",
                (collection, doc_id, dump_json(data)),
            )
            inserted = cur.rowcount == 1
        if inserted:
            self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.CREATED, self._out(doc_id, data)))
        return inserted

    def set(self, collection: str, doc_id: str, doc: dict) -> None:
        data = self._clean(doc)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT body FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                (collection, doc_id),
            )
            previous = fetchone(cur)
            cur.execute(
                """
                INSERT INTO documents (collection, doc_id, body) VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE body=VALUES(body)
                """,
                (collection, doc_id, dump_json(data)),
            )
        prev_out = self._out(doc_id, load_json(previous["body"])) if previous else None
        kind = ChangeKind.UPDATED if previous else ChangeKind.CREATED
        self._hub.publish(ChangeEvent(collection, doc_id, kind, self._out(doc_id, data), prev_out))

    def update(self, collection: str, doc_id: str, partial: dict) -> dict:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT body FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                raise DocumentNotFoundError(collection, doc_id)
            previous = load_json(r["body"])
            merged = dict(previous)
            merged.update(self._clean(partial))
            cur.execute(
                "UPDATE documents SET body=%s WHERE collection=%s AND doc_id=%s",
                (dump_json(merged), collection, doc_id),
            )
        out = self._out(doc_id, merged)
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.UPDATED, out, self._out(doc_id, previous)))
        return dict(out)

    def delete(self, collection: str, doc_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT body FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                return False
            cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
        previous = self._out(doc_id, load_json(r["body"]))
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.DELETED, None, previous))
        return True

    def subscribe(
        self,
        collection: str,
        on_change: OnChange,
        *,
        doc_id: Optional[str] = None,
        predicate: Optional[Predicate] = None,
    ) -> HubSubscription:
        return self._hub.subscribe(collection, on_change, doc_id=doc_id, predicate=predicate)
