from __future__ import annotations

import copy
import threading
import uuid
from typing import Optional, Sequence

from ..core.exceptions import DocumentNotFoundError
from .document_store import ChangeEvent, ChangeKind, DocumentStore, OnChange, Predicate
from .notifier import HubSubscription, SubscriptionHub


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe dict-backed store (tests and the `memory` backend)."""

    def __init__(self):
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}
        self._hub = SubscriptionHub()

    def _docs(self, collection: str) -> dict[str, dict]:
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _out(doc_id: str, doc: dict) -> dict:
        out = copy.deepcopy(doc)
        out["id"] = doc_id
        return out

    @staticmethod
    def _clean(doc: dict) -> dict:
        data = copy.deepcopy(doc)
        data.pop("id", None)
        return data

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            doc = self._docs(collection).get(doc_id)
            return self._out(doc_id, doc) if doc is not None else None

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> Sequence[dict]:
        with self._lock:
            items = [self._out(k, v) for k, v in self._docs(collection).items()]
        if predicate is None:
            return items
        return [d for d in items if predicate(d)]

    def create(self, collection: str, doc: dict, *, doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        data = self._clean(doc)
        with self._lock:
            self._docs(collection)[doc_id] = data
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.CREATED, self._out(doc_id, data)))
        return doc_id

    def create_if_absent(self, collection: str, doc_id: str, doc: dict) -> bool:
        data = self._clean(doc)
        with self._lock:
            docs = self._docs(collection)
            if doc_id in docs:
                return False
            docs[doc_id] = data
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.CREATED, self._out(doc_id, data)))
        return True

    def set(self, collection: str, doc_id: str, doc: dict) -> None:
        data = self._clean(doc)
        with self._lock:
            docs = self._docs(collection)
            previous = docs.get(doc_id)
            docs[doc_id] = data
        kind = ChangeKind.CREATED if previous is None else ChangeKind.UPDATED
        prev_out = self._out(doc_id, previous) if previous is not None else None
        self._hub.publish(ChangeEvent(collection, doc_id, kind, self._out(doc_id, data), prev_out))

    def update(self, collection: str, doc_id: str, partial: dict) -> dict:
        with self._lock:
            docs = self._docs(collection)
            previous = docs.get(doc_id)
            if previous is None:
                raise DocumentNotFoundError(collection, doc_id)
            merged = copy.deepcopy(previous)
            merged.update(self._clean(partial))
            docs[doc_id] = merged
        out = self._out(doc_id, merged)
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.UPDATED, out, self._out(doc_id, previous)))
        return copy.deepcopy(out)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            previous = self._docs(collection).pop(doc_id, None)
        if previous is None:
            return False
        self._hub.publish(ChangeEvent(collection, doc_id, ChangeKind.DELETED, None, self._out(doc_id, previous)))
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
