from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .document_store import ChangeEvent, OnChange, Predicate

logger = logging.getLogger(__name__)


@dataclass
class _Observer:
    key: int
    collection: str
    on_change: OnChange
    doc_id: Optional[str]
    predicate: Optional[Predicate]

    def wants(self, event: ChangeEvent) -> bool:
        if event.collection != self.collection:
            return False
        if self.doc_id is not None and event.doc_id != self.doc_id:
            return False
        if self.predicate is None:
            return True
        # A predicate observer also hears about documents leaving its filter.
        return any(doc is not None and self.predicate(doc) for doc in (event.data, event.previous))


class HubSubscription:
    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._cancel()


class SubscriptionHub:
    """In-process fan-out of store change events to observers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._observers: dict[int, _Observer] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        collection: str,
        on_change: OnChange,
        *,
        doc_id: Optional[str] = None,
        predicate: Optional[Predicate] = None,
    ) -> HubSubscription:
        key = next(self._ids)
        with self._lock:
            self._observers[key] = _Observer(key, collection, on_change, doc_id, predicate)
        return HubSubscription(lambda: self._remove(key))

    def _remove(self, key: int) -> None:
        with self._lock:
            self._observers.pop(key, None)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            observers = [o for o in self._observers.values() if o.wants(event)]

        for observer in observers:
            try:
                observer.on_change(event)
            except Exception:
                logger.exception("Observer failed for %s/%s (%s)", event.collection, event.doc_id, event.kind.value)
