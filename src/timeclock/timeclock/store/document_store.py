from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

Predicate = Callable[[dict], bool]


class ChangeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """One document create/update/delete. `data` is None for deletes."""

    collection: str
    doc_id: str
    kind: ChangeKind
    data: Optional[dict]
    previous: Optional[dict] = None


OnChange = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class DocumentStore(Protocol):
    """Abstract document store used by every repository.

    Documents are JSON-compatible dicts. Reads return copies that include the
    document id under the "id" key. Change notification is at-least-once.
    """

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        raise NotImplementedError

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> Sequence[dict]:
        """Matching documents in insertion order (an upsert keeps its original place)."""

        raise NotImplementedError

    def create(self, collection: str, doc: dict, *, doc_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def create_if_absent(self, collection: str, doc_id: str, doc: dict) -> bool:
        """Insert only when no document with `doc_id` exists.

        Returns False (and writes nothing) when the id is already taken.
        """

        raise NotImplementedError

    def set(self, collection: str, doc_id: str, doc: dict) -> None:
        """Create or fully replace a document."""

        raise NotImplementedError

    def update(self, collection: str, doc_id: str, partial: dict) -> dict:
        """Merge `partial` into an existing document and return the result.

        Raises DocumentNotFoundError when the document does not exist.
        """

        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    def subscribe(
        self,
        collection: str,
        on_change: OnChange,
        *,
        doc_id: Optional[str] = None,
        predicate: Optional[Predicate] = None,
    ) -> Subscription:
        raise NotImplementedError
