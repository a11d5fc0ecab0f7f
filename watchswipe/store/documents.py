"""
In-process document store.

Two logical collections are used by the app: ``watches`` (the catalog,
read-only after seeding) and ``users`` (one profile document per user id).
Documents are plain dicts; every read and write goes through a deep copy so
callers never share state with the store.
"""
from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Any

WATCHES = "watches"
USERS = "users"


class StoreError(Exception):
    """Base class for document store failures."""


class DocumentNotFound(StoreError):
    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


@dataclass(frozen=True)
class ArrayUnion:
    """Update value: append each of *values* not already in the array."""

    values: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class ArrayRemove:
    """Update value: drop every element equal to one of *values*."""

    values: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class Document:
    id: str
    data: dict[str, Any]


def _apply(current: Any, change: Any) -> Any:
    if isinstance(change, ArrayUnion):
        result = list(current) if isinstance(current, list) else []
        for value in change.values:
            if value not in result:
                result.append(copy.deepcopy(value))
        return result
    if isinstance(change, ArrayRemove):
        if not isinstance(current, list):
            return []
        return [item for item in current if item not in change.values]
    return copy.deepcopy(change)


class DocumentStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def query(
        self,
        collection: str,
        field_name: str | None = None,
        value: Any = None,
    ) -> list[Document]:
        """Return documents whose *field_name* equals *value*, in insertion order.

        Without a field every document in the collection is returned.
        """
        with self._lock:
            docs = self._collections.get(collection, {})
            return [
                Document(doc_id, copy.deepcopy(data))
                for doc_id, data in docs.items()
                if field_name is None or data.get(field_name) == value
            ]

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            if data is None:
                return None
            return Document(doc_id, copy.deepcopy(data))

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create the document, or replace it entirely if it exists."""
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        """Partially update an existing document.

        Values may be ``ArrayUnion`` / ``ArrayRemove`` transforms, applied
        atomically against the stored array.
        """
        with self._lock:
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                raise DocumentNotFound(collection, doc_id)
            current = docs[doc_id]
            for key, change in changes.items():
                current[key] = _apply(current.get(key), change)

    def clear(self, collection: str | None = None) -> None:
        with self._lock:
            if collection is None:
                self._collections.clear()
            else:
                self._collections.pop(collection, None)
