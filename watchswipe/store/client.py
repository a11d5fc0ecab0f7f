from __future__ import annotations

from ..catalog.data_store import seed_catalog
from .documents import DocumentStore

_store: DocumentStore | None = None


def get_store() -> DocumentStore:
    """Return the process-wide document store, seeding the catalog on first call."""
    global _store
    if _store is None:
        store = DocumentStore()
        seed_catalog(store)
        _store = store
    return _store
