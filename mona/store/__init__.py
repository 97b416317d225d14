"""
Persistence backends.

    from mona.store import get_store
    store = get_store()            # backend from MONA_STORE
    store = get_store("document")  # explicit
"""

from mona import config
from mona.store.base import ClientStore, RecordStore, passwords_match
from mona.store.document_store import DocumentStore
from mona.store.file_store import FileStore
from mona.store.remote_store import RemoteStore

_BACKENDS = {
    "file": FileStore,
    "document": DocumentStore,
    "remote": RemoteStore,
}


def get_store(backend: str | None = None) -> ClientStore:
    """Build the configured store backend."""
    name = (backend or config.STORE_BACKEND).lower()
    try:
        backend_cls = _BACKENDS[name]
    except KeyError:
        raise ValueError(f"Unknown store backend: {name!r}") from None
    return backend_cls()


__all__ = [
    "ClientStore",
    "RecordStore",
    "FileStore",
    "DocumentStore",
    "RemoteStore",
    "get_store",
    "passwords_match",
]
