"""
Shared dependencies for the API routers.

The store is resolved once per process from configuration; tests swap it
with `app.dependency_overrides[get_store]`.
"""

import logging

from fastapi import Depends, HTTPException

from mona.errors import (
    Conflict,
    InvalidCredentials,
    MonaError,
    NotFound,
    PermissionDenied,
    StoreError,
)
from mona.snapshots import SnapshotCache
from mona.store import ClientStore
from mona.store import get_store as build_store
from mona.workspace import Workspace

logger = logging.getLogger(__name__)

_store: ClientStore | None = None
_snapshots = SnapshotCache()


def get_store() -> ClientStore:
    global _store
    if _store is None:
        _store = build_store()
        logger.info(f"Using {_store.backend_name} store")
    return _store


def get_workspace(username: str, store: ClientStore = Depends(get_store)) -> Workspace:
    """A freshly loaded working copy for the user named in the path."""
    try:
        workspace = Workspace(username, store, snapshots=_snapshots)
        workspace.load()
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    return workspace


def http_error(e: Exception) -> HTTPException:
    """Translate a domain error into the HTTP status the board expects."""
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, Conflict):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (InvalidCredentials, PermissionDenied)):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, StoreError):
        logger.error(f"Store failure: {e.__cause__ or e}")
        return HTTPException(status_code=500, detail=StoreError.message)
    logger.exception("Unexpected error")
    return HTTPException(status_code=500, detail=StoreError.message)
