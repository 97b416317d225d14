"""
Data API Router - whole-map reads and full-replacement writes.

These are the persistence endpoints the board (and RemoteStore) speak:
every write replaces a user's entire personal map or the entire shared map.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from api.deps import get_store, http_error
from api.response_models import MutationResponse, SaveRequest
from mona.errors import MonaError, PermissionDenied
from mona.store import ClientStore

logger = logging.getLogger(__name__)

data_router = APIRouter(prefix="/api", tags=["Data"])


@data_router.get("/data/{username}")
def get_user_clients(username: str, store: ClientStore = Depends(get_store)) -> dict[str, Any]:
    """The user's personal client map."""
    try:
        return store.get_user_state(username)["clients"]
    except (MonaError, ValueError) as e:
        raise http_error(e) from e


@data_router.post("/data/{username}", response_model=MutationResponse)
def put_user_clients(
    username: str,
    clients: dict[str, Any] = Body(...),
    store: ClientStore = Depends(get_store),
) -> dict:
    """Replace the user's personal client map."""
    try:
        store.put_user_state(username, clients)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    logger.info(f"Saved {len(clients)} client(s) for {username}")
    return {"success": True}


@data_router.post("/save", response_model=MutationResponse)
def save(body: SaveRequest, store: ClientStore = Depends(get_store)) -> dict:
    """Legacy form of POST /data/{username}."""
    try:
        store.put_user_state(body.username, body.clients)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    return {"success": True}


@data_router.get("/shared")
def get_shared_clients(store: ClientStore = Depends(get_store)) -> dict[str, Any]:
    try:
        return store.get_shared_state()
    except MonaError as e:
        raise http_error(e) from e


@data_router.post("/shared", response_model=MutationResponse)
def put_shared_clients(
    clients: dict[str, Any] = Body(...), store: ClientStore = Depends(get_store)
) -> dict:
    """Replace the whole shared map."""
    try:
        store.put_shared_state(clients)
    except MonaError as e:
        raise http_error(e) from e
    return {"success": True}


@data_router.post("/shared/{client_id}", response_model=MutationResponse)
def put_shared_client(
    client_id: str,
    client: dict[str, Any] = Body(...),
    username: str = Query(..., description="Who is writing; must own the client"),
    store: ClientStore = Depends(get_store),
) -> dict:
    """Upsert one shared client, keeping every other entry."""
    try:
        shared = store.get_shared_state()
        owner = (shared.get(client_id) or {}).get("owner")
        if owner and owner != username:
            raise PermissionDenied(f"{client_id} is shared by {owner}; only the owner can edit it")
        shared[client_id] = {**client, "id": client_id, "shared": True, "owner": owner or username}
        store.put_shared_state(shared)
    except MonaError as e:
        raise http_error(e) from e
    return {"success": True}
