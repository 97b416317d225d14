"""
Accounts API Router - user creation, login and admin user management.

Provides endpoints for:
- Creating accounts (with or without a password)
- Logging in, which returns the user's personal clients
- Listing users for the login screen
- Resetting passwords and deleting users (admin token)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.auth import require_admin
from api.deps import get_store, http_error
from api.response_models import (
    Credentials,
    LoginResponse,
    MutationResponse,
    PasswordReset,
    UserSummary,
)
from mona.errors import MonaError
from mona.store import ClientStore

logger = logging.getLogger(__name__)

account_router = APIRouter(prefix="/api", tags=["Accounts"])


def _create(body: Credentials, store: ClientStore) -> dict:
    try:
        store.create_user(body.username, body.password)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    return {"success": True}


@account_router.post("/create", response_model=MutationResponse)
def create_account(body: Credentials, store: ClientStore = Depends(get_store)) -> dict:
    """Create an account with an empty client map."""
    return _create(body, store)


@account_router.post("/create-user", response_model=MutationResponse)
def create_user(body: Credentials, store: ClientStore = Depends(get_store)) -> dict:
    """Alias of /create used by the login screen's admin panel."""
    return _create(body, store)


@account_router.post("/login", response_model=LoginResponse)
def login(body: Credentials, store: ClientStore = Depends(get_store)) -> dict:
    try:
        return store.authenticate(body.username, body.password)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e


@account_router.get("/users", response_model=list[UserSummary])
def list_users(store: ClientStore = Depends(get_store)) -> list[dict]:
    try:
        return store.list_users()
    except MonaError as e:
        raise http_error(e) from e


@account_router.put(
    "/users/{username}", response_model=MutationResponse, dependencies=[Depends(require_admin)]
)
def reset_password(
    username: str, body: PasswordReset, store: ClientStore = Depends(get_store)
) -> dict:
    try:
        store.set_password(username, body.password)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    return {"success": True}


@account_router.delete(
    "/users/{username}", response_model=MutationResponse, dependencies=[Depends(require_admin)]
)
def delete_user(username: str, store: ClientStore = Depends(get_store)) -> dict:
    if not username.strip():
        raise HTTPException(status_code=400, detail="Username required")
    try:
        store.delete_user(username)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    return {"success": True}
