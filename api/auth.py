"""
Admin authentication for Mona.

User deletion and password resets are guarded by MONA_ADMIN_TOKEN. Board
routes are not: a board session is identified by the username in the path.

Token extraction order:
1. Authorization: Bearer <token> header
2. X-API-Token header
3. api_token query parameter (for testing)

Usage:
    from api.auth import require_admin

    @router.delete("/users/{username}", dependencies=[Depends(require_admin)])
    def delete_user(username: str):
        ...
"""

import logging
import os
import secrets

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)


def _get_token_from_env() -> str | None:
    """Get the expected admin token from environment."""
    return os.environ.get("MONA_ADMIN_TOKEN") or None


def _get_token_from_request(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]  # Strip "Bearer "

    x_token = request.headers.get("X-API-Token")
    if x_token:
        return x_token

    return request.query_params.get("api_token") or None


async def require_admin(
    request: Request, credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> str:
    """
    Dependency that requires the admin token.

    Returns the validated token on success.
    Raises HTTPException 401 on failure.

    If MONA_ADMIN_TOKEN is not set, WARNS but allows (development mode).
    """
    expected_token = _get_token_from_env()
    if not expected_token:
        logger.warning(
            "MONA_ADMIN_TOKEN not set - admin routes are unprotected! "
            "Set it in production."
        )
        return "auth_disabled"

    provided_token = _get_token_from_request(request)
    if not provided_token:
        logger.warning(f"Admin auth failed: no token provided for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Bearer token in Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Constant-time comparison
    if not secrets.compare_digest(provided_token, expected_token):
        logger.warning(f"Admin auth failed: invalid token for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return provided_token


def is_auth_enabled() -> bool:
    """Check if admin authentication is configured."""
    return bool(_get_token_from_env())
