"""
Remote backend: the store contract spoken over the Mona HTTP API.

Lets a Workspace run as a client session against a running server, the way
the browser board does. Any httpx.Client works as transport, including
FastAPI's TestClient.
"""

import logging

import httpx

from mona import config
from mona.errors import InvalidCredentials, StoreError, UserExists, UserNotFound
from mona.store.base import ClientStore, normalize_username

logger = logging.getLogger(__name__)


class RemoteStore(ClientStore):
    backend_name = "remote"

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        admin_token: str | None = None,
        timeout: float | None = None,
    ):
        self._http = client or httpx.Client(
            base_url=base_url or config.REMOTE_URL,
            timeout=timeout or config.REMOTE_TIMEOUT_SECONDS,
        )
        self._admin_headers = {"Authorization": f"Bearer {admin_token}"} if admin_token else {}

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, url: str, username: str | None = None, **kwargs):
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise StoreError() from e

        if response.status_code < 400:
            return response.json() if response.content else None

        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = response.text
        status = response.status_code
        if status == 404:
            raise UserNotFound(username or "")
        if status == 409:
            raise UserExists(username or "")
        if status in (401, 403):
            raise InvalidCredentials(detail if isinstance(detail, str) else None)
        if status in (400, 422):
            raise ValueError(detail if isinstance(detail, str) else "Invalid request")
        logger.error(f"{method} {url} returned {status}: {detail}")
        raise StoreError()

    def create_user(self, username: str, password: str | None = None) -> None:
        username = normalize_username(username)
        self._request(
            "POST", "/api/create", username, json={"username": username, "password": password}
        )

    def authenticate(self, username: str, password: str | None = None) -> dict:
        username = normalize_username(username)
        body = self._request(
            "POST", "/api/login", username, json={"username": username, "password": password}
        )
        return {"clients": body.get("clients") or {}}

    def list_users(self) -> list[dict]:
        return self._request("GET", "/api/users")

    def get_user_state(self, username: str) -> dict:
        username = normalize_username(username)
        return {"clients": self._request("GET", f"/api/data/{username}", username) or {}}

    def put_user_state(self, username: str, clients: dict) -> None:
        username = normalize_username(username)
        self._request("POST", f"/api/data/{username}", username, json=clients)

    def get_shared_state(self) -> dict:
        return self._request("GET", "/api/shared") or {}

    def put_shared_state(self, clients: dict) -> None:
        self._request("POST", "/api/shared", json=clients)

    def delete_user(self, username: str) -> None:
        username = normalize_username(username)
        self._request("DELETE", f"/api/users/{username}", username, headers=self._admin_headers)

    def set_password(self, username: str, password: str | None) -> None:
        username = normalize_username(username)
        self._request(
            "PUT",
            f"/api/users/{username}",
            username,
            json={"password": password},
            headers=self._admin_headers,
        )
