"""
Persistence contract shared by every backend.

One JSON object per user ({password, clients}) plus one shared object holding
shared clients. Every write is a full replacement: no merges, no partial
updates, no transactions. The last writer wins.
"""

import logging
from abc import ABC, abstractmethod

from mona.errors import InvalidCredentials, UserExists, UserNotFound

logger = logging.getLogger(__name__)


def normalize_username(username: str | None) -> str:
    name = (username or "").strip()
    if not name:
        raise ValueError("Username required")
    return name


def passwords_match(stored: str | None, supplied: str | None) -> bool:
    """Plaintext comparison. An empty stored password only matches an empty one."""
    if not stored and not supplied:
        return True
    return stored == supplied


class ClientStore(ABC):
    """What the board needs from persistence."""

    backend_name = "abstract"

    @abstractmethod
    def create_user(self, username: str, password: str | None = None) -> None:
        """Create an account with an empty client map. Raises UserExists."""

    @abstractmethod
    def authenticate(self, username: str, password: str | None = None) -> dict:
        """Check credentials and return {"clients": {...}}.

        Raises UserNotFound or InvalidCredentials.
        """

    @abstractmethod
    def list_users(self) -> list[dict]:
        """[{username, hasPassword}] - never the password itself."""

    @abstractmethod
    def get_user_state(self, username: str) -> dict:
        """{"clients": {...}} for the user. Raises UserNotFound."""

    @abstractmethod
    def put_user_state(self, username: str, clients: dict) -> None:
        """Replace the user's whole client map. Raises UserNotFound."""

    @abstractmethod
    def get_shared_state(self) -> dict:
        """The shared client map (empty when nothing is shared yet)."""

    @abstractmethod
    def put_shared_state(self, clients: dict) -> None:
        """Replace the whole shared client map."""

    @abstractmethod
    def delete_user(self, username: str) -> None:
        """Remove an account and its clients. Raises UserNotFound."""

    @abstractmethod
    def set_password(self, username: str, password: str | None) -> None:
        """Reset (or clear) a user's password. Raises UserNotFound."""


class RecordStore(ClientStore):
    """ClientStore over per-user records; backends supply the record I/O."""

    @abstractmethod
    def _read_user(self, username: str) -> dict | None:
        """The user's {password, clients} record, or None."""

    @abstractmethod
    def _write_user(self, username: str, record: dict) -> None:
        """Persist the user's whole record."""

    @abstractmethod
    def _remove_user(self, username: str) -> bool:
        """Delete the record. Returns False when there was none."""

    @abstractmethod
    def _usernames(self) -> list[str]:
        """All stored usernames."""

    def _require_user(self, username: str) -> dict:
        username = normalize_username(username)
        record = self._read_user(username)
        if record is None:
            raise UserNotFound(username)
        return record

    def create_user(self, username: str, password: str | None = None) -> None:
        username = normalize_username(username)
        if self._read_user(username) is not None:
            raise UserExists(username)
        self._write_user(username, {"password": password or None, "clients": {}})
        logger.info(f"Created user {username} ({self.backend_name})")

    def authenticate(self, username: str, password: str | None = None) -> dict:
        record = self._require_user(username)
        if not passwords_match(record.get("password"), password):
            logger.warning(f"Incorrect password for {username}")
            raise InvalidCredentials()
        return {"clients": record.get("clients") or {}}

    def list_users(self) -> list[dict]:
        users = []
        for username in sorted(self._usernames()):
            record = self._read_user(username) or {}
            users.append({"username": username, "hasPassword": bool(record.get("password"))})
        return users

    def get_user_state(self, username: str) -> dict:
        return {"clients": self._require_user(username).get("clients") or {}}

    def put_user_state(self, username: str, clients: dict) -> None:
        record = self._require_user(username)
        record["clients"] = clients
        self._write_user(normalize_username(username), record)

    def delete_user(self, username: str) -> None:
        username = normalize_username(username)
        if not self._remove_user(username):
            raise UserNotFound(username)
        logger.info(f"Deleted user {username} ({self.backend_name})")

    def set_password(self, username: str, password: str | None) -> None:
        record = self._require_user(username)
        record["password"] = password or None
        self._write_user(normalize_username(username), record)
        logger.info(f"Password reset for {username}")
