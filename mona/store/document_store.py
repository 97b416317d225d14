"""
Document backend: SQLite table of per-user JSON documents plus one shared
document. Same contract as the file backend; passwords never leave the store.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from mona import paths
from mona.errors import StoreError
from mona.store.base import RecordStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    username TEXT PRIMARY KEY,
    password TEXT,
    clients TEXT NOT NULL DEFAULT '{}',
    updated_at TEXT
);
CREATE TABLE IF NOT EXISTS shared_state (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    clients TEXT NOT NULL DEFAULT '{}',
    updated_at TEXT
);
"""


def _now() -> str:
    return datetime.now(UTC).isoformat()


class DocumentStore(RecordStore):
    backend_name = "document"

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = str(db_path or paths.db_path())
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._get_conn() as conn:
            conn.executescript(SCHEMA)
        logger.info("DocumentStore ready, DB path: %s", self.db_path)

    @contextmanager
    def _get_conn(self):
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError() from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"DocumentStore error on {self.db_path}: {e}")
            raise StoreError() from e
        finally:
            conn.close()

    @staticmethod
    def _decode(raw: str | None) -> dict:
        try:
            return json.loads(raw) if raw else {}
        except json.JSONDecodeError as e:
            raise StoreError() from e

    # ==================== Records ====================

    def _read_user(self, username: str) -> dict | None:
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT password, clients FROM users WHERE username = ?", [username]
            ).fetchone()
        if row is None:
            return None
        return {"password": row["password"], "clients": self._decode(row["clients"])}

    def _write_user(self, username: str, record: dict) -> None:
        with self._get_conn() as conn:
            conn.execute(
                "INSERT INTO users (username, password, clients, updated_at) VALUES (?, ?, ?, ?) "
                "ON CONFLICT(username) DO UPDATE SET password = excluded.password, "
                "clients = excluded.clients, updated_at = excluded.updated_at",
                [username, record.get("password"), json.dumps(record.get("clients") or {}), _now()],
            )

    def _remove_user(self, username: str) -> bool:
        with self._get_conn() as conn:
            cursor = conn.execute("DELETE FROM users WHERE username = ?", [username])
            return cursor.rowcount > 0

    def _usernames(self) -> list[str]:
        with self._get_conn() as conn:
            return [row["username"] for row in conn.execute("SELECT username FROM users")]

    # ==================== Shared ====================

    def get_shared_state(self) -> dict:
        with self._get_conn() as conn:
            row = conn.execute("SELECT clients FROM shared_state WHERE id = 1").fetchone()
        return self._decode(row["clients"]) if row else {}

    def put_shared_state(self, clients: dict) -> None:
        with self._get_conn() as conn:
            conn.execute(
                "INSERT INTO shared_state (id, clients, updated_at) VALUES (1, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET clients = excluded.clients, "
                "updated_at = excluded.updated_at",
                [json.dumps(clients), _now()],
            )
