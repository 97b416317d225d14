"""
File backend: one <username>.json per user plus shared.json.

Layout under the data directory (MONA_DATA_DIR):
    alice.json   {"password": null, "clients": {...}}
    bob.json     {"password": "x", "clients": {...}}
    shared.json  {"<clientId>": {...}, ...}
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path

from mona import paths
from mona.errors import StoreError
from mona.store.base import RecordStore, normalize_username

logger = logging.getLogger(__name__)

SHARED_FILE = "shared.json"
_SAFE_USERNAME_RE = re.compile(r"^[A-Za-z0-9_@ -][A-Za-z0-9_.@ -]*$")


class FileStore(RecordStore):
    backend_name = "file"

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else paths.data_dir()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileStore ready, data dir: %s", self.data_dir)

    def _user_path(self, username: str) -> Path:
        username = normalize_username(username)
        if not _SAFE_USERNAME_RE.match(username):
            raise ValueError(f"Invalid username: {username!r}")
        if f"{username}.json" == SHARED_FILE:
            raise ValueError("Username 'shared' is reserved")
        return self.data_dir / f"{username}.json"

    def _load(self, path: Path):
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StoreError() from e

    def _dump(self, path: Path, payload) -> None:
        """Write via a temp file in the same directory, then rename over."""
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StoreError() from e

    # ==================== Records ====================

    def _read_user(self, username: str) -> dict | None:
        return self._load(self._user_path(username))

    def _write_user(self, username: str, record: dict) -> None:
        self._dump(self._user_path(username), record)

    def _remove_user(self, username: str) -> bool:
        path = self._user_path(username)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreError() from e

    def _usernames(self) -> list[str]:
        return [
            p.stem
            for p in self.data_dir.glob("*.json")
            if p.name != SHARED_FILE and not p.name.startswith(".")
        ]

    # ==================== Shared ====================

    def get_shared_state(self) -> dict:
        return self._load(self.data_dir / SHARED_FILE) or {}

    def put_shared_state(self, clients: dict) -> None:
        self._dump(self.data_dir / SHARED_FILE, clients)
