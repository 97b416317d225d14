from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "MONA_HOME"
APP_ENV_DATA_DIR = "MONA_DATA_DIR"
APP_ENV_DB = "MONA_DB"


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains mona/, api/, cli/, tests/.
    """
    return Path(__file__).parent.parent.resolve()


def app_home() -> Path:
    """
    User-writable home for Mona.
    Override with MONA_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".mona").resolve()


def data_dir() -> Path:
    """
    Directory holding the file backend's <username>.json and shared.json.

    Resolution order:
    1. MONA_DATA_DIR env var (explicit override)
    2. ~/.mona/data (default)
    """
    if os.environ.get(APP_ENV_DATA_DIR):
        d = Path(os.environ[APP_ENV_DATA_DIR]).expanduser().resolve()
    else:
        d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    """
    SQLite path for the document backend.

    Resolution order:
    1. MONA_DB env var (explicit override)
    2. ~/.mona/data/mona.db (default)
    """
    if os.environ.get(APP_ENV_DB):
        return Path(os.environ[APP_ENV_DB]).expanduser().resolve()
    return data_dir() / "mona.db"
