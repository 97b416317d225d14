"""
Centralized configuration for Mona.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Server
# ============================================================

PORT: int = int(os.environ.get("MONA_PORT") or os.environ.get("PORT") or 3001)
"""HTTP listener port. MONA_PORT wins over the generic PORT."""

HOST: str = os.environ.get("MONA_HOST", "0.0.0.0")  # noqa: S104

CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "*")
"""Comma-separated allowed origins, or * for any."""

# MONA_ADMIN_TOKEN is read per request by api.auth.

# ============================================================
# Persistence
# ============================================================

STORE_BACKEND: str = os.environ.get("MONA_STORE", "file")
"""Which persistence backend to use: 'file' or 'document'."""

REMOTE_URL: str = os.environ.get("MONA_REMOTE_URL", "http://localhost:3001")
"""Base URL used by the remote store when a session talks to a running server."""

REMOTE_TIMEOUT_SECONDS: float = float(os.environ.get("MONA_REMOTE_TIMEOUT", "10"))

SNAPSHOT_TTL_SECONDS: int = int(os.environ.get("MONA_SNAPSHOT_TTL_SECONDS", "3600"))
"""How long a last-known-good user snapshot may serve as a fallback."""

# ============================================================
# Board behaviour
# ============================================================

UNDO_WINDOW_SECONDS: float = float(os.environ.get("MONA_UNDO_WINDOW_SECONDS", "4.0"))
"""Undo window offered after marking a task complete."""

OUTBOX_MAX_RETRIES: int = int(os.environ.get("MONA_OUTBOX_MAX_RETRIES", "3"))

LOGO_FETCH_TIMEOUT_SECONDS: float = float(os.environ.get("MONA_LOGO_TIMEOUT", "5"))

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("MONA_LOG_LEVEL", "INFO")

_log_json = os.environ.get("MONA_LOG_JSON")
LOG_JSON: bool | None = None if _log_json is None else _log_json.lower() in ("1", "true", "yes")
"""Force JSON (true) or human (false) log lines. Unset = detect from TTY."""
