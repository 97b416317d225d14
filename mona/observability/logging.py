"""
Structured logging for the board.

Every record can carry the board it concerns: the request id bound by
CorrelationIdMiddleware, the username whose workspace logged it and the
client id being edited. Workspaces log through a BoardLogger that binds the
username once; call sites add client_id per record:

    log = get_logger(__name__, username="alice")
    log.info("Added client", extra={"client_id": "client-1a2b3c4d"})
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from .context import RequestContext, generate_request_id, get_request_id

# Board fields, emitted in this order ahead of any other extras
BOARD_FIELDS = ("username", "client_id")

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    )
)


def board_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Board context attached to a record, in BOARD_FIELDS order."""
    return {
        key: getattr(record, key) for key in BOARD_FIELDS if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    {
        "timestamp": "2026-03-15T10:30:00.000Z",
        "level": "INFO",
        "logger": "mona.workspace",
        "message": "Added client",
        "request_id": "req-0123456789abcdef",
        "username": "alice",
        "client_id": "client-1a2b3c4d"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_obj["request_id"] = request_id
        log_obj.update(board_fields(record))

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_obj:
                log_obj[key] = value

        return json.dumps(log_obj, default=str)


class HumanFormatter(logging.Formatter):
    """Terminal lines: `time [LEVEL] logger: [request] user/client message`."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        request_id = get_request_id()
        rid_str = f"[{request_id[:12]}] " if request_id else ""
        board = "/".join(str(v) for v in board_fields(record).values())
        board_str = f"{board} " if board else ""
        line = (
            f"{timestamp} [{record.levelname}] {record.name}: "
            f"{rid_str}{board_str}{record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class BoardLogger(logging.LoggerAdapter):
    """Logger adapter that stamps bound board fields on every record.

    Per-call `extra` is merged over the bound fields rather than replacing
    them.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format. If None, auto-detect based on environment.
    """
    if json_format is None:
        # JSON when not attached to a terminal
        json_format = not sys.stderr.isatty()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    root_logger.addHandler(handler)


def get_logger(name: str, **board) -> BoardLogger:
    """Logger for `name` with board fields (username, client_id) bound."""
    return BoardLogger(logging.getLogger(name), board)


class CorrelationIdMiddleware:
    """
    ASGI middleware that puts a request ID in context for every HTTP request.

    Honors an incoming X-Request-ID header and echoes the ID back.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = None
        for key, value in scope.get("headers", []):
            if key.lower() == b"x-request-id":
                request_id = value.decode("latin-1") or None
                break

        if not request_id:
            request_id = generate_request_id()

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        with RequestContext(request_id=request_id):
            await self.app(scope, receive, send_with_request_id)
