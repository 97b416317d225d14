"""
Observability: structured logging tagged with request id, username and client.

    from mona.observability import get_logger

    log = get_logger(__name__, username="alice")
    log.info("Added client", extra={"client_id": "client-1a2b3c4d"})
"""

from .context import RequestContext, get_request_id
from .logging import (
    BoardLogger,
    CorrelationIdMiddleware,
    HumanFormatter,
    JSONFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "BoardLogger",
    "CorrelationIdMiddleware",
    "HumanFormatter",
    "JSONFormatter",
    "RequestContext",
    "configure_logging",
    "get_logger",
    "get_request_id",
]
