"""
Outbox for writes the store did not acknowledge.

A failed save is not rolled back in memory: the board keeps showing the
edit, and the full-replacement payload is parked here. Writes to the same
target coalesce, since only the newest full replacement matters. Nothing
retries on its own; flush() replays the parked writes with backoff.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from mona import config
from mona.errors import StoreError
from mona.resilience import RetryConfig, retry_with_backoff
from mona.store.base import ClientStore

logger = logging.getLogger(__name__)

SHARED_TARGET = "shared"


def user_target(username: str) -> str:
    return f"user:{username}"


@dataclass
class PendingWrite:
    """A full-replacement write waiting for acknowledgement."""

    target: str
    payload: dict
    error: str = ""
    attempts: int = 1
    queued_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "error": self.error,
            "attempts": self.attempts,
            "queued_at": self.queued_at,
        }


class Outbox:
    def __init__(
        self,
        store: ClientStore,
        retry_config: RetryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.retry_config = retry_config or RetryConfig(max_retries=config.OUTBOX_MAX_RETRIES)
        self._sleep = sleep
        self._pending: dict[str, PendingWrite] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def pending(self) -> list[PendingWrite]:
        return list(self._pending.values())

    def park(self, target: str, payload: dict, error: Exception) -> None:
        previous = self._pending.get(target)
        attempts = previous.attempts + 1 if previous else 1
        self._pending[target] = PendingWrite(target, payload, str(error), attempts)
        logger.error(f"Write to {target} failed ({error}); parked, attempt {attempts}")

    def discard(self, target: str) -> None:
        """Drop a parked write superseded by a newer acknowledged one."""
        self._pending.pop(target, None)

    def _send(self, write: PendingWrite) -> None:
        if write.target == SHARED_TARGET:
            self.store.put_shared_state(write.payload)
        else:
            self.store.put_user_state(write.target.split(":", 1)[1], write.payload)

    def flush(self) -> int:
        """Replay parked writes. Returns how many were acknowledged."""
        delivered = 0
        for write in list(self._pending.values()):
            try:
                retry_with_backoff(lambda w=write: self._send(w), self.retry_config, logger, self._sleep)
            except StoreError as e:
                write.attempts += self.retry_config.max_retries + 1
                write.error = str(e)
                continue
            self._pending.pop(write.target, None)
            delivered += 1
        if delivered:
            logger.info(f"Outbox delivered {delivered} write(s), {len(self._pending)} pending")
        return delivered
