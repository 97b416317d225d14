"""
Retry with exponential backoff for persistence writes.

Provides:
- RetryConfig: Configuration for retry behavior
- retry_with_backoff: run a callable, retrying StoreError with backoff and jitter
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from mona.errors import StoreError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior with exponential backoff."""

    max_retries: int = 3
    base_delay: float = 0.5  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0


def retry_with_backoff(
    func: Callable[[], T],
    config: RetryConfig,
    logger_: logging.Logger | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute a function with exponential backoff and jitter.

    Only StoreError is retried; anything else propagates at once.

    Raises:
        The last StoreError if all retries are exhausted
    """
    log = logger_ or logger
    last_error: StoreError | None = None

    for attempt in range(config.max_retries + 1):
        try:
            return func()
        except StoreError as e:
            last_error = e
            if attempt < config.max_retries:
                delay = min(config.base_delay * (config.exponential_base**attempt), config.max_delay)
                actual_delay = delay + random.uniform(0, delay * 0.1)  # noqa: S311
                log.warning(f"Attempt {attempt + 1} failed: {e}. Retrying in {actual_delay:.1f}s")
                sleep(actual_delay)

    log.error(f"All {config.max_retries + 1} attempts failed")
    raise last_error
