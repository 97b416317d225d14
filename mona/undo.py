"""
Soft task completion with an undo window.

Marking a task complete hides it from the open-task views at once and starts
a timer. Undo inside the window cancels the timer and nothing is written;
when the timer fires the completion goes through the Mutation Protocol.
"""

import logging
import threading
from collections.abc import Callable

from mona import config
from mona.ids import TaskPath

logger = logging.getLogger(__name__)


def daemon_timer(seconds: float, callback: Callable[[], None]) -> threading.Timer:
    """threading.Timer that never keeps the process alive on shutdown."""
    timer = threading.Timer(seconds, callback)
    timer.daemon = True
    return timer


class _Pending:
    __slots__ = ("path", "timer", "cancelled")

    def __init__(self, path: TaskPath):
        self.path = path
        self.timer = None
        self.cancelled = False


class CompletionUndoQueue:
    """Pending completions keyed by composite task id.

    `commit` receives the TaskPath when a window closes without undo.
    `timer_factory(seconds, callback)` must return an object with start() and
    cancel(); tests pass a fake and drive it with flush(). The default timers
    are daemon threads, so open windows do not hold the process at exit: call
    flush() first to commit them.
    """

    def __init__(
        self,
        commit: Callable[[TaskPath], object],
        window: float | None = None,
        timer_factory: Callable = daemon_timer,
    ):
        self._commit = commit
        self.window = config.UNDO_WINDOW_SECONDS if window is None else window
        self._timer_factory = timer_factory
        self._pending: dict[str, _Pending] = {}
        self._lock = threading.Lock()

    @property
    def hidden(self) -> frozenset[str]:
        """Composite ids hidden from open-task views while their window runs."""
        with self._lock:
            return frozenset(self._pending)

    def stage(self, path: TaskPath) -> None:
        key = path.composite
        with self._lock:
            if key in self._pending:
                return
            pending = _Pending(path)
            pending.timer = self._timer_factory(self.window, lambda: self._fire(key))
            self._pending[key] = pending
        pending.timer.start()
        logger.debug(f"Staged completion of {key} ({self.window}s undo window)")

    def undo(self, path: TaskPath | str) -> bool:
        """Cancel a staged completion. Returns False if the window already closed."""
        key = path if isinstance(path, str) else path.composite
        with self._lock:
            pending = self._pending.pop(key, None)
        if pending is None:
            return False
        pending.cancelled = True
        pending.timer.cancel()
        logger.debug(f"Undid completion of {key}")
        return True

    def _take(self, key: str) -> _Pending | None:
        with self._lock:
            pending = self._pending.pop(key, None)
        if pending is None or pending.cancelled:
            return None
        return pending

    def _fire(self, key: str) -> None:
        # Runs on the timer thread: nobody is there to catch.
        pending = self._take(key)
        if pending is None:
            return
        try:
            self._commit(pending.path)
        except Exception:
            logger.exception(f"Committing completion of {key} failed")

    def flush(self) -> int:
        """Close every open window now. Returns how many completions committed.

        Commit errors propagate to the caller.
        """
        with self._lock:
            keys = list(self._pending)
        committed = 0
        for key in keys:
            pending = self._take(key)
            if pending is None:
                continue
            pending.timer.cancel()
            self._commit(pending.path)
            committed += 1
        return committed
