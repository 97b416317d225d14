"""
Identifiers: timestamp ids, client ids and `::`-joined composite paths.
"""

import secrets
import string
import threading
import time
from dataclasses import dataclass

SEPARATOR = "::"

_BASE36 = string.digits + string.ascii_lowercase
_last_timestamp_id = 0
_timestamp_lock = threading.Lock()


def timestamp_id() -> str:
    """Millisecond-timestamp id for meetings, deliverables and tasks.

    Strictly increasing within the process, so two adds in the same
    millisecond never collide.
    """
    global _last_timestamp_id
    with _timestamp_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_timestamp_id:
            candidate = _last_timestamp_id + 1
        _last_timestamp_id = candidate
    return str(candidate)


def new_client_id() -> str:
    return "client-" + "".join(secrets.choice(_BASE36) for _ in range(8))


def composite_id(*parts: str) -> str:
    return SEPARATOR.join(parts)


def split_composite_id(value: str, parts: int) -> list[str]:
    """Split a composite id, requiring exactly `parts` non-empty segments."""
    segments = value.split(SEPARATOR)
    if len(segments) != parts or not all(segments):
        raise ValueError(f"Expected {parts}-part composite id, got {value!r}")
    return segments


@dataclass(frozen=True)
class DeliverablePath:
    client_id: str
    meeting_id: str
    deliverable_id: str

    @property
    def composite(self) -> str:
        return composite_id(self.client_id, self.meeting_id, self.deliverable_id)

    @classmethod
    def parse(cls, value: str) -> "DeliverablePath":
        return cls(*split_composite_id(value, 3))


@dataclass(frozen=True)
class TaskPath:
    client_id: str
    meeting_id: str
    deliverable_id: str
    task_id: str

    @property
    def composite(self) -> str:
        return composite_id(self.client_id, self.meeting_id, self.deliverable_id, self.task_id)

    @property
    def deliverable(self) -> DeliverablePath:
        return DeliverablePath(self.client_id, self.meeting_id, self.deliverable_id)

    @classmethod
    def parse(cls, value: str) -> "TaskPath":
        return cls(*split_composite_id(value, 4))
