"""
Entity tree: Client -> Meeting -> Deliverable -> Task.

Entities are plain JSON-compatible dicts, exactly as they travel to and from
the persistence layer. This module holds the constants, factories and derived
predicates; mutations live in mona.mutations.
"""

import re
from enum import Enum
from typing import Any

from mona import ids


class Bucket(str, Enum):
    """Workflow stage a deliverable occupies on the bucket board."""

    UNASSIGNED = "Unassigned"
    DOWNSTREAM = "Downstream"
    ACTIVE_WORK = "Active Work"
    UPSTREAM = "Upstream"
    INTERNAL = "Internal"
    COMPLETE = "Complete"


# Board column order
BUCKETS: list[str] = [b.value for b in Bucket]

ADHOC_MEETING_ID = "adhoc"
ADHOC_PAST_MEETING_ID = "adhoc_past"

MEETING_LISTS = ("meetings", "pastMeetings")

DEFAULT_CLIENT_NAME = "Unnamed Client"
DEFAULT_BASE_COLOR = "#4A5568"
DEFAULT_HEADER_COLOR = "#F7FAFC"
DEFAULT_SIDEBAR_COLOR = "#EDF2F7"

STATUS_OPTIONS: dict[str, list[str]] = {
    "sector": ["Tech", "Life Sci", "Other"],
    "status": ["Active", "On Hold", "Other"],
    "type": ["Public", "Private"],
}
DEFAULT_STATUS: dict[str, int] = {"sector": 0, "status": 0, "type": 0}

_LOGO_HOST = "https://logo.clearbit.com"
_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w]", re.ASCII)


def is_bucket(name: Any) -> bool:
    return isinstance(name, str) and name in BUCKETS


def new_adhoc_meeting(past: bool = False) -> dict:
    return {
        "id": ADHOC_PAST_MEETING_ID if past else ADHOC_MEETING_ID,
        "isAdHoc": True,
        "name": "",
        "date": "",
        "deliverables": [],
    }


def new_client(owner: str, name: str = DEFAULT_CLIENT_NAME, client_id: str | None = None) -> dict:
    return {
        "id": client_id or ids.new_client_id(),
        "name": name,
        "logo": "",
        "baseColor": DEFAULT_BASE_COLOR,
        "headerColor": DEFAULT_HEADER_COLOR,
        "sidebarColor": DEFAULT_SIDEBAR_COLOR,
        "team": [],
        "status": {},
        "notes": "",
        "shared": False,
        "owner": owner,
        "meetings": [new_adhoc_meeting()],
        "pastMeetings": [new_adhoc_meeting(past=True)],
    }


def new_meeting(name: str = "", date: str = "") -> dict:
    return {
        "id": ids.timestamp_id(),
        "date": date,
        "name": name,
        "isAdHoc": False,
        "deliverables": [],
    }


def new_deliverable(name: str = "", bucket: str = Bucket.UNASSIGNED.value) -> dict:
    return {
        "id": ids.timestamp_id(),
        "name": name,
        "bucket": bucket,
        "tasks": [],
        "isDeliverableComplete": False,
    }


def new_task(name: str = "", assignees: list[str] | None = None, due: str = "") -> dict:
    return {
        "id": ids.timestamp_id(),
        "name": name,
        "assignees": list(assignees or []),
        "due": due,
        "complete": False,
    }


def iter_meetings(client: dict):
    """Yield (list_key, meeting) over meetings then pastMeetings."""
    for list_key in MEETING_LISTS:
        for meeting in client.get(list_key) or []:
            if meeting:
                yield list_key, meeting


def is_deliverable_complete(deliverable: dict) -> bool:
    """Derived: at least one task and every task complete."""
    tasks = deliverable.get("tasks") or []
    return len(tasks) > 0 and all(t.get("complete") for t in tasks)


def is_meeting_complete(meeting: dict) -> bool:
    """Derived: a real meeting whose deliverables are all derived-complete."""
    if meeting.get("isAdHoc"):
        return False
    deliverables = meeting.get("deliverables") or []
    return len(deliverables) > 0 and all(is_deliverable_complete(d) for d in deliverables)


def logo_url(client: dict) -> str:
    """The client's logo, or a Clearbit URL guessed from its name."""
    logo = (client.get("logo") or "").strip()
    if logo:
        return logo
    return clearbit_url(client.get("name") or "")


def clearbit_url(name: str) -> str:
    domain = _NON_WORD_RE.sub("", _WHITESPACE_RE.sub("", name.lower()))
    return f"{_LOGO_HOST}/{domain}.com"


def task_assignees(task: dict) -> list[str]:
    """`assignees`, else the legacy single `assignee`, else Unassigned."""
    assignees = task.get("assignees")
    if isinstance(assignees, list):
        return list(assignees)
    return [task.get("assignee") or "Unassigned"]


def client_status(client: dict) -> dict[str, int]:
    return {**DEFAULT_STATUS, **(client.get("status") or {})}


def status_labels(client: dict) -> dict[str, str]:
    """Human labels for the client's status badges."""
    labels = {}
    for key, index in client_status(client).items():
        options = STATUS_OPTIONS.get(key)
        if options:
            labels[key] = options[index % len(options)]
    return labels
