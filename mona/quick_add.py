"""
Quick-add: one line of free text becomes a task.

    "Acme send deck to Pat tomorrow"
      -> client Acme, task "send deck", assignees ["Pat"], due tomorrow

The task lands in the first deliverable of the client's current ad-hoc
meeting; the deliverable is created when the meeting has none.
"""

import copy
import re
from dataclasses import dataclass, field
from datetime import date, timedelta

from mona import dates
from mona.entities import new_deliverable, new_task
from mona.mutations import ensure_adhoc_meetings

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_ASSIGNEE_RE = re.compile(r"\b(?:to|for)\s+([A-Z][a-z]+)")
_MMDD_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})\b")
_NEXT_RE = re.compile(r"\bnext\s+(\w+)", re.IGNORECASE)
_THIS_RE = re.compile(r"\bthis\s+(\w+)", re.IGNORECASE)
_WEEKDAY_RE = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE)
_STRIP_RES = [
    re.compile(r"\bdue\b", re.IGNORECASE),
    _NEXT_RE,
    re.compile(r"\btomorrow\b", re.IGNORECASE),
    re.compile(r"\btoday\b", re.IGNORECASE),
    _THIS_RE,
    _MMDD_RE,
    _WEEKDAY_RE,
]
_SPACES_RE = re.compile(r"\s+")


@dataclass
class QuickTask:
    client_id: str
    client_name: str
    task: str
    assignees: list[str] = field(default_factory=list)
    due: str = ""


def _upcoming_weekday(today: date, weekday: int) -> date:
    """The weekday on or after today."""
    return today + timedelta(days=(weekday - today.weekday()) % 7)


def _weekday_next_week(today: date, weekday: int) -> date:
    return dates.monday_of(today) + timedelta(days=7 + weekday)


def parse_due_phrase(text: str, today: date | None = None) -> str:
    """Find a due date in free text and return it as "MM/DD" ("" if none)."""
    today = today or date.today()
    lower = text.lower()
    if re.search(r"\btoday\b", lower):
        return dates.format_due(today)
    if re.search(r"\btomorrow\b", lower):
        return dates.format_due(today + timedelta(days=1))

    match = _NEXT_RE.search(lower)
    if match and match.group(1) in WEEKDAYS:
        return dates.format_due(_weekday_next_week(today, WEEKDAYS.index(match.group(1))))
    if match and match.group(1) == "week":
        return dates.format_due(today + timedelta(days=7))

    match = _WEEKDAY_RE.search(lower)
    if match:
        return dates.format_due(_upcoming_weekday(today, WEEKDAYS.index(match.group(1))))

    match = _MMDD_RE.search(lower)
    if match:
        parsed = dates.parse_due(f"{match.group(1)}/{match.group(2)}", today.year)
        if parsed:
            return dates.format_due(parsed)
    return ""


def parse_quick_task(text: str, clients: dict[str, dict], today: date | None = None) -> QuickTask | None:
    """Match the text to a client by name. Returns None when no client is named."""
    lower = text.lower()
    match = next(
        (
            (client_id, client)
            for client_id, client in clients.items()
            if client.get("name") and client["name"].lower() in lower
        ),
        None,
    )
    if match is None:
        return None
    client_id, client = match

    assignee = _ASSIGNEE_RE.search(text)
    due = parse_due_phrase(text, today)

    task = re.sub(re.escape(client["name"]), "", text, count=1, flags=re.IGNORECASE)
    if assignee:
        task = task.replace(assignee.group(0), "", 1)
    for pattern in _STRIP_RES:
        task = pattern.sub("", task)
    task = _SPACES_RE.sub(" ", task).strip()

    return QuickTask(
        client_id=client_id,
        client_name=client["name"],
        task=task or "Untitled Task",
        assignees=[assignee.group(1)] if assignee else [],
        due=due,
    )


def add_quick_task(client: dict, parsed: QuickTask) -> dict:
    """Append the parsed task to the first deliverable of the ad-hoc meeting."""
    updated = copy.deepcopy(ensure_adhoc_meetings(client))
    adhoc = next(m for m in updated["meetings"] if m.get("isAdHoc"))
    deliverables = adhoc.setdefault("deliverables", [])
    if not deliverables:
        deliverables.append(new_deliverable())
    deliverables[0].setdefault("tasks", []).append(
        new_task(parsed.task, parsed.assignees, parsed.due)
    )
    return updated
