"""
Mutation Protocol - pure edits on one client.

Every function takes the current client dict and returns the edited client.
The input is never touched: edits happen on a deep copy, so views still
reading the previous tree never observe a half-applied change. When an edit
turns out to be a no-op the input object itself is returned, which callers
use to skip the write.

A path link that does not resolve raises EntityNotFound.
"""

import copy
import logging
from datetime import date

from mona import dates
from mona.entities import (
    MEETING_LISTS,
    STATUS_OPTIONS,
    Bucket,
    client_status,
    is_bucket,
    new_adhoc_meeting,
)
from mona.errors import EntityNotFound
from mona.index import ClientIndex

logger = logging.getLogger(__name__)

TASK_FIELDS = frozenset({"name", "assignees", "due", "complete"})
DELIVERABLE_FIELDS = frozenset({"name", "bucket"})
MEETING_FIELDS = frozenset({"name", "date"})


def _edit(client: dict) -> tuple[dict, ClientIndex]:
    updated = copy.deepcopy(client)
    return updated, ClientIndex(updated)


def _check_fields(changes: dict, allowed: frozenset, kind: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Cannot set {', '.join(sorted(unknown))} on a {kind}")


def _move(items: list, old_index: int, new_index: int) -> None:
    if not (0 <= old_index < len(items) and 0 <= new_index < len(items)):
        raise ValueError(f"Reorder index out of range: {old_index} -> {new_index}")
    items.insert(new_index, items.pop(old_index))


# ==================== Ad-hoc repair ====================


def ensure_adhoc_meetings(client: dict) -> dict:
    """Guarantee one ad-hoc meeting at the head of each meeting list.

    Idempotent: a client that already has both comes back as the same object.
    """
    missing = [
        list_key
        for list_key in MEETING_LISTS
        if not any(m and m.get("isAdHoc") for m in client.get(list_key) or [])
    ]
    if not missing:
        return client

    updated = copy.deepcopy(client)
    for list_key in missing:
        past = list_key == "pastMeetings"
        updated[list_key] = [new_adhoc_meeting(past=past)] + list(updated.get(list_key) or [])
    logger.info(f"Repaired ad-hoc meetings for client {client.get('id')}: {missing}")
    return updated


# ==================== Tasks ====================


def update_task(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    task_id: str,
    list_key: str | None = None,
    **changes,
) -> dict:
    _check_fields(changes, TASK_FIELDS, "task")
    if "assignees" in changes:
        changes["assignees"] = [a for a in changes["assignees"] if a is not None]
    updated, index = _edit(client)
    task = index.task(meeting_id, deliverable_id, task_id, list_key)
    task.update(changes)
    if "assignees" in changes:
        task.pop("assignee", None)
    return updated


def set_task_complete(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    task_id: str,
    complete: bool = True,
    list_key: str | None = None,
) -> dict:
    return update_task(
        client, meeting_id, deliverable_id, task_id, list_key=list_key, complete=complete
    )


def reschedule_task(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    task_id: str,
    day_key: str,
    list_key: str | None = None,
) -> dict:
    """Drop a task on a calendar/week day: the day key becomes its MM/DD due."""
    return update_task(
        client,
        meeting_id,
        deliverable_id,
        task_id,
        list_key=list_key,
        due=dates.due_from_day_key(day_key),
    )


def add_task(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    task: dict,
    list_key: str | None = None,
) -> dict:
    updated, index = _edit(client)
    deliverable = index.deliverable(meeting_id, deliverable_id, list_key)
    deliverable.setdefault("tasks", []).append(copy.deepcopy(task))
    return updated


def delete_task(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    task_id: str,
    list_key: str | None = None,
) -> dict:
    updated, index = _edit(client)
    index.task(meeting_id, deliverable_id, task_id, list_key)
    deliverable = index.deliverable(meeting_id, deliverable_id, list_key)
    deliverable["tasks"] = [t for t in deliverable["tasks"] if t.get("id") != task_id]
    return updated


def reorder_tasks(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    old_index: int,
    new_index: int,
    list_key: str | None = None,
) -> dict:
    updated, index = _edit(client)
    deliverable = index.deliverable(meeting_id, deliverable_id, list_key)
    _move(deliverable.setdefault("tasks", []), old_index, new_index)
    return updated


# ==================== Deliverables ====================


def update_deliverable(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    list_key: str | None = None,
    **changes,
) -> dict:
    _check_fields(changes, DELIVERABLE_FIELDS, "deliverable")
    if "bucket" in changes and not is_bucket(changes["bucket"]):
        raise ValueError(f"Unknown bucket: {changes['bucket']!r}")
    updated, index = _edit(client)
    index.deliverable(meeting_id, deliverable_id, list_key).update(changes)
    return updated


def rebucket_deliverable(
    client: dict,
    meeting_id: str,
    deliverable_id: str,
    bucket: str,
    list_key: str | None = None,
) -> dict:
    """Drop a deliverable on a bucket column.

    Unrecognized drop targets and drops onto the current bucket are ignored.
    """
    if not is_bucket(bucket):
        logger.warning(f"Ignoring drop on unknown bucket {bucket!r}")
        return client
    current = ClientIndex(client).deliverable(meeting_id, deliverable_id, list_key)
    if (current.get("bucket") or Bucket.UNASSIGNED.value) == bucket:
        return client
    return update_deliverable(client, meeting_id, deliverable_id, list_key, bucket=bucket)


def complete_deliverable(
    client: dict, meeting_id: str, deliverable_id: str, list_key: str | None = None
) -> dict:
    """Flag a deliverable done on the bucket board. One-way: nothing unsets it."""
    updated, index = _edit(client)
    index.deliverable(meeting_id, deliverable_id, list_key)["isDeliverableComplete"] = True
    return updated


def add_deliverable(
    client: dict, meeting_id: str, deliverable: dict, list_key: str | None = None
) -> dict:
    updated, index = _edit(client)
    meeting = index.meeting(meeting_id, list_key)
    meeting.setdefault("deliverables", []).append(copy.deepcopy(deliverable))
    return updated


def add_adhoc_deliverable(client: dict, deliverable: dict, past: bool = False) -> dict:
    client = ensure_adhoc_meetings(client)
    list_key = "pastMeetings" if past else "meetings"
    adhoc = next(m for m in client[list_key] if m.get("isAdHoc"))
    return add_deliverable(client, adhoc["id"], deliverable, list_key)


def delete_deliverable(
    client: dict, meeting_id: str, deliverable_id: str, list_key: str | None = None
) -> dict:
    updated, index = _edit(client)
    index.deliverable(meeting_id, deliverable_id, list_key)
    meeting = index.meeting(meeting_id, list_key)
    meeting["deliverables"] = [d for d in meeting["deliverables"] if d.get("id") != deliverable_id]
    return updated


def reorder_deliverables(
    client: dict,
    meeting_id: str,
    old_index: int,
    new_index: int,
    list_key: str | None = None,
) -> dict:
    updated, index = _edit(client)
    _move(index.meeting(meeting_id, list_key).setdefault("deliverables", []), old_index, new_index)
    return updated


def move_deliverable(
    client: dict,
    from_meeting_id: str,
    deliverable_id: str,
    to_meeting_id: str,
    list_key: str = "meetings",
) -> dict:
    """Drag a deliverable from one meeting card to another in the same list."""
    if from_meeting_id == to_meeting_id:
        return client
    updated, index = _edit(client)
    source = index.meeting(from_meeting_id, list_key)
    target = index.meeting(to_meeting_id, list_key)
    deliverable = index.deliverable(from_meeting_id, deliverable_id, list_key)
    source["deliverables"] = [d for d in source["deliverables"] if d.get("id") != deliverable_id]
    target.setdefault("deliverables", []).append(deliverable)
    return updated


def move_adhoc_deliverable(client: dict, deliverable_id: str, to_past: bool = True) -> dict:
    """Archive an ad-hoc deliverable to the past ad-hoc meeting, or bring it back."""
    client = ensure_adhoc_meetings(client)
    updated, index = _edit(client)
    source_list, target_list = ("meetings", "pastMeetings") if to_past else ("pastMeetings", "meetings")
    source = next(m for m in updated[source_list] if m.get("isAdHoc"))
    target = next(m for m in updated[target_list] if m.get("isAdHoc"))
    deliverable = index.deliverable(source["id"], deliverable_id, source_list)
    source["deliverables"] = [d for d in source["deliverables"] if d.get("id") != deliverable_id]
    target.setdefault("deliverables", []).append(deliverable)
    return updated


# ==================== Meetings ====================


def add_meeting(client: dict, meeting: dict) -> dict:
    meeting = copy.deepcopy(meeting)
    if not meeting.get("date"):
        meeting["date"] = dates.format_due(date.today())
    updated = copy.deepcopy(client)
    updated.setdefault("meetings", []).append(meeting)
    return updated


def update_meeting(
    client: dict, meeting_id: str, list_key: str | None = None, **changes
) -> dict:
    _check_fields(changes, MEETING_FIELDS, "meeting")
    updated, index = _edit(client)
    index.meeting(meeting_id, list_key).update(changes)
    return updated


def delete_meeting(client: dict, meeting_id: str, list_key: str | None = None) -> dict:
    updated, index = _edit(client)
    found_in = index.meeting_list(meeting_id, list_key)
    if index.meeting(meeting_id, found_in).get("isAdHoc"):
        raise ValueError("Ad-hoc meetings cannot be deleted")
    updated[found_in] = [m for m in updated[found_in] if m.get("id") != meeting_id]
    return updated


def move_meeting(client: dict, meeting_id: str, to_past: bool = True) -> dict:
    """Move a meeting between the current and past lists (appended at the end)."""
    source_list, target_list = ("meetings", "pastMeetings") if to_past else ("pastMeetings", "meetings")
    updated, index = _edit(client)
    meeting = index.meeting(meeting_id, source_list)
    if meeting.get("isAdHoc"):
        raise ValueError("Ad-hoc meetings cannot be moved")
    updated[source_list] = [m for m in updated[source_list] if m.get("id") != meeting_id]
    updated.setdefault(target_list, []).append(meeting)
    return updated


def reorder_meetings(client: dict, list_key: str, old_index: int, new_index: int) -> dict:
    if list_key not in MEETING_LISTS:
        raise ValueError(f"Unknown meeting list: {list_key!r}")
    updated = copy.deepcopy(client)
    _move(updated.setdefault(list_key, []), old_index, new_index)
    return updated


# ==================== Client fields ====================


def rename_client(client: dict, name: str) -> dict:
    final = (name or "").strip()
    if not final or final == client.get("name"):
        return client
    updated = copy.deepcopy(client)
    updated["name"] = final
    return updated


def set_notes(client: dict, notes: str) -> dict:
    updated = copy.deepcopy(client)
    updated["notes"] = notes
    return updated


def set_shared(client: dict, shared: bool) -> dict:
    if bool(client.get("shared")) == shared:
        return client
    updated = copy.deepcopy(client)
    updated["shared"] = shared
    return updated


def add_team_member(client: dict, name: str = "") -> dict:
    updated = copy.deepcopy(client)
    team = updated.get("team") if isinstance(updated.get("team"), list) else []
    updated["team"] = team + [name]
    return updated


def _team_member_index(client: dict, index: int) -> list:
    team = client.get("team") if isinstance(client.get("team"), list) else []
    if not 0 <= index < len(team):
        raise EntityNotFound("team member", f"{client.get('id')}::team[{index}]")
    return team


def update_team_member(client: dict, index: int, name: str) -> dict:
    updated = copy.deepcopy(client)
    team = _team_member_index(updated, index)
    team[index] = name
    updated["team"] = team
    return updated


def remove_team_member(client: dict, index: int) -> dict:
    updated = copy.deepcopy(client)
    team = _team_member_index(updated, index)
    updated["team"] = team[:index] + team[index + 1 :]
    return updated


def cycle_status_badge(client: dict, key: str) -> dict:
    """Advance one status badge (sector, status, type) to its next option."""
    options = STATUS_OPTIONS.get(key)
    if options is None:
        raise ValueError(f"Unknown status badge: {key!r}")
    updated = copy.deepcopy(client)
    status = client_status(updated)
    status[key] = (status[key] + 1) % len(options)
    updated["status"] = status
    return updated


def apply_branding(client: dict, logo: str, colors: dict | None = None) -> dict:
    """Store a logo URL and, when given, the colors derived from it."""
    updated = copy.deepcopy(client)
    updated["logo"] = logo
    if colors:
        for key in ("baseColor", "headerColor", "sidebarColor"):
            if colors.get(key):
                updated[key] = colors[key]
    return updated


