"""
Aggregation Engine - read-only projections of the entity tree.

Two projections feed every board view:
- build_task_map: day key -> task view records (calendar, week, upcoming list)
- deliverables_by_bucket: bucket -> deliverable view records (bucket board)

Both are pure functions of their inputs. ProjectionCache memoizes them on
identical inputs; nothing else is cached.
"""

import hashlib
import json
import logging
from datetime import date
from typing import Any

from mona import dates, ids
from mona.cache import CacheManager
from mona.entities import (
    BUCKETS,
    DEFAULT_CLIENT_NAME,
    Bucket,
    iter_meetings,
    logo_url,
    task_assignees,
)

logger = logging.getLogger(__name__)


def build_task_map(clients: dict[str, dict], year: int | None = None) -> dict[str, list[dict]]:
    """Index every dated task by the day it is due.

    Tasks whose `due` is empty or unparseable are skipped. Records within a
    day keep tree order (client, meeting, deliverable, task).
    """
    year = year or date.today().year
    task_map: dict[str, list[dict]] = {}

    for client_id, client in clients.items():
        if not client:
            continue
        client_name = client.get("name") or DEFAULT_CLIENT_NAME
        logo = logo_url(client)
        for _list_key, meeting in iter_meetings(client):
            for deliverable in meeting.get("deliverables") or []:
                for task in deliverable.get("tasks") or []:
                    due = task.get("due")
                    if not due:
                        continue
                    due_date = dates.parse_due(due, year)
                    if due_date is None:
                        continue
                    task_map.setdefault(dates.day_key(due_date), []).append(
                        {
                            "id": ids.composite_id(
                                client_id, meeting["id"], deliverable["id"], task["id"]
                            ),
                            "clientId": client_id,
                            "logo": logo,
                            "clientName": client_name,
                            "assignees": task_assignees(task),
                            "taskName": task.get("name") or "Untitled Task",
                            "deliverableName": deliverable.get("name") or "Untitled Deliverable",
                            "due": due,
                            "complete": bool(task.get("complete")),
                        }
                    )
    return task_map


def upcoming_tasks(
    task_map: dict[str, list[dict]],
    assignee: str | None = None,
    year: int | None = None,
) -> list[dict]:
    """Open dated tasks, soonest first, optionally for one assignee.

    The assignee filter is a case-insensitive exact match on any assignee.
    """
    wanted = (assignee or "").strip().lower()
    upcoming = []
    for records in task_map.values():
        for record in records:
            if not record.get("due") or record.get("complete"):
                continue
            if wanted and not any(
                (name or "").lower() == wanted for name in record.get("assignees") or []
            ):
                continue
            upcoming.append(record)
    upcoming.sort(key=lambda r: dates.due_sort_key(r["due"], year))
    return upcoming


def deliverables_by_bucket(
    clients: dict[str, dict], search: str | None = None
) -> dict[str, list[dict]]:
    """Group open deliverables by bucket, in board column order.

    Deliverables flagged isDeliverableComplete are left out; each record
    carries only the deliverable's incomplete tasks. `search` is a
    case-insensitive substring match on deliverable or client name.
    """
    records = []
    for client_id, client in clients.items():
        if not client:
            continue
        for _list_key, meeting in iter_meetings(client):
            for deliverable in meeting.get("deliverables") or []:
                if deliverable.get("isDeliverableComplete"):
                    continue
                records.append(
                    {
                        "id": ids.composite_id(client_id, meeting["id"], deliverable["id"]),
                        "clientId": client_id,
                        "clientName": client.get("name"),
                        "logo": logo_url(client),
                        "meetingId": meeting["id"],
                        "deliverableId": deliverable["id"],
                        "deliverableName": deliverable.get("name"),
                        "bucket": deliverable.get("bucket") or Bucket.UNASSIGNED.value,
                        "tasks": [
                            t for t in deliverable.get("tasks") or [] if not t.get("complete")
                        ],
                    }
                )

    query = (search or "").lower()
    if query:
        records = [
            r
            for r in records
            if query in (r["deliverableName"] or "").lower()
            or query in (r["clientName"] or "").lower()
        ]

    grouped: dict[str, list[dict]] = {bucket: [] for bucket in BUCKETS}
    for record in records:
        if record["bucket"] in grouped:
            grouped[record["bucket"]].append(record)
        else:
            logger.debug(f"Deliverable {record['id']} has unknown bucket {record['bucket']!r}")
    return grouped


def tasks_for_week(
    task_map: dict[str, list[dict]], anchor: date, include_completed: bool = False
) -> dict[str, list[dict]]:
    """Monday-Friday slice of the task map for the anchor's week."""
    week = {}
    for day in dates.week_dates(anchor):
        key = dates.day_key(day)
        records = task_map.get(key, [])
        week[key] = records if include_completed else [r for r in records if not r["complete"]]
    return week


def calendar_grid(
    task_map: dict[str, list[dict]],
    anchor: date,
    include_completed: bool = False,
    today: date | None = None,
) -> list[dict]:
    """Weekday month grid for the anchor's month with each cell's tasks."""
    today = today or date.today()
    cells = []
    for day, in_month in dates.weekday_month_grid(anchor):
        key = dates.day_key(day)
        records = task_map.get(key, [])
        if not include_completed:
            records = [r for r in records if not r["complete"]]
        cells.append(
            {"dayKey": key, "inMonth": in_month, "isToday": day == today, "tasks": records}
        )
    return cells


class ProjectionCache:
    """Memoize projections on identical inputs.

    Keys are a digest of the full clients map plus the filter arguments, so
    any edit to the tree produces a new key. Returned projections are shared
    between callers and must be treated as read-only.
    """

    def __init__(self, cache: CacheManager | None = None, ttl_seconds: float = 300):
        self._cache = cache or CacheManager(max_size=256, default_ttl=ttl_seconds)
        self._ttl = ttl_seconds

    @staticmethod
    def _digest(kind: str, clients: dict, params: dict[str, Any]) -> str:
        payload = json.dumps([clients, params], sort_keys=True, default=str)
        return f"projection:{kind}:{hashlib.sha256(payload.encode()).hexdigest()}"

    def task_map(self, clients: dict[str, dict], year: int | None = None) -> dict:
        year = year or date.today().year
        key = self._digest("task_map", clients, {"year": year})
        return self._cache.get_or_compute(key, lambda: build_task_map(clients, year), self._ttl)

    def buckets(self, clients: dict[str, dict], search: str | None = None) -> dict:
        key = self._digest("buckets", clients, {"search": search or ""})
        return self._cache.get_or_compute(
            key, lambda: deliverables_by_bucket(clients, search), self._ttl
        )

    def clear(self) -> None:
        self._cache.invalidate_pattern("projection:*")
