"""
Global task search across every visible client.
"""

import re

from mona import ids
from mona.entities import DEFAULT_CLIENT_NAME, iter_meetings

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize(text: str | None) -> str:
    """Lowercase and keep only ASCII letters and digits ("Q3 Plan!" -> "q3plan")."""
    return _NON_ALNUM_RE.sub("", (text or "").lower())


def _assignee_text(task: dict) -> str:
    assignees = task.get("assignees")
    if isinstance(assignees, list):
        return ", ".join(a for a in assignees if a)
    return task.get("assignee") or ""


def search_tasks(
    clients: dict[str, dict],
    query: str,
    completed_only: bool = False,
    limit: int = 10,
) -> list[dict]:
    """Tasks whose name or assignees, client name or deliverable name match.

    Matching ignores case, spaces and punctuation. Results keep tree order and
    stop at `limit`.
    """
    wanted = normalize(query)
    if not wanted:
        return []

    results = []
    for client_id, client in clients.items():
        client_name = client.get("name") or DEFAULT_CLIENT_NAME
        for _list_key, meeting in iter_meetings(client):
            for deliverable in meeting.get("deliverables") or []:
                deliverable_name = deliverable.get("name") or ""
                for task in deliverable.get("tasks") or []:
                    if completed_only and not task.get("complete"):
                        continue
                    assignees = _assignee_text(task)
                    if not (
                        wanted in normalize(f"{task.get('name') or ''} {assignees}")
                        or wanted in normalize(client_name)
                        or wanted in normalize(deliverable_name)
                    ):
                        continue
                    results.append(
                        {
                            "id": ids.composite_id(
                                client_id, meeting["id"], deliverable["id"], task["id"]
                            ),
                            "clientId": client_id,
                            "label": " – ".join(
                                [
                                    client_name,
                                    deliverable_name,
                                    task.get("name") or "",
                                    assignees,
                                    task.get("due") or "No date",
                                ]
                            ),
                        }
                    )
                    if len(results) >= limit:
                        return results
    return results
