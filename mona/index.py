"""
Arena index over one client's nested tree.

Maps composite paths to the live dicts inside the client so mutations can
resolve (meeting, deliverable, task) with dictionary lookups instead of
nested scans. An index is a snapshot of structure: rebuild it after adding,
removing or moving entities.
"""

from mona import ids
from mona.entities import MEETING_LISTS, iter_meetings
from mona.errors import EntityNotFound


class ClientIndex:
    """Lookup tables for meetings, deliverables and tasks of one client.

    When no list is given, `meetings` is searched before `pastMeetings` and
    the first list holding the whole path wins.
    """

    def __init__(self, client: dict):
        self.client = client
        self._meetings: dict[tuple, dict] = {}
        self._deliverables: dict[tuple, dict] = {}
        self._tasks: dict[tuple, dict] = {}

        for list_key, meeting in iter_meetings(client):
            meeting_key = (list_key, meeting.get("id"))
            if meeting_key in self._meetings:
                continue
            self._meetings[meeting_key] = meeting
            for deliverable in meeting.get("deliverables") or []:
                deliverable_key = meeting_key + (deliverable.get("id"),)
                self._deliverables.setdefault(deliverable_key, deliverable)
                for task in deliverable.get("tasks") or []:
                    self._tasks.setdefault(deliverable_key + (task.get("id"),), task)

    def _lists(self, list_key: str | None) -> tuple[str, ...]:
        if list_key is None:
            return MEETING_LISTS
        if list_key not in MEETING_LISTS:
            raise ValueError(f"Unknown meeting list: {list_key!r}")
        return (list_key,)

    def _find(self, table: dict, kind: str, parts: tuple, list_key: str | None):
        for candidate in self._lists(list_key):
            found = table.get((candidate,) + parts)
            if found is not None:
                return candidate, found
        raise EntityNotFound(kind, ids.composite_id(self.client.get("id") or "?", *parts))

    def meeting(self, meeting_id: str, list_key: str | None = None) -> dict:
        return self._find(self._meetings, "meeting", (meeting_id,), list_key)[1]

    def meeting_list(self, meeting_id: str, list_key: str | None = None) -> str:
        """Which list ('meetings' or 'pastMeetings') holds the meeting."""
        return self._find(self._meetings, "meeting", (meeting_id,), list_key)[0]

    def deliverable(
        self, meeting_id: str, deliverable_id: str, list_key: str | None = None
    ) -> dict:
        self.meeting(meeting_id, list_key)
        return self._find(
            self._deliverables, "deliverable", (meeting_id, deliverable_id), list_key
        )[1]

    def task(
        self,
        meeting_id: str,
        deliverable_id: str,
        task_id: str,
        list_key: str | None = None,
    ) -> dict:
        self.deliverable(meeting_id, deliverable_id, list_key)
        return self._find(
            self._tasks, "task", (meeting_id, deliverable_id, task_id), list_key
        )[1]
