"""
Workspace - one user's working copy of the board.

Holds the user's personal client map and the shared map, routes every edit
through a pure mutation, and persists the owning map as a full replacement:
personal clients into the user's record, shared clients into the shared
record. A failed write keeps the edit in memory and parks it in the outbox.

    ws = Workspace("alice", get_store())
    ws.load()
    ws.apply(client_id, mutations.rebucket_deliverable, meeting_id, deliverable_id, "Upstream")
"""

import copy
from collections.abc import Callable
from datetime import date

from mona import aggregation, dates, mutations
from mona.entities import new_client
from mona.errors import ClientNotFound, PermissionDenied, StoreError
from mona.ids import TaskPath
from mona.observability import get_logger
from mona.outbox import SHARED_TARGET, Outbox, user_target
from mona.snapshots import SnapshotCache
from mona.store.base import ClientStore, normalize_username
from mona.undo import CompletionUndoQueue


class Workspace:
    def __init__(
        self,
        username: str,
        store: ClientStore,
        snapshots: SnapshotCache | None = None,
        outbox: Outbox | None = None,
        undo_window: float | None = None,
        timer_factory: Callable | None = None,
    ):
        self.username = normalize_username(username)
        self.log = get_logger(__name__, username=self.username)
        self.store = store
        self.snapshots = snapshots or SnapshotCache()
        self.outbox = outbox or Outbox(store)
        self.personal: dict[str, dict] = {}
        self.shared: dict[str, dict] = {}
        self.stale = False
        self.loaded = False
        self.projections = aggregation.ProjectionCache()
        undo_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        self.undo = CompletionUndoQueue(self._commit_completion, undo_window, **undo_kwargs)

    # ==================== Loading ====================

    def load(self) -> dict[str, dict]:
        """Fetch personal and shared clients, repairing missing ad-hoc meetings.

        Falls back to the last-known-good snapshot (and sets `stale`) when the
        store fails. UserNotFound always propagates.
        """
        try:
            personal = self.store.get_user_state(self.username).get("clients") or {}
            shared = self.store.get_shared_state() or {}
            self.stale = False
        except StoreError:
            snapshot = self.snapshots.recall(self.username)
            if snapshot is None:
                raise
            self.log.warning("Store unavailable, serving snapshot")
            personal, shared = snapshot["personal"], snapshot["shared"]
            self.stale = True

        self.personal = self._repair(personal)
        self.shared = self._repair(shared)
        self.loaded = True

        if not self.stale:
            if self.personal != personal:
                self._write_personal()
            repaired_own = [
                cid
                for cid, client in self.shared.items()
                if client != shared.get(cid) and self._owns(client)
            ]
            if repaired_own:
                self._write_shared()
            self.snapshots.remember(self.username, self.personal, self.shared)
        return self.clients

    def refresh(self) -> dict[str, dict]:
        return self.load()

    def _repair(self, clients: dict) -> dict:
        repaired = {}
        for client_id, client in clients.items():
            if not isinstance(client, dict):
                self.log.warning(
                    "Dropping malformed client record", extra={"client_id": client_id}
                )
                continue
            fixed = mutations.ensure_adhoc_meetings(client)
            if not fixed.get("id"):
                fixed = {**fixed, "id": client_id}
            repaired[client_id] = fixed
        return repaired

    def _ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    # ==================== Reading ====================

    @property
    def clients(self) -> dict[str, dict]:
        """Every client this user sees: shared ones, then personal ones."""
        return {**self.shared, **self.personal}

    def client(self, client_id: str) -> dict:
        self._ensure_loaded()
        client = self.personal.get(client_id) or self.shared.get(client_id)
        if client is None:
            raise ClientNotFound(client_id)
        return client

    def task_map(self, year: int | None = None) -> dict[str, list[dict]]:
        self._ensure_loaded()
        return self.projections.task_map(self.clients, year)

    def upcoming(self, assignee: str | None = None) -> list[dict]:
        """Open dated tasks, minus those waiting out an undo window."""
        hidden = self.undo.hidden
        records = aggregation.upcoming_tasks(self.task_map(), assignee)
        return [r for r in records if r["id"] not in hidden]

    def buckets(self, search: str | None = None) -> dict[str, list[dict]]:
        self._ensure_loaded()
        return self.projections.buckets(self.clients, search)

    def _task_map_spanning(self, days) -> dict[str, list[dict]]:
        """Task map covering every year the given days fall in."""
        merged: dict[str, list[dict]] = {}
        for year in sorted({d.year for d in days}):
            merged.update(self.task_map(year))
        return merged

    def week(self, anchor: date, include_completed: bool = False) -> dict[str, list[dict]]:
        task_map = self._task_map_spanning(dates.week_dates(anchor))
        return aggregation.tasks_for_week(task_map, anchor, include_completed)

    def calendar(self, anchor: date, include_completed: bool = False) -> list[dict]:
        task_map = self._task_map_spanning(d for d, _ in dates.weekday_month_grid(anchor))
        return aggregation.calendar_grid(task_map, anchor, include_completed)

    # ==================== Writing ====================

    def _owns(self, client: dict) -> bool:
        owner = client.get("owner")
        return not owner or owner == self.username

    def apply(self, client_id: str, mutation: Callable, *args, **kwargs) -> dict:
        """Run a pure mutation on one client and persist the result.

        Returns the client as it now stands. A mutation that hands back its
        input unchanged writes nothing.
        """
        current = self.client(client_id)
        updated = mutation(current, *args, **kwargs)
        if updated is current:
            self.log.debug(
                f"{getattr(mutation, '__name__', mutation)}: no change",
                extra={"client_id": client_id},
            )
            return current
        return self.save_client(client_id, updated)

    def save_client(self, client_id: str, client: dict) -> dict:
        """Place a client in the personal or shared map and persist that map."""
        was_shared = client_id in self.shared
        if client.get("shared") or was_shared:
            existing = self.shared.get(client_id) or client
            if not self._owns(existing):
                raise PermissionDenied(
                    f"{client_id} is shared by {existing.get('owner')}; only the owner can edit it"
                )
        if not client.get("owner"):
            client = {**client, "owner": self.username}

        if client.get("shared"):
            self.shared[client_id] = client
            moved = self.personal.pop(client_id, None) is not None
            self._write_shared()
            if moved:
                self._write_personal()
        else:
            self.personal[client_id] = client
            self._write_personal()
            if was_shared:
                self.shared.pop(client_id, None)
                self._write_shared()
        return client

    def add_client(self, name: str | None = None, shared: bool = False) -> dict:
        self._ensure_loaded()
        client = new_client(self.username, **({"name": name} if name else {}))
        client["shared"] = shared
        self.save_client(client["id"], client)
        self.log.info("Added client", extra={"client_id": client["id"]})
        return client

    def delete_client(self, client_id: str) -> None:
        client = self.client(client_id)
        if client_id in self.shared:
            if not self._owns(client):
                raise PermissionDenied(f"Only {client.get('owner')} can delete {client_id}")
            del self.shared[client_id]
            self._write_shared()
        else:
            del self.personal[client_id]
            self._write_personal()
        self.log.info("Deleted client", extra={"client_id": client_id})

    def import_shared(self, client_ids: list[str]) -> list[dict]:
        """Pull fresh copies of the given shared clients from the store.

        Raises ClientNotFound for an id nobody shares.
        """
        self._ensure_loaded()
        latest = self.store.get_shared_state() or {}
        imported = []
        for client_id in client_ids:
            if client_id not in latest:
                raise ClientNotFound(client_id)
            client = self._repair({client_id: latest[client_id]})[client_id]
            self.shared[client_id] = client
            imported.append(client)
        return imported

    def _write_personal(self) -> None:
        self._persist(user_target(self.username), self.personal)

    def _write_shared(self) -> None:
        # Read-modify-write: keep other owners' latest entries, replace our own.
        payload = copy.deepcopy(self.shared)
        try:
            latest = self.store.get_shared_state() or {}
        except StoreError as e:
            self.outbox.park(SHARED_TARGET, payload, e)
            return
        for client_id, client in latest.items():
            if not self._owns(client):
                payload[client_id] = client
                self.shared[client_id] = client
        for client_id in [cid for cid in payload if cid not in latest]:
            if not self._owns(payload[client_id]):
                del payload[client_id]
                self.shared.pop(client_id, None)
        self._persist(SHARED_TARGET, payload)

    def _persist(self, target: str, clients: dict) -> bool:
        payload = copy.deepcopy(clients)
        try:
            if target == SHARED_TARGET:
                self.store.put_shared_state(payload)
            else:
                self.store.put_user_state(self.username, payload)
        except StoreError as e:
            self.outbox.park(target, payload, e)
            return False
        self.outbox.discard(target)
        self.snapshots.remember(self.username, self.personal, self.shared)
        return True

    def flush(self) -> int:
        """Replay writes parked after a store failure."""
        return self.outbox.flush()

    # ==================== Soft completion ====================

    def complete_task(self, path: TaskPath | str) -> None:
        """Mark a task complete after the undo window closes."""
        path = TaskPath.parse(path) if isinstance(path, str) else path
        self.client(path.client_id)
        self.undo.stage(path)

    def undo_complete(self, path: TaskPath | str) -> bool:
        return self.undo.undo(path)

    def _commit_completion(self, path: TaskPath) -> dict:
        return self.apply(
            path.client_id,
            mutations.set_task_complete,
            path.meeting_id,
            path.deliverable_id,
            path.task_id,
        )
