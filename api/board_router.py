"""
Board API Router - the Mutation Protocol over HTTP.

Each route resolves one client of the user's workspace, runs a pure edit from
mona.mutations on it and persists the owning map. Deliverables and tasks are
addressed by the composite ids the views hand out ("client::meeting::deliverable"
and "client::meeting::deliverable::task").
"""

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, Query

from api.deps import get_workspace, http_error
from api.response_models import (
    BucketDrop,
    ClientCreate,
    ClientPatch,
    DeliverableCreate,
    DeliverableMove,
    DeliverablePatch,
    MeetingCreate,
    MeetingPatch,
    MoveRequest,
    MutationResponse,
    QuickAdd,
    ReorderRequest,
    Reschedule,
    TaskCreate,
    TaskPatch,
    TeamMember,
)
from mona import branding, mutations, quick_add
from mona.entities import new_deliverable, new_meeting, new_task
from mona.errors import MonaError, StoreError
from mona.ids import DeliverablePath, TaskPath
from mona.workspace import Workspace

logger = logging.getLogger(__name__)

board_router = APIRouter(prefix="/api/board/{username}", tags=["Board"])

ListKey = Query(None, description="meetings or pastMeetings; both are searched when omitted")


def _apply(workspace: Workspace, client_id: str, mutation: Callable, *args, **kwargs) -> dict:
    try:
        if workspace.stale:
            raise StoreError("Store unavailable; board is read-only")
        before = workspace.client(client_id)
        updated = workspace.apply(client_id, mutation, *args, **kwargs)
    except (MonaError, ValueError) as e:
        logger.info(
            f"{getattr(mutation, '__name__', mutation)} rejected: {e}",
            extra={"username": workspace.username, "client_id": client_id},
        )
        raise http_error(e) from e
    if len(workspace.outbox):
        raise http_error(StoreError())
    return {"success": True, "changed": updated is not before, "client": updated}


def _deliverable(path: str) -> DeliverablePath:
    try:
        return DeliverablePath.parse(path)
    except ValueError as e:
        raise http_error(e) from e


def _task(path: str) -> TaskPath:
    try:
        return TaskPath.parse(path)
    except ValueError as e:
        raise http_error(e) from e


# ==== Clients ====


@board_router.post("/clients", response_model=MutationResponse)
def add_client(body: ClientCreate, workspace: Workspace = Depends(get_workspace)) -> dict:
    try:
        client = workspace.add_client(body.name, shared=body.shared)
    except (MonaError, ValueError) as e:
        raise http_error(e) from e
    return {"success": True, "client": client}


@board_router.delete("/clients/{client_id}", response_model=MutationResponse)
def delete_client(client_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    try:
        workspace.delete_client(client_id)
    except MonaError as e:
        raise http_error(e) from e
    return {"success": True}


@board_router.patch("/clients/{client_id}", response_model=MutationResponse)
def patch_client(
    client_id: str, body: ClientPatch, workspace: Workspace = Depends(get_workspace)
) -> dict:
    result = {"success": True, "changed": False}
    if body.name is not None:
        result = _apply(workspace, client_id, mutations.rename_client, body.name)
    if body.notes is not None:
        result = _apply(workspace, client_id, mutations.set_notes, body.notes)
    if body.shared is not None:
        result = _apply(workspace, client_id, mutations.set_shared, body.shared)
    if "client" not in result:
        try:
            result["client"] = workspace.client(client_id)
        except MonaError as e:
            raise http_error(e) from e
    return result


@board_router.post("/clients/{client_id}/status/{badge}", response_model=MutationResponse)
def cycle_status(
    client_id: str, badge: str, workspace: Workspace = Depends(get_workspace)
) -> dict:
    """Advance a status badge (sector, status, type) to its next option."""
    return _apply(workspace, client_id, mutations.cycle_status_badge, badge)


@board_router.post("/clients/{client_id}/team", response_model=MutationResponse)
def add_team_member(
    client_id: str, body: TeamMember, workspace: Workspace = Depends(get_workspace)
) -> dict:
    return _apply(workspace, client_id, mutations.add_team_member, body.name)


@board_router.patch("/clients/{client_id}/team/{index}", response_model=MutationResponse)
def update_team_member(
    client_id: str, index: int, body: TeamMember, workspace: Workspace = Depends(get_workspace)
) -> dict:
    return _apply(workspace, client_id, mutations.update_team_member, index, body.name)


@board_router.delete("/clients/{client_id}/team/{index}", response_model=MutationResponse)
def remove_team_member(
    client_id: str, index: int, workspace: Workspace = Depends(get_workspace)
) -> dict:
    return _apply(workspace, client_id, mutations.remove_team_member, index)


@board_router.post("/clients/{client_id}/branding", response_model=MutationResponse)
def refresh_branding(client_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Look up the client's logo and derive its colors from it."""
    return _apply(workspace, client_id, branding.refresh_branding)


# ==== Meetings ====


@board_router.post("/clients/{client_id}/meetings", response_model=MutationResponse)
def add_meeting(
    client_id: str, body: MeetingCreate, workspace: Workspace = Depends(get_workspace)
) -> dict:
    meeting = new_meeting(body.name, body.date)
    result = _apply(workspace, client_id, mutations.add_meeting, meeting)
    return {**result, "id": meeting["id"]}


@board_router.post("/clients/{client_id}/meetings/reorder", response_model=MutationResponse)
def reorder_meetings(
    client_id: str, body: ReorderRequest, workspace: Workspace = Depends(get_workspace)
) -> dict:
    return _apply(
        workspace,
        client_id,
        mutations.reorder_meetings,
        body.list_key or "meetings",
        body.old_index,
        body.new_index,
    )


@board_router.patch("/clients/{client_id}/meetings/{meeting_id}", response_model=MutationResponse)
def update_meeting(
    client_id: str,
    meeting_id: str,
    body: MeetingPatch,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    changes = body.model_dump(exclude_none=True)
    return _apply(workspace, client_id, mutations.update_meeting, meeting_id, list_key, **changes)


@board_router.delete(
    "/clients/{client_id}/meetings/{meeting_id}", response_model=MutationResponse
)
def delete_meeting(
    client_id: str,
    meeting_id: str,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    return _apply(workspace, client_id, mutations.delete_meeting, meeting_id, list_key)


@board_router.post(
    "/clients/{client_id}/meetings/{meeting_id}/move", response_model=MutationResponse
)
def move_meeting(
    client_id: str,
    meeting_id: str,
    body: MoveRequest,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    return _apply(workspace, client_id, mutations.move_meeting, meeting_id, body.to_past)


@board_router.post(
    "/clients/{client_id}/meetings/{meeting_id}/deliverables", response_model=MutationResponse
)
def add_deliverable(
    client_id: str,
    meeting_id: str,
    body: DeliverableCreate,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    deliverable = new_deliverable(body.name, body.bucket)
    result = _apply(
        workspace, client_id, mutations.add_deliverable, meeting_id, deliverable, list_key
    )
    return {**result, "id": deliverable["id"]}


@board_router.post(
    "/clients/{client_id}/meetings/{meeting_id}/deliverables/reorder",
    response_model=MutationResponse,
)
def reorder_deliverables(
    client_id: str,
    meeting_id: str,
    body: ReorderRequest,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    return _apply(
        workspace,
        client_id,
        mutations.reorder_deliverables,
        meeting_id,
        body.old_index,
        body.new_index,
        body.list_key,
    )


# ==== Deliverables ====


@board_router.patch("/deliverables/{path}", response_model=MutationResponse)
def update_deliverable(
    path: str,
    body: DeliverablePatch,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    p = _deliverable(path)
    changes = body.model_dump(exclude_none=True)
    return _apply(
        workspace,
        p.client_id,
        mutations.update_deliverable,
        p.meeting_id,
        p.deliverable_id,
        list_key,
        **changes,
    )


@board_router.post("/deliverables/{path}/bucket", response_model=MutationResponse)
def rebucket_deliverable(
    path: str,
    body: BucketDrop,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    """Drop a deliverable on a bucket column. Unknown buckets change nothing."""
    p = _deliverable(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.rebucket_deliverable,
        p.meeting_id,
        p.deliverable_id,
        body.bucket,
        list_key,
    )


@board_router.post("/deliverables/{path}/complete", response_model=MutationResponse)
def complete_deliverable(
    path: str, list_key: str | None = ListKey, workspace: Workspace = Depends(get_workspace)
) -> dict:
    p = _deliverable(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.complete_deliverable,
        p.meeting_id,
        p.deliverable_id,
        list_key,
    )


@board_router.delete("/deliverables/{path}", response_model=MutationResponse)
def delete_deliverable(
    path: str, list_key: str | None = ListKey, workspace: Workspace = Depends(get_workspace)
) -> dict:
    p = _deliverable(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.delete_deliverable,
        p.meeting_id,
        p.deliverable_id,
        list_key,
    )


@board_router.post("/deliverables/{path}/move", response_model=MutationResponse)
def move_deliverable(
    path: str,
    body: DeliverableMove,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    """Move a deliverable to another meeting in the same list."""
    p = _deliverable(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.move_deliverable,
        p.meeting_id,
        p.deliverable_id,
        body.to_meeting_id,
        list_key or "meetings",
    )


@board_router.post("/deliverables/{path}/archive", response_model=MutationResponse)
def archive_adhoc_deliverable(
    path: str, body: MoveRequest, workspace: Workspace = Depends(get_workspace)
) -> dict:
    """Move an ad-hoc deliverable between the current and past ad-hoc meetings."""
    p = _deliverable(path)
    return _apply(
        workspace, p.client_id, mutations.move_adhoc_deliverable, p.deliverable_id, body.to_past
    )


@board_router.post("/deliverables/{path}/tasks", response_model=MutationResponse)
def add_task(
    path: str,
    body: TaskCreate,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    p = _deliverable(path)
    task = new_task(body.name, body.assignees, body.due)
    result = _apply(
        workspace, p.client_id, mutations.add_task, p.meeting_id, p.deliverable_id, task, list_key
    )
    return {**result, "id": task["id"]}


@board_router.post("/deliverables/{path}/tasks/reorder", response_model=MutationResponse)
def reorder_tasks(
    path: str, body: ReorderRequest, workspace: Workspace = Depends(get_workspace)
) -> dict:
    p = _deliverable(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.reorder_tasks,
        p.meeting_id,
        p.deliverable_id,
        body.old_index,
        body.new_index,
        body.list_key,
    )


# ==== Tasks ====


@board_router.patch("/tasks/{path}", response_model=MutationResponse)
def update_task(
    path: str,
    body: TaskPatch,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    p = _task(path)
    changes = body.model_dump(exclude_none=True)
    return _apply(
        workspace,
        p.client_id,
        mutations.update_task,
        p.meeting_id,
        p.deliverable_id,
        p.task_id,
        list_key,
        **changes,
    )


@board_router.post("/tasks/{path}/reschedule", response_model=MutationResponse)
def reschedule_task(
    path: str,
    body: Reschedule,
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    """Drop a task on a day: its due becomes that day's MM/DD."""
    p = _task(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.reschedule_task,
        p.meeting_id,
        p.deliverable_id,
        p.task_id,
        body.day_key,
        list_key,
    )


@board_router.post("/tasks/{path}/complete", response_model=MutationResponse)
def complete_task(
    path: str,
    complete: bool = Query(True),
    list_key: str | None = ListKey,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    """Set a task's completion at once. The undo window lives in the session."""
    p = _task(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.set_task_complete,
        p.meeting_id,
        p.deliverable_id,
        p.task_id,
        complete,
        list_key,
    )


@board_router.delete("/tasks/{path}", response_model=MutationResponse)
def delete_task(
    path: str, list_key: str | None = ListKey, workspace: Workspace = Depends(get_workspace)
) -> dict:
    p = _task(path)
    return _apply(
        workspace,
        p.client_id,
        mutations.delete_task,
        p.meeting_id,
        p.deliverable_id,
        p.task_id,
        list_key,
    )


# ==== Quick add ====


@board_router.post("/quick-add", response_model=MutationResponse)
def quick_add_task(body: QuickAdd, workspace: Workspace = Depends(get_workspace)) -> dict:
    """Parse one line ("Acme send deck to Pat tomorrow") into an ad-hoc task."""
    parsed = quick_add.parse_quick_task(body.text, workspace.clients)
    if parsed is None:
        raise http_error(ValueError("No client named in quick-add text"))
    result = _apply(workspace, parsed.client_id, quick_add.add_quick_task, parsed)
    return {
        **result,
        "task": {"name": parsed.task, "assignees": parsed.assignees, "due": parsed.due},
    }
