"""
Views API Router - read-only board projections for one user.

Every view is derived from the user's personal clients plus all shared
clients: calendar month grid, week, upcoming list, bucket board, search.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_workspace
from mona import search
from mona.workspace import Workspace

logger = logging.getLogger(__name__)

views_router = APIRouter(prefix="/api/views/{username}", tags=["Views"])


def _anchor(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid anchor date: {value}") from e


def _envelope(workspace: Workspace, **payload) -> dict:
    return {"username": workspace.username, "stale": workspace.stale, **payload}


@views_router.get("/calendar")
def calendar(
    anchor: str | None = Query(None, description="Any ISO date in the month to show"),
    include_completed: bool = Query(False),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    day = _anchor(anchor)
    return _envelope(
        workspace,
        month=day.strftime("%Y-%m"),
        cells=workspace.calendar(day, include_completed),
    )


@views_router.get("/week")
def week(
    anchor: str | None = Query(None, description="Any ISO date in the week to show"),
    include_completed: bool = Query(False),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    return _envelope(workspace, days=workspace.week(_anchor(anchor), include_completed))


@views_router.get("/upcoming")
def upcoming(
    assignee: str | None = Query(None, description="Case-insensitive exact assignee"),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    tasks = workspace.upcoming(assignee)
    return _envelope(workspace, tasks=tasks, total=len(tasks))


@views_router.get("/buckets")
def buckets(
    search_text: str | None = Query(None, alias="search"),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    return _envelope(workspace, buckets=workspace.buckets(search_text))


@views_router.get("/search")
def search_tasks(
    q: str = Query("", description="Search text"),
    completed_only: bool = Query(False),
    limit: int = Query(10, ge=1, le=100),
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    results = search.search_tasks(workspace.clients, q, completed_only, limit)
    return _envelope(workspace, results=results, total=len(results))
