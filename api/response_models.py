"""
Pydantic request and response models for the Mona API.

Client trees travel as plain JSON objects (`dict[str, Any]`): their shape is
owned by mona.entities, not by the HTTP layer.

Usage:
    from api.response_models import MutationResponse, Credentials

    @router.post("/create", response_model=MutationResponse)
    def create(body: Credentials): ...
"""

from typing import Any

from pydantic import BaseModel, Field

# ==== Accounts ====


class Credentials(BaseModel):
    """Username plus optional password (empty means no password)."""

    username: str | None = None
    password: str | None = None


class PasswordReset(BaseModel):
    password: str | None = None


class UserSummary(BaseModel):
    username: str
    hasPassword: bool  # noqa: N815


class LoginResponse(BaseModel):
    clients: dict[str, Any] = Field(default_factory=dict)


class SaveRequest(BaseModel):
    """Legacy save body: the user's whole personal client map."""

    username: str | None = None
    clients: dict[str, Any] = Field(default_factory=dict)


# ==== Mutation Result ====
# Used by POST/PATCH/DELETE endpoints that return {success: bool, ...}.


class MutationResponse(BaseModel):
    """Standard mutation result."""

    success: bool = Field(description="Whether the operation succeeded")

    model_config = {"extra": "allow"}


# ==== Health Check ====


class CacheHealth(BaseModel):
    """Snapshot cache counters."""

    hits: int
    misses: int
    size: int = Field(description="Live entries (one per recently loaded user)")
    hit_rate: float


class HealthResponse(BaseModel):
    """Health check result."""

    status: str = Field(description="healthy or error")
    version: str = Field(description="Mona version string")
    store: str = Field(description="Active store backend")
    timestamp: str = Field(description="ISO timestamp")
    cache: CacheHealth = Field(description="Snapshot cache statistics")


# ==== Board edits ====


class ClientCreate(BaseModel):
    name: str | None = None
    shared: bool = False


class ClientPatch(BaseModel):
    name: str | None = None
    notes: str | None = None
    shared: bool | None = None


class TeamMember(BaseModel):
    name: str = ""


class MeetingCreate(BaseModel):
    name: str = ""
    date: str = ""


class MeetingPatch(BaseModel):
    name: str | None = None
    date: str | None = None


class MoveRequest(BaseModel):
    to_past: bool = True


class ReorderRequest(BaseModel):
    old_index: int
    new_index: int
    list_key: str | None = None


class DeliverableCreate(BaseModel):
    name: str = ""
    bucket: str = "Unassigned"


class DeliverablePatch(BaseModel):
    name: str | None = None
    bucket: str | None = None


class BucketDrop(BaseModel):
    bucket: str


class DeliverableMove(BaseModel):
    to_meeting_id: str


class TaskCreate(BaseModel):
    name: str = ""
    assignees: list[str] = Field(default_factory=list)
    due: str = ""


class TaskPatch(BaseModel):
    name: str | None = None
    assignees: list[str] | None = None
    due: str | None = None
    complete: bool | None = None


class Reschedule(BaseModel):
    day_key: str = Field(description="ISO date of the day the task was dropped on")


class QuickAdd(BaseModel):
    text: str
