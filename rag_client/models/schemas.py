from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskState(str, Enum):
    """Lifecycle status of an ingestion task.

    Forward order: pending, converting, vector_indexing, graph_building,
    completed. Failed is reachable from any non-terminal state.
    """

    PENDING = "pending"
    CONVERTING = "converting"
    VECTOR_INDEXING = "vector_indexing"
    GRAPH_BUILDING = "graph_building"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAILED)

    def can_transition_to(self, other: "TaskState") -> bool:
        """Return True if moving from this status to `other` is not a regression."""
        if self is other:
            return True
        if self.is_terminal:
            return False
        if other is TaskState.FAILED:
            return True
        return _FORWARD_ORDER.index(other) > _FORWARD_ORDER.index(self)


_FORWARD_ORDER = [
    TaskState.PENDING,
    TaskState.CONVERTING,
    TaskState.VECTOR_INDEXING,
    TaskState.GRAPH_BUILDING,
    TaskState.COMPLETED,
]

STATUS_LABELS: dict[TaskState, str] = {
    TaskState.PENDING: "Queued",
    TaskState.CONVERTING: "Converting PDF…",
    TaskState.VECTOR_INDEXING: "Indexing vectors…",
    TaskState.GRAPH_BUILDING: "Building graph…",
    TaskState.COMPLETED: "Done",
    TaskState.FAILED: "Failed",
}


class Task(BaseModel):
    """An ingestion job currently shown to the user.

    Records are immutable; the registry replaces a record on every update.

    Attributes:
        task_id: Backend job identifier.
        filename: Name of the uploaded file.
        status: Current lifecycle status.
        step: Human-readable progress step reported by the backend.
        error: Failure message, set when the job failed.
    """

    model_config = ConfigDict(frozen=True)

    task_id: str
    filename: str
    status: TaskState = TaskState.PENDING
    step: str = "Queued"
    error: str | None = None


class RagSource(BaseModel):
    """A document cited by a chat answer."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    document_id: str
    title: str | None = None
    source: str | None = None


class TaskStatusResponse(BaseModel):
    """Response of GET /tasks/{task_id}/status."""

    model_config = ConfigDict(extra="ignore")

    task_id: str
    filename: str = ""
    build_graph: bool = False
    user_id: str | None = None
    status: TaskState
    step: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    error: str | None = None
    document_id: str | None = None


class UploadResponse(BaseModel):
    """Response after submitting a document for ingestion.

    Attributes:
        task_id: Job identifier to poll.
        filename: Name of the uploaded file.
        raw_blob: Storage location of the original file.
        markdown_blob: Storage location of the converted markdown.
        build_graph: Whether a knowledge graph will be built.
        status: Submission status.
    """

    model_config = ConfigDict(extra="ignore")

    task_id: str
    filename: str
    raw_blob: str = ""
    markdown_blob: str = ""
    build_graph: bool = False
    status: Literal["queued", "processing", "completed", "failed"] = "queued"


class ChatRequest(BaseModel):
    """Request payload for the chat endpoints.

    Attributes:
        message: User's question or prompt.
        session_id: Optional session for conversation continuity.
        stream: Whether the backend should answer as an event stream.
    """

    message: str = Field(..., min_length=1)
    session_id: str | None = None
    stream: bool = True

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ChatResponse(BaseModel):
    """Response of the non-streaming chat endpoint."""

    response: str
    session_id: str
    tool_calls: list[dict[str, Any]] = Field(default_factory=list)
