"""Pydantic models for API requests, responses and tracked tasks.

Provides type safety and validation at the HTTP boundary.

Models:
    - ChatRequest / ChatResponse: Chat endpoint payloads
    - RagSource: Document cited by an answer
    - TaskStatusResponse: Polled ingestion job status
    - UploadResponse: Result of submitting a document
    - Task / TaskState: Registry record and its lifecycle status
"""

from rag_client.models.schemas import (
    STATUS_LABELS,
    ChatRequest,
    ChatResponse,
    RagSource,
    Task,
    TaskState,
    TaskStatusResponse,
    UploadResponse,
)

__all__ = [
    "STATUS_LABELS",
    "ChatRequest",
    "ChatResponse",
    "RagSource",
    "Task",
    "TaskState",
    "TaskStatusResponse",
    "UploadResponse",
]
