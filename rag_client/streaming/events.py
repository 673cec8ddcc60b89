"""Typed chat stream events and the decoder that produces them.

The backend sends one JSON object per `data:` line:

    data: {"type": "session", "session_id": "..."}     first event
    data: {"type": "text", "content": "..."}           token delta (many)
    data: {"type": "replace", "content": "..."}        final clean text
    data: {"type": "sources", "sources": [...]}        cited documents
    data: {"type": "tools", "tools": [...]}            tool calls (optional)
    data: {"type": "error", "content": "..."}          stream failure
    data: {"type": "end"}                              turn finished

Anything else on the wire is dropped without surfacing an error.
"""

import json
import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from rag_client.models.schemas import RagSource
from rag_client.streaming.frames import FrameSplitter

logger = logging.getLogger(__name__)

DATA_MARKER = "data:"
DONE_SENTINEL = "[DONE]"
DEFAULT_ERROR_MESSAGE = "Stream error"


class SessionEvent(BaseModel):
    """Authoritative conversation identifier."""

    type: Literal["session"] = "session"
    session_id: str = ""


class TextEvent(BaseModel):
    """Incremental text fragment to append."""

    type: Literal["text"] = "text"
    content: str = ""


class ReplaceEvent(BaseModel):
    """Full text superseding every delta of the current turn."""

    type: Literal["replace"] = "replace"
    content: str


class SourcesEvent(BaseModel):
    """Documents cited by the answer."""

    type: Literal["sources"] = "sources"
    sources: list[RagSource]


class ToolsEvent(BaseModel):
    """Tool calls made by the agent. Advisory only."""

    type: Literal["tools"] = "tools"
    tools: list[Any] = Field(default_factory=list)


class ErrorEvent(BaseModel):
    """Stream-level failure reported by the backend."""

    type: Literal["error"] = "error"
    content: str = DEFAULT_ERROR_MESSAGE

    @field_validator("content", mode="before")
    @classmethod
    def default_missing_content(cls, v: Any) -> Any:
        """A null message still reports the failure."""
        return DEFAULT_ERROR_MESSAGE if v is None else v


class EndEvent(BaseModel):
    """Terminator. No further events follow for this turn."""

    type: Literal["end"] = "end"


StreamEvent = Annotated[
    SessionEvent | TextEvent | ReplaceEvent | SourcesEvent | ToolsEvent | ErrorEvent | EndEvent,
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)

EVENT_TYPES = frozenset({"session", "text", "replace", "sources", "tools", "error", "end"})


def decode_line(line: str) -> StreamEvent | None:
    """Decode one complete protocol line.

    Args:
        line: A line produced by the frame splitter.

    Returns:
        The typed event, or None if the line is not a recognised data frame.
    """
    stripped = line.strip()
    if not stripped.startswith(DATA_MARKER):
        return None

    raw = stripped[len(DATA_MARKER):].strip()
    if not raw or raw == DONE_SENTINEL:
        return None

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug(f"Dropping undecodable frame: {raw[:80]!r}")
        return None

    if not isinstance(payload, dict):
        logger.debug(f"Dropping non-object frame: {raw[:80]!r}")
        return None

    event_type = payload.get("type")
    if event_type not in EVENT_TYPES:
        logger.debug(f"Dropping frame with unknown type: {event_type!r}")
        return None

    try:
        return _event_adapter.validate_python(payload)
    except ValidationError as e:
        logger.debug(f"Dropping invalid {event_type!r} frame: {e.error_count()} error(s)")
        return None


class EventDecoder:
    """Turn a chunked byte stream into typed events for a single turn.

    Once an `end` event has been emitted, further input is ignored.
    """

    def __init__(self) -> None:
        self._splitter = FrameSplitter()
        self.finished = False

    def feed(self, chunk: bytes | str) -> list[StreamEvent]:
        """Decode all events completed by this chunk."""
        if self.finished:
            return []
        return self._decode(self._splitter.feed(chunk))

    def flush(self) -> list[StreamEvent]:
        """Decode the trailing unterminated line, if any, at end of stream."""
        if self.finished:
            return []
        return self._decode(self._splitter.flush())

    def _decode(self, lines: list[str]) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        for line in lines:
            event = decode_line(line)
            if event is None:
                continue
            events.append(event)
            if isinstance(event, EndEvent):
                self.finished = True
                break
        return events
