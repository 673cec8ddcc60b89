"""State of one streamed chat turn."""

import logging
from collections.abc import Callable

from rag_client.models.schemas import RagSource
from rag_client.streaming.events import (
    EndEvent,
    ErrorEvent,
    EventDecoder,
    ReplaceEvent,
    SessionEvent,
    SourcesEvent,
    StreamEvent,
    TextEvent,
    ToolsEvent,
)

logger = logging.getLogger(__name__)

CLOSED_BEFORE_END = "Stream closed before end"


class ChatStreamSession:
    """Consume decoded events and drive the caller's callbacks.

    Each turn ends exactly one way: `on_done(session_id)` after an `end`
    event, or a single `on_error(message)` for a backend error event, a
    transport failure, or a body that closes before `end`.

    Sources are held until `end` so the caller sees at most one list; if the
    backend sends several, the last one wins.
    """

    def __init__(
        self,
        session_id: str | None = None,
        *,
        on_chunk: Callable[[str], None],
        on_done: Callable[[str], None],
        on_error: Callable[[str], None] | None = None,
        on_replace: Callable[[str], None] | None = None,
        on_sources: Callable[[list[RagSource]], None] | None = None,
    ) -> None:
        self.session_id: str = session_id or ""
        self.text: str = ""
        self.sources: list[RagSource] | None = None
        self.error: str | None = None
        self.finished: bool = False
        self._decoder = EventDecoder()
        self._on_chunk = on_chunk
        self._on_done = on_done
        self._on_error = on_error
        self._on_replace = on_replace
        self._on_sources = on_sources

    def feed(self, chunk: bytes | str) -> None:
        """Process a raw chunk of the response body."""
        for event in self._decoder.feed(chunk):
            self.handle(event)
            if self.finished:
                return

    def close(self) -> None:
        """Signal that the response body ended."""
        for event in self._decoder.flush():
            self.handle(event)
            if self.finished:
                return
        if not self.finished:
            self.fail(CLOSED_BEFORE_END)

    def fail(self, message: str) -> None:
        """Report a transport-level failure, unless the turn already ended."""
        if self.finished:
            return
        self.finished = True
        self.error = message
        logger.warning(f"Chat stream failed: {message}")
        if self._on_error:
            self._on_error(message)

    def handle(self, event: StreamEvent) -> None:
        if self.finished:
            return

        match event:
            case SessionEvent(session_id=session_id):
                if session_id:
                    self.session_id = session_id
            case TextEvent(content=content):
                if content:
                    self.text += content
                    self._on_chunk(content)
            case ReplaceEvent(content=content):
                self.text = content
                if self._on_replace:
                    self._on_replace(content)
            case SourcesEvent(sources=sources):
                self.sources = sources
            case ToolsEvent(tools=tools):
                logger.debug(f"Ignoring {len(tools)} tool call(s)")
            case ErrorEvent(content=content):
                self.fail(content)
            case EndEvent():
                self.finished = True
                if self.sources is not None and self._on_sources:
                    self._on_sources(self.sources)
                self._on_done(self.session_id)
