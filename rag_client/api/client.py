"""HTTP client for the agentic-rag backend.

Wraps httpx.AsyncClient with the chat, upload and task status endpoints.
The streaming chat call never raises for stream-level problems: they are
reported through the session's error callback.
"""

import logging
from collections.abc import Callable
from types import TracebackType
from typing import Any

import httpx

from rag_client.config import ClientConfig, get_client_config
from rag_client.errors import InvalidResponseError, RagApiError
from rag_client.models.schemas import (
    ChatRequest,
    ChatResponse,
    RagSource,
    TaskStatusResponse,
    UploadResponse,
)
from rag_client.streaming.session import ChatStreamSession

logger = logging.getLogger(__name__)


class RagApiClient:
    """Async client for the RAG endpoints.

    Usable as an async context manager; otherwise call `aclose()`.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport (ASGI or mock transports in tests).
        """
        self.config = config or get_client_config()
        self._http = httpx.AsyncClient(
            base_url=self.config.rag_base_url,
            headers=self._auth_headers(),
            timeout=self.config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RagApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _auth_headers(self) -> dict[str, str]:
        if self.config.auth_token:
            return {"Authorization": f"Bearer {self.config.auth_token}"}
        return {}

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_error:
            detail = response.text or response.reason_phrase
            raise RagApiError(response.status_code, detail)

    @classmethod
    def _json(cls, response: httpx.Response) -> Any:
        cls._raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(response.status_code, str(e)) from e

    async def health(self) -> dict[str, str]:
        """Check whether the RAG service is reachable."""
        response = await self._http.get("/health")
        return self._json(response)

    async def upload_document(
        self,
        filename: str,
        content: bytes,
        build_graph: bool = False,
        content_type: str = "application/pdf",
    ) -> UploadResponse:
        """Submit a document for ingestion.

        Returns immediately; the returned task_id is polled for progress.

        Raises:
            RagApiError: If the backend rejects the upload.
            httpx.RequestError: If the backend cannot be reached.
        """
        response = await self._http.post(
            "/upload",
            files={"file": (filename, content, content_type)},
            data={"build_graph": str(build_graph).lower()},
        )
        upload = UploadResponse.model_validate(self._json(response))
        logger.info(f"Uploaded {filename} as task {upload.task_id}")
        return upload

    async def get_task_status(self, task_id: str) -> TaskStatusResponse:
        """Fetch the current status of an ingestion task.

        Raises:
            RagApiError: On an error response.
            InvalidResponseError: If the body is not JSON.
            httpx.RequestError: If the backend cannot be reached.
            pydantic.ValidationError: If the payload is not a task status.
        """
        response = await self._http.get(f"/tasks/{task_id}/status")
        return TaskStatusResponse.model_validate(self._json(response))

    async def chat(self, message: str, session_id: str | None = None) -> ChatResponse:
        """Send a chat message and wait for the complete answer."""
        request = ChatRequest(message=message, session_id=session_id, stream=False)
        response = await self._http.post("/chat", json=request.model_dump())
        return ChatResponse.model_validate(self._json(response))

    async def chat_stream(
        self,
        message: str,
        session_id: str | None,
        on_chunk: Callable[[str], None],
        on_done: Callable[[str], None],
        on_error: Callable[[str], None] | None = None,
        on_replace: Callable[[str], None] | None = None,
        on_sources: Callable[[list[RagSource]], None] | None = None,
    ) -> ChatStreamSession:
        """Send a chat message and consume the event stream answer.

        Returns:
            The finished session, holding the resolved session id, the
            visible text and the sources of this turn.
        """
        session = ChatStreamSession(
            session_id,
            on_chunk=on_chunk,
            on_done=on_done,
            on_error=on_error,
            on_replace=on_replace,
            on_sources=on_sources,
        )
        request = ChatRequest(message=message, session_id=session_id, stream=True)

        try:
            async with self._http.stream(
                "POST",
                "/chat/stream",
                json=request.model_dump(),
                headers={"Accept": "text/event-stream"},
            ) as response:
                if response.is_error:
                    body = (await response.aread()).decode(errors="replace")
                    session.fail(f"HTTP {response.status_code}: {body or response.reason_phrase}")
                    return session

                async for chunk in response.aiter_bytes():
                    session.feed(chunk)
                    if session.finished:
                        break
                else:
                    session.close()
        except httpx.HTTPError as e:
            session.fail(f"Connection failed: {e}")

        return session
