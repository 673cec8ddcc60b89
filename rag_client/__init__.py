"""RAG Client - streaming chat and ingestion tracking for the agentic-rag backend.

Combines httpx for chunked HTTP streaming, Pydantic for wire validation,
and asyncio for cooperative polling of background ingestion jobs.

Components:
    - streaming: SSE frame splitting, event decoding and chat turn state
    - tasks: task registry, pollers and the upload notifications consumer
    - api: HTTP client for chat, upload and task status endpoints
    - models: Request/response schemas
"""

__version__ = "0.1.0"
