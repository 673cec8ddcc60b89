"""HTTP access to the agentic-rag backend.

Endpoints (relative to the configured RAG base URL):
    - POST /chat/stream: Chat answer as a Server-Sent Events stream
    - POST /chat: Chat answer in one response
    - POST /upload: Document submission for ingestion
    - GET /tasks/{task_id}/status: Ingestion progress
    - GET /health: Service health status
"""

from rag_client.api.client import RagApiClient

__all__ = ["RagApiClient"]
