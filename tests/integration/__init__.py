"""Integration tests for the client working against a backend.

Coverage:
    - Streaming chat over httpx with arbitrary chunking and failures
    - Upload, status polling and removal of finished tasks

The backend is a FastAPI app served through httpx.ASGITransport; no
network or external services are required.
"""
