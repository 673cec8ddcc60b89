"""Test package for the RAG client.

Unit tests cover isolated logic; integration tests drive the client
against an in-process fake backend.

Structure:
    - unit/: Decoder, session, registry and poller tests
    - integration/: Client workflows over real HTTP semantics

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
