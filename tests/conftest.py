"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - clock: Virtual clock so pollers run without real delays
    - registry: Fresh task registry per test
    - client_config: Client configuration pointing at the fake backend
    - mock_session_id: Consistent session ID for tests
"""

import pytest

from rag_client.config import ClientConfig
from rag_client.tasks.registry import TaskRegistry
from tests.helpers import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Return a virtual clock starting at t=0."""
    return FakeClock()


@pytest.fixture
def registry() -> TaskRegistry:
    """Return an empty, isolated task registry."""
    return TaskRegistry()


@pytest.fixture
def client_config() -> ClientConfig:
    """Return configuration for the in-process fake backend.

    Returns:
        Config with short polling timings for integration tests.
    """
    return ClientConfig(
        api_base_url="http://test",
        auth_token="test-token",
        timeout=5.0,
        poll_interval=0.01,
        removal_delay=0.05,
    )


@pytest.fixture
def mock_session_id() -> str:
    """Generate consistent session ID for testing.

    Returns:
        Predictable session ID for test assertions.
    """
    return "test-session-12345"
