"""Client configuration with environment variable loading.

Pydantic-based configuration for the RAG API client, the chat stream and
the ingestion task pollers.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for the RAG API client.

    Attributes:
        api_base_url: Backend base URL, without trailing slash.
        api_prefix: Path prefix of the RAG endpoints.
        auth_token: Optional bearer token sent with every request.
        timeout: HTTP timeout in seconds (also bounds each stream read).
        poll_interval: Seconds between task status queries.
        removal_delay: Seconds a finished task stays visible before removal.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("RAG_API_URL", "http://localhost:8000"),
        description="Backend base URL",
    )
    api_prefix: str = Field(
        default="/api/rag",
        description="Path prefix of the RAG endpoints",
    )
    auth_token: str | None = Field(
        default_factory=lambda: os.getenv("RAG_AUTH_TOKEN") or None,
        description="Bearer token (None for anonymous access)",
    )
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("RAG_TIMEOUT", "120")),
        gt=0.0,
        description="HTTP timeout in seconds",
    )
    poll_interval: float = Field(
        default=2.5,
        gt=0.0,
        description="Seconds between task status queries",
    )
    removal_delay: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds a terminal task stays visible before removal",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate that the base URL is an http(s) URL and drop the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("RAG_API_URL must start with http:// or https://")
        return v.rstrip("/")

    @property
    def rag_base_url(self) -> str:
        return f"{self.api_base_url}{self.api_prefix}"


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If RAG_API_URL is not an http(s) URL.
    """
    return ClientConfig()
