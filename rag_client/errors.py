"""Exceptions raised by the request/response side of the client."""


class RagClientError(Exception):
    """Base class for client errors."""

    pass


class RagApiError(RagClientError):
    """Raised when the backend answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the backend.
        detail: Response body or reason phrase.
    """

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}")


class InvalidResponseError(RagClientError):
    """Raised when a successful response does not carry a JSON body."""

    def __init__(self, status_code: int, reason: str) -> None:
        self.status_code = status_code
        super().__init__(f"Invalid response body (HTTP {status_code}): {reason}")
