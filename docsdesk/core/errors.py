"""Error taxonomy for the ServiceNow client.

Every failure the client surfaces is one of four variants:

- ConfigurationError: missing/invalid credentials, raised before any network call
- TransportError: no HTTP response obtained (DNS, connect, timeout)
- ApiError: a response was obtained but its status is outside 2xx
- RequestCancelledError: caller-initiated abort or deadline, never retried

None of these carry the Authorization header or raw credentials.
"""

from typing import Any, Optional


def is_retryable_status(status_code: int) -> bool:
    """True for 429 (Too Many Requests) and 5xx (server errors)."""
    return status_code == 429 or 500 <= status_code <= 599


class DocsDeskError(Exception):
    """Base class for all DocsDesk client errors."""


class ConfigurationError(DocsDeskError):
    """Missing or invalid configuration for the selected auth mode."""


class TransportError(DocsDeskError):
    """No HTTP response was received.

    The original httpx exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, method: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.method = method
        self.url = url


class ApiError(DocsDeskError):
    """ServiceNow returned a non-2xx response.

    Attributes:
        status_code: HTTP status code
        body: Parsed JSON body, or {} when the body was empty/unparseable
        retry_after_seconds: Parsed Retry-After header (seconds), if numeric
        method: HTTP method of the failed request
        url: Absolute URL of the failed request
    """

    def __init__(
        self,
        status_code: int,
        body: Any = None,
        retry_after_seconds: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.retry_after_seconds = retry_after_seconds
        self.method = method
        self.url = url
        self.reason = reason or ""
        super().__init__(f"ServiceNow API error: {status_code} {self.reason}".rstrip())

    @property
    def retryable(self) -> bool:
        """True for 429 and 5xx responses."""
        return is_retryable_status(self.status_code)


class RequestCancelledError(DocsDeskError):
    """The caller cancelled the request or its deadline elapsed."""

    def __init__(self, reason: str = "cancelled"):
        super().__init__(f"ServiceNow request aborted: {reason}")
        self.reason = reason
