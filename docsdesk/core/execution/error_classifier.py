"""Error classifier for the ServiceNow client.

Classifies errors into categories for retry decisions.
"""

from docsdesk.core.errors import (
    ApiError,
    RequestCancelledError,
    TransportError,
    is_retryable_status,
)
from docsdesk.core.retry_config import ErrorCategory


class ErrorClassifier:
    """Classifies errors into categories for retry decisions.

    Static methods for stateless classification.
    """

    @staticmethod
    def is_retryable(status_code: int) -> bool:
        """Return True for 429 (Too Many Requests) and 5xx (server errors).

        Any other 4xx is a client error and never retried. 2xx/3xx never
        reach the retry path.
        """
        return is_retryable_status(status_code)

    @staticmethod
    def categorize(error: BaseException) -> ErrorCategory:
        """Categorize an error into TRANSIENT, RATE_LIMIT, PERMANENT or CANCELLED.

        Args:
            error: Exception raised by an attempt

        Returns:
            ErrorCategory enum value
        """
        match error:
            case RequestCancelledError():
                return ErrorCategory.CANCELLED
            case TransportError():
                return ErrorCategory.TRANSIENT
            case ApiError(status_code=429):
                return ErrorCategory.RATE_LIMIT
            case ApiError(status_code=code) if ErrorClassifier.is_retryable(code):
                return ErrorCategory.TRANSIENT
            case _:
                return ErrorCategory.PERMANENT
