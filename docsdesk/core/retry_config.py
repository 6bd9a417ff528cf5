"""Retry configuration for the ServiceNow client.

Immutable configuration for error retry behavior.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Error categories for classification and retry decisions.

    - TRANSIENT: No response or a 5xx response (retry with backoff)
    - RATE_LIMIT: 429 responses (honor Retry-After, else backoff)
    - PERMANENT: Any other 4xx, configuration errors (no retry)
    - CANCELLED: Caller abort or deadline (never retried)
    """

    TRANSIENT = "transient"
    RATE_LIMIT = "rate_limit"
    PERMANENT = "permanent"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attempts are numbered 1..max_attempts. A delay is only computed between
    attempts, never after the final one.
    """

    max_attempts: int = 5
    base_delay_ms: float = 500
    factor: float = 2.0  # exponential backoff multiplier
    jitter_percent: float = 15.0  # +/- percentage of the computed delay

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")
        if self.jitter_percent < 0:
            raise ValueError("jitter_percent must be >= 0")
