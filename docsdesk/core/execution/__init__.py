"""Execution module for DocsDesk.

Provides classes for error classification and retrying execution.
"""

from docsdesk.core.execution.error_classifier import ErrorClassifier
from docsdesk.core.execution.retry_policy import RetryPolicy

__all__ = ["ErrorClassifier", "RetryPolicy"]
