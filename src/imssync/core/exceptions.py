"""
Exceptions - Typed failures raised by IMS connectors.

Every failure carries the issue id, the attempted operation and, where the
tracker supplied one, its own error detail. Callers use the type to decide
whether to retry, surface the problem to a user, or map it to an error code.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional


__all__ = [
    "ImsConnectorError",
    "NotFoundError",
    "AuthenticationError",
    "PermissionError",
    "TrackerUnreachableError",
    "TransientError",
    "RateLimitError",
    "TrackerRejectedError",
    "TransitionError",
    "UnmappedValueError",
    "ConfigurationError",
    "annotate_errors",
]


class ImsConnectorError(Exception):
    """Base exception for all connector failures."""

    def __init__(
        self,
        message: str,
        issue_id: Optional[str] = None,
        operation: Optional[str] = None,
        detail: Any = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.issue_id = issue_id
        self.operation = operation
        self.detail = detail
        self.cause = cause

    def __str__(self) -> str:
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.issue_id:
            parts.append(self.issue_id)
        prefix = f"[{' '.join(parts)}] " if parts else ""
        return f"{prefix}{self.message}"


class NotFoundError(ImsConnectorError):
    """The targeted issue (or resource) does not exist in the tracker."""
    pass


class AuthenticationError(ImsConnectorError):
    """The tracker rejected the credentials."""
    pass


class PermissionError(ImsConnectorError):
    """The credentials lack permission for the operation."""
    pass


class TrackerUnreachableError(ImsConnectorError):
    """Network failure or timeout talking to the tracker."""
    pass


class TransientError(ImsConnectorError):
    """Server-side failure that may succeed when retried."""
    pass


class RateLimitError(TransientError):
    """The tracker throttled the request."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class TrackerRejectedError(ImsConnectorError):
    """The tracker refused the write (validation failure)."""
    pass


class TransitionError(TrackerRejectedError):
    """No workflow transition leads to the requested state."""
    pass


class UnmappedValueError(ImsConnectorError):
    """The mapping configuration has no equivalent for a value."""

    def __init__(self, message: str, value: Any = None, vocabulary: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.value = value
        self.vocabulary = vocabulary


class ConfigurationError(ImsConnectorError):
    """Missing or invalid connector / mapping configuration."""
    pass


@contextmanager
def annotate_errors(operation: str, issue_id: Optional[str] = None) -> Iterator[None]:
    """
    Attach the attempted operation and issue id to escaping connector errors.

    Values already set closer to the failure are kept.
    """
    try:
        yield
    except ImsConnectorError as e:
        if e.operation is None:
            e.operation = operation
        if e.issue_id is None:
            e.issue_id = issue_id
        raise
