"""Typed failures raised below the message router."""

import enum
from typing import Optional


class CognifyError(Exception):
    """Base class for failures that carry a user-facing message."""

    code = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotConfigured(CognifyError):
    """The generation backend credential is missing."""

    code = "NOT_CONFIGURED"

    def __init__(
        self,
        message: str = "Please configure your Gemini API key in extension settings first",
    ):
        super().__init__(message)


class RateLimitExceeded(CognifyError):
    """Local admission control rejected a generation call."""

    code = "RATE_LIMITED"

    def __init__(self, retry_after: float):
        super().__init__(
            "Rate limit exceeded. Please wait a minute before continuing."
        )
        self.retry_after = retry_after


class FailureReason(str, enum.Enum):
    """Best-effort classification of a backend failure."""

    QUOTA_EXHAUSTED = "quota_exhausted"
    UNKNOWN = "unknown"


class BackendError(CognifyError):
    """The generation backend answered with a non-success status."""

    code = "BACKEND_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: FailureReason = FailureReason.UNKNOWN,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class GenerationTimeout(CognifyError):
    """The generation backend did not answer in time."""

    code = "TIMEOUT"

    def __init__(self, message: str = "Request timed out. Please try again."):
        super().__init__(message)


class ValidationError(CognifyError):
    """A request is malformed or not valid for the current session state."""

    code = "VALIDATION_ERROR"


class NotAuthenticated(CognifyError):
    """The operation needs a signed-in user."""

    code = "AUTH_REQUIRED"

    def __init__(
        self,
        message: str = "Authentication required. Please sign in to use this feature.",
    ):
        super().__init__(message)


class PersistenceWarning(CognifyError):
    """Durable mirror write failed. Logged, never surfaced to callers."""

    code = "PERSISTENCE_WARNING"


_QUOTA_MARKERS = ("quota", "resource_exhausted", "credits exhausted", "rate limit")


def classify_backend_failure(
    status_code: Optional[int], status: Optional[str], message: str
) -> FailureReason:
    """Classify a backend failure from its HTTP status, error status and text.

    Text matching is a heuristic: a transient failure whose message happens to
    mention a quota is reported as quota exhaustion.
    """
    if status_code == 429 or (status or "").upper() == "RESOURCE_EXHAUSTED":
        return FailureReason.QUOTA_EXHAUSTED

    lowered = (message or "").lower()
    if any(marker in lowered for marker in _QUOTA_MARKERS):
        return FailureReason.QUOTA_EXHAUSTED

    return FailureReason.UNKNOWN
