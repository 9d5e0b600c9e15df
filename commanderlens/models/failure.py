"""
Failure classification for tag acquisition.

Tag fetching never fails a deck evaluation. Every failure below is either
absorbed by the fetch loop's retry/circuit-breaker policy or surfaced to the
caller as a warning string in the fetch result.

- Not found: the tagging service has no record of the card. This is a
  successful lookup with an empty tag list, not an error.
- TransientFetchError: any failure talking to the tagging service.
  Accumulated (deduplicated) and counted toward the circuit breaker.
- OperationAbortedError: the consecutive-failure threshold was reached.
  Recorded once; remaining cards default to empty tags.
- DegradedModeError: the legacy name-only path was used. Always reported,
  regardless of outcome.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    EXTERNAL_API_ERROR = "external_api_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CANCELLED = "cancelled"
    DEGRADED_MODE = "degraded_mode"


# Fixed user-facing messages
ABORTED_MESSAGE = "Stopped fetching due to repeated errors."
CANCELLED_MESSAGE = "Stopped fetching tags: cancelled."
DEGRADED_MODE_MESSAGE = (
    "Oracle tag fetching requires full card data. "
    "Please use fetch_tags with set and collector number instead."
)


class TaggerError(Exception):
    """
    Base class for tag acquisition failures.

    The message is independent of the card being fetched so that
    repeated failures collapse into one entry when deduplicated.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        super().__init__(message)


class TransientFetchError(TaggerError):
    """Raised when a request to the tagging service fails for any reason."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
        )


class OperationAbortedError(TaggerError):
    """Terminal condition once too many consecutive requests have failed."""

    def __init__(self, failures: int):
        self.failures = failures
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=ABORTED_MESSAGE,
            detail=f"{failures} consecutive failures",
        )


class FetchCancelledError(TaggerError):
    """Terminal condition when the caller cancels a fetch run."""

    def __init__(self) -> None:
        super().__init__(kind=FailureKind.CANCELLED, message=CANCELLED_MESSAGE)


class DegradedModeError(TaggerError):
    """Compatibility signal for the legacy name-only lookup path."""

    def __init__(self) -> None:
        super().__init__(kind=FailureKind.DEGRADED_MODE, message=DEGRADED_MODE_MESSAGE)
