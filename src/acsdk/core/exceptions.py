from typing import Any, Optional

from pydantic import ValidationError


class ApiError(Exception):
    """Failure of a request against the Automation Cloud API.

    Attributes:
        message: Human-readable error description (server `message` when present)
        status: HTTP status code, or None when no response was received
        body: Parsed error body returned by the server (if any)
    """
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[Any] = None,
    ):
        self.message = message
        self.status = status
        self.body = body
        super().__init__(message)

    @property
    def is_transient(self) -> bool:
        """Server errors and network failures may succeed on a later attempt."""
        return self.status is None or self.status >= 500

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status={self.status!r})"


class EventChannelError(Exception):
    """Raised (and reported) when a push channel cannot deliver events.

    Attributes:
        status: HTTP status of the failed connection attempt (if applicable)
    """
    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


def is_transient_error(exc: BaseException) -> bool:
    """Classify a fetch failure for retry purposes.

    Client errors (status below 500) are final: the request must change before
    it can succeed. So is a response body that does not validate, since the
    same offset would return the same body again. Anything else without a
    status is treated like a network failure. Cancellation and other
    non-Exception signals are never retried.
    """
    if not isinstance(exc, Exception) or isinstance(exc, ValidationError):
        return False
    status = getattr(exc, "status", None)
    if not isinstance(status, int):
        return True
    return status >= 500
