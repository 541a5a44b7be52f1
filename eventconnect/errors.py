"""Error taxonomy for the EventConnect admin core."""

from typing import Any, List, Optional


class EventConnectError(Exception):
    """Base class for every error raised by the core."""

    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransportError(EventConnectError):
    """Network failure or timeout before a response was received."""

    retryable = True


class HttpStatusError(EventConnectError):
    """The backend answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, message: str, body: Optional[Any] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


class ValidationError(HttpStatusError):
    """400 response carrying per-field validation messages."""

    def __init__(self, field_errors: List[str], body: Optional[Any] = None, status_code: int = 400):
        self.field_errors = list(field_errors)
        super().__init__(status_code, "; ".join(self.field_errors), body)


class MalformedResponseError(EventConnectError):
    """The backend answered with a payload of the wrong shape."""


class AuthError(EventConnectError):
    """Missing, expired or rejected bearer token."""


class NotFoundError(EventConnectError):
    """Unknown event, reservation or user."""


class CapacityExhaustedError(EventConnectError):
    """A booking was rejected because the event has no room left."""

    def __init__(self, message: str, event_id: Optional[int] = None, requested: Optional[int] = None,
                 available: Optional[int] = None):
        self.event_id = event_id
        self.requested = requested
        self.available = available
        super().__init__(message)


class InvalidTransitionError(EventConnectError):
    """A reservation status change outside the allowed transitions."""
