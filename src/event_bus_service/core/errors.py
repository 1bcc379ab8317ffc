"""
Error taxonomy for the event bus.

Only AuthenticationError, ValidationError and PersistenceError reach the
producer. DispatchError and SinkError are raised and caught inside their
own component and end up as result objects.
"""


class EventBusError(Exception):
    """Base exception for event bus errors."""
    status_code: int = 500
    category: str = "Internal server error"


class AuthenticationError(EventBusError):
    """Raised when the bearer credential is missing, malformed, invalid or expired."""
    status_code = 401
    category = "Unauthorized"


class ValidationError(EventBusError):
    """Raised when an event is missing its type or data."""
    status_code = 422
    category = "Invalid event"


class PersistenceError(EventBusError):
    """Raised when the event store cannot record an event."""
    status_code = 503
    category = "Event store unavailable"


class DispatchError(EventBusError):
    """Raised when delivery to a single downstream service fails."""

    def __init__(self, destination: str, message: str, status_code: int | None = None):
        super().__init__(f"{destination}: {message}")
        self.destination = destination
        self.message = message
        self.response_status = status_code


class SinkError(EventBusError):
    """Raised when a logging sink endpoint rejects or fails a delivery."""

    def __init__(self, endpoint: str, message: str):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.message = message
