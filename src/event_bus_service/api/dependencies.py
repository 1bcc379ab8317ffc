"""FastAPI dependencies for the event routes."""

from fastapi import HTTPException, Request, status

from ..services import EventBus


def get_event_bus(request: Request) -> EventBus:
    """Return the EventBus created during application startup."""
    bus = getattr(request.app.state, "event_bus", None)
    if bus is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Event bus not initialized",
        )
    return bus
