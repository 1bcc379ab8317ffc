from fastapi import APIRouter, Depends

from ...core.config import settings
from ...models.schemas import HealthResponse
from ...services import EventBus
from ..dependencies import get_event_bus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(bus: EventBus = Depends(get_event_bus)) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and the configured fanout destinations.
    """
    destinations = list(bus.registry.names)
    return HealthResponse(
        status="healthy" if destinations else "degraded",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        destinations=destinations,
    )
