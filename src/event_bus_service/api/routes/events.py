import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.auth import get_current_identity
from ...core.config import settings
from ...core.database import get_db
from ...models.schemas import EventInput, Identity, PublishAck, StoredEvent
from ...services import EventBus, EventStore
from ..dependencies import get_event_bus

router = APIRouter(prefix="/events", tags=["Events"])
logger = logging.getLogger(__name__)


@router.post("", response_model=PublishAck)
async def publish_event(
    event: EventInput,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> PublishAck:
    """
    Accept an event from a producer.

    The event is stored, delivered to every downstream service and copied to
    the logging service. The producer is acknowledged once all delivery
    attempts are done, whatever their individual outcome.
    """
    outcome = await bus.publish(db, event)
    logger.info(
        f"Accepted event {outcome.event.id} ({outcome.event.type}) from user {identity.id}; "
        f"delivered to {len(outcome.dispatch.delivered)}/{len(outcome.dispatch.results)} destinations"
    )
    return PublishAck()


@router.get("", response_model=List[StoredEvent])
async def list_events(
    type: Optional[str] = Query(None, description="Filter by event type"),
    limit: Optional[int] = Query(
        None,
        ge=1,
        le=settings.EVENTS_QUERY_MAX_LIMIT,
        description="Maximum number of events to return (all when omitted)"
    ),
    offset: int = Query(0, ge=0, description="Number of events to skip"),
    order: Literal["asc", "desc"] = Query("asc", description="Insertion order, oldest first by default"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> List[StoredEvent]:
    """
    Return stored events for diagnostics or replay, oldest first.

    Without query parameters the full history is returned.
    """
    return await EventStore.list_all(
        db,
        event_type=type,
        limit=limit,
        offset=offset,
        newest_first=order == "desc",
    )


@router.get("/{event_id}", response_model=StoredEvent)
async def get_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> StoredEvent:
    """Return a single stored event."""
    event = await EventStore.get(db, event_id)
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event '{event_id}' not found"
        )
    return event


@router.post("/{event_id}/replay", response_model=PublishAck)
async def replay_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> PublishAck:
    """
    Deliver a stored event to the downstream services again.

    No new record is created. Delivery is best-effort, as for new events.
    """
    event = await EventStore.get(db, event_id)
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event '{event_id}' not found"
        )

    outcome = await bus.replay(event)
    logger.info(
        f"Replayed event {event_id} for user {identity.id}; "
        f"failed destinations: {outcome.dispatch.failed or 'none'}"
    )
    return PublishAck()
