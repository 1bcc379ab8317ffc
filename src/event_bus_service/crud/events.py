"""
CRUD operations for the event store.

Only create and read operations exist: stored events are immutable.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import EventTable
from ..models.schemas import StoredEvent


class EventCRUD:
    """CRUD operations for events."""

    async def create_event(
        self,
        db: AsyncSession,
        event_id: str,
        event_type: str,
        data: Dict[str, Any],
        timestamp: datetime,
    ) -> EventTable:
        """
        Insert a new event row.

        Args:
            db: Database session
            event_id: Identifier assigned by the store
            event_type: Event type tag
            data: Event payload
            timestamp: Occurrence time

        Returns:
            Created EventTable instance
        """
        event_table = EventTable(
            id=event_id,
            type=event_type,
            data=data,
            timestamp=timestamp,
        )
        db.add(event_table)
        await db.flush()
        return event_table

    async def get_event_by_id(
        self,
        db: AsyncSession,
        event_id: str
    ) -> Optional[EventTable]:
        """
        Get an event by its identifier.

        Returns:
            EventTable if found, None otherwise
        """
        result = await db.execute(
            select(EventTable).where(EventTable.id == event_id)
        )
        return result.scalar_one_or_none()

    async def get_events(
        self,
        db: AsyncSession,
        event_type: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        newest_first: bool = False,
    ) -> List[EventTable]:
        """
        Get stored events in insertion order.

        Args:
            db: Database session
            event_type: Optional type filter
            limit: Maximum number of rows (None for all)
            offset: Number of rows to skip
            newest_first: Reverse insertion order

        Returns:
            List of EventTable instances
        """
        order = EventTable.sequence.desc() if newest_first else EventTable.sequence.asc()
        query = select(EventTable).order_by(order)
        if event_type:
            query = query.where(EventTable.type == event_type)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def count_events(
        self,
        db: AsyncSession,
        event_type: Optional[str] = None
    ) -> int:
        """Count stored events, optionally for one type."""
        query = select(func.count()).select_from(EventTable)
        if event_type:
            query = query.where(EventTable.type == event_type)
        result = await db.execute(query)
        return result.scalar_one()

    def event_to_dto(self, event: EventTable) -> StoredEvent:
        """
        Convert EventTable to StoredEvent DTO.
        """
        return StoredEvent(
            id=event.id,
            type=event.type,
            data=event.data,
            timestamp=as_utc(event.timestamp),
        )


def as_utc(value: datetime) -> datetime:
    """
    Return `value` as an aware UTC datetime.

    Naive values are taken to be UTC: SQLite stores timestamps without offset.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Singleton instance
event_crud = EventCRUD()
