"""
Service layer for the append-only event store.
"""
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union
from uuid import uuid4

import pydantic
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import PersistenceError, ValidationError
from ..crud import event_crud
from ..crud.events import as_utc
from ..models.schemas import EventInput, StoredEvent

logger = logging.getLogger(__name__)


class EventStore:
    """Records every accepted event and reads the history back."""

    @staticmethod
    def validate(event: Union[EventInput, Mapping[str, Any]]) -> EventInput:
        """
        Check that an event carries a type and a data payload.

        Raises:
            ValidationError: type or data missing, null or of the wrong shape
        """
        if isinstance(event, EventInput):
            return event
        if not isinstance(event, Mapping):
            raise ValidationError("Event must be an object with 'type' and 'data'")

        missing = [f for f in ("type", "data") if event.get(f) is None]
        if missing:
            raise ValidationError(f"Event is missing required field(s): {', '.join(missing)}")

        try:
            return EventInput.model_validate(dict(event))
        except pydantic.ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ValidationError(f"Invalid event field(s): {', '.join(fields)}") from e

    @staticmethod
    async def append(
        db: AsyncSession,
        event: Union[EventInput, Mapping[str, Any]]
    ) -> StoredEvent:
        """
        Persist a new event. Every call creates a new record.

        Args:
            db: Database session
            event: Event input (model or plain mapping)

        Returns:
            The stored event with its assigned id and timestamp

        Raises:
            ValidationError: nothing was written
            PersistenceError: the write failed and was rolled back
        """
        valid = EventStore.validate(event)
        timestamp = as_utc(valid.timestamp) if valid.timestamp else datetime.now(timezone.utc)

        try:
            event_table = await event_crud.create_event(
                db,
                event_id=str(uuid4()),
                event_type=valid.type,
                data=valid.data,
                timestamp=timestamp,
            )
            stored = event_crud.event_to_dto(event_table)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to persist event of type {valid.type}: {e}")
            raise PersistenceError(f"Failed to persist event: {str(e)}") from e

        logger.info(f"Stored event {stored.id} ({stored.type})")
        return stored

    @staticmethod
    async def list_all(
        db: AsyncSession,
        event_type: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        newest_first: bool = False,
    ) -> List[StoredEvent]:
        """
        Return stored events, oldest first unless `newest_first` is set.

        Raises:
            PersistenceError: the store could not be read
        """
        try:
            event_tables = await event_crud.get_events(
                db,
                event_type=event_type,
                limit=limit,
                offset=offset,
                newest_first=newest_first,
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to read events: {e}")
            raise PersistenceError(f"Failed to read events: {str(e)}") from e

        return [event_crud.event_to_dto(e) for e in event_tables]

    @staticmethod
    async def get(db: AsyncSession, event_id: str) -> Optional[StoredEvent]:
        """Return one stored event, or None if it does not exist."""
        try:
            event_table = await event_crud.get_event_by_id(db, event_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read event {event_id}: {e}")
            raise PersistenceError(f"Failed to read event: {str(e)}") from e

        return event_crud.event_to_dto(event_table) if event_table else None

    @staticmethod
    async def count(db: AsyncSession, event_type: Optional[str] = None) -> int:
        """Number of stored events."""
        try:
            return await event_crud.count_events(db, event_type=event_type)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count events: {str(e)}") from e
