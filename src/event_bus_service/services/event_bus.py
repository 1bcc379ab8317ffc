"""
Event bus orchestration: persist, fan out, log, acknowledge.

The stages for one event run strictly in this order:

1. EventStore.append    - terminal errors (ValidationError, PersistenceError) propagate
2. FanoutDispatcher     - per-destination failures are reported, never raised
3. LoggingSink          - failures are reported, never raised

Authentication happens before the bus is reached (see core.auth).
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..core.registry import ServiceRegistry
from ..models.schemas import DispatchReport, EventInput, SinkResult, StoredEvent
from .dispatcher import FanoutDispatcher
from .event_store import EventStore
from .logging_sink import LoggingSink

logger = logging.getLogger(__name__)


@dataclass
class PublishOutcome:
    """Everything that happened to one event. Kept inside the service."""
    event: StoredEvent
    dispatch: DispatchReport
    sink: SinkResult


class EventBus:
    """Owns the shared HTTP client, the dispatcher and the logging sink."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        dispatcher: FanoutDispatcher,
        sink: LoggingSink,
        store: Any = EventStore,
    ):
        self._client = client
        self.dispatcher = dispatcher
        self.sink = sink
        self.store = store

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        registry: Optional[ServiceRegistry] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "EventBus":
        """
        Build the bus from configuration.

        Args:
            settings: Application settings
            registry: Destinations; resolved from settings when omitted
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        registry = registry or ServiceRegistry.from_settings(settings)
        client = httpx.AsyncClient(transport=transport)
        dispatcher = FanoutDispatcher(
            client,
            registry,
            timeout=settings.DISPATCH_TIMEOUT_SECONDS,
            mode=settings.DISPATCH_MODE,
        )
        sink = LoggingSink(
            client,
            registry,
            timeout=settings.SINK_TIMEOUT_SECONDS,
            service_name=settings.SINK_SERVICE_NAME,
        )
        return cls(client, dispatcher, sink)

    @property
    def registry(self) -> ServiceRegistry:
        return self.dispatcher.registry

    async def publish(
        self,
        db: AsyncSession,
        event: Union[EventInput, Mapping[str, Any]],
    ) -> PublishOutcome:
        """
        Accept an event from a producer.

        Raises:
            ValidationError: event rejected, nothing stored or dispatched
            PersistenceError: store failed, nothing dispatched
        """
        stored = await self.store.append(db, event)
        return await self._fan_out(stored)

    async def replay(self, event: StoredEvent) -> PublishOutcome:
        """Dispatch an already stored event again. No new record is created."""
        logger.info(f"Replaying event {event.id} ({event.type})")
        return await self._fan_out(event)

    async def _fan_out(self, event: StoredEvent) -> PublishOutcome:
        report = await self.dispatcher.dispatch(event)

        sink_result = await self.sink.send(event)
        if not sink_result.delivered:
            logger.warning(f"Event {event.id} not delivered to logging service: {sink_result.error}")

        return PublishOutcome(event=event, dispatch=report, sink=sink_result)

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        await self._client.aclose()
