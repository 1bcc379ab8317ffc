"""
Best-effort forwarding of events to the logging service.

The raw event is posted to the logger's events endpoint. If that fails, the
event is wrapped into an `ErrorLogCreated` record and posted to the logs
endpoint instead. The outcome is returned as a SinkResult; nothing raised
here ever reaches the producer.
"""
import logging
from typing import Any, Dict

import httpx

from ..core.errors import SinkError
from ..core.registry import ServiceRegistry
from ..models.schemas import SinkResult, StoredEvent

logger = logging.getLogger(__name__)

FALLBACK_EVENT_TYPE = "ErrorLogCreated"


class LoggingSink:
    """Primary + fallback delivery of events to the logging service."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        registry: ServiceRegistry,
        timeout: float = 5.0,
        service_name: str = "event-bus",
    ):
        self._client = client
        self._registry = registry
        self._timeout = timeout
        self._service_name = service_name

    @property
    def enabled(self) -> bool:
        return bool(self._registry.logger_url)

    async def send(self, event: StoredEvent) -> SinkResult:
        """
        Forward an event to the logger.

        Returns:
            SinkResult describing which endpoint accepted the event, if any
        """
        if not self.enabled:
            return SinkResult(delivered=False, error="logging sink disabled")

        body = event.model_dump(mode="json")
        primary = self._registry.logger_events_endpoint
        fallback = self._registry.logger_fallback_endpoint

        try:
            await self._post(primary, body)
            return SinkResult(delivered=True, endpoint=primary)
        except SinkError as e:
            logger.warning(f"Primary logger delivery failed for event {event.id}: {e.message}")

        try:
            await self._post(fallback, self.build_fallback_record(body))
            return SinkResult(delivered=True, endpoint=fallback, used_fallback=True)
        except SinkError as e:
            logger.error(f"Fallback logger delivery failed for event {event.id}: {e.message}")
            return SinkResult(delivered=False, used_fallback=True, error=e.message)

    def build_fallback_record(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Wrap an event into the structured log record accepted by the logs endpoint."""
        return {
            "type": FALLBACK_EVENT_TYPE,
            "data": {**body, "service": self._service_name},
        }

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> None:
        try:
            response = await self._client.post(endpoint, json=body, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise SinkError(endpoint, f"transport error: {e.__class__.__name__}: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error posting to logger endpoint {endpoint}: {e}", exc_info=True)
            raise SinkError(endpoint, f"{e.__class__.__name__}: {e}") from e

        if not response.is_success:
            raise SinkError(endpoint, f"HTTP {response.status_code}")
