"""
Fanout dispatcher for downstream services.

Every downstream service exposes the same GraphQL mutation and decides on its
own what to do with an event based on its `type`. The dispatcher delivers one
stored event to every destination of the registry:

- one attempt per destination per cycle (no retries, no circuit breaking)
- a failing destination never stops the remaining ones
- each attempt is bounded by a timeout
"""
import asyncio
import logging
from typing import Any, Dict, List, Literal

import httpx

from ..core.errors import DispatchError
from ..core.registry import Destination, ServiceRegistry
from ..models.schemas import DeliveryResult, DispatchReport, StoredEvent

logger = logging.getLogger(__name__)

EVENTS_MUTATION = """
mutation Mutation($input: EventInput!) {
  events(input: $input) {
    id
  }
}
"""

DispatchMode = Literal["sequential", "concurrent"]


class FanoutDispatcher:
    """
    Delivers events to the destinations of a ServiceRegistry.

    In "sequential" mode destinations are called one after the other in
    registry order. In "concurrent" mode all calls run together; the report
    keeps registry order either way.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        registry: ServiceRegistry,
        timeout: float = 5.0,
        mode: DispatchMode = "sequential",
    ):
        """
        Initialize the dispatcher.

        Args:
            client: Shared HTTP client
            registry: Destinations to deliver to
            timeout: Per-destination timeout in seconds
            mode: "sequential" or "concurrent"
        """
        if mode not in ("sequential", "concurrent"):
            raise ValueError(f"Unknown dispatch mode: {mode}")

        self._client = client
        self._registry = registry
        self._timeout = timeout
        self._mode = mode

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def mode(self) -> str:
        return self._mode

    async def dispatch(self, event: StoredEvent) -> DispatchReport:
        """
        Deliver an event to every destination.

        Never raises for a failing destination; failures are reported in the
        returned DispatchReport and logged.
        """
        destinations = self._registry.destinations
        if not destinations:
            logger.warning(f"No destinations configured; event {event.id} not dispatched")
            return DispatchReport(event_id=event.id)

        payload = self._build_payload(event)

        if self._mode == "concurrent":
            results: List[DeliveryResult] = list(
                await asyncio.gather(
                    *(self._attempt(d, event, payload) for d in destinations)
                )
            )
        else:
            results = []
            for destination in destinations:
                results.append(await self._attempt(destination, event, payload))

        report = DispatchReport(event_id=event.id, results=results)
        if report.failed:
            logger.warning(
                f"Event {event.id} ({event.type}) delivered to {len(report.delivered)}/"
                f"{len(results)} destinations; failed: {', '.join(report.failed)}"
            )
        else:
            logger.info(f"Event {event.id} ({event.type}) delivered to all {len(results)} destinations")
        return report

    async def _attempt(
        self,
        destination: Destination,
        event: StoredEvent,
        payload: Dict[str, Any],
    ) -> DeliveryResult:
        """Run one delivery and convert any failure into a DeliveryResult."""
        try:
            status_code = await self.deliver(destination, payload)
        except DispatchError as e:
            logger.error(f"Failed to deliver event {event.id} to {destination.name}: {e.message}")
            return DeliveryResult(
                destination=destination.name,
                url=destination.url,
                success=False,
                status_code=e.response_status,
                error=e.message,
            )
        except Exception as e:
            logger.error(
                f"Unexpected error delivering event {event.id} to {destination.name}: {e}",
                exc_info=True,
            )
            return DeliveryResult(
                destination=destination.name,
                url=destination.url,
                success=False,
                error=str(e) or e.__class__.__name__,
            )

        logger.debug(f"Delivered event {event.id} to {destination.name}")
        return DeliveryResult(
            destination=destination.name,
            url=destination.url,
            success=True,
            status_code=status_code,
        )

    async def deliver(self, destination: Destination, payload: Dict[str, Any]) -> int:
        """
        Send the events mutation to one destination.

        Returns:
            HTTP status code of the successful response

        Raises:
            DispatchError: transport failure, timeout, non-2xx status,
                malformed body or GraphQL errors
        """
        try:
            response = await self._client.post(
                destination.url,
                json=payload,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise DispatchError(destination.name, f"timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise DispatchError(destination.name, f"transport error: {e}") from e

        if not response.is_success:
            raise DispatchError(
                destination.name,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DispatchError(
                destination.name,
                "response is not valid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise DispatchError(
                destination.name,
                "response is not a GraphQL result object",
                status_code=response.status_code,
            )

        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise DispatchError(
                destination.name,
                f"GraphQL errors: {messages}",
                status_code=response.status_code,
            )

        data = body.get("data")
        if not isinstance(data, dict) or "events" not in data:
            raise DispatchError(
                destination.name,
                "response has no data.events field",
                status_code=response.status_code,
            )

        return response.status_code

    @staticmethod
    def _build_payload(event: StoredEvent) -> Dict[str, Any]:
        return {
            "query": EVENTS_MUTATION,
            "variables": {"input": event.to_mutation_input()},
        }
