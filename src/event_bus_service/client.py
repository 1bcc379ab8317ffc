"""
Client library for producers talking to the Event Bus Service.

Usage:
    async with EventBusClient("http://event-bus:4001", token=jwt_token) as bus:
        await bus.publish("OrderCreated", {"orderId": "abc123"})
        events = await bus.get_events(type="OrderCreated")
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from .models.schemas import EventInput, PublishAck, StoredEvent


class EventBusClient:
    """
    Client for publishing events to and reading events from the event bus.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the event bus client.

        Args:
            base_url: Base URL of the event bus (e.g., "http://localhost:4001")
            token: JWT sent as a Bearer credential
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def publish(
        self,
        event_type: str,
        data: Dict[str, Any],
        timestamp: Optional[datetime] = None,
    ) -> PublishAck:
        """
        Publish an event.

        Args:
            event_type: Event type (e.g., "OrderCreated")
            data: Event payload
            timestamp: Optional occurrence time

        Returns:
            PublishAck once the bus has stored and dispatched the event
        """
        event = EventInput(type=event_type, data=data, timestamp=timestamp)
        response = await self._client.post(
            f"{self.base_url}/events",
            json=event.model_dump(mode="json", exclude_none=True)
        )
        response.raise_for_status()
        return PublishAck.model_validate(response.json())

    async def get_events(
        self,
        type: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order: Optional[str] = None,
    ) -> List[StoredEvent]:
        """
        List stored events, oldest first unless order="desc".
        """
        params = {}
        if type:
            params["type"] = type
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        if order:
            params["order"] = order

        response = await self._client.get(f"{self.base_url}/events", params=params)
        response.raise_for_status()
        return [StoredEvent.model_validate(e) for e in response.json()]

    async def get_event(self, event_id: str) -> Optional[StoredEvent]:
        """
        Get a stored event by id.

        Returns:
            StoredEvent if found, None otherwise
        """
        response = await self._client.get(f"{self.base_url}/events/{event_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return StoredEvent.model_validate(response.json())

    async def replay(self, event_id: str) -> PublishAck:
        """Ask the bus to deliver a stored event to the downstream services again."""
        response = await self._client.post(f"{self.base_url}/events/{event_id}/replay")
        response.raise_for_status()
        return PublishAck.model_validate(response.json())
