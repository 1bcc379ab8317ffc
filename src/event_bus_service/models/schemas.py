"""
Pydantic DTOs for the event bus API and its internal results.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventInput(BaseModel):
    """Event submitted by a producer."""
    type: str = Field(..., min_length=1, description="Event type (e.g., 'OrderCreated')")
    data: Dict[str, Any] = Field(..., description="Event payload")
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Occurrence time; defaults to receipt time"
    )


class StoredEvent(BaseModel):
    """Event as recorded by the event store."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Identifier assigned at persistence time")
    type: str = Field(..., description="Event type")
    data: Dict[str, Any] = Field(..., description="Event payload")
    timestamp: datetime = Field(..., description="Occurrence time")

    def to_mutation_input(self) -> Dict[str, Any]:
        """Variables for the downstream `events(input: EventInput!)` mutation."""
        return {"type": self.type, "data": self.data}


class PublishAck(BaseModel):
    """Acknowledgment returned to the producer."""
    status: Literal["OK"] = "OK"


class Identity(BaseModel):
    """Caller identity decoded from the bearer token."""
    id: Optional[str] = None
    user_type: Optional[str] = None
    email: Optional[str] = None


class DeliveryResult(BaseModel):
    """Outcome of one dispatch attempt to one destination."""
    destination: str
    url: str
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class DispatchReport(BaseModel):
    """Outcome of one fanout cycle, in registry order."""
    event_id: str
    results: List[DeliveryResult] = Field(default_factory=list)

    @property
    def delivered(self) -> List[str]:
        return [r.destination for r in self.results if r.success]

    @property
    def failed(self) -> List[str]:
        return [r.destination for r in self.results if not r.success]


class SinkResult(BaseModel):
    """Outcome of forwarding an event to the logging service."""
    delivered: bool
    endpoint: Optional[str] = None
    used_fallback: bool = False
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    destinations: List[str] = Field(..., description="Configured fanout destinations, in order")
