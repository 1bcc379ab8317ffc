"""
Service layer for the event bus.
"""
from .dispatcher import FanoutDispatcher
from .event_bus import EventBus, PublishOutcome
from .event_store import EventStore
from .logging_sink import LoggingSink

__all__ = ["EventBus", "EventStore", "FanoutDispatcher", "LoggingSink", "PublishOutcome"]
