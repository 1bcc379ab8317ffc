"""
Core configuration and infrastructure for the event bus service.
"""

from .config import settings, Settings
from .errors import (
    EventBusError,
    AuthenticationError,
    ValidationError,
    PersistenceError,
    DispatchError,
    SinkError,
)
from .registry import Destination, ServiceRegistry

__all__ = [
    # Config
    "settings",
    "Settings",
    # Errors
    "EventBusError",
    "AuthenticationError",
    "ValidationError",
    "PersistenceError",
    "DispatchError",
    "SinkError",
    # Registry
    "Destination",
    "ServiceRegistry",
]
