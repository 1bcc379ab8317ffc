"""
Database models for the event bus service.
"""

from .base import Base
from .event import EventTable

__all__ = [
    "Base",
    "EventTable",
]
