"""
CRUD operations for the event bus service.
"""

from .events import EventCRUD, event_crud

__all__ = [
    "EventCRUD",
    "event_crud",
]
