"""
SQLAlchemy model for the append-only event store.
"""
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base


class EventTable(Base):
    """Stored event. Rows are inserted once and never updated."""
    __tablename__ = "events"

    # Insertion order of the store
    sequence: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        unique=True,
        index=True
    )
    type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True
    )
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Occurrence time supplied by the producer, or receipt time"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<EventTable(sequence={self.sequence}, id={self.id}, type={self.type})>"
