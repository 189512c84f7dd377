"""Stored event model for the SQL event store.

Each row is one immutable event of one stream.  ``sequence`` is the 1-based
position of the event in its stream; the unique constraint on
``(stream_id, sequence)`` is what turns a lost append race into an
``IntegrityError``.
"""

from typing import Any

from sqlalchemy import JSON, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampCreatedMixin


class StoredEvent(Base, TimestampCreatedMixin):
    """One persisted event.

    Attributes:
        id: Primary key
        stream_id: Stream the event belongs to (``player-<id>``)
        sequence: Position within the stream, starting at 1
        event_type: Discriminator copied out of the payload for querying
        payload: Flat JSON record of the event
    """

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stream_id: Mapped[str] = mapped_column(String, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    event_type: Mapped[str] = mapped_column(String, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (
        UniqueConstraint("stream_id", "sequence", name="uq_events_stream_sequence"),
        Index("idx_events_type", "event_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<StoredEvent(stream='{self.stream_id}', seq={self.sequence}, "
            f"type='{self.event_type}')>"
        )
