"""SQLAlchemy models for the Space Fortress event store."""

from .base import Base, TimestampCreatedMixin, utc_now
from .event import StoredEvent

__all__ = [
    "Base",
    "StoredEvent",
    "TimestampCreatedMixin",
    "utc_now",
]
