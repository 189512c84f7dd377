"""Event store backends."""

from .base import EventStore, player_id_from, stream_id_for, validate_stream_id
from .json_lines import JsonLinesEventStore
from .sql import SqlEventStore

__all__ = [
    "EventStore",
    "JsonLinesEventStore",
    "SqlEventStore",
    "player_id_from",
    "stream_id_for",
    "validate_stream_id",
]
