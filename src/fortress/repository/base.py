"""Event store contract shared by every persistence backend."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Protocol

from fortress.domain.events import Event

_STREAM_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")
STREAM_PREFIX = "player-"


def stream_id_for(player_id: str) -> str:
    """Stream key that owns a player's events."""

    return f"{STREAM_PREFIX}{player_id}"


def player_id_from(stream_id: str) -> str | None:
    """Recover the player identity encoded in a stream key."""

    if not stream_id.startswith(STREAM_PREFIX):
        return None
    return stream_id[len(STREAM_PREFIX) :] or None


def validate_stream_id(stream_id: str) -> str:
    if not _STREAM_ID.match(stream_id):
        raise ValueError(f"invalid stream id: {stream_id!r}")
    return stream_id


class EventStore(Protocol):
    """Append-only, per-stream event log."""

    def append(
        self,
        stream_id: str,
        events: Sequence[Event],
        *,
        expected_version: int | None = None,
    ) -> int:
        """Append ``events`` atomically and return the new stream version.

        Raises ``ConcurrencyConflict`` when ``expected_version`` is given and
        the stream has moved past it.
        """
        ...

    def read(self, stream_id: str) -> list[Event]:
        """Every decodable event of the stream, in append order."""
        ...

    def version(self, stream_id: str) -> int:
        """Number of records appended to the stream so far."""
        ...
