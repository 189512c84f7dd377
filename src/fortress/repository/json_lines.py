"""JSON-lines event store: one append-only ``<stream>.jsonl`` file per stream."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, TypeAdapter

from fortress.domain.errors import ConcurrencyConflict, DataCorruption
from fortress.domain.events import Event, decode_event, encode_event
from fortress.models.base import utc_now

from .base import validate_stream_id

logger = logging.getLogger(__name__)


class StoredRecord(BaseModel):
    """Envelope written for every event."""

    sequence: int
    recorded_at: datetime
    event: dict[str, Any]


class JsonLinesEventStore:
    """Persist event streams as JSON lines on disk."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[StoredRecord] = TypeAdapter(StoredRecord)
        self._lock = threading.Lock()

    def _path_for(self, stream_id: str) -> Path:
        return self.base_path / f"{validate_stream_id(stream_id)}.jsonl"

    def _lines(self, stream_id: str) -> list[str]:
        path = self._path_for(stream_id)
        if not path.exists():
            return []
        return [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]

    def version(self, stream_id: str) -> int:
        return len(self._lines(stream_id))

    def append(
        self,
        stream_id: str,
        events: Sequence[Event],
        *,
        expected_version: int | None = None,
    ) -> int:
        """Append ``events`` to the stream file and return the new version."""

        with self._lock:
            current = self.version(stream_id)
            if expected_version is not None and current != expected_version:
                raise ConcurrencyConflict(stream_id, expected_version, current)
            if not events:
                return current
            recorded_at = utc_now()
            lines = [
                self._adapter.dump_json(
                    StoredRecord(
                        sequence=current + offset,
                        recorded_at=recorded_at,
                        event=encode_event(event),
                    )
                ).decode("utf-8")
                for offset, event in enumerate(events, start=1)
            ]
            with self._path_for(stream_id).open("a", encoding="utf-8") as handle:
                handle.write("\n".join(lines) + "\n")
            return current + len(events)

    def read(self, stream_id: str) -> list[Event]:
        """Load the stream, skipping (and logging) records that cannot be decoded."""

        events: list[Event] = []
        for line_number, line in enumerate(self._lines(stream_id), start=1):
            try:
                events.append(self._decode(stream_id, line_number, line))
            except DataCorruption as exc:
                logger.warning("skipping event %s#%s: %s", stream_id, line_number, exc)
        return events

    def _decode(self, stream_id: str, line_number: int, line: str) -> Event:
        try:
            record = self._adapter.validate_json(line)
        except pydantic.ValidationError as exc:
            raise DataCorruption(
                f"unreadable record ({exc.error_count()} error(s))",
                stream_id=stream_id,
                sequence=line_number,
            ) from exc
        return decode_event(record.event, stream_id=stream_id, sequence=record.sequence)

    def list_streams(self) -> list[str]:
        """Return every stream id currently persisted."""

        return sorted(path.stem for path in self.base_path.glob("*.jsonl"))

    def delete(self, stream_id: str) -> None:
        """Remove a stream file if it exists."""

        path = self._path_for(stream_id)
        if path.exists():
            path.unlink()
