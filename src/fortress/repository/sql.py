"""SQLAlchemy-backed event store."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from fortress.domain.errors import ConcurrencyConflict, DataCorruption
from fortress.domain.events import Event, decode_event, encode_event
from fortress.models import StoredEvent

from .base import validate_stream_id

logger = logging.getLogger(__name__)


class SqlEventStore:
    """Persist event streams in the ``events`` table, one transaction per append."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _current(session: Session, stream_id: str) -> int:
        latest = session.scalar(
            select(func.max(StoredEvent.sequence)).where(StoredEvent.stream_id == stream_id)
        )
        return latest or 0

    def version(self, stream_id: str) -> int:
        with self._session_factory() as session:
            return self._current(session, validate_stream_id(stream_id))

    def append(
        self,
        stream_id: str,
        events: Sequence[Event],
        *,
        expected_version: int | None = None,
    ) -> int:
        validate_stream_id(stream_id)
        try:
            with self._session_factory() as session, session.begin():
                current = self._current(session, stream_id)
                if expected_version is not None and current != expected_version:
                    raise ConcurrencyConflict(stream_id, expected_version, current)
                session.add_all(
                    StoredEvent(
                        stream_id=stream_id,
                        sequence=current + offset,
                        event_type=event.type,
                        payload=encode_event(event),
                    )
                    for offset, event in enumerate(events, start=1)
                )
                return current + len(events)
        except IntegrityError as exc:
            # Another writer claimed the same sequence numbers first.
            expected = expected_version if expected_version is not None else -1
            raise ConcurrencyConflict(stream_id, expected, self.version(stream_id)) from exc

    def read(self, stream_id: str) -> list[Event]:
        validate_stream_id(stream_id)
        with self._session_factory() as session:
            rows = session.scalars(
                select(StoredEvent)
                .where(StoredEvent.stream_id == stream_id)
                .order_by(StoredEvent.sequence)
            ).all()
            records = [(row.sequence, row.payload) for row in rows]

        events: list[Event] = []
        for sequence, payload in records:
            try:
                events.append(decode_event(payload, stream_id=stream_id, sequence=sequence))
            except DataCorruption as exc:
                logger.warning("skipping event %s#%s: %s", stream_id, sequence, exc)
        return events
