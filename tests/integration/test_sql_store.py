"""Integration tests for the SQL event store on SQLite."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import select, update

from fortress.database import (
    check_database_health,
    create_db_engine,
    create_session_factory,
    init_db,
)
from fortress.domain import events as ev
from fortress.domain.enums import Side
from fortress.domain.errors import ConcurrencyConflict
from fortress.models import StoredEvent
from fortress.repository import SqlEventStore

STREAM = "player-pilot-1"


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return SqlEventStore(session_factory)


def _events():
    return [
        ev.GameStarted(player_id="pilot-1"),
        ev.CardDrawn(side=Side.PLAYER, card_id="p1"),
        ev.CardDrawn(side=Side.OPPONENT, card_id="o1"),
    ]


def test_database_health(engine):
    assert check_database_health(engine)


def test_file_database_is_created(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'events.db'}", echo=False)
    init_db(engine)
    store = SqlEventStore(create_session_factory(engine))

    store.append(STREAM, _events())
    assert SqlEventStore(create_session_factory(engine)).read(STREAM) == _events()
    assert (tmp_path / "events.db").exists()
    engine.dispose()


def test_append_and_read(store):
    assert store.version(STREAM) == 0
    assert store.read(STREAM) == []

    assert store.append(STREAM, _events(), expected_version=0) == 3
    assert store.version(STREAM) == 3
    assert store.read(STREAM) == _events()


def test_rows_carry_sequence_and_type(store, session_factory):
    store.append(STREAM, _events())

    with session_factory() as session:
        rows = session.scalars(select(StoredEvent).order_by(StoredEvent.sequence)).all()
        assert [row.sequence for row in rows] == [1, 2, 3]
        assert [row.event_type for row in rows] == ["GAME_STARTED", "CARD_DRAWN", "CARD_DRAWN"]
        assert rows[0].payload == {"type": "GAME_STARTED", "player_id": "pilot-1"}
        assert rows[0].created_at is not None


def test_streams_are_independent(store):
    store.append(STREAM, _events())
    store.append("player-pilot-2", _events()[:1])

    assert store.version("player-pilot-2") == 1
    assert store.read("player-pilot-2") == _events()[:1]


def test_stale_version_is_a_conflict(store):
    store.append(STREAM, _events())

    with pytest.raises(ConcurrencyConflict) as excinfo:
        store.append(STREAM, _events()[:1], expected_version=2)
    assert (excinfo.value.expected, excinfo.value.actual) == (2, 3)
    assert store.version(STREAM) == 3


def test_corrupt_payload_is_skipped(store, session_factory, caplog):
    store.append(STREAM, _events())
    with session_factory() as session, session.begin():
        session.execute(
            update(StoredEvent)
            .where(StoredEvent.sequence == 2)
            .values(payload={"type": "WORMHOLE"})
        )

    with caplog.at_level(logging.WARNING, logger="fortress.repository.sql"):
        events = store.read(STREAM)

    assert events == [_events()[0], _events()[2]]
    assert "player-pilot-1#2" in caplog.text
    assert store.version(STREAM) == 3


def test_invalid_stream_id_is_refused(store):
    with pytest.raises(ValueError):
        store.append("../oops", _events())
    with pytest.raises(ValueError):
        store.read("")
