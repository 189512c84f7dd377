"""Game session service: the serialized command cycle for one stream.

A session owns the confirmed event list and the state folded from it.  Each
command runs read → decide → append → fold as one unit under an
``asyncio.Lock``:

- Store I/O happens in a worker thread so the event loop never blocks
- A command either appends all of its events or none of them
- A stale version raises ``ConcurrencyConflict``; the session re-reads the
  stream and decides the command once more before giving up

Identity comes from the stream key (``player-<id>``) and is handed to the
decider on every command; the session never stores it anywhere else.
"""

from __future__ import annotations

import asyncio
import logging

from fortress.domain.catalog import ContentCatalog, default_catalog
from fortress.domain.commands import Command
from fortress.domain.decider import decide
from fortress.domain.enums import Side
from fortress.domain.errors import ConcurrencyConflict, ValidationError
from fortress.domain.events import Event
from fortress.domain.models import GameState
from fortress.domain.policy import GreedyOpponentPolicy
from fortress.domain.projector import fold, initial_state, rebuild
from fortress.domain.rules_config import DEFAULT_RULES, RulesConfig
from fortress.repository import EventStore, player_id_from, validate_stream_id

logger = logging.getLogger(__name__)


class GameSession:
    """Serialized command processing for a single event stream."""

    MAX_OPPONENT_COMMANDS = 64

    def __init__(
        self,
        store: EventStore,
        stream_id: str,
        *,
        catalog: ContentCatalog | None = None,
        rules: RulesConfig = DEFAULT_RULES,
        policy: GreedyOpponentPolicy | None = None,
    ) -> None:
        self._store = store
        self.stream_id = validate_stream_id(stream_id)
        self._catalog = catalog if catalog is not None else default_catalog()
        self._rules = rules
        self._policy = policy or GreedyOpponentPolicy()
        self._lock = asyncio.Lock()
        self._events: list[Event] = []
        self._state: GameState = initial_state()
        self._version = 0
        self._loaded = False

    @property
    def player_id(self) -> str | None:
        return player_id_from(self.stream_id)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    async def load(self) -> GameState:
        """Replay the stream from the store."""

        async with self._lock:
            await self._reload()
            return self._state

    async def ensure_loaded(self) -> GameState:
        async with self._lock:
            if not self._loaded:
                await self._reload()
            return self._state

    async def execute(self, command: Command) -> list[Event]:
        """Validate and persist ``command``; return the events it produced."""

        async with self._lock:
            if not self._loaded:
                await self._reload()
            try:
                return await self._execute_locked(command)
            except ConcurrencyConflict as exc:
                logger.warning("%s moved on (%s); re-reading and retrying", self.stream_id, exc)
                await self._reload()
                return await self._execute_locked(command)

    def rebuild(self) -> GameState:
        """Re-derive state from the confirmed events, discarding anything else."""

        self._state = rebuild(self._events)
        return self._state

    async def play_opponent_turn(self) -> list[Event]:
        """Let the opponent policy act until it has nothing left to do."""

        produced: list[Event] = []
        for _ in range(self.MAX_OPPONENT_COMMANDS):
            command = self._policy.next_command(self._state, Side.OPPONENT)
            if command is None:
                break
            produced.extend(await self.execute(command))
        else:
            logger.warning(
                "opponent on %s stopped after %d commands",
                self.stream_id,
                self.MAX_OPPONENT_COMMANDS,
            )
        return produced

    async def _reload(self) -> None:
        events, version = await asyncio.to_thread(self._read_sync)
        self._events = events
        self._state = rebuild(events)
        self._version = version
        self._loaded = True

    def _read_sync(self) -> tuple[list[Event], int]:
        return self._store.read(self.stream_id), self._store.version(self.stream_id)

    async def _execute_locked(self, command: Command) -> list[Event]:
        try:
            events = decide(
                command,
                self._state,
                catalog=self._catalog,
                rules=self._rules,
                player_id=self.player_id,
            )
        except ValidationError as exc:
            logger.info("rejected %s on %s: %s", command.type, self.stream_id, exc.reason)
            raise

        version = await asyncio.to_thread(
            self._store.append, self.stream_id, events, expected_version=self._version
        )
        state = self._state
        for event in events:
            state = fold(state, event)
        self._state = state
        self._events.extend(events)
        self._version = version
        logger.info(
            "accepted %s on %s: %d event(s), version %d",
            command.type,
            self.stream_id,
            len(events),
            version,
        )
        return events
