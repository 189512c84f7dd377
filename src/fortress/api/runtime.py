"""Runtime primitives backing the Space Fortress HTTP API."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.engine import Engine

from fortress.config import Settings, get_settings
from fortress.database import (
    check_database_health,
    create_db_engine,
    create_session_factory,
    init_db,
)
from fortress.domain.catalog import ContentCatalog, default_catalog
from fortress.domain.rules_config import DEFAULT_RULES, RulesConfig
from fortress.repository import EventStore, JsonLinesEventStore, SqlEventStore, stream_id_for
from fortress.services.session import GameSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """One :class:`GameSession` per stream, created on first use."""

    def __init__(
        self,
        store: EventStore,
        *,
        catalog: ContentCatalog,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._rules = rules
        self._sessions: dict[str, GameSession] = {}
        self._lock = asyncio.Lock()

    async def get(self, player_id: str) -> GameSession:
        """Loaded session for ``player_id``."""

        stream_id = stream_id_for(player_id)
        async with self._lock:
            session = self._sessions.get(stream_id)
            if session is None:
                session = GameSession(
                    self._store, stream_id, catalog=self._catalog, rules=self._rules
                )
                self._sessions[stream_id] = session
        await session.ensure_loaded()
        return session

    def stream_exists(self, player_id: str) -> bool:
        return self._store.version(stream_id_for(player_id)) > 0

    def active_streams(self) -> list[str]:
        return sorted(self._sessions)


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        rules: RulesConfig = DEFAULT_RULES,
        catalog: ContentCatalog | None = None,
        store: EventStore | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.rules = rules
        self.catalog = catalog if catalog is not None else default_catalog()
        self._engine: Engine | None = None
        self.store = store if store is not None else self._build_store()
        self.sessions = SessionRegistry(self.store, catalog=self.catalog, rules=rules)

    def _build_store(self) -> EventStore:
        if self.settings.event_store == "sql":
            self._engine = create_db_engine(
                self.settings.database_url, echo=self.settings.database_echo
            )
            init_db(self._engine)
            logger.info("using SQL event store at %s", self._engine.url)
            return SqlEventStore(create_session_factory(self._engine))
        logger.info("using JSON-lines event store in %s", self.settings.data_dir)
        return JsonLinesEventStore(self.settings.data_dir)

    def healthy(self) -> bool:
        if self._engine is None:
            return True
        return check_database_health(self._engine)

    async def shutdown(self) -> None:
        if self._engine is not None:
            await asyncio.to_thread(self._engine.dispose)


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
