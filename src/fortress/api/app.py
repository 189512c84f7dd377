"""FastAPI application wiring for Space Fortress.

Rejected commands leave the API as ``{"reason", "message"}`` bodies: 422 when
a rule refused the command, 409 when the stream moved on under a retry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fortress.api import routes
from fortress.api.runtime import ApiState, build_state
from fortress.config import Settings, get_settings
from fortress.domain.errors import ConcurrencyConflict, ValidationError

logger = logging.getLogger(__name__)


async def _rejected(request: Request, exc: ValidationError) -> JSONResponse:
    code = (
        status.HTTP_409_CONFLICT
        if isinstance(exc, ConcurrencyConflict)
        else status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    return JSONResponse(status_code=code, content=exc.to_dict())


def create_app(
    *,
    state_factory: Callable[[], ApiState] = build_state,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the API; each lifespan gets a fresh :class:`ApiState`."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = state_factory()
        app.state.api_state = state
        logger.info(
            "serving games from the %s store (rules %s)",
            state.settings.event_store,
            state.settings.rules_version,
        )
        try:
            yield
        finally:
            await state.shutdown()

    app = FastAPI(title="Space Fortress API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ValidationError, _rejected)
    app.include_router(routes.router)
    return app


app = create_app()
