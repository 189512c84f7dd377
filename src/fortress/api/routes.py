"""HTTP routes for the Space Fortress API."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import BaseModel

from fortress.api.runtime import ApiState
from fortress.domain.commands import decode_command
from fortress.domain.enums import RejectionReason, Side
from fortress.domain.errors import ValidationError
from fortress.domain.events import Event, encode_event
from fortress.domain.views import battle_view, game_summary
from fortress.services.session import GameSession

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class HealthResponse(BaseModel):
    status: str
    store: str


class CommandResult(BaseModel):
    version: int
    events: list[dict[str, Any]]


class EventLog(BaseModel):
    stream_id: str
    version: int
    events: list[dict[str, Any]]


async def _session(state: ApiState, player_id: str, *, must_exist: bool) -> GameSession:
    try:
        if must_exist and not state.sessions.stream_exists(player_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="game not found")
        return await state.sessions.get(player_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="game not found"
        ) from exc


def _result(session: GameSession, events: list[Event]) -> CommandResult:
    return CommandResult(version=session.version, events=[encode_event(e) for e in events])


@router.get("/health", response_model=HealthResponse)
async def health(state: ApiStateDep) -> HealthResponse:
    if not state.healthy():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="event store unavailable"
        )
    return HealthResponse(status="ok", store=state.settings.event_store)


@router.post("/games/{player_id}/commands", response_model=CommandResult)
async def submit_command(
    player_id: str,
    state: ApiStateDep,
    payload: Annotated[dict[str, Any], Body()],
) -> CommandResult:
    """Decide and persist one player command; rejections become 422 bodies."""

    session = await _session(state, player_id, must_exist=False)
    command = decode_command(payload)
    if getattr(command, "side", Side.PLAYER) != Side.PLAYER:
        raise ValidationError(
            RejectionReason.NOT_YOUR_TURN, "opponent commands are issued by the server"
        )
    return _result(session, await session.execute(command))


@router.get("/games/{player_id}/state")
async def game_state(player_id: str, state: ApiStateDep) -> dict[str, object]:
    session = await _session(state, player_id, must_exist=True)
    return game_summary(session.state)


@router.get("/games/{player_id}/battle")
async def battle_state(player_id: str, state: ApiStateDep) -> dict[str, object]:
    session = await _session(state, player_id, must_exist=True)
    battle = session.state.battle
    if battle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no battle in progress")
    return battle_view(battle, Side.PLAYER)


@router.get("/games/{player_id}/events", response_model=EventLog)
async def event_log(player_id: str, state: ApiStateDep) -> EventLog:
    session = await _session(state, player_id, must_exist=True)
    return EventLog(
        stream_id=session.stream_id,
        version=session.version,
        events=[encode_event(e) for e in session.events],
    )


@router.post("/games/{player_id}/opponent-turn", response_model=CommandResult)
async def opponent_turn(player_id: str, state: ApiStateDep) -> CommandResult:
    session = await _session(state, player_id, must_exist=True)
    return _result(session, await session.play_opponent_turn())
