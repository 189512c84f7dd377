"""Command schema: intents submitted by the player or the opponent policy.

Commands are transient; only the events a command produces are stored.
Tactical commands name the acting ``side`` so the opponent policy issues
exactly the same commands a player would.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, get_args

import pydantic
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .enums import Difficulty, RejectionReason, Side
from .errors import ValidationError


class _Intent(BaseModel):
    model_config = ConfigDict(frozen=True)


class StartGame(_Intent):
    type: Literal["START_GAME"] = "START_GAME"


class TriggerBattle(_Intent):
    """Issued by the narrative layer when a quest leads into combat."""

    type: Literal["TRIGGER_BATTLE"] = "TRIGGER_BATTLE"
    battle_id: str = Field(min_length=1)
    quest_id: str | None = None
    opponent_id: str = Field(min_length=1)
    difficulty: Difficulty = Difficulty.MEDIUM


class StartTacticalBattle(_Intent):
    type: Literal["START_TACTICAL_BATTLE"] = "START_TACTICAL_BATTLE"
    deck: tuple[str, ...]


class Mulligan(_Intent):
    type: Literal["MULLIGAN"] = "MULLIGAN"
    side: Side = Side.PLAYER
    card_ids: tuple[str, ...]


class SkipMulligan(_Intent):
    type: Literal["SKIP_MULLIGAN"] = "SKIP_MULLIGAN"
    side: Side = Side.PLAYER


class DeployShip(_Intent):
    type: Literal["DEPLOY_SHIP"] = "DEPLOY_SHIP"
    side: Side = Side.PLAYER
    card_id: str
    position: int


class AttackWithShip(_Intent):
    """Attack along the lane unless a target is named.

    ``target_position`` selects another lane (cross-lane ships only);
    ``target_flagship`` strikes the flagship directly (flagship-direct only).
    """

    type: Literal["ATTACK_WITH_SHIP"] = "ATTACK_WITH_SHIP"
    side: Side = Side.PLAYER
    card_id: str
    target_position: int | None = None
    target_flagship: bool = False


class ActivateAbility(_Intent):
    type: Literal["ACTIVATE_ABILITY"] = "ACTIVATE_ABILITY"
    side: Side = Side.PLAYER
    card_id: str
    ability_id: str
    target_side: Side | None = None
    target_card_id: str | None = None


class MoveShip(_Intent):
    type: Literal["MOVE_SHIP"] = "MOVE_SHIP"
    side: Side = Side.PLAYER
    card_id: str
    to_position: int


class DrawExtraCard(_Intent):
    type: Literal["DRAW_EXTRA_CARD"] = "DRAW_EXTRA_CARD"
    side: Side = Side.PLAYER


class UseEmergencyReserves(_Intent):
    type: Literal["USE_EMERGENCY_RESERVES"] = "USE_EMERGENCY_RESERVES"
    side: Side = Side.PLAYER


class EndTurn(_Intent):
    type: Literal["END_TURN"] = "END_TURN"
    side: Side = Side.PLAYER


class AcknowledgeOutcome(_Intent):
    type: Literal["ACKNOWLEDGE_OUTCOME"] = "ACKNOWLEDGE_OUTCOME"


Command = (
    StartGame
    | TriggerBattle
    | StartTacticalBattle
    | Mulligan
    | SkipMulligan
    | DeployShip
    | AttackWithShip
    | ActivateAbility
    | MoveShip
    | DrawExtraCard
    | UseEmergencyReserves
    | EndTurn
    | AcknowledgeOutcome
)

COMMAND_TYPES: tuple[type[_Intent], ...] = get_args(Command)

CommandPayload = Annotated[Command, Field(discriminator="type")]

command_adapter: TypeAdapter[Command] = TypeAdapter(CommandPayload)


def encode_command(command: Command) -> dict[str, Any]:
    return command.model_dump(mode="json")


def decode_command(raw: Mapping[str, Any]) -> Command:
    """Parse an incoming command record; malformed input is a rejection."""

    try:
        return command_adapter.validate_python(raw)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            RejectionReason.UNKNOWN_COMMAND, f"malformed command ({location}): {first['msg']}"
        ) from exc
