"""Event schema: every fact the rules engine can record.

Events are frozen pydantic models tagged by a ``type`` literal.  They are
"fat": each one carries every value the projector needs, so replaying a
stream never touches the content catalog or the live rules configuration.
On the wire an event is a flat JSON object whose ``type`` key selects the
variant.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, get_args

import pydantic
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .enums import (
    AbilityTrigger,
    BattleOutcome,
    DamageSource,
    Difficulty,
    DiscardReason,
    EnergySpendReason,
    Side,
    StatusEffectType,
    VictoryCondition,
)
from .errors import DataCorruption
from .models import BattleSettings, CombatantSetup, InitiativeState, ShipProfile


class _Fact(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Game lifecycle ---------------------------------------------------------------


class GameStarted(_Fact):
    type: Literal["GAME_STARTED"] = "GAME_STARTED"
    player_id: str


class CardGained(_Fact):
    type: Literal["CARD_GAINED"] = "CARD_GAINED"
    card: ShipProfile
    source: str


class BattleTriggered(_Fact):
    type: Literal["BATTLE_TRIGGERED"] = "BATTLE_TRIGGERED"
    battle_id: str
    quest_id: str | None = None
    opponent_id: str
    difficulty: Difficulty


class TacticalBattleStarted(_Fact):
    """Creates the battle atomically: decks, rosters, hulls and initiative."""

    type: Literal["TACTICAL_BATTLE_STARTED"] = "TACTICAL_BATTLE_STARTED"
    battle_id: str
    quest_id: str | None = None
    opponent_id: str
    opponent_name: str
    difficulty: Difficulty
    settings: BattleSettings
    player: CombatantSetup
    opponent: CombatantSetup
    initiative: InitiativeState


class BattleOutcomeAcknowledged(_Fact):
    type: Literal["BATTLE_OUTCOME_ACKNOWLEDGED"] = "BATTLE_OUTCOME_ACKNOWLEDGED"
    battle_id: str


# --- Cards and turns --------------------------------------------------------------


class CardDrawn(_Fact):
    type: Literal["CARD_DRAWN"] = "CARD_DRAWN"
    side: Side
    card_id: str


class CardDiscarded(_Fact):
    type: Literal["CARD_DISCARDED"] = "CARD_DISCARDED"
    side: Side
    card_id: str
    reason: DiscardReason


class MulliganStarted(_Fact):
    type: Literal["MULLIGAN_STARTED"] = "MULLIGAN_STARTED"
    battle_id: str


class MulliganResolved(_Fact):
    """Returned cards go to the bottom of the deck in the listed order."""

    type: Literal["MULLIGAN_RESOLVED"] = "MULLIGAN_RESOLVED"
    side: Side
    returned_card_ids: tuple[str, ...] = ()


class TurnStarted(_Fact):
    type: Literal["TURN_STARTED"] = "TURN_STARTED"
    side: Side
    turn_number: int
    energy_gained: int
    new_energy_total: int


class TurnEnded(_Fact):
    type: Literal["TURN_ENDED"] = "TURN_ENDED"
    side: Side
    turn_number: int


class ShipsReadied(_Fact):
    type: Literal["SHIPS_READIED"] = "SHIPS_READIED"
    side: Side
    card_ids: tuple[str, ...]


# --- Energy -----------------------------------------------------------------------


class EnergySpent(_Fact):
    type: Literal["ENERGY_SPENT"] = "ENERGY_SPENT"
    side: Side
    amount: int
    new_total: int
    reason: EnergySpendReason


class EnergyGained(_Fact):
    type: Literal["ENERGY_GAINED"] = "ENERGY_GAINED"
    side: Side
    amount: int
    new_total: int
    source_card_id: str | None = None


class EmergencyReservesUsed(_Fact):
    type: Literal["EMERGENCY_RESERVES_USED"] = "EMERGENCY_RESERVES_USED"
    side: Side
    amount: int
    new_total: int


class EmergencyReservesExpired(_Fact):
    type: Literal["EMERGENCY_RESERVES_EXPIRED"] = "EMERGENCY_RESERVES_EXPIRED"
    side: Side
    turn_number: int


# --- Ships ------------------------------------------------------------------------


class ShipDeployed(_Fact):
    type: Literal["SHIP_DEPLOYED"] = "SHIP_DEPLOYED"
    side: Side
    card_id: str
    position: int
    profile: ShipProfile


class ShipMoved(_Fact):
    type: Literal["SHIP_MOVED"] = "SHIP_MOVED"
    side: Side
    card_id: str
    from_position: int
    to_position: int


class ShipAttacked(_Fact):
    """An attack was declared; ``target_card_id`` is ``None`` for the flagship."""

    type: Literal["SHIP_ATTACKED"] = "SHIP_ATTACKED"
    side: Side
    card_id: str
    position: int
    target_card_id: str | None = None
    target_position: int | None = None


class DamageDealt(_Fact):
    type: Literal["DAMAGE_DEALT"] = "DAMAGE_DEALT"
    side: Side
    card_id: str
    amount: int
    new_hull: int
    source: DamageSource
    source_card_id: str | None = None


class ShipRepaired(_Fact):
    type: Literal["SHIP_REPAIRED"] = "SHIP_REPAIRED"
    side: Side
    card_id: str
    amount: int
    new_hull: int


class ShipDestroyed(_Fact):
    type: Literal["SHIP_DESTROYED"] = "SHIP_DESTROYED"
    side: Side
    card_id: str
    position: int
    destroyed_by: str | None = None


class AbilityTriggered(_Fact):
    """An ability fired; a positive ``cooldown`` puts it on cooldown."""

    type: Literal["ABILITY_TRIGGERED"] = "ABILITY_TRIGGERED"
    side: Side
    card_id: str
    ability_id: str
    trigger: AbilityTrigger
    cooldown: int = 0


class StatusApplied(_Fact):
    """Sets a status to the given totals, merging with any existing one."""

    type: Literal["STATUS_APPLIED"] = "STATUS_APPLIED"
    side: Side
    card_id: str
    status: StatusEffectType
    remaining: int
    stacks: int
    source_id: str


class StatusExpired(_Fact):
    type: Literal["STATUS_EXPIRED"] = "STATUS_EXPIRED"
    side: Side
    card_id: str
    status: StatusEffectType


# --- Flagships and resolution -----------------------------------------------------


class FlagshipDamaged(_Fact):
    type: Literal["FLAGSHIP_DAMAGED"] = "FLAGSHIP_DAMAGED"
    side: Side
    amount: int
    new_hull: int
    source: DamageSource
    source_card_id: str | None = None


class FlagshipRepaired(_Fact):
    type: Literal["FLAGSHIP_REPAIRED"] = "FLAGSHIP_REPAIRED"
    side: Side
    amount: int
    new_hull: int


class FlagshipDestroyed(_Fact):
    type: Literal["FLAGSHIP_DESTROYED"] = "FLAGSHIP_DESTROYED"
    side: Side


class TacticalBattleResolved(_Fact):
    type: Literal["TACTICAL_BATTLE_RESOLVED"] = "TACTICAL_BATTLE_RESOLVED"
    battle_id: str
    winner: BattleOutcome
    victory_condition: VictoryCondition
    turn_number: int
    player_total_hull: int
    opponent_total_hull: int


Event = (
    GameStarted
    | CardGained
    | BattleTriggered
    | TacticalBattleStarted
    | BattleOutcomeAcknowledged
    | CardDrawn
    | CardDiscarded
    | MulliganStarted
    | MulliganResolved
    | TurnStarted
    | TurnEnded
    | ShipsReadied
    | EnergySpent
    | EnergyGained
    | EmergencyReservesUsed
    | EmergencyReservesExpired
    | ShipDeployed
    | ShipMoved
    | ShipAttacked
    | DamageDealt
    | ShipRepaired
    | ShipDestroyed
    | AbilityTriggered
    | StatusApplied
    | StatusExpired
    | FlagshipDamaged
    | FlagshipRepaired
    | FlagshipDestroyed
    | TacticalBattleResolved
)

EVENT_TYPES: tuple[type[_Fact], ...] = get_args(Event)

# Events that touch battlefield, hull or energy; none may land on a resolved battle.
COMBAT_EVENT_TYPES: frozenset[type[_Fact]] = frozenset(
    {
        CardDrawn,
        CardDiscarded,
        TurnStarted,
        TurnEnded,
        ShipsReadied,
        EnergySpent,
        EnergyGained,
        EmergencyReservesUsed,
        ShipDeployed,
        ShipMoved,
        ShipAttacked,
        DamageDealt,
        ShipRepaired,
        ShipDestroyed,
        AbilityTriggered,
        StatusApplied,
        StatusExpired,
        FlagshipDamaged,
        FlagshipRepaired,
    }
)

event_adapter: TypeAdapter[Event] = TypeAdapter(Annotated[Event, Field(discriminator="type")])


def encode_event(event: Event) -> dict[str, Any]:
    """Return the flat JSON-compatible record for ``event``."""

    return event.model_dump(mode="json")


def decode_event(
    raw: Mapping[str, Any] | str | bytes,
    *,
    stream_id: str | None = None,
    sequence: int | None = None,
) -> Event:
    """Parse a stored record, raising :class:`DataCorruption` when it is unusable."""

    try:
        if isinstance(raw, str | bytes):
            return event_adapter.validate_json(raw)
        return event_adapter.validate_python(raw)
    except pydantic.ValidationError as exc:
        raise DataCorruption(
            f"{exc.error_count()} validation error(s)", stream_id=stream_id, sequence=sequence
        ) from exc
