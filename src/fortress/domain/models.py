"""Immutable dataclasses describing the game and its tactical battle.

Every record here is frozen.  The projector produces new instances with
:func:`dataclasses.replace` and never mutates one it has already returned,
so any state handed to a caller stays valid for as long as they hold it.
Collections are tuples; the few mappings (rosters, cooldowns, owned cards)
are stored as read-only views and rebuilt on every change.

The card and ability snapshots at the top are also embedded in events, which
is what lets a battle replay without consulting the content catalog.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from .enums import (
    AbilityTrigger,
    BattleOutcome,
    BattlePhase,
    ConditionType,
    Difficulty,
    EffectType,
    GamePhase,
    GameStatus,
    InitiativeReason,
    LaneBypass,
    Side,
    StatusEffectType,
    TargetType,
    VictoryCondition,
)


def _freeze_mapping(record: object, name: str) -> None:
    """Swap a mapping field for a read-only copy."""

    value = getattr(record, name)
    if not isinstance(value, MappingProxyType):
        object.__setattr__(record, name, MappingProxyType(dict(value)))


# --- Card snapshots ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EffectCondition:
    """Guard on an ability effect; ``value`` is a percentage or an amount."""

    type: ConditionType
    value: int = 0


@dataclass(frozen=True, slots=True)
class AbilityEffect:
    type: EffectType
    amount: int = 0
    duration: int = 0
    status: StatusEffectType | None = None
    condition: EffectCondition | None = None


@dataclass(frozen=True, slots=True)
class CardAbility:
    """Ability printed on a card."""

    ability_id: str
    name: str
    trigger: AbilityTrigger
    target: TargetType
    effects: tuple[AbilityEffect, ...] = ()
    energy_cost: int = 0
    cooldown: int = 0
    lane_bypass: LaneBypass = LaneBypass.NONE
    description: str = ""


@dataclass(frozen=True, slots=True)
class ShipProfile:
    """Base combat stats of a card at the moment it entered play."""

    card_id: str
    name: str
    faction: str
    attack: int
    defense: int
    hull: int
    agility: int
    energy_cost: int
    abilities: tuple[CardAbility, ...] = ()

    def ability(self, ability_id: str) -> CardAbility | None:
        for ability in self.abilities:
            if ability.ability_id == ability_id:
                return ability
        return None

    def abilities_for(self, trigger: AbilityTrigger) -> tuple[CardAbility, ...]:
        return tuple(a for a in self.abilities if a.trigger == trigger)


# --- Tactical battle state --------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StatusEffect:
    """Active modifier; ``remaining`` counts owner turn ends after the turn it landed on."""

    type: StatusEffectType
    remaining: int
    source_id: str
    stacks: int = 1
    applied_turn: int = 0


@dataclass(frozen=True, slots=True)
class ShipState:
    """A ship occupying one battlefield slot."""

    card_id: str
    profile: ShipProfile
    position: int
    current_hull: int
    max_hull: int
    is_exhausted: bool = True
    status_effects: tuple[StatusEffect, ...] = ()
    cooldowns: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_mapping(self, "cooldowns")

    def status(self, status_type: StatusEffectType) -> StatusEffect | None:
        for effect in self.status_effects:
            if effect.type == status_type:
                return effect
        return None

    def has_status(self, status_type: StatusEffectType) -> bool:
        return self.status(status_type) is not None

    def stacks(self, status_type: StatusEffectType) -> int:
        effect = self.status(status_type)
        return effect.stacks if effect is not None else 0

    def cooldown(self, ability_id: str) -> int:
        return self.cooldowns.get(ability_id, 0)


@dataclass(frozen=True, slots=True)
class FlagshipState:
    current_hull: int
    max_hull: int


@dataclass(frozen=True, slots=True)
class EnergyState:
    current: int
    maximum: int
    regeneration: int


@dataclass(frozen=True, slots=True)
class CombatantState:
    """One side of the battle: flagship, energy, battlefield and cards."""

    side: Side
    flagship: FlagshipState
    energy: EnergyState
    battlefield: tuple[ShipState | None, ...]
    hand: tuple[str, ...] = ()
    deck: tuple[str, ...] = ()
    discard: tuple[str, ...] = ()
    roster: Mapping[str, ShipProfile] = field(default_factory=dict)
    ships_destroyed_this_turn: int = 0
    cards_played_this_turn: int = 0
    ships_lost: int = 0
    turns_taken: int = 0
    mulligan_resolved: bool = False

    def __post_init__(self) -> None:
        _freeze_mapping(self, "roster")

    def ships(self) -> list[ShipState]:
        return [ship for ship in self.battlefield if ship is not None]

    def ship(self, card_id: str) -> ShipState | None:
        for ship in self.battlefield:
            if ship is not None and ship.card_id == card_id:
                return ship
        return None

    def ship_at(self, position: int) -> ShipState | None:
        if not 1 <= position <= len(self.battlefield):
            return None
        return self.battlefield[position - 1]

    def with_ship(self, ship: ShipState) -> CombatantState:
        slots = list(self.battlefield)
        slots[ship.position - 1] = ship
        return replace(self, battlefield=tuple(slots))

    def without_ship(self, position: int) -> CombatantState:
        slots = list(self.battlefield)
        slots[position - 1] = None
        return replace(self, battlefield=tuple(slots))

    def total_hull(self) -> int:
        return self.flagship.current_hull + sum(ship.current_hull for ship in self.ships())

    def is_depleted(self) -> bool:
        """No ships in play and nothing left to play."""

        return not self.ships() and not self.hand and not self.deck


@dataclass(frozen=True, slots=True)
class EmergencyReserve:
    """One-shot energy grant held by the side that acts second."""

    side: Side
    energy_grant: int
    expires_on_turn: int
    available: bool = True


@dataclass(frozen=True, slots=True)
class InitiativeState:
    first_player: Side
    reason: InitiativeReason
    player_agility: int
    opponent_agility: int
    second_player_bonus: int
    reserve: EmergencyReserve


@dataclass(frozen=True, slots=True)
class BattleSettings:
    """Rule values a battle was started with; replay never reads live config."""

    round_limit: int
    max_hand_size: int
    battlefield_slots: int
    energy_maximum: int
    energy_regeneration: int


@dataclass(frozen=True, slots=True)
class CombatantSetup:
    """Opening position of one side, carried by the battle start event."""

    deck: tuple[str, ...]
    roster: tuple[ShipProfile, ...]
    flagship_hull: int
    starting_energy: int


@dataclass(frozen=True, slots=True)
class TacticalBattleState:
    battle_id: str
    quest_id: str | None
    opponent_id: str
    opponent_name: str
    difficulty: Difficulty
    phase: BattlePhase
    turn_number: int
    active_player: Side
    settings: BattleSettings
    player: CombatantState
    opponent: CombatantState
    initiative: InitiativeState
    winner: BattleOutcome | None = None
    victory_condition: VictoryCondition | None = None

    @property
    def is_resolved(self) -> bool:
        return self.phase == BattlePhase.RESOLVED

    @property
    def round_number(self) -> int:
        return (self.turn_number + 1) // 2

    def combatant(self, side: Side) -> CombatantState:
        return self.player if side == Side.PLAYER else self.opponent

    def with_combatant(self, combatant: CombatantState) -> TacticalBattleState:
        if combatant.side == Side.PLAYER:
            return replace(self, player=combatant)
        return replace(self, opponent=combatant)


# --- Game state -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BattleContext:
    """A battle announced by the narrative layer, awaiting deck selection."""

    battle_id: str
    quest_id: str | None
    opponent_id: str
    difficulty: Difficulty


@dataclass(frozen=True, slots=True)
class OwnedCard:
    profile: ShipProfile
    source: str

    @property
    def card_id(self) -> str:
        return self.profile.card_id


@dataclass(frozen=True, slots=True)
class GameStats:
    battles_won: int = 0
    battles_lost: int = 0
    battles_drawn: int = 0
    cards_acquired: int = 0


@dataclass(frozen=True, slots=True)
class GameState:
    """Root of the projected state."""

    player_id: str | None = None
    status: GameStatus = GameStatus.NOT_STARTED
    phase: GamePhase = GamePhase.NOT_STARTED
    owned_cards: Mapping[str, OwnedCard] = field(default_factory=dict)
    pending_battle: BattleContext | None = None
    battle: TacticalBattleState | None = None
    stats: GameStats = field(default_factory=GameStats)

    def __post_init__(self) -> None:
        _freeze_mapping(self, "owned_cards")
