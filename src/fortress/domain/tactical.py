"""Battle bookkeeping shared by the decider: event batches, victory and setup."""

from __future__ import annotations

from collections.abc import Sequence

from fortress.utils.rng import generate_seed, random_choice, weighted_sample

from . import events as ev
from .catalog import OpponentFleet
from .enums import BattleOutcome, Difficulty, InitiativeReason, Side, VictoryCondition
from .errors import InvariantViolation
from .models import (
    EmergencyReserve,
    GameState,
    InitiativeState,
    ShipProfile,
    TacticalBattleState,
)
from .projector import apply_event
from .rules_config import DEFAULT_RULES, RulesConfig


class EventBatch:
    """Events produced by one command, folded as they are emitted.

    Each helper that reads the battle sees the effect of everything emitted
    before it, so payload values such as ``new_hull`` are always consistent
    with replay.  Once the battle resolves, further combat events are dropped.
    """

    def __init__(self, state: GameState, rules: RulesConfig = DEFAULT_RULES) -> None:
        self.state = state
        self.rules = rules
        self.events: list[ev.Event] = []

    @property
    def battle(self) -> TacticalBattleState:
        if self.state.battle is None:
            raise InvariantViolation("no tactical battle in progress")
        return self.state.battle

    @property
    def resolved(self) -> bool:
        return self.state.battle is not None and self.state.battle.is_resolved

    def emit(self, event: ev.Event) -> None:
        if self.resolved and type(event) in ev.COMBAT_EVENT_TYPES:
            return
        self.state = apply_event(self.state, event)
        self.events.append(event)


def _outcome(side: Side) -> BattleOutcome:
    return BattleOutcome(side.value)


def _resolve(batch: EventBatch, winner: BattleOutcome, condition: VictoryCondition) -> None:
    battle = batch.battle
    batch.emit(
        ev.TacticalBattleResolved(
            battle_id=battle.battle_id,
            winner=winner,
            victory_condition=condition,
            turn_number=battle.turn_number,
            player_total_hull=battle.player.total_hull(),
            opponent_total_hull=battle.opponent.total_hull(),
        )
    )


def check_victory(batch: EventBatch) -> bool:
    """Resolve the battle if a flagship has fallen; return whether it is over."""

    if batch.resolved:
        return True
    battle = batch.battle
    fallen = [side for side in Side if battle.combatant(side).flagship.current_hull == 0]
    if not fallen:
        return False
    for side in fallen:
        batch.emit(ev.FlagshipDestroyed(side=side))
    winner = BattleOutcome.DRAW if len(fallen) == 2 else _outcome(fallen[0].other)
    _resolve(batch, winner, VictoryCondition.FLAGSHIP_DESTROYED)
    return True


def round_limit_reached(battle: TacticalBattleState) -> bool:
    return battle.turn_number >= battle.settings.round_limit * 2


def resolve_timeout(batch: EventBatch) -> None:
    """Compare total remaining hull once the round limit is reached."""

    battle = batch.battle
    player_total = battle.player.total_hull()
    opponent_total = battle.opponent.total_hull()
    if player_total > opponent_total:
        winner = BattleOutcome.PLAYER
    elif opponent_total > player_total:
        winner = BattleOutcome.OPPONENT
    else:
        winner = BattleOutcome.DRAW
    _resolve(batch, winner, VictoryCondition.TIMEOUT)


def determine_initiative(
    battle_id: str,
    player_hand: Sequence[ShipProfile],
    opponent_hand: Sequence[ShipProfile],
    rules: RulesConfig = DEFAULT_RULES,
) -> InitiativeState:
    """Higher opening-hand agility acts first; ties go to a seeded coin flip."""

    player_agility = sum(card.agility for card in player_hand)
    opponent_agility = sum(card.agility for card in opponent_hand)
    if player_agility != opponent_agility:
        first = Side.PLAYER if player_agility > opponent_agility else Side.OPPONENT
        reason = InitiativeReason.AGILITY
    else:
        flip = random_choice(generate_seed(battle_id, "initiative"), [Side.PLAYER, Side.OPPONENT])
        first = flip["choice"]
        reason = InitiativeReason.TIEBREAKER
    energy = rules.energy
    return InitiativeState(
        first_player=first,
        reason=reason,
        player_agility=player_agility,
        opponent_agility=opponent_agility,
        second_player_bonus=energy.second_player_bonus,
        reserve=EmergencyReserve(
            side=first.other,
            energy_grant=energy.reserve_grant,
            expires_on_turn=energy.reserve_expires_on_turn,
        ),
    )


def build_opponent_roster(
    fleet: OpponentFleet,
    difficulty: Difficulty,
    battle_id: str,
    rules: RulesConfig = DEFAULT_RULES,
) -> tuple[ShipProfile, ...]:
    """Stamp a deck of uniquely numbered ships from the fleet's weighted designs."""

    picks = weighted_sample(
        generate_seed(battle_id, "fleet", fleet.opponent_id),
        [(design, design.weight) for design in fleet.designs],
        rules.deck.opponent_deck_size,
    )["items"]
    bonus = rules.opponents.stat_bonus(difficulty)
    floor = rules.opponents.minimum_stat
    roster = []
    for index, design in enumerate(picks, start=1):
        roster.append(
            ShipProfile(
                card_id=f"{design.design_id}_{index}",
                name=design.name,
                faction=fleet.faction,
                attack=max(floor, design.attack + bonus),
                defense=max(0, design.defense + bonus),
                hull=max(floor, design.hull + bonus),
                agility=max(floor, design.agility + bonus),
                energy_cost=design.energy_cost,
                abilities=design.abilities,
            )
        )
    return tuple(roster)


def starting_energy(
    side: Side, initiative: InitiativeState, rules: RulesConfig = DEFAULT_RULES
) -> int:
    base = rules.energy.starting_energy
    if side == initiative.first_player:
        return base
    return base + initiative.second_player_bonus


def draw_cards(batch: EventBatch, side: Side, count: int = 1) -> int:
    """Draw up to ``count`` cards from the top of the deck; return how many were drawn."""

    drawn = 0
    for _ in range(count):
        deck = batch.battle.combatant(side).deck
        if not deck or batch.resolved:
            break
        batch.emit(ev.CardDrawn(side=side, card_id=deck[0]))
        drawn += 1
    return drawn
