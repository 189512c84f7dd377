"""State projector: the pure fold from events to :class:`GameState`.

``apply_event`` is strict and raises :class:`InvariantViolation` when an
event cannot be applied cleanly.  ``fold`` is the total, forgiving version
used for replay: a violating event is logged and skipped, and event types
without a handler leave the state untouched.  ``rebuild`` is the only way
to obtain state from a stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from functools import reduce
from typing import Any

from . import events as ev
from .enums import BattleOutcome, BattlePhase, GamePhase, GameStatus, Side
from .errors import InvariantViolation
from .models import (
    BattleContext,
    BattleSettings,
    CombatantSetup,
    CombatantState,
    EnergyState,
    FlagshipState,
    GameState,
    GameStats,
    OwnedCard,
    ShipState,
    StatusEffect,
    TacticalBattleState,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[GameState, Any], GameState]


def initial_state() -> GameState:
    """Canonical empty state every stream is folded from."""

    return GameState()


def apply_event(state: GameState, event: ev.Event) -> GameState:
    """Apply ``event`` to ``state`` or raise :class:`InvariantViolation`."""

    handler = _EVENT_HANDLERS.get(type(event))
    if handler is None:
        return state
    if (
        state.battle is not None
        and state.battle.is_resolved
        and type(event) in ev.COMBAT_EVENT_TYPES
    ):
        raise InvariantViolation(f"{event.type} arrived after the battle was resolved")
    updated = handler(state, event)
    _check_invariants(updated)
    return updated


def fold(state: GameState, event: ev.Event) -> GameState:
    """Total fold step: invariant violations become logged no-ops."""

    try:
        return apply_event(state, event)
    except InvariantViolation as exc:
        logger.warning("ignoring %s: %s", getattr(event, "type", type(event).__name__), exc)
        return state


def rebuild(events: Iterable[ev.Event]) -> GameState:
    """Left-fold ``events`` from the initial state."""

    return reduce(fold, events, initial_state())


# ---------------------------------------------------------------------------
# Invariants


def _check_invariants(state: GameState) -> None:
    battle = state.battle
    if battle is None:
        return
    seen: set[str] = set()
    for combatant in (battle.player, battle.opponent):
        energy = combatant.energy
        if not 0 <= energy.current <= energy.maximum:
            raise InvariantViolation(
                f"{combatant.side} energy {energy.current} outside 0..{energy.maximum}"
            )
        if len(combatant.battlefield) != battle.settings.battlefield_slots:
            raise InvariantViolation(f"{combatant.side} battlefield lost its slot layout")
        if combatant.flagship.current_hull < 0:
            raise InvariantViolation(f"{combatant.side} flagship hull below zero")
        for index, ship in enumerate(combatant.battlefield, start=1):
            if ship is None:
                continue
            if ship.position != index:
                raise InvariantViolation(
                    f"{ship.card_id} recorded at {ship.position}, found at {index}"
                )
            if ship.card_id in seen:
                raise InvariantViolation(f"{ship.card_id} occupies more than one slot")
            if not 0 <= ship.current_hull <= ship.max_hull:
                raise InvariantViolation(f"{ship.card_id} hull {ship.current_hull} out of range")
            seen.add(ship.card_id)


# ---------------------------------------------------------------------------
# Helpers


def _require_battle(state: GameState) -> TacticalBattleState:
    if state.battle is None:
        raise InvariantViolation("no tactical battle in progress")
    return state.battle


def _with_battle(state: GameState, battle: TacticalBattleState) -> GameState:
    return replace(state, battle=battle)


def _update_combatant(
    state: GameState, side: Side, update: Callable[[CombatantState], CombatantState]
) -> GameState:
    battle = _require_battle(state)
    return _with_battle(state, battle.with_combatant(update(battle.combatant(side))))


def _require_ship(combatant: CombatantState, card_id: str) -> ShipState:
    ship = combatant.ship(card_id)
    if ship is None:
        raise InvariantViolation(f"{card_id} is not on the {combatant.side} battlefield")
    return ship


def _update_ship(
    state: GameState, side: Side, card_id: str, update: Callable[[ShipState], ShipState]
) -> GameState:
    def _apply(combatant: CombatantState) -> CombatantState:
        return combatant.with_ship(update(_require_ship(combatant, card_id)))

    return _update_combatant(state, side, _apply)


def _remove_card(cards: tuple[str, ...], card_id: str, zone: str) -> tuple[str, ...]:
    if card_id not in cards:
        raise InvariantViolation(f"{card_id} is not in the {zone}")
    index = cards.index(card_id)
    return cards[:index] + cards[index + 1 :]


def _set_energy(state: GameState, side: Side, new_total: int) -> GameState:
    return _update_combatant(
        state, side, lambda c: replace(c, energy=replace(c.energy, current=new_total))
    )


def _new_combatant(side: Side, setup: CombatantSetup, settings: BattleSettings) -> CombatantState:
    return CombatantState(
        side=side,
        flagship=FlagshipState(current_hull=setup.flagship_hull, max_hull=setup.flagship_hull),
        energy=EnergyState(
            current=setup.starting_energy,
            maximum=settings.energy_maximum,
            regeneration=settings.energy_regeneration,
        ),
        battlefield=(None,) * settings.battlefield_slots,
        deck=tuple(setup.deck),
        roster={profile.card_id: profile for profile in setup.roster},
    )


# ---------------------------------------------------------------------------
# Game lifecycle handlers


def _on_game_started(state: GameState, event: ev.GameStarted) -> GameState:
    if state.status != GameStatus.NOT_STARTED:
        raise InvariantViolation("game already started")
    return replace(
        state, player_id=event.player_id, status=GameStatus.IN_PROGRESS, phase=GamePhase.HUB
    )


def _on_card_gained(state: GameState, event: ev.CardGained) -> GameState:
    card_id = event.card.card_id
    if card_id in state.owned_cards:
        raise InvariantViolation(f"{card_id} is already owned")
    owned = {**state.owned_cards, card_id: OwnedCard(profile=event.card, source=event.source)}
    stats = replace(state.stats, cards_acquired=state.stats.cards_acquired + 1)
    return replace(state, owned_cards=owned, stats=stats)


def _on_battle_triggered(state: GameState, event: ev.BattleTriggered) -> GameState:
    context = BattleContext(
        battle_id=event.battle_id,
        quest_id=event.quest_id,
        opponent_id=event.opponent_id,
        difficulty=event.difficulty,
    )
    return replace(state, pending_battle=context, phase=GamePhase.CARD_SELECTION)


def _on_battle_started(state: GameState, event: ev.TacticalBattleStarted) -> GameState:
    if state.battle is not None and not state.battle.is_resolved:
        raise InvariantViolation("a tactical battle is already in progress")
    settings = event.settings
    battle = TacticalBattleState(
        battle_id=event.battle_id,
        quest_id=event.quest_id,
        opponent_id=event.opponent_id,
        opponent_name=event.opponent_name,
        difficulty=event.difficulty,
        phase=BattlePhase.SETUP,
        turn_number=0,
        active_player=event.initiative.first_player,
        settings=settings,
        player=_new_combatant(Side.PLAYER, event.player, settings),
        opponent=_new_combatant(Side.OPPONENT, event.opponent, settings),
        initiative=event.initiative,
    )
    return replace(state, battle=battle, pending_battle=None, phase=GamePhase.TACTICAL_BATTLE)


def _on_outcome_acknowledged(state: GameState, event: ev.BattleOutcomeAcknowledged) -> GameState:
    battle = _require_battle(state)
    if not battle.is_resolved or battle.battle_id != event.battle_id:
        raise InvariantViolation(f"battle {event.battle_id} has no outcome to acknowledge")
    return replace(state, battle=None, phase=GamePhase.HUB)


def _on_battle_resolved(state: GameState, event: ev.TacticalBattleResolved) -> GameState:
    battle = _require_battle(state)
    if battle.is_resolved:
        raise InvariantViolation("battle already resolved")
    stats: GameStats = state.stats
    if event.winner == BattleOutcome.PLAYER:
        stats = replace(stats, battles_won=stats.battles_won + 1)
    elif event.winner == BattleOutcome.OPPONENT:
        stats = replace(stats, battles_lost=stats.battles_lost + 1)
    else:
        stats = replace(stats, battles_drawn=stats.battles_drawn + 1)
    resolved = replace(
        battle,
        phase=BattlePhase.RESOLVED,
        winner=event.winner,
        victory_condition=event.victory_condition,
    )
    return replace(state, battle=resolved, phase=GamePhase.AFTERMATH, stats=stats)


# ---------------------------------------------------------------------------
# Card and turn handlers


def _on_card_drawn(state: GameState, event: ev.CardDrawn) -> GameState:
    return _update_combatant(
        state,
        event.side,
        lambda c: replace(
            c, deck=_remove_card(c.deck, event.card_id, "deck"), hand=(*c.hand, event.card_id)
        ),
    )


def _on_card_discarded(state: GameState, event: ev.CardDiscarded) -> GameState:
    return _update_combatant(
        state,
        event.side,
        lambda c: replace(
            c,
            hand=_remove_card(c.hand, event.card_id, "hand"),
            discard=(*c.discard, event.card_id),
        ),
    )


def _on_mulligan_started(state: GameState, event: ev.MulliganStarted) -> GameState:
    battle = _require_battle(state)
    if battle.phase != BattlePhase.SETUP:
        raise InvariantViolation(f"mulligan cannot start from {battle.phase}")
    return _with_battle(state, replace(battle, phase=BattlePhase.MULLIGAN))


def _on_mulligan_resolved(state: GameState, event: ev.MulliganResolved) -> GameState:
    def _apply(combatant: CombatantState) -> CombatantState:
        if combatant.mulligan_resolved:
            raise InvariantViolation(f"{combatant.side} already resolved its mulligan")
        hand = combatant.hand
        for card_id in event.returned_card_ids:
            hand = _remove_card(hand, card_id, "hand")
        return replace(
            combatant,
            hand=hand,
            deck=(*combatant.deck, *event.returned_card_ids),
            mulligan_resolved=True,
        )

    return _update_combatant(state, event.side, _apply)


def _on_turn_started(state: GameState, event: ev.TurnStarted) -> GameState:
    battle = _require_battle(state)
    if event.turn_number <= battle.turn_number:
        raise InvariantViolation(
            f"turn {event.turn_number} does not follow turn {battle.turn_number}"
        )
    if battle.phase not in (BattlePhase.MULLIGAN, BattlePhase.PLAYING):
        raise InvariantViolation(f"turns cannot start during {battle.phase}")

    def _reset(combatant: CombatantState) -> CombatantState:
        reset = replace(combatant, ships_destroyed_this_turn=0, cards_played_this_turn=0)
        if combatant.side != event.side:
            return reset
        return replace(
            reset,
            energy=replace(combatant.energy, current=event.new_energy_total),
            turns_taken=combatant.turns_taken + 1,
        )

    updated = replace(
        battle,
        phase=BattlePhase.PLAYING,
        turn_number=event.turn_number,
        active_player=event.side,
        player=_reset(battle.player),
        opponent=_reset(battle.opponent),
    )
    return _with_battle(state, updated)


def _tick_ship(ship: ShipState, turn_number: int) -> ShipState:
    statuses = tuple(
        effect
        if effect.applied_turn == turn_number
        else replace(effect, remaining=effect.remaining - 1)
        for effect in ship.status_effects
        if effect.applied_turn == turn_number or effect.remaining > 1
    )
    cooldowns = {key: value - 1 for key, value in ship.cooldowns.items() if value > 1}
    return replace(ship, status_effects=statuses, cooldowns=cooldowns)


def _on_turn_ended(state: GameState, event: ev.TurnEnded) -> GameState:
    battle = _require_battle(state)
    if event.side != battle.active_player or event.turn_number != battle.turn_number:
        raise InvariantViolation(f"turn {event.turn_number} of {event.side} is not active")

    def _tick(combatant: CombatantState) -> CombatantState:
        slots = tuple(
            None if ship is None else _tick_ship(ship, event.turn_number)
            for ship in combatant.battlefield
        )
        return replace(combatant, battlefield=slots)

    return _update_combatant(state, event.side, _tick)


def _on_ships_readied(state: GameState, event: ev.ShipsReadied) -> GameState:
    ready = set(event.card_ids)

    def _apply(combatant: CombatantState) -> CombatantState:
        slots = tuple(
            replace(ship, is_exhausted=False)
            if ship is not None and ship.card_id in ready
            else ship
            for ship in combatant.battlefield
        )
        return replace(combatant, battlefield=slots)

    return _update_combatant(state, event.side, _apply)


# ---------------------------------------------------------------------------
# Energy handlers


def _on_energy_spent(state: GameState, event: ev.EnergySpent) -> GameState:
    return _set_energy(state, event.side, event.new_total)


def _on_energy_gained(state: GameState, event: ev.EnergyGained) -> GameState:
    return _set_energy(state, event.side, event.new_total)


def _on_reserves_used(state: GameState, event: ev.EmergencyReservesUsed) -> GameState:
    battle = _require_battle(state)
    reserve = battle.initiative.reserve
    if reserve.side != event.side or not reserve.available:
        raise InvariantViolation(f"{event.side} holds no emergency reserve")
    initiative = replace(battle.initiative, reserve=replace(reserve, available=False))
    state = _with_battle(state, replace(battle, initiative=initiative))
    return _set_energy(state, event.side, event.new_total)


def _on_reserves_expired(state: GameState, event: ev.EmergencyReservesExpired) -> GameState:
    battle = _require_battle(state)
    reserve = replace(battle.initiative.reserve, available=False)
    initiative = replace(battle.initiative, reserve=reserve)
    return _with_battle(state, replace(battle, initiative=initiative))


# ---------------------------------------------------------------------------
# Ship handlers


def _on_ship_deployed(state: GameState, event: ev.ShipDeployed) -> GameState:
    def _apply(combatant: CombatantState) -> CombatantState:
        if not 1 <= event.position <= len(combatant.battlefield):
            raise InvariantViolation(f"position {event.position} does not exist")
        if combatant.ship_at(event.position) is not None:
            raise InvariantViolation(f"position {event.position} is occupied")
        ship = ShipState(
            card_id=event.card_id,
            profile=event.profile,
            position=event.position,
            current_hull=event.profile.hull,
            max_hull=event.profile.hull,
            is_exhausted=True,
        )
        placed = replace(
            combatant,
            hand=_remove_card(combatant.hand, event.card_id, "hand"),
            cards_played_this_turn=combatant.cards_played_this_turn + 1,
        )
        return placed.with_ship(ship)

    return _update_combatant(state, event.side, _apply)


def _on_ship_moved(state: GameState, event: ev.ShipMoved) -> GameState:
    def _apply(combatant: CombatantState) -> CombatantState:
        ship = _require_ship(combatant, event.card_id)
        if ship.position != event.from_position:
            raise InvariantViolation(f"{event.card_id} is not at {event.from_position}")
        if combatant.ship_at(event.to_position) is not None or not (
            1 <= event.to_position <= len(combatant.battlefield)
        ):
            raise InvariantViolation(f"cannot move into position {event.to_position}")
        moved = replace(ship, position=event.to_position, is_exhausted=True)
        return combatant.without_ship(event.from_position).with_ship(moved)

    return _update_combatant(state, event.side, _apply)


def _on_ship_attacked(state: GameState, event: ev.ShipAttacked) -> GameState:
    return _update_ship(
        state, event.side, event.card_id, lambda ship: replace(ship, is_exhausted=True)
    )


def _on_damage_dealt(state: GameState, event: ev.DamageDealt) -> GameState:
    # A lethal hit leaves the wreck at zero hull until the matching SHIP_DESTROYED.
    if event.new_hull < 0:
        raise InvariantViolation(f"{event.card_id} hull cannot go below zero")
    return _update_ship(
        state, event.side, event.card_id, lambda ship: replace(ship, current_hull=event.new_hull)
    )


def _on_ship_repaired(state: GameState, event: ev.ShipRepaired) -> GameState:
    def _apply(ship: ShipState) -> ShipState:
        if event.new_hull > ship.max_hull:
            raise InvariantViolation(f"{ship.card_id} repaired beyond its maximum hull")
        return replace(ship, current_hull=event.new_hull)

    return _update_ship(state, event.side, event.card_id, _apply)


def _on_ship_destroyed(state: GameState, event: ev.ShipDestroyed) -> GameState:
    def _apply(combatant: CombatantState) -> CombatantState:
        occupant = combatant.ship_at(event.position)
        if occupant is None or occupant.card_id != event.card_id:
            raise InvariantViolation(f"{event.card_id} is not at position {event.position}")
        combatant = combatant.without_ship(event.position)
        return replace(
            combatant,
            discard=(*combatant.discard, event.card_id),
            ships_destroyed_this_turn=combatant.ships_destroyed_this_turn + 1,
            ships_lost=combatant.ships_lost + 1,
        )

    return _update_combatant(state, event.side, _apply)


def _on_ability_triggered(state: GameState, event: ev.AbilityTriggered) -> GameState:
    if event.cooldown <= 0:
        return state
    battle = _require_battle(state)
    if battle.combatant(event.side).ship(event.card_id) is None:
        # Ships that triggered on their way out keep no cooldowns.
        return state
    return _update_ship(
        state,
        event.side,
        event.card_id,
        lambda ship: replace(ship, cooldowns={**ship.cooldowns, event.ability_id: event.cooldown}),
    )


def _on_status_applied(state: GameState, event: ev.StatusApplied) -> GameState:
    if event.remaining <= 0 or event.stacks <= 0:
        raise InvariantViolation("status effects need a positive duration and stack count")
    turn_number = _require_battle(state).turn_number

    def _apply(ship: ShipState) -> ShipState:
        effect = StatusEffect(
            type=event.status,
            remaining=event.remaining,
            source_id=event.source_id,
            stacks=event.stacks,
            applied_turn=turn_number,
        )
        others = tuple(s for s in ship.status_effects if s.type != event.status)
        return replace(ship, status_effects=(*others, effect))

    return _update_ship(state, event.side, event.card_id, _apply)


def _on_status_expired(state: GameState, event: ev.StatusExpired) -> GameState:
    return _update_ship(
        state,
        event.side,
        event.card_id,
        lambda ship: replace(
            ship,
            status_effects=tuple(s for s in ship.status_effects if s.type != event.status),
        ),
    )


# ---------------------------------------------------------------------------
# Flagship handlers


def _on_flagship_damaged(state: GameState, event: ev.FlagshipDamaged) -> GameState:
    if event.new_hull < 0:
        raise InvariantViolation("flagship hull is clamped at zero")
    return _update_combatant(
        state,
        event.side,
        lambda c: replace(c, flagship=replace(c.flagship, current_hull=event.new_hull)),
    )


def _on_flagship_repaired(state: GameState, event: ev.FlagshipRepaired) -> GameState:
    def _apply(combatant: CombatantState) -> CombatantState:
        if event.new_hull > combatant.flagship.max_hull:
            raise InvariantViolation("flagship repaired beyond its maximum hull")
        return replace(combatant, flagship=replace(combatant.flagship, current_hull=event.new_hull))

    return _update_combatant(state, event.side, _apply)


def _on_flagship_destroyed(state: GameState, event: ev.FlagshipDestroyed) -> GameState:
    battle = _require_battle(state)
    if battle.combatant(event.side).flagship.current_hull != 0:
        raise InvariantViolation(f"{event.side} flagship still has hull")
    return state


_EVENT_HANDLERS: dict[type, EventHandler] = {
    ev.GameStarted: _on_game_started,
    ev.CardGained: _on_card_gained,
    ev.BattleTriggered: _on_battle_triggered,
    ev.TacticalBattleStarted: _on_battle_started,
    ev.BattleOutcomeAcknowledged: _on_outcome_acknowledged,
    ev.CardDrawn: _on_card_drawn,
    ev.CardDiscarded: _on_card_discarded,
    ev.MulliganStarted: _on_mulligan_started,
    ev.MulliganResolved: _on_mulligan_resolved,
    ev.TurnStarted: _on_turn_started,
    ev.TurnEnded: _on_turn_ended,
    ev.ShipsReadied: _on_ships_readied,
    ev.EnergySpent: _on_energy_spent,
    ev.EnergyGained: _on_energy_gained,
    ev.EmergencyReservesUsed: _on_reserves_used,
    ev.EmergencyReservesExpired: _on_reserves_expired,
    ev.ShipDeployed: _on_ship_deployed,
    ev.ShipMoved: _on_ship_moved,
    ev.ShipAttacked: _on_ship_attacked,
    ev.DamageDealt: _on_damage_dealt,
    ev.ShipRepaired: _on_ship_repaired,
    ev.ShipDestroyed: _on_ship_destroyed,
    ev.AbilityTriggered: _on_ability_triggered,
    ev.StatusApplied: _on_status_applied,
    ev.StatusExpired: _on_status_expired,
    ev.FlagshipDamaged: _on_flagship_damaged,
    ev.FlagshipRepaired: _on_flagship_repaired,
    ev.FlagshipDestroyed: _on_flagship_destroyed,
    ev.TacticalBattleResolved: _on_battle_resolved,
}

_unhandled = set(ev.EVENT_TYPES) - set(_EVENT_HANDLERS)
if _unhandled:  # pragma: no cover - caught at import time
    raise RuntimeError(
        f"event types without a projector handler: {sorted(t.__name__ for t in _unhandled)}"
    )
