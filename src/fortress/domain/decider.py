"""Command validation: ``decide(command, state) -> events``.

Each handler checks the command against the current state and either raises
:class:`ValidationError` or returns the complete, ordered list of events the
command produces.  Events are folded into a scratch state as they are built
(see :class:`EventBatch`), so a rejection can never leave a partial batch.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fortress.utils.rng import generate_seed, shuffle_items

from . import commands as cmd
from . import events as ev
from .abilities import (
    ShipRef,
    TriggerContext,
    activate_ability,
    resolve_attack,
    trigger_abilities,
)
from .catalog import ContentCatalog, default_catalog
from .combat import resolve_enemy_ability_target
from .enums import (
    AbilityTrigger,
    BattlePhase,
    EnergySpendReason,
    GamePhase,
    GameStatus,
    RejectionReason,
    Side,
    StatusEffectType,
    TargetType,
)
from .errors import ValidationError
from .models import (
    BattleSettings,
    CardAbility,
    CombatantSetup,
    GameState,
    ShipState,
    TacticalBattleState,
)
from .rules_config import DEFAULT_RULES, RulesConfig
from .tactical import (
    EventBatch,
    build_opponent_roster,
    determine_initiative,
    draw_cards,
    starting_energy,
)
from .turns import complete_mulligan, end_turn

STARTER_SOURCE = "starter"


@dataclass(slots=True)
class DecisionContext:
    """Shared context passed to every command handler."""

    state: GameState
    catalog: ContentCatalog
    rules: RulesConfig = DEFAULT_RULES
    player_id: str | None = None

    def batch(self) -> EventBatch:
        return EventBatch(self.state, self.rules)


CommandHandler = Callable[[Any, DecisionContext], list[ev.Event]]


def decide(
    command: cmd.Command,
    state: GameState,
    *,
    catalog: ContentCatalog | None = None,
    rules: RulesConfig = DEFAULT_RULES,
    player_id: str | None = None,
) -> list[ev.Event]:
    """Validate ``command`` against ``state`` and return the events it produces.

    ``player_id`` is the identity derived from the stream key; it is only
    consulted by ``START_GAME``.
    """

    handler = _COMMAND_HANDLERS.get(type(command))
    if handler is None:
        raise ValidationError(
            RejectionReason.UNKNOWN_COMMAND, f"unsupported command: {type(command).__name__}"
        )
    context = DecisionContext(
        state=state,
        catalog=catalog if catalog is not None else default_catalog(),
        rules=rules,
        player_id=player_id,
    )
    return handler(command, context)


def _reject(reason: RejectionReason, message: str) -> ValidationError:
    return ValidationError(reason, message)


# ---------------------------------------------------------------------------
# Game lifecycle


def _handle_start_game(command: cmd.StartGame, context: DecisionContext) -> list[ev.Event]:
    if context.state.status != GameStatus.NOT_STARTED:
        raise _reject(RejectionReason.GAME_ALREADY_STARTED, "the game has already started")
    if not context.player_id:
        raise _reject(RejectionReason.MISSING_IDENTITY, "no player identity for this stream")
    events: list[ev.Event] = [ev.GameStarted(player_id=context.player_id)]
    events.extend(
        ev.CardGained(card=card, source=STARTER_SOURCE) for card in context.catalog.starter_cards()
    )
    return events


def _require_started(state: GameState) -> None:
    if state.status != GameStatus.IN_PROGRESS:
        raise _reject(RejectionReason.GAME_NOT_STARTED, "start a game first")


def _handle_trigger_battle(command: cmd.TriggerBattle, context: DecisionContext) -> list[ev.Event]:
    state = context.state
    _require_started(state)
    if state.phase != GamePhase.HUB:
        raise _reject(RejectionReason.WRONG_PHASE, f"cannot start a battle from {state.phase}")
    if context.catalog.fleet(command.opponent_id) is None:
        raise _reject(
            RejectionReason.UNKNOWN_OPPONENT, f"no opponent fleet named {command.opponent_id!r}"
        )
    return [
        ev.BattleTriggered(
            battle_id=command.battle_id,
            quest_id=command.quest_id,
            opponent_id=command.opponent_id,
            difficulty=command.difficulty,
        )
    ]


def _handle_start_battle(
    command: cmd.StartTacticalBattle, context: DecisionContext
) -> list[ev.Event]:
    state = context.state
    rules = context.rules
    _require_started(state)

    deck = command.deck
    deck_rules = rules.deck
    if not deck_rules.min_deck_size <= len(deck) <= deck_rules.max_deck_size:
        raise _reject(
            RejectionReason.DECK_SIZE_OUT_OF_RANGE,
            f"a deck needs {deck_rules.min_deck_size}-{deck_rules.max_deck_size} cards, "
            f"got {len(deck)}",
        )
    if len(set(deck)) != len(deck):
        raise _reject(RejectionReason.DUPLICATE_CARD, "each owned card may be included once")
    unowned = [card_id for card_id in deck if card_id not in state.owned_cards]
    if unowned:
        raise _reject(RejectionReason.UNOWNED_CARD, f"cards not owned: {', '.join(unowned)}")
    pending = state.pending_battle
    if state.phase != GamePhase.CARD_SELECTION or pending is None:
        raise _reject(RejectionReason.WRONG_PHASE, "no battle is waiting for a deck")
    fleet = context.catalog.fleet(pending.opponent_id)
    if fleet is None:
        raise _reject(
            RejectionReason.UNKNOWN_OPPONENT, f"no opponent fleet named {pending.opponent_id!r}"
        )

    battle_id = pending.battle_id
    player_roster = tuple(state.owned_cards[card_id].profile for card_id in deck)
    opponent_roster = build_opponent_roster(fleet, pending.difficulty, battle_id, rules)
    player_deck = shuffle_items(
        generate_seed(battle_id, "deck", Side.PLAYER.value), [p.card_id for p in player_roster]
    )["items"]
    opponent_deck = shuffle_items(
        generate_seed(battle_id, "deck", Side.OPPONENT.value), [p.card_id for p in opponent_roster]
    )["items"]

    hand_size = deck_rules.starting_hand_size
    by_id = {profile.card_id: profile for profile in (*player_roster, *opponent_roster)}
    initiative = determine_initiative(
        battle_id,
        [by_id[card_id] for card_id in player_deck[:hand_size]],
        [by_id[card_id] for card_id in opponent_deck[:hand_size]],
        rules,
    )
    flagship_hull = rules.flagship_hull(pending.difficulty)

    batch = context.batch()
    batch.emit(
        ev.TacticalBattleStarted(
            battle_id=battle_id,
            quest_id=pending.quest_id,
            opponent_id=fleet.opponent_id,
            opponent_name=fleet.name,
            difficulty=pending.difficulty,
            settings=BattleSettings(
                round_limit=rules.combat.round_limit,
                max_hand_size=deck_rules.max_hand_size,
                battlefield_slots=rules.combat.battlefield_slots,
                energy_maximum=rules.energy.maximum,
                energy_regeneration=rules.energy.regeneration,
            ),
            player=CombatantSetup(
                deck=tuple(player_deck),
                roster=player_roster,
                flagship_hull=rules.combat.base_flagship_hull,
                starting_energy=starting_energy(Side.PLAYER, initiative, rules),
            ),
            opponent=CombatantSetup(
                deck=tuple(opponent_deck),
                roster=opponent_roster,
                flagship_hull=flagship_hull,
                starting_energy=starting_energy(Side.OPPONENT, initiative, rules),
            ),
            initiative=initiative,
        )
    )
    for _ in range(hand_size):
        draw_cards(batch, Side.PLAYER)
        draw_cards(batch, Side.OPPONENT)
    batch.emit(ev.MulliganStarted(battle_id=battle_id))
    return batch.events


def _handle_acknowledge(
    command: cmd.AcknowledgeOutcome, context: DecisionContext
) -> list[ev.Event]:
    battle = context.state.battle
    if battle is None or not battle.is_resolved:
        raise _reject(RejectionReason.WRONG_PHASE, "there is no finished battle to acknowledge")
    return [ev.BattleOutcomeAcknowledged(battle_id=battle.battle_id)]


# ---------------------------------------------------------------------------
# Mulligan


def _require_mulligan(context: DecisionContext, side: Side) -> TacticalBattleState:
    battle = _require_battle(context.state)
    if battle.phase != BattlePhase.MULLIGAN:
        raise _reject(RejectionReason.WRONG_PHASE, "the mulligan window has closed")
    if battle.combatant(side).mulligan_resolved:
        raise _reject(RejectionReason.MULLIGAN_ALREADY_USED, f"{side} already kept its hand")
    return battle


def _handle_mulligan(command: cmd.Mulligan, context: DecisionContext) -> list[ev.Event]:
    battle = _require_mulligan(context, command.side)
    hand = battle.combatant(command.side).hand
    returned = command.card_ids
    if len(set(returned)) != len(returned) or any(card_id not in hand for card_id in returned):
        raise _reject(RejectionReason.CARD_NOT_IN_HAND, "mulligan only cards from your hand")

    batch = context.batch()
    batch.emit(ev.MulliganResolved(side=command.side, returned_card_ids=returned))
    draw_cards(batch, command.side, len(returned))
    complete_mulligan(batch)
    return batch.events


def _handle_skip_mulligan(command: cmd.SkipMulligan, context: DecisionContext) -> list[ev.Event]:
    _require_mulligan(context, command.side)
    batch = context.batch()
    batch.emit(ev.MulliganResolved(side=command.side))
    complete_mulligan(batch)
    return batch.events


# ---------------------------------------------------------------------------
# Main phase actions


def _require_battle(state: GameState) -> TacticalBattleState:
    battle = state.battle
    if battle is None:
        raise _reject(RejectionReason.WRONG_PHASE, "no tactical battle in progress")
    if battle.is_resolved:
        raise _reject(RejectionReason.BATTLE_RESOLVED, "the battle is already over")
    return battle


def _require_turn(context: DecisionContext, side: Side) -> TacticalBattleState:
    battle = _require_battle(context.state)
    if battle.phase != BattlePhase.PLAYING:
        raise _reject(RejectionReason.WRONG_PHASE, f"cannot act during {battle.phase}")
    if battle.active_player != side:
        raise _reject(RejectionReason.NOT_YOUR_TURN, f"it is the {battle.active_player}'s turn")
    return battle


def _require_energy(battle: TacticalBattleState, side: Side, cost: int) -> None:
    current = battle.combatant(side).energy.current
    if current < cost:
        raise _reject(
            RejectionReason.INSUFFICIENT_ENERGY, f"needs {cost} energy, {current} available"
        )


def _require_position(battle: TacticalBattleState, position: int) -> None:
    if not 1 <= position <= battle.settings.battlefield_slots:
        raise _reject(RejectionReason.INVALID_POSITION, f"position {position} does not exist")


def _require_ship(battle: TacticalBattleState, side: Side, card_id: str) -> ShipState:
    ship = battle.combatant(side).ship(card_id)
    if ship is None:
        raise _reject(RejectionReason.SHIP_NOT_FOUND, f"{card_id} is not on the battlefield")
    return ship


def _require_ready(ship: ShipState) -> None:
    if ship.is_exhausted:
        raise _reject(RejectionReason.SHIP_EXHAUSTED, f"{ship.card_id} has already acted")
    _require_not_stunned(ship)


def _require_not_stunned(ship: ShipState) -> None:
    if ship.has_status(StatusEffectType.STUNNED):
        raise _reject(RejectionReason.SHIP_STUNNED, f"{ship.card_id} is stunned")


def _handle_deploy(command: cmd.DeployShip, context: DecisionContext) -> list[ev.Event]:
    side = command.side
    battle = _require_turn(context, side)
    combatant = battle.combatant(side)
    if command.card_id not in combatant.hand:
        raise _reject(RejectionReason.CARD_NOT_IN_HAND, f"{command.card_id} is not in hand")
    _require_position(battle, command.position)
    if combatant.ship_at(command.position) is not None:
        raise _reject(
            RejectionReason.POSITION_OCCUPIED, f"position {command.position} is occupied"
        )
    profile = combatant.roster[command.card_id]
    _require_energy(battle, side, profile.energy_cost)

    batch = context.batch()
    if profile.energy_cost > 0:
        current = combatant.energy.current
        batch.emit(
            ev.EnergySpent(
                side=side,
                amount=profile.energy_cost,
                new_total=current - profile.energy_cost,
                reason=EnergySpendReason.DEPLOY,
            )
        )
    batch.emit(
        ev.ShipDeployed(
            side=side, card_id=command.card_id, position=command.position, profile=profile
        )
    )
    deployed = batch.battle.combatant(side).ship(command.card_id)
    if deployed is not None:
        trigger_abilities(
            batch,
            side,
            deployed,
            AbilityTrigger.ON_DEPLOY,
            TriggerContext(lane=command.position),
        )
    return batch.events


def _handle_attack(command: cmd.AttackWithShip, context: DecisionContext) -> list[ev.Event]:
    side = command.side
    battle = _require_turn(context, side)
    attacker = _require_ship(battle, side, command.card_id)
    _require_ready(attacker)

    batch = context.batch()
    resolve_attack(
        batch,
        side,
        attacker,
        target_position=command.target_position,
        target_flagship=command.target_flagship,
    )
    return batch.events


def _ability_target(
    battle: TacticalBattleState,
    side: Side,
    ship: ShipState,
    ability: CardAbility,
    command: cmd.ActivateAbility,
) -> ShipRef | None:
    """Validate the chosen target against the ability's declared target type."""

    match ability.target:
        case TargetType.ENEMY:
            if command.target_side == side:
                raise _reject(RejectionReason.INVALID_TARGET, f"{ability.name} targets enemies")
            target = resolve_enemy_ability_target(
                battle, side, ship, ability, command.target_card_id
            )
            return ShipRef(side.other, target.card_id)
        case TargetType.ALLY:
            if command.target_side not in (None, side):
                raise _reject(RejectionReason.INVALID_TARGET, f"{ability.name} targets allies")
            if command.target_card_id is not None:
                ally = battle.combatant(side).ship(command.target_card_id)
                if ally is None or ally.card_id == ship.card_id:
                    raise _reject(
                        RejectionReason.INVALID_TARGET,
                        f"{command.target_card_id} is not an allied ship",
                    )
                return ShipRef(side, ally.card_id)
            if len(battle.combatant(side).ships()) < 2:
                raise _reject(RejectionReason.INVALID_TARGET, "no allied ship to target")
            return None
        case TargetType.ANY_SHIP:
            if command.target_side is None or command.target_card_id is None:
                raise _reject(RejectionReason.INVALID_TARGET, f"{ability.name} needs a target")
            if battle.combatant(command.target_side).ship(command.target_card_id) is None:
                raise _reject(
                    RejectionReason.INVALID_TARGET, f"{command.target_card_id} is not in play"
                )
            return ShipRef(command.target_side, command.target_card_id)
    if command.target_card_id is not None:
        raise _reject(RejectionReason.INVALID_TARGET, f"{ability.name} does not take a target")
    return None


def _handle_activate(command: cmd.ActivateAbility, context: DecisionContext) -> list[ev.Event]:
    side = command.side
    battle = _require_turn(context, side)
    ship = _require_ship(battle, side, command.card_id)
    _require_not_stunned(ship)
    ability = ship.profile.ability(command.ability_id)
    if ability is None:
        raise _reject(
            RejectionReason.ABILITY_NOT_FOUND, f"{ship.card_id} has no ability {command.ability_id}"
        )
    if ability.trigger != AbilityTrigger.ACTIVATED:
        raise _reject(
            RejectionReason.ABILITY_NOT_ACTIVATABLE, f"{ability.name} cannot be activated"
        )
    remaining = ship.cooldown(ability.ability_id)
    if remaining > 0:
        raise _reject(
            RejectionReason.ABILITY_ON_COOLDOWN,
            f"{ability.name} is on cooldown for {remaining} more turn(s)",
        )
    _require_energy(battle, side, ability.energy_cost)
    target = _ability_target(battle, side, ship, ability, command)

    batch = context.batch()
    activate_ability(batch, side, ship, ability, target)
    return batch.events


def _handle_move(command: cmd.MoveShip, context: DecisionContext) -> list[ev.Event]:
    side = command.side
    battle = _require_turn(context, side)
    ship = _require_ship(battle, side, command.card_id)
    _require_ready(ship)
    _require_position(battle, command.to_position)
    if battle.combatant(side).ship_at(command.to_position) is not None:
        raise _reject(
            RejectionReason.POSITION_OCCUPIED, f"position {command.to_position} is occupied"
        )
    cost = context.rules.energy.move_cost
    _require_energy(battle, side, cost)

    batch = context.batch()
    if cost > 0:
        current = battle.combatant(side).energy.current
        batch.emit(
            ev.EnergySpent(
                side=side, amount=cost, new_total=current - cost, reason=EnergySpendReason.MOVE
            )
        )
    batch.emit(
        ev.ShipMoved(
            side=side,
            card_id=ship.card_id,
            from_position=ship.position,
            to_position=command.to_position,
        )
    )
    return batch.events


def _handle_draw(command: cmd.DrawExtraCard, context: DecisionContext) -> list[ev.Event]:
    side = command.side
    battle = _require_turn(context, side)
    if not battle.combatant(side).deck:
        raise _reject(RejectionReason.DECK_EMPTY, "no cards left to draw")
    cost = context.rules.energy.draw_card_cost
    _require_energy(battle, side, cost)

    batch = context.batch()
    current = battle.combatant(side).energy.current
    batch.emit(
        ev.EnergySpent(
            side=side, amount=cost, new_total=current - cost, reason=EnergySpendReason.DRAW
        )
    )
    draw_cards(batch, side, 1)
    return batch.events


def _handle_reserves(command: cmd.UseEmergencyReserves, context: DecisionContext) -> list[ev.Event]:
    side = command.side
    battle = _require_turn(context, side)
    reserve = battle.initiative.reserve
    if reserve.side != side or not reserve.available:
        raise _reject(RejectionReason.RESERVES_UNAVAILABLE, f"{side} has no emergency reserve")
    if battle.turn_number > reserve.expires_on_turn:
        raise _reject(RejectionReason.RESERVES_UNAVAILABLE, "the emergency reserve has expired")
    energy = battle.combatant(side).energy
    new_total = min(energy.maximum, energy.current + reserve.energy_grant)
    if new_total == energy.current:
        raise _reject(
            RejectionReason.RESERVES_UNAVAILABLE, f"{side} is already at maximum energy"
        )
    return [
        ev.EmergencyReservesUsed(side=side, amount=new_total - energy.current, new_total=new_total)
    ]


def _handle_end_turn(command: cmd.EndTurn, context: DecisionContext) -> list[ev.Event]:
    _require_turn(context, command.side)
    batch = context.batch()
    end_turn(batch, command.side)
    return batch.events


_COMMAND_HANDLERS: dict[type, CommandHandler] = {
    cmd.StartGame: _handle_start_game,
    cmd.TriggerBattle: _handle_trigger_battle,
    cmd.StartTacticalBattle: _handle_start_battle,
    cmd.Mulligan: _handle_mulligan,
    cmd.SkipMulligan: _handle_skip_mulligan,
    cmd.DeployShip: _handle_deploy,
    cmd.AttackWithShip: _handle_attack,
    cmd.ActivateAbility: _handle_activate,
    cmd.MoveShip: _handle_move,
    cmd.DrawExtraCard: _handle_draw,
    cmd.UseEmergencyReserves: _handle_reserves,
    cmd.EndTurn: _handle_end_turn,
    cmd.AcknowledgeOutcome: _handle_acknowledge,
}

_unhandled = set(cmd.COMMAND_TYPES) - set(_COMMAND_HANDLERS)
if _unhandled:  # pragma: no cover - caught at import time
    raise RuntimeError(
        f"command types without a decider handler: {sorted(t.__name__ for t in _unhandled)}"
    )
