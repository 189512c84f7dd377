"""Turn cycle of a tactical battle.

Start phase: reserve expiry, energy, one draw, burning damage, start-of-turn
abilities, then attrition for a side with nothing left to fight with.
End phase: hand trim, end-of-turn abilities, status expiry, readying, then
either the round-limit verdict or the other side's start phase.
"""

from __future__ import annotations

from . import events as ev
from .abilities import ShipRef, damage_flagship, damage_ship, trigger_abilities
from .enums import AbilityTrigger, DamageSource, DiscardReason, Side, StatusEffectType
from .tactical import EventBatch, draw_cards, resolve_timeout, round_limit_reached


def start_turn(batch: EventBatch, side: Side) -> None:
    if batch.resolved:
        return
    battle = batch.battle
    turn_number = battle.turn_number + 1

    reserve = battle.initiative.reserve
    if reserve.available and turn_number > reserve.expires_on_turn:
        batch.emit(ev.EmergencyReservesExpired(side=reserve.side, turn_number=turn_number))

    combatant = battle.combatant(side)
    energy = combatant.energy
    # Unspent energy carries over; the opening turn keeps the starting total.
    if combatant.turns_taken == 0:
        new_total = energy.current
    else:
        new_total = min(energy.maximum, energy.current + energy.regeneration)
    batch.emit(
        ev.TurnStarted(
            side=side,
            turn_number=turn_number,
            energy_gained=new_total - energy.current,
            new_energy_total=new_total,
        )
    )
    draw_cards(batch, side, 1)

    for ship in batch.battle.combatant(side).ships():
        burning = ship.status(StatusEffectType.BURNING)
        if burning is not None:
            damage_ship(
                batch,
                ShipRef(side, ship.card_id),
                burning.stacks,
                DamageSource.STATUS,
                burning.source_id,
            )

    _trigger_all(batch, side, AbilityTrigger.START_TURN)

    if not batch.resolved and batch.battle.combatant(side).is_depleted():
        damage_flagship(batch, side, batch.rules.combat.attrition_damage, DamageSource.ATTRITION)


def end_turn(batch: EventBatch, side: Side) -> None:
    battle = batch.battle
    turn_number = battle.turn_number

    hand = battle.combatant(side).hand
    limit = battle.settings.max_hand_size
    for card_id in hand[limit:]:
        batch.emit(ev.CardDiscarded(side=side, card_id=card_id, reason=DiscardReason.HAND_LIMIT))

    _trigger_all(batch, side, AbilityTrigger.END_TURN)
    _expire_statuses(batch, side, turn_number)
    if batch.resolved:
        return

    exhausted = tuple(
        ship.card_id for ship in batch.battle.combatant(side).ships() if ship.is_exhausted
    )
    if exhausted:
        batch.emit(ev.ShipsReadied(side=side, card_ids=exhausted))
    batch.emit(ev.TurnEnded(side=side, turn_number=turn_number))

    if round_limit_reached(batch.battle):
        resolve_timeout(batch)
    else:
        start_turn(batch, side.other)


def complete_mulligan(batch: EventBatch) -> None:
    """Open the first turn once both sides have kept or redrawn their hands."""

    battle = batch.battle
    if battle.player.mulligan_resolved and battle.opponent.mulligan_resolved:
        start_turn(batch, battle.initiative.first_player)


def _trigger_all(batch: EventBatch, side: Side, trigger: AbilityTrigger) -> None:
    for ship in batch.battle.combatant(side).ships():
        if batch.resolved:
            return
        current = batch.battle.combatant(side).ship(ship.card_id)
        if current is not None:
            trigger_abilities(batch, side, current, trigger)


def _expire_statuses(batch: EventBatch, side: Side, turn_number: int) -> None:
    for ship in batch.battle.combatant(side).ships():
        for effect in ship.status_effects:
            if effect.applied_turn == turn_number or effect.remaining > 1:
                continue
            if batch.resolved or batch.battle.combatant(side).ship(ship.card_id) is None:
                break
            batch.emit(ev.StatusExpired(side=side, card_id=ship.card_id, status=effect.type))
            if effect.type == StatusEffectType.UNSTABLE:
                damage_ship(
                    batch,
                    ShipRef(side, ship.card_id),
                    batch.rules.combat.unstable_expiry_damage * effect.stacks,
                    DamageSource.STATUS,
                    effect.source_id,
                )
