"""Event-emitting combat actions: damage, repair, statuses and ability effects.

Every helper works against an :class:`EventBatch` and re-reads the ship it
is about to touch, because an earlier effect in the same command may have
moved, damaged or destroyed it.  Helpers quietly do nothing once their
target is gone or the battle has resolved.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import events as ev
from .combat import (
    adjacent_positions,
    calculate_damage,
    condition_met,
    effective_attack,
    effective_defense,
    resolve_attack_target,
)
from .enums import (
    AbilityTrigger,
    DamageSource,
    EffectType,
    EnergySpendReason,
    Side,
    StatusEffectType,
    TargetType,
)
from .models import AbilityEffect, CardAbility, ShipState
from .tactical import EventBatch, check_victory, draw_cards

STACKABLE_STATUSES = frozenset(
    {
        StatusEffectType.SHIELDED,
        StatusEffectType.ENERGIZED,
        StatusEffectType.MARKED,
        StatusEffectType.WEAKENED,
        StatusEffectType.BURNING,
        StatusEffectType.UNSTABLE,
    }
)

# Non-passive stat boosts land as temporary statuses.
_BOOST_STATUSES = {
    EffectType.BOOST_ATTACK: StatusEffectType.ENERGIZED,
    EffectType.BOOST_DEFENSE: StatusEffectType.SHIELDED,
}


@dataclass(frozen=True, slots=True)
class ShipRef:
    side: Side
    card_id: str


@dataclass(frozen=True, slots=True)
class TriggerContext:
    """What an ability fired against.

    ``target`` is the ship on the other end of the action (the defender for
    ``on_attack``, the attacker for ``on_defend``, the chosen ship for an
    activation).  ``lane`` anchors lane-relative targets such as
    ``adjacent``; it defaults to the source ship's position.
    """

    target: ShipRef | None = None
    lane: int | None = None


def _fresh(batch: EventBatch, ref: ShipRef) -> ShipState | None:
    if batch.state.battle is None:
        return None
    return batch.battle.combatant(ref.side).ship(ref.card_id)


# ---------------------------------------------------------------------------
# Hull


def damage_ship(
    batch: EventBatch,
    ref: ShipRef,
    amount: int,
    source: DamageSource,
    source_card_id: str | None = None,
) -> None:
    ship = _fresh(batch, ref)
    if ship is None or amount <= 0 or batch.resolved:
        return
    new_hull = max(0, ship.current_hull - amount)
    batch.emit(
        ev.DamageDealt(
            side=ref.side,
            card_id=ref.card_id,
            amount=ship.current_hull - new_hull,
            new_hull=new_hull,
            source=source,
            source_card_id=source_card_id,
        )
    )
    if new_hull == 0:
        destroy_ship(batch, ref, destroyed_by=source_card_id)


def destroy_ship(batch: EventBatch, ref: ShipRef, destroyed_by: str | None = None) -> None:
    """Remove a wreck from play, then resolve its ``on_destroyed`` abilities."""

    ship = _fresh(batch, ref)
    if ship is None or batch.resolved:
        return
    batch.emit(
        ev.ShipDestroyed(
            side=ref.side, card_id=ref.card_id, position=ship.position, destroyed_by=destroyed_by
        )
    )
    trigger_abilities(batch, ref.side, ship, AbilityTrigger.ON_DESTROYED)


def repair_ship(batch: EventBatch, ref: ShipRef, amount: int) -> None:
    ship = _fresh(batch, ref)
    if ship is None or batch.resolved:
        return
    new_hull = min(ship.max_hull, ship.current_hull + amount)
    if new_hull == ship.current_hull:
        return
    batch.emit(
        ev.ShipRepaired(
            side=ref.side,
            card_id=ref.card_id,
            amount=new_hull - ship.current_hull,
            new_hull=new_hull,
        )
    )


def damage_flagship(
    batch: EventBatch,
    side: Side,
    amount: int,
    source: DamageSource,
    source_card_id: str | None = None,
) -> None:
    if batch.resolved or amount <= 0:
        return
    flagship = batch.battle.combatant(side).flagship
    new_hull = max(0, flagship.current_hull - amount)
    batch.emit(
        ev.FlagshipDamaged(
            side=side,
            amount=flagship.current_hull - new_hull,
            new_hull=new_hull,
            source=source,
            source_card_id=source_card_id,
        )
    )
    check_victory(batch)


def repair_flagship(batch: EventBatch, side: Side, amount: int) -> None:
    if batch.resolved:
        return
    flagship = batch.battle.combatant(side).flagship
    new_hull = min(flagship.max_hull, flagship.current_hull + amount)
    if new_hull == flagship.current_hull:
        return
    batch.emit(
        ev.FlagshipRepaired(side=side, amount=new_hull - flagship.current_hull, new_hull=new_hull)
    )


# ---------------------------------------------------------------------------
# Energy and statuses


def gain_energy(
    batch: EventBatch, side: Side, amount: int, source_card_id: str | None = None
) -> None:
    if batch.resolved:
        return
    energy = batch.battle.combatant(side).energy
    new_total = min(energy.maximum, energy.current + amount)
    if new_total == energy.current:
        return
    batch.emit(
        ev.EnergyGained(
            side=side,
            amount=new_total - energy.current,
            new_total=new_total,
            source_card_id=source_card_id,
        )
    )


def spend_energy(batch: EventBatch, side: Side, amount: int, reason: EnergySpendReason) -> None:
    """Record an energy payment; a drain takes whatever is left."""

    if batch.resolved or amount <= 0:
        return
    current = batch.battle.combatant(side).energy.current
    paid = min(amount, current)
    if paid == 0:
        return
    batch.emit(ev.EnergySpent(side=side, amount=paid, new_total=current - paid, reason=reason))


def apply_status(
    batch: EventBatch,
    ref: ShipRef,
    status: StatusEffectType,
    duration: int,
    stacks: int,
    source_id: str,
) -> None:
    """Add a status, merging with an existing one of the same type."""

    ship = _fresh(batch, ref)
    if ship is None or batch.resolved:
        return
    duration = max(1, duration)
    stacks = max(1, stacks)
    existing = ship.status(status)
    if existing is not None:
        duration = max(existing.remaining, duration)
        stacks = existing.stacks + stacks if status in STACKABLE_STATUSES else 1
    elif status not in STACKABLE_STATUSES:
        stacks = 1
    batch.emit(
        ev.StatusApplied(
            side=ref.side,
            card_id=ref.card_id,
            status=status,
            remaining=duration,
            stacks=stacks,
            source_id=source_id,
        )
    )


# ---------------------------------------------------------------------------
# Abilities


def _ship_targets(
    batch: EventBatch,
    side: Side,
    source: ShipState,
    target_type: TargetType,
    context: TriggerContext,
) -> list[ShipRef]:
    battle = batch.battle
    own = battle.combatant(side)
    enemy = battle.combatant(side.other)
    lane = context.lane if context.lane is not None else source.position

    match target_type:
        case TargetType.SELF:
            return [ShipRef(side, source.card_id)]
        case TargetType.ENEMY:
            if context.target is not None and context.target.side != side:
                return [context.target]
            opposite = enemy.ship_at(lane)
            return [ShipRef(side.other, opposite.card_id)] if opposite is not None else []
        case TargetType.ALLY:
            if context.target is not None and context.target.side == side:
                return [context.target]
            allies = [ship for ship in own.ships() if ship.card_id != source.card_id]
            return [ShipRef(side, allies[0].card_id)] if allies else []
        case TargetType.ALL_ENEMIES:
            return [ShipRef(side.other, ship.card_id) for ship in enemy.ships()]
        case TargetType.ALL_ALLIES:
            return [ShipRef(side, ship.card_id) for ship in own.ships()]
        case TargetType.ADJACENT:
            return [
                ShipRef(side.other, ship.card_id)
                for position in adjacent_positions(lane, len(enemy.battlefield))
                if (ship := enemy.ship_at(position)) is not None
            ]
        case TargetType.ANY_SHIP:
            return [context.target] if context.target is not None else []
    return []


def _apply_effect(
    batch: EventBatch,
    side: Side,
    source: ShipState,
    ability: CardAbility,
    effect: AbilityEffect,
    context: TriggerContext,
) -> None:
    if batch.resolved:
        return
    # A ship that is gone keeps its last snapshot for condition checks.
    current = batch.battle.combatant(side).ship(source.card_id) or source
    if not condition_met(effect.condition, current, side, batch.battle):
        return

    match effect.type:
        case EffectType.DEAL_DAMAGE:
            if ability.target == TargetType.FLAGSHIP:
                damage_flagship(
                    batch, side.other, effect.amount, DamageSource.ABILITY, source.card_id
                )
                return
            for ref in _ship_targets(batch, side, source, ability.target, context):
                damage_ship(batch, ref, effect.amount, DamageSource.ABILITY, source.card_id)
        case EffectType.DAMAGE_FLAGSHIP:
            damage_flagship(batch, side.other, effect.amount, DamageSource.ABILITY, source.card_id)
        case EffectType.REPAIR:
            for ref in _ship_targets(batch, side, source, ability.target, context):
                repair_ship(batch, ref, effect.amount)
        case EffectType.REPAIR_FLAGSHIP:
            repair_flagship(batch, side, effect.amount)
        case EffectType.APPLY_STATUS:
            if effect.status is None:
                return
            for ref in _ship_targets(batch, side, source, ability.target, context):
                apply_status(
                    batch, ref, effect.status, effect.duration, effect.amount, source.card_id
                )
        case EffectType.BOOST_ATTACK | EffectType.BOOST_DEFENSE:
            for ref in _ship_targets(batch, side, source, ability.target, context):
                apply_status(
                    batch,
                    ref,
                    _BOOST_STATUSES[effect.type],
                    effect.duration,
                    effect.amount,
                    source.card_id,
                )
        case EffectType.ENERGY_GAIN:
            gain_energy(batch, side, effect.amount, source.card_id)
        case EffectType.ENERGY_DRAIN:
            spend_energy(batch, side.other, effect.amount, EnergySpendReason.DRAINED)
        case EffectType.DRAW_CARD:
            draw_cards(batch, side, effect.amount)


def resolve_ability(
    batch: EventBatch,
    side: Side,
    source: ShipState,
    ability: CardAbility,
    trigger: AbilityTrigger,
    context: TriggerContext | None = None,
    cooldown: int = 0,
) -> None:
    """Announce ``ability`` and run each of its effects in order."""

    if batch.resolved:
        return
    batch.emit(
        ev.AbilityTriggered(
            side=side,
            card_id=source.card_id,
            ability_id=ability.ability_id,
            trigger=trigger,
            cooldown=cooldown,
        )
    )
    context = context or TriggerContext()
    for effect in ability.effects:
        _apply_effect(batch, side, source, ability, effect, context)


def trigger_abilities(
    batch: EventBatch,
    side: Side,
    ship: ShipState,
    trigger: AbilityTrigger,
    context: TriggerContext | None = None,
) -> None:
    for ability in ship.profile.abilities_for(trigger):
        if not ability.effects:
            continue
        resolve_ability(batch, side, ship, ability, trigger, context)


def activate_ability(
    batch: EventBatch,
    side: Side,
    ship: ShipState,
    ability: CardAbility,
    target: ShipRef | None = None,
) -> None:
    """Pay for and fire an activated ability; callers validate first."""

    spend_energy(batch, side, ability.energy_cost, EnergySpendReason.ABILITY)
    resolve_ability(
        batch,
        side,
        ship,
        ability,
        AbilityTrigger.ACTIVATED,
        TriggerContext(target=target),
        cooldown=ability.cooldown,
    )


# ---------------------------------------------------------------------------
# Attacks


def resolve_attack(
    batch: EventBatch,
    side: Side,
    attacker: ShipState,
    *,
    target_position: int | None = None,
    target_flagship: bool = False,
) -> None:
    """Full attack sequence for one ship.

    ``on_defend`` abilities fire before damage so a defensive status can
    soften the hit; ``on_attack`` abilities fire after it.  Damage uses the
    attacker's latest state, or its last snapshot if retaliation already
    destroyed it.
    """

    target = resolve_attack_target(
        batch.battle,
        side,
        attacker,
        target_position=target_position,
        target_flagship=target_flagship,
    )
    defender = target.ship
    batch.emit(
        ev.ShipAttacked(
            side=side,
            card_id=attacker.card_id,
            position=attacker.position,
            target_card_id=defender.card_id if defender is not None else None,
            target_position=defender.position if defender is not None else None,
        )
    )
    attacker_ref = ShipRef(side, attacker.card_id)
    lane = defender.position if defender is not None else attacker.position

    if defender is None:
        power = effective_attack(_fresh(batch, attacker_ref) or attacker, side, batch.battle)
        damage = calculate_damage(
            power, batch.rules.combat.flagship_defense, batch.rules.combat.minimum_damage
        )
        damage_flagship(batch, target.side, damage, DamageSource.ATTACK, attacker.card_id)
    else:
        defender_ref = ShipRef(target.side, defender.card_id)
        trigger_abilities(
            batch,
            target.side,
            defender,
            AbilityTrigger.ON_DEFEND,
            TriggerContext(target=attacker_ref, lane=attacker.position),
        )
        current_defender = _fresh(batch, defender_ref)
        if current_defender is not None and not batch.resolved:
            power = effective_attack(_fresh(batch, attacker_ref) or attacker, side, batch.battle)
            damage = calculate_damage(
                power,
                effective_defense(current_defender, target.side, batch.battle),
                batch.rules.combat.minimum_damage,
            )
            damage_ship(batch, defender_ref, damage, DamageSource.ATTACK, attacker.card_id)

    if not batch.resolved:
        trigger_abilities(
            batch,
            side,
            _fresh(batch, attacker_ref) or attacker,
            AbilityTrigger.ON_ATTACK,
            TriggerContext(
                target=ShipRef(target.side, defender.card_id) if defender is not None else None,
                lane=lane,
            ),
        )
