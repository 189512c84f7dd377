"""Pure combat calculations: effective stats, damage and target selection.

Target precedence for attacks, strongest first:

1. flagship-direct: a ship with a flagship-direct bypass may strike the
   enemy flagship and ignores taunt;
2. taunt: while the enemy has a taunting ship, attacks must hit one;
3. cross-lane: a ship with a cross-lane bypass may pick any occupied lane;
4. lane rule: the ship directly opposite, or the flagship when that lane is empty.

Activated abilities that target an enemy ship follow rules 2-4 with the
ability's own bypass flag.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import (
    AbilityTrigger,
    ConditionType,
    EffectType,
    LaneBypass,
    RejectionReason,
    Side,
    StatusEffectType,
)
from .errors import ValidationError
from .models import (
    CardAbility,
    CombatantState,
    EffectCondition,
    ShipProfile,
    ShipState,
    TacticalBattleState,
)


@dataclass(frozen=True, slots=True)
class AttackTarget:
    """Resolved attack target; ``ship`` is ``None`` when the flagship is hit."""

    side: Side
    ship: ShipState | None = None

    @property
    def is_flagship(self) -> bool:
        return self.ship is None


def calculate_damage(attack: int, defense: int, minimum: int = 1) -> int:
    """``max(minimum, attack - defense)``: every hit lands for at least ``minimum``."""

    return max(minimum, attack - defense)


def condition_met(
    condition: EffectCondition | None,
    ship: ShipState,
    side: Side,
    battle: TacticalBattleState,
) -> bool:
    if condition is None:
        return True
    combatant = battle.combatant(side)
    match condition.type:
        case ConditionType.HULL_BELOW:
            return ship.current_hull * 100 < condition.value * ship.max_hull
        case ConditionType.HULL_ABOVE:
            return ship.current_hull * 100 > condition.value * ship.max_hull
        case ConditionType.ENERGY_AT_LEAST:
            return combatant.energy.current >= condition.value
        case ConditionType.SHIP_DESTROYED_THIS_TURN:
            return (
                battle.player.ships_destroyed_this_turn + battle.opponent.ships_destroyed_this_turn
            ) > 0
        case ConditionType.FIRST_CARD_PLAYED:
            return combatant.cards_played_this_turn <= 1
    return False


def _passive_bonus(
    ship: ShipState, side: Side, battle: TacticalBattleState, effect_type: EffectType
) -> int:
    total = 0
    for ability in ship.profile.abilities_for(AbilityTrigger.PASSIVE):
        for effect in ability.effects:
            if effect.type == effect_type and condition_met(effect.condition, ship, side, battle):
                total += effect.amount
    return total


def effective_attack(ship: ShipState, side: Side, battle: TacticalBattleState) -> int:
    value = (
        ship.profile.attack
        + _passive_bonus(ship, side, battle, EffectType.BOOST_ATTACK)
        + ship.stacks(StatusEffectType.ENERGIZED)
        - ship.stacks(StatusEffectType.WEAKENED)
    )
    return max(0, value)


def effective_defense(ship: ShipState, side: Side, battle: TacticalBattleState) -> int:
    value = (
        ship.profile.defense
        + _passive_bonus(ship, side, battle, EffectType.BOOST_DEFENSE)
        + ship.stacks(StatusEffectType.SHIELDED)
        - ship.stacks(StatusEffectType.MARKED)
    )
    return max(0, value)


def lane_bypasses(profile: ShipProfile) -> frozenset[LaneBypass]:
    """Bypass flags granted by a ship's passive abilities."""

    return frozenset(
        ability.lane_bypass
        for ability in profile.abilities_for(AbilityTrigger.PASSIVE)
        if ability.lane_bypass != LaneBypass.NONE
    )


def taunting_ships(combatant: CombatantState) -> list[ShipState]:
    return [ship for ship in combatant.ships() if ship.has_status(StatusEffectType.TAUNTING)]


def adjacent_positions(position: int, slots: int) -> list[int]:
    return [p for p in (position - 1, position + 1) if 1 <= p <= slots]


def _invalid_target(message: str) -> ValidationError:
    return ValidationError(RejectionReason.INVALID_TARGET, message)


def _taunt_target(
    taunters: list[ShipState], position: int, requested: ShipState | None
) -> ShipState:
    if requested is not None:
        if requested.has_status(StatusEffectType.TAUNTING):
            return requested
        raise _invalid_target("a taunting ship must be targeted first")
    for ship in taunters:
        if ship.position == position:
            return ship
    return taunters[0]


def resolve_attack_target(
    battle: TacticalBattleState,
    side: Side,
    attacker: ShipState,
    *,
    target_position: int | None = None,
    target_flagship: bool = False,
) -> AttackTarget:
    enemy_side = side.other
    enemy = battle.combatant(enemy_side)
    bypasses = lane_bypasses(attacker.profile)

    if target_flagship:
        if LaneBypass.FLAGSHIP_DIRECT not in bypasses:
            raise _invalid_target(f"{attacker.card_id} cannot strike the flagship directly")
        return AttackTarget(enemy_side)

    requested: ShipState | None = None
    if target_position is not None:
        if not 1 <= target_position <= len(enemy.battlefield):
            raise ValidationError(
                RejectionReason.INVALID_POSITION, f"position {target_position} does not exist"
            )
        requested = enemy.ship_at(target_position)
        if requested is None and target_position != attacker.position:
            raise _invalid_target(f"no enemy ship at position {target_position}")

    taunters = taunting_ships(enemy)
    if taunters:
        return AttackTarget(enemy_side, _taunt_target(taunters, attacker.position, requested))

    if requested is not None and requested.position != attacker.position:
        if LaneBypass.CROSS_LANE not in bypasses:
            raise _invalid_target(f"{attacker.card_id} can only attack along its own lane")
        return AttackTarget(enemy_side, requested)

    return AttackTarget(enemy_side, enemy.ship_at(attacker.position))


def resolve_enemy_ability_target(
    battle: TacticalBattleState,
    side: Side,
    source: ShipState,
    ability: CardAbility,
    target_card_id: str | None,
) -> ShipState:
    """Pick and validate the enemy ship an activated ability will hit."""

    enemy = battle.combatant(side.other)
    requested: ShipState | None = None
    if target_card_id is not None:
        requested = enemy.ship(target_card_id)
        if requested is None:
            raise _invalid_target(f"{target_card_id} is not an enemy ship in play")

    taunters = taunting_ships(enemy)
    if taunters and ability.lane_bypass != LaneBypass.FLAGSHIP_DIRECT:
        return _taunt_target(taunters, source.position, requested)

    if requested is not None:
        if requested.position != source.position and ability.lane_bypass == LaneBypass.NONE:
            raise _invalid_target(f"{ability.name} can only reach the opposing lane")
        return requested

    opposite = enemy.ship_at(source.position)
    if opposite is None:
        raise _invalid_target(f"no enemy ship opposite {source.card_id}")
    return opposite
