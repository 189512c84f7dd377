"""Unit tests for ability activation, triggered effects and statuses."""

from __future__ import annotations

import pytest

from fortress.domain import commands as cmd
from fortress.domain import events as ev
from fortress.domain.abilities import ShipRef, apply_status
from fortress.domain.decider import decide
from fortress.domain.enums import (
    AbilityTrigger,
    DamageSource,
    EffectType,
    EnergySpendReason,
    LaneBypass,
    RejectionReason,
    Side,
    StatusEffectType,
    TargetType,
)
from fortress.domain.errors import ValidationError
from fortress.domain.models import AbilityEffect, CardAbility
from fortress.domain.projector import apply_event, rebuild
from fortress.domain.tactical import EventBatch


def _activated(
    ability_id="volley",
    target=TargetType.ENEMY,
    effects=(AbilityEffect(EffectType.DEAL_DAMAGE, amount=2),),
    *,
    energy_cost=2,
    cooldown=2,
    lane_bypass=LaneBypass.NONE,
):
    return CardAbility(
        ability_id,
        ability_id.title(),
        AbilityTrigger.ACTIVATED,
        target,
        effects,
        energy_cost=energy_cost,
        cooldown=cooldown,
        lane_bypass=lane_bypass,
    )


def _apply(state, events):
    for event in events:
        state = apply_event(state, event)
    return state


def _activate(state, card_id="p1", ability_id="volley", **kwargs):
    return decide(cmd.ActivateAbility(card_id=card_id, ability_id=ability_id, **kwargs), state)


def _reason(state, **kwargs) -> RejectionReason:
    with pytest.raises(ValidationError) as excinfo:
        _activate(state, **kwargs)
    return excinfo.value.reason


@pytest.fixture
def volley_state(builder):
    player = [builder.profile("p1", abilities=(_activated(),))]
    opponent = [builder.profile("o1", defense=4, hull=5)]
    return builder.playing(player, opponent, player_field={1: "p1"}, opponent_field={1: "o1"})


def test_activation_pays_energy_and_starts_cooldown(volley_state):
    events = _activate(volley_state)

    assert events == [
        ev.EnergySpent(side=Side.PLAYER, amount=2, new_total=1, reason=EnergySpendReason.ABILITY),
        ev.AbilityTriggered(
            side=Side.PLAYER,
            card_id="p1",
            ability_id="volley",
            trigger=AbilityTrigger.ACTIVATED,
            cooldown=2,
        ),
        ev.DamageDealt(
            side=Side.OPPONENT,
            card_id="o1",
            amount=2,
            new_hull=3,
            source=DamageSource.ABILITY,
            source_card_id="p1",
        ),
    ]
    ship = _apply(volley_state, events).battle.player.ship("p1")
    assert ship.cooldown("volley") == 2
    assert not ship.is_exhausted


def test_ability_damage_ignores_defense(volley_state):
    events = _activate(volley_state)
    assert events[-1].amount == 2


def test_cooldown_blocks_until_it_runs_out(volley_state):
    state = _apply(volley_state, _activate(volley_state))
    assert _reason(state) == RejectionReason.ABILITY_ON_COOLDOWN

    for side in (Side.PLAYER, Side.OPPONENT):
        state = _apply(state, decide(cmd.EndTurn(side=side), state))
    assert state.battle.turn_number == 3
    assert state.battle.player.ship("p1").cooldown("volley") == 1
    assert _reason(state) == RejectionReason.ABILITY_ON_COOLDOWN

    for side in (Side.PLAYER, Side.OPPONENT):
        state = _apply(state, decide(cmd.EndTurn(side=side), state))
    assert state.battle.player.ship("p1").cooldown("volley") == 0
    assert isinstance(_activate(state)[1], ev.AbilityTriggered)


@pytest.mark.parametrize(
    ("kwargs", "reason"),
    [
        ({"ability_id": "missing"}, RejectionReason.ABILITY_NOT_FOUND),
        ({"target_side": Side.PLAYER}, RejectionReason.INVALID_TARGET),
        ({"target_card_id": "ghost"}, RejectionReason.INVALID_TARGET),
        ({"card_id": "o1"}, RejectionReason.SHIP_NOT_FOUND),
    ],
)
def test_activation_rejections(volley_state, kwargs, reason):
    assert _reason(volley_state, **kwargs) == reason


def test_passive_ability_cannot_be_activated(builder):
    armour = CardAbility(
        "armour",
        "Armour",
        AbilityTrigger.PASSIVE,
        TargetType.SELF,
        (AbilityEffect(EffectType.BOOST_DEFENSE, amount=1),),
    )
    state = builder.playing(
        [builder.profile("p1", abilities=(armour,))],
        [builder.profile("o1")],
        player_field={1: "p1"},
    )
    assert _reason(state, ability_id="armour") == RejectionReason.ABILITY_NOT_ACTIVATABLE


def test_activation_needs_energy(builder):
    state = builder.playing(
        [builder.profile("p1", abilities=(_activated(),))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        opponent_field={1: "o1"},
        energy={Side.PLAYER: 1},
    )
    assert _reason(state) == RejectionReason.INSUFFICIENT_ENERGY


def test_stunned_ship_cannot_activate(builder):
    events = builder.playing_events(
        [builder.profile("p1", abilities=(_activated(),))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        opponent_field={1: "o1"},
    )
    events.append(
        ev.StatusApplied(
            side=Side.PLAYER,
            card_id="p1",
            status=StatusEffectType.STUNNED,
            remaining=1,
            stacks=1,
            source_id="o1",
        )
    )
    assert _reason(rebuild(events)) == RejectionReason.SHIP_STUNNED


def test_exhausted_ship_may_still_activate(builder):
    state = builder.playing(
        [builder.profile("p1", abilities=(_activated(),))],
        [builder.profile("o1", defense=0)],
        player_field={1: "p1"},
        opponent_field={1: "o1"},
        ready=False,
    )
    assert isinstance(_activate(state)[-1], ev.DamageDealt)


def test_enemy_ability_stays_in_its_lane(builder):
    state = builder.playing(
        [builder.profile("p1", abilities=(_activated(),))],
        [builder.profile("o1"), builder.profile("o2")],
        player_field={1: "p1"},
        opponent_field={1: "o1", 3: "o2"},
    )
    assert _reason(state, target_card_id="o2") == RejectionReason.INVALID_TARGET
    assert _activate(state, target_card_id="o1")[-1].card_id == "o1"


def test_cross_lane_ability_picks_any_enemy(builder):
    sniper = _activated(lane_bypass=LaneBypass.CROSS_LANE)
    state = builder.playing(
        [builder.profile("p1", abilities=(sniper,))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        opponent_field={4: "o1"},
    )
    assert _activate(state, target_card_id="o1")[-1].card_id == "o1"


def test_enemy_ability_needs_an_opposing_ship(builder):
    state = builder.playing(
        [builder.profile("p1", abilities=(_activated(),))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        opponent_field={2: "o1"},
    )
    assert _reason(state) == RejectionReason.INVALID_TARGET


def test_ally_repair_needs_another_ship(builder):
    patch = _activated(
        "patch", TargetType.ALLY, (AbilityEffect(EffectType.REPAIR, amount=3),), cooldown=0
    )
    alone = builder.playing(
        [builder.profile("p1", abilities=(patch,)), builder.profile("p2")],
        [builder.profile("o1")],
        player_field={1: "p1"},
    )
    assert _reason(alone, ability_id="patch") == RejectionReason.INVALID_TARGET
    assert (
        _reason(alone, ability_id="patch", target_card_id="p1") == RejectionReason.INVALID_TARGET
    )


def test_ally_repair_is_capped_at_max_hull(builder):
    patch = _activated(
        "patch", TargetType.ALLY, (AbilityEffect(EffectType.REPAIR, amount=3),), cooldown=0
    )
    events = builder.playing_events(
        [builder.profile("p1", abilities=(patch,)), builder.profile("p2", hull=6)],
        [builder.profile("o1")],
        player_field={1: "p1", 2: "p2"},
    )
    events.append(
        ev.DamageDealt(
            side=Side.PLAYER, card_id="p2", amount=2, new_hull=4, source=DamageSource.ATTACK
        )
    )
    state = rebuild(events)

    repaired = _activate(state, ability_id="patch", target_card_id="p2")[-1]
    assert repaired == ev.ShipRepaired(side=Side.PLAYER, card_id="p2", amount=2, new_hull=6)


def test_area_abilities_hit_every_target(builder):
    barrage = _activated(
        "barrage", TargetType.ALL_ENEMIES, (AbilityEffect(EffectType.DEAL_DAMAGE, amount=1),)
    )
    state = builder.playing(
        [builder.profile("p1", abilities=(barrage,))],
        [builder.profile(f"o{i}") for i in range(1, 4)],
        player_field={1: "p1"},
        opponent_field={1: "o1", 3: "o2", 5: "o3"},
    )
    emitted = _activate(state, ability_id="barrage")
    hits = [e.card_id for e in emitted if isinstance(e, ev.DamageDealt)]
    assert hits == ["o1", "o2", "o3"]


def test_adjacent_abilities_flank_the_lane(builder):
    scatter = _activated(
        "scatter", TargetType.ADJACENT, (AbilityEffect(EffectType.DEAL_DAMAGE, amount=1),)
    )
    state = builder.playing(
        [builder.profile("p1", abilities=(scatter,))],
        [builder.profile(f"o{i}") for i in range(1, 4)],
        player_field={3: "p1"},
        opponent_field={2: "o1", 3: "o2", 4: "o3"},
    )
    emitted = _activate(state, ability_id="scatter")
    hits = [e.card_id for e in emitted if isinstance(e, ev.DamageDealt)]
    assert hits == ["o1", "o3"]


def test_energy_drain_takes_what_is_left(builder):
    siphon = _activated(
        "siphon",
        TargetType.SELF,
        (AbilityEffect(EffectType.ENERGY_DRAIN, amount=3),),
        energy_cost=1,
    )
    state = builder.playing(
        [builder.profile("p1", abilities=(siphon,))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        energy={Side.OPPONENT: 2},
    )
    drained = _activate(state, ability_id="siphon")[-1]
    assert drained == ev.EnergySpent(
        side=Side.OPPONENT, amount=2, new_total=0, reason=EnergySpendReason.DRAINED
    )


def test_flagship_ability_strikes_the_flagship(builder):
    torpedo = _activated(
        "torpedo", TargetType.FLAGSHIP, (AbilityEffect(EffectType.DEAL_DAMAGE, amount=3),)
    )
    state = builder.playing(
        [builder.profile("p1", abilities=(torpedo,))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        opponent_field={1: "o1"},
    )
    hit = _activate(state, ability_id="torpedo")[-1]
    assert isinstance(hit, ev.FlagshipDamaged)
    assert hit.new_hull == 9


def test_deploy_trigger_draws_a_card(builder):
    scout = CardAbility(
        "scout",
        "Scout",
        AbilityTrigger.ON_DEPLOY,
        TargetType.SELF,
        (AbilityEffect(EffectType.DRAW_CARD, amount=1),),
    )
    player = [
        builder.profile("p1", abilities=(scout,)),
        builder.profile("p2"),
        builder.profile("p3"),
    ]
    state = builder.playing(player, [builder.profile("o1")], hand_size=2)

    events = decide(cmd.DeployShip(card_id="p1", position=2), state)
    assert [type(e) for e in events] == [
        ev.EnergySpent,
        ev.ShipDeployed,
        ev.AbilityTriggered,
        ev.CardDrawn,
    ]
    assert events[-1].card_id == "p3"


def test_stackable_statuses_merge(builder):
    state = builder.playing(
        [builder.profile("p1")], [builder.profile("o1")], player_field={1: "p1"}
    )
    ref = ShipRef(Side.PLAYER, "p1")
    batch = EventBatch(state)

    apply_status(batch, ref, StatusEffectType.SHIELDED, duration=1, stacks=2, source_id="a")
    apply_status(batch, ref, StatusEffectType.SHIELDED, duration=3, stacks=1, source_id="b")
    apply_status(batch, ref, StatusEffectType.STUNNED, duration=1, stacks=4, source_id="c")
    apply_status(batch, ref, StatusEffectType.STUNNED, duration=1, stacks=4, source_id="c")

    ship = batch.battle.player.ship("p1")
    shield = ship.status(StatusEffectType.SHIELDED)
    assert (shield.remaining, shield.stacks) == (3, 3)
    assert ship.stacks(StatusEffectType.STUNNED) == 1
    assert len(batch.events) == 4
