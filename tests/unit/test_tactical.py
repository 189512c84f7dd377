"""Unit tests for battle setup helpers and victory checks."""

from __future__ import annotations

import pytest

from fortress.domain import events as ev
from fortress.domain.catalog import FleetDesign, OpponentFleet
from fortress.domain.enums import (
    BattleOutcome,
    DamageSource,
    Difficulty,
    InitiativeReason,
    Side,
    VictoryCondition,
)
from fortress.domain.projector import rebuild
from fortress.domain.rules_config import DEFAULT_RULES, DeckRules, RulesConfig
from fortress.domain.tactical import (
    EventBatch,
    build_opponent_roster,
    check_victory,
    determine_initiative,
    round_limit_reached,
    starting_energy,
)

FLEET = OpponentFleet(
    opponent_id="drifters",
    name="Drifters",
    faction="void",
    designs=(
        FleetDesign("skiff", "Skiff", attack=1, defense=0, hull=2, agility=4, energy_cost=1),
        FleetDesign("hulk", "Hulk", attack=3, defense=2, hull=7, agility=1, energy_cost=4),
    ),
)


def test_higher_agility_takes_initiative(builder):
    fast = [builder.profile(f"f{i}", agility=5) for i in range(4)]
    slow = [builder.profile(f"s{i}", agility=2) for i in range(4)]

    initiative = determine_initiative("b-1", slow, fast)
    assert initiative.first_player == Side.OPPONENT
    assert initiative.reason == InitiativeReason.AGILITY
    assert (initiative.player_agility, initiative.opponent_agility) == (8, 20)
    assert initiative.second_player_bonus == 1
    assert initiative.reserve.side == Side.PLAYER
    assert initiative.reserve.energy_grant == 2
    assert initiative.reserve.expires_on_turn == 6
    assert initiative.reserve.available


def test_tied_agility_uses_a_seeded_tiebreak(builder):
    hand = [builder.profile(f"c{i}") for i in range(4)]

    first = determine_initiative("b-7", hand, hand)
    assert first.reason == InitiativeReason.TIEBREAKER
    assert determine_initiative("b-7", hand, hand) == first
    assert first.reserve.side == first.first_player.other


def test_tiebreak_varies_between_battles(builder):
    hand = [builder.profile(f"c{i}") for i in range(4)]
    winners = {determine_initiative(f"b-{n}", hand, hand).first_player for n in range(32)}
    assert winners == {Side.PLAYER, Side.OPPONENT}


def test_second_player_starts_with_bonus_energy(builder):
    hand = [builder.profile("c1", agility=9)]
    initiative = determine_initiative("b-1", hand, [builder.profile("c2", agility=1)])
    assert starting_energy(Side.PLAYER, initiative) == 3
    assert starting_energy(Side.OPPONENT, initiative) == 4


def test_opponent_roster_is_numbered_and_deterministic():
    roster = build_opponent_roster(FLEET, Difficulty.MEDIUM, "b-3")

    assert len(roster) == DEFAULT_RULES.deck.opponent_deck_size
    for index, profile in enumerate(roster, start=1):
        assert profile.card_id.endswith(f"_{index}")
        assert profile.card_id.rsplit("_", 1)[0] in {"skiff", "hulk"}
        assert profile.faction == "void"
    assert build_opponent_roster(FLEET, Difficulty.MEDIUM, "b-3") == roster


def test_roster_size_follows_the_rules():
    rules = RulesConfig(deck=DeckRules(opponent_deck_size=3))
    assert len(build_opponent_roster(FLEET, Difficulty.EASY, "b-3", rules)) == 3


@pytest.mark.parametrize(
    ("difficulty", "attack", "defense", "hull"),
    [
        (Difficulty.EASY, 1, 0, 1),
        (Difficulty.MEDIUM, 1, 0, 2),
        (Difficulty.HARD, 2, 1, 3),
    ],
)
def test_difficulty_adjusts_stats_with_a_floor(difficulty, attack, defense, hull):
    skiffs = OpponentFleet("skiffs", "Skiffs", "void", (FLEET.designs[0],))
    profile = build_opponent_roster(skiffs, difficulty, "b-9")[0]
    assert (profile.attack, profile.defense, profile.hull) == (attack, defense, hull)
    assert profile.energy_cost == 1


@pytest.mark.parametrize(
    ("difficulty", "hull"),
    [(Difficulty.EASY, 10), (Difficulty.MEDIUM, 12), (Difficulty.HARD, 14)],
)
def test_opponent_flagship_hull_scales_with_difficulty(difficulty, hull):
    assert DEFAULT_RULES.flagship_hull(difficulty) == hull


def test_check_victory_is_quiet_while_both_flagships_stand(builder):
    state = builder.playing([builder.profile("p1")], [builder.profile("o1")])
    batch = EventBatch(state)
    assert check_victory(batch) is False
    assert batch.events == []


def test_double_knockout_is_a_draw(builder):
    events = builder.playing_events([builder.profile("p1")], [builder.profile("o1")])
    events += [
        ev.FlagshipDamaged(side=Side.PLAYER, amount=10, new_hull=0, source=DamageSource.STATUS),
        ev.FlagshipDamaged(side=Side.OPPONENT, amount=12, new_hull=0, source=DamageSource.STATUS),
    ]
    batch = EventBatch(rebuild(events))

    assert check_victory(batch) is True
    assert batch.events[:2] == [
        ev.FlagshipDestroyed(side=Side.PLAYER),
        ev.FlagshipDestroyed(side=Side.OPPONENT),
    ]
    resolved = batch.events[2]
    assert resolved.winner == BattleOutcome.DRAW
    assert resolved.victory_condition == VictoryCondition.FLAGSHIP_DESTROYED


def test_batch_drops_combat_events_after_resolution(builder):
    events = builder.playing_events(
        [builder.profile("p1")], [builder.profile("o1")], player_field={1: "p1"}
    )
    events.append(
        ev.FlagshipDamaged(side=Side.OPPONENT, amount=12, new_hull=0, source=DamageSource.ATTACK)
    )
    batch = EventBatch(rebuild(events))
    check_victory(batch)
    emitted = len(batch.events)

    batch.emit(
        ev.DamageDealt(
            side=Side.PLAYER, card_id="p1", amount=1, new_hull=4, source=DamageSource.ATTACK
        )
    )
    assert len(batch.events) == emitted
    assert batch.battle.player.ship("p1").current_hull == 5


def test_round_limit_counts_both_sides_turns(builder):
    state = builder.playing([builder.profile("p1")], [builder.profile("o1")], round_limit=1)
    assert not round_limit_reached(state.battle)

    batch = EventBatch(state)
    batch.emit(ev.TurnEnded(side=Side.PLAYER, turn_number=1))
    batch.emit(
        ev.TurnStarted(side=Side.OPPONENT, turn_number=2, energy_gained=0, new_energy_total=4)
    )
    assert round_limit_reached(batch.battle)
