"""Unit tests for the greedy opponent policy."""

from __future__ import annotations

import pytest

from fortress.content.cards import STARTER_CARD_IDS
from fortress.domain import commands as cmd
from fortress.domain.decider import decide
from fortress.domain.enums import (
    AbilityTrigger,
    BattlePhase,
    Difficulty,
    LaneBypass,
    Side,
    TargetType,
)
from fortress.domain.models import CardAbility
from fortress.domain.policy import GreedyOpponentPolicy
from fortress.domain.projector import apply_event, initial_state

PLAYER_ID = "pilot-1"

policy = GreedyOpponentPolicy()


def _apply(state, events):
    for event in events:
        state = apply_event(state, event)
    return state


def _new_battle(battle_id: str, opponent_id: str, difficulty: Difficulty):
    state = initial_state()
    for command in (
        cmd.StartGame(),
        cmd.TriggerBattle(battle_id=battle_id, opponent_id=opponent_id, difficulty=difficulty),
        cmd.StartTacticalBattle(deck=STARTER_CARD_IDS[:8]),
    ):
        state = _apply(state, decide(command, state, player_id=PLAYER_ID))
    return state


def test_no_command_outside_a_battle():
    assert policy.next_command(initial_state()) is None


def test_skips_the_mulligan_once():
    state = _new_battle("b-1", "scavengers", Difficulty.EASY)
    assert state.battle.phase == BattlePhase.MULLIGAN

    command = policy.next_command(state, Side.OPPONENT)
    assert command == cmd.SkipMulligan(side=Side.OPPONENT)
    state = _apply(state, decide(command, state))
    assert policy.next_command(state, Side.OPPONENT) is None


def test_waits_for_its_turn(builder):
    state = builder.playing([builder.profile("p1")], [builder.profile("o1")])
    assert policy.next_command(state, Side.OPPONENT) is None


def test_deploys_most_expensive_affordable_into_a_contested_lane(builder):
    player = [builder.profile("p1")]
    opponent = [
        builder.profile("o1", energy_cost=1),
        builder.profile("o2", energy_cost=4),
        builder.profile("o3", energy_cost=9),
    ]
    state = builder.playing(
        player,
        opponent,
        first=Side.OPPONENT,
        player_field={4: "p1"},
        energy={Side.OPPONENT: 5},
    )

    assert policy.next_command(state, Side.OPPONENT) == cmd.DeployShip(
        side=Side.OPPONENT, card_id="o2", position=4
    )


def test_attacks_with_ready_ships_then_passes(builder):
    state = builder.playing(
        [builder.profile("p1")],
        [builder.profile("o1", energy_cost=9)],
        first=Side.OPPONENT,
        opponent_field={2: "o1"},
    )
    # o1 is on the field, so nothing is left to deploy
    attack = policy.next_command(state, Side.OPPONENT)
    assert attack == cmd.AttackWithShip(side=Side.OPPONENT, card_id="o1")

    state = _apply(state, decide(attack, state))
    assert policy.next_command(state, Side.OPPONENT) == cmd.EndTurn(side=Side.OPPONENT)


def test_flagship_raiders_go_for_the_flagship(builder):
    raid = CardAbility(
        "raid",
        "Raid",
        AbilityTrigger.PASSIVE,
        TargetType.FLAGSHIP,
        lane_bypass=LaneBypass.FLAGSHIP_DIRECT,
    )
    state = builder.playing(
        [builder.profile("p1", abilities=(raid,))],
        [builder.profile("o1")],
        player_field={1: "p1"},
        opponent_field={1: "o1"},
    )
    command = policy.next_command(state, Side.PLAYER)
    assert command == cmd.AttackWithShip(side=Side.PLAYER, card_id="p1", target_flagship=True)


@pytest.mark.parametrize("opponent_id", ["scavengers", "pirates", "ironveil_security"])
def test_greedy_mirror_match_reaches_a_verdict(opponent_id):
    state = _new_battle(f"mirror-{opponent_id}", opponent_id, Difficulty.MEDIUM)

    for _ in range(500):
        battle = state.battle
        if battle.is_resolved:
            break
        side = battle.active_player
        if battle.phase == BattlePhase.MULLIGAN:
            side = Side.PLAYER if not battle.player.mulligan_resolved else Side.OPPONENT
        command = policy.next_command(state, side)
        assert command is not None
        state = _apply(state, decide(command, state))

    battle = state.battle
    assert battle.is_resolved
    assert battle.turn_number <= battle.settings.round_limit * 2
    assert battle.winner is not None
