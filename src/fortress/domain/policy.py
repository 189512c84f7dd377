"""Deterministic opponent policy.

The policy only ever proposes ordinary commands; the decider validates them
exactly as it would a player's.
"""

from __future__ import annotations

from . import commands as cmd
from .combat import lane_bypasses
from .enums import BattlePhase, LaneBypass, Side, StatusEffectType
from .models import CombatantState, GameState, TacticalBattleState


class GreedyOpponentPolicy:
    """Deploy the most expensive affordable ship, attack with everything, then pass."""

    def next_command(self, state: GameState, side: Side = Side.OPPONENT) -> cmd.Command | None:
        """Return the next command for ``side``, or ``None`` when it has nothing to do."""

        battle = state.battle
        if battle is None or battle.is_resolved:
            return None
        if battle.phase == BattlePhase.MULLIGAN:
            if battle.combatant(side).mulligan_resolved:
                return None
            return cmd.SkipMulligan(side=side)
        if battle.phase != BattlePhase.PLAYING or battle.active_player != side:
            return None
        return (
            self._deployment(battle, side)
            or self._attack(battle, side)
            or cmd.EndTurn(side=side)
        )

    def _deployment(self, battle: TacticalBattleState, side: Side) -> cmd.DeployShip | None:
        own = battle.combatant(side)
        free = [p for p in range(1, len(own.battlefield) + 1) if own.ship_at(p) is None]
        if not free:
            return None
        affordable = [
            (index, own.roster[card_id])
            for index, card_id in enumerate(own.hand)
            if own.roster[card_id].energy_cost <= own.energy.current
        ]
        if not affordable:
            return None
        _, profile = min(
            affordable,
            key=lambda item: (-item[1].energy_cost, -item[1].attack, item[0]),
        )
        return cmd.DeployShip(
            side=side,
            card_id=profile.card_id,
            position=self._position(free, battle.combatant(side.other)),
        )

    @staticmethod
    def _position(free: list[int], enemy: CombatantState) -> int:
        contested = [p for p in free if enemy.ship_at(p) is not None]
        return contested[0] if contested else free[0]

    @staticmethod
    def _attack(battle: TacticalBattleState, side: Side) -> cmd.AttackWithShip | None:
        for ship in battle.combatant(side).ships():
            if ship.is_exhausted or ship.has_status(StatusEffectType.STUNNED):
                continue
            direct = LaneBypass.FLAGSHIP_DIRECT in lane_bypasses(ship.profile)
            return cmd.AttackWithShip(side=side, card_id=ship.card_id, target_flagship=direct)
        return None
