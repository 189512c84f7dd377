"""Declarative rule configuration for the tactical battle."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import Difficulty


@dataclass(frozen=True, slots=True)
class DeckRules:
    """Deck selection and hand sizes."""

    min_deck_size: int = 8
    max_deck_size: int = 10
    starting_hand_size: int = 4
    max_hand_size: int = 5
    opponent_deck_size: int = 8


@dataclass(frozen=True, slots=True)
class EnergyRules:
    """Energy economy, including the second-player compensation."""

    starting_energy: int = 3
    maximum: int = 10
    regeneration: int = 2
    second_player_bonus: int = 1
    reserve_grant: int = 2
    reserve_expires_on_turn: int = 6  # second player's third turn
    draw_card_cost: int = 2
    move_cost: int = 1


@dataclass(frozen=True, slots=True)
class CombatRules:
    """Battlefield geometry and damage constants."""

    battlefield_slots: int = 5
    minimum_damage: int = 1
    flagship_defense: int = 0
    base_flagship_hull: int = 10
    flagship_hull_per_difficulty: int = 2
    attrition_damage: int = 2
    unstable_expiry_damage: int = 2
    round_limit: int = 5  # one round is one turn per side


@dataclass(frozen=True, slots=True)
class OpponentRules:
    """Stat adjustments applied to generated opponent fleets."""

    easy_stat_bonus: int = -1
    medium_stat_bonus: int = 0
    hard_stat_bonus: int = 1
    minimum_stat: int = 1

    def stat_bonus(self, difficulty: Difficulty) -> int:
        return getattr(self, f"{difficulty.value}_stat_bonus")


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for the tactical rules."""

    deck: DeckRules = DeckRules()
    energy: EnergyRules = EnergyRules()
    combat: CombatRules = CombatRules()
    opponents: OpponentRules = OpponentRules()

    def flagship_hull(self, difficulty: Difficulty) -> int:
        return self.combat.base_flagship_hull + (
            difficulty.step * self.combat.flagship_hull_per_difficulty
        )


DEFAULT_RULES = RulesConfig()
