"""Enumerations shared by the Space Fortress rules layer."""

from __future__ import annotations

from enum import StrEnum


class Side(StrEnum):
    """One of the two combatants in a tactical battle."""

    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Side:
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


class GameStatus(StrEnum):
    """Lifecycle of the whole game session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"


class GamePhase(StrEnum):
    """Where the player currently is in the game loop."""

    NOT_STARTED = "not_started"
    HUB = "hub"
    CARD_SELECTION = "card_selection"
    TACTICAL_BATTLE = "tactical_battle"
    AFTERMATH = "aftermath"


class BattlePhase(StrEnum):
    """Tactical battle state machine; ``RESOLVED`` is terminal."""

    SETUP = "setup"
    MULLIGAN = "mulligan"
    PLAYING = "playing"
    RESOLVED = "resolved"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def step(self) -> int:
        return {"easy": 0, "medium": 1, "hard": 2}[self.value]


class BattleOutcome(StrEnum):
    """Winner of a resolved battle (or a draw)."""

    PLAYER = "player"
    OPPONENT = "opponent"
    DRAW = "draw"


class VictoryCondition(StrEnum):
    FLAGSHIP_DESTROYED = "flagship_destroyed"
    TIMEOUT = "timeout"


class InitiativeReason(StrEnum):
    """Why a side acts first."""

    AGILITY = "agility"
    TIEBREAKER = "tiebreaker"


class StatusEffectType(StrEnum):
    """Temporary ship modifiers."""

    SHIELDED = "shielded"
    ENERGIZED = "energized"
    MARKED = "marked"
    WEAKENED = "weakened"
    STUNNED = "stunned"
    TAUNTING = "taunting"
    BURNING = "burning"
    UNSTABLE = "unstable"


class AbilityTrigger(StrEnum):
    ON_DEPLOY = "on_deploy"
    ON_ATTACK = "on_attack"
    ON_DEFEND = "on_defend"
    ON_DESTROYED = "on_destroyed"
    START_TURN = "start_turn"
    END_TURN = "end_turn"
    ACTIVATED = "activated"
    PASSIVE = "passive"


class TargetType(StrEnum):
    """Declared target of an ability."""

    SELF = "self"
    ENEMY = "enemy"
    ALLY = "ally"
    ALL_ENEMIES = "all_enemies"
    ALL_ALLIES = "all_allies"
    ADJACENT = "adjacent"
    FLAGSHIP = "flagship"
    ANY_SHIP = "any_ship"


class EffectType(StrEnum):
    DEAL_DAMAGE = "deal_damage"
    DAMAGE_FLAGSHIP = "damage_flagship"
    REPAIR = "repair"
    REPAIR_FLAGSHIP = "repair_flagship"
    APPLY_STATUS = "apply_status"
    ENERGY_DRAIN = "energy_drain"
    ENERGY_GAIN = "energy_gain"
    DRAW_CARD = "draw_card"
    BOOST_ATTACK = "boost_attack"
    BOOST_DEFENSE = "boost_defense"


class ConditionType(StrEnum):
    HULL_BELOW = "hull_below"
    HULL_ABOVE = "hull_above"
    ENERGY_AT_LEAST = "energy_at_least"
    SHIP_DESTROYED_THIS_TURN = "ship_destroyed_this_turn"
    FIRST_CARD_PLAYED = "first_card_played"


class LaneBypass(StrEnum):
    """Exceptions to the lane rule granted by an ability."""

    NONE = "none"
    CROSS_LANE = "cross_lane"
    FLAGSHIP_DIRECT = "flagship_direct"


class DamageSource(StrEnum):
    ATTACK = "attack"
    ABILITY = "ability"
    STATUS = "status"
    ATTRITION = "attrition"


class EnergySpendReason(StrEnum):
    DEPLOY = "deploy"
    ABILITY = "ability"
    MOVE = "move"
    DRAW = "draw"
    DRAINED = "drained"


class DiscardReason(StrEnum):
    HAND_LIMIT = "hand_limit"
    DESTROYED = "destroyed"


class RejectionReason(StrEnum):
    """Machine-readable reason attached to every rejected command."""

    UNKNOWN_COMMAND = "unknown_command"
    GAME_ALREADY_STARTED = "game_already_started"
    GAME_NOT_STARTED = "game_not_started"
    MISSING_IDENTITY = "missing_identity"
    WRONG_PHASE = "wrong_phase"
    NOT_YOUR_TURN = "not_your_turn"
    BATTLE_RESOLVED = "battle_resolved"
    UNKNOWN_OPPONENT = "unknown_opponent"
    DECK_SIZE_OUT_OF_RANGE = "deck_size_out_of_range"
    UNOWNED_CARD = "unowned_card"
    DUPLICATE_CARD = "duplicate_card"
    MULLIGAN_ALREADY_USED = "mulligan_already_used"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    INVALID_POSITION = "invalid_position"
    POSITION_OCCUPIED = "position_occupied"
    INSUFFICIENT_ENERGY = "insufficient_energy"
    SHIP_NOT_FOUND = "ship_not_found"
    SHIP_EXHAUSTED = "ship_exhausted"
    SHIP_STUNNED = "ship_stunned"
    INVALID_TARGET = "invalid_target"
    ABILITY_NOT_FOUND = "ability_not_found"
    ABILITY_NOT_ACTIVATABLE = "ability_not_activatable"
    ABILITY_ON_COOLDOWN = "ability_on_cooldown"
    DECK_EMPTY = "deck_empty"
    RESERVES_UNAVAILABLE = "reserves_unavailable"
    CONCURRENCY_CONFLICT = "concurrency_conflict"
