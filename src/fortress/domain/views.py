"""Read projections: JSON-friendly views derived from :class:`GameState`.

Views are disposable; nothing reads them back into the engine.
"""

from __future__ import annotations

from .enums import Side
from .models import CombatantState, GameState, ShipState, TacticalBattleState


def ship_view(ship: ShipState) -> dict[str, object]:
    return {
        "card_id": ship.card_id,
        "name": ship.profile.name,
        "position": ship.position,
        "attack": ship.profile.attack,
        "defense": ship.profile.defense,
        "hull": ship.current_hull,
        "max_hull": ship.max_hull,
        "exhausted": ship.is_exhausted,
        "statuses": [
            {"type": str(effect.type), "remaining": effect.remaining, "stacks": effect.stacks}
            for effect in ship.status_effects
        ],
        "cooldowns": dict(ship.cooldowns),
    }


def combatant_view(combatant: CombatantState, *, reveal_hand: bool) -> dict[str, object]:
    """Summarise one side; the hand is only listed for the viewer's own side."""

    return {
        "side": str(combatant.side),
        "flagship": {
            "hull": combatant.flagship.current_hull,
            "max_hull": combatant.flagship.max_hull,
        },
        "energy": {
            "current": combatant.energy.current,
            "maximum": combatant.energy.maximum,
            "regeneration": combatant.energy.regeneration,
        },
        "battlefield": [
            ship_view(ship) if ship is not None else None for ship in combatant.battlefield
        ],
        "hand": list(combatant.hand) if reveal_hand else None,
        "hand_size": len(combatant.hand),
        "deck_size": len(combatant.deck),
        "discard": list(combatant.discard),
        "ships_lost": combatant.ships_lost,
    }


def battle_view(battle: TacticalBattleState, viewer: Side = Side.PLAYER) -> dict[str, object]:
    reserve = battle.initiative.reserve
    return {
        "battle_id": battle.battle_id,
        "quest_id": battle.quest_id,
        "opponent_id": battle.opponent_id,
        "opponent_name": battle.opponent_name,
        "difficulty": str(battle.difficulty),
        "phase": str(battle.phase),
        "turn_number": battle.turn_number,
        "round_number": battle.round_number,
        "round_limit": battle.settings.round_limit,
        "active_player": str(battle.active_player),
        "initiative": {
            "first_player": str(battle.initiative.first_player),
            "reason": str(battle.initiative.reason),
            "player_agility": battle.initiative.player_agility,
            "opponent_agility": battle.initiative.opponent_agility,
            "reserve": {
                "side": str(reserve.side),
                "energy_grant": reserve.energy_grant,
                "expires_on_turn": reserve.expires_on_turn,
                "available": reserve.available,
            },
        },
        "player": combatant_view(battle.player, reveal_hand=viewer == Side.PLAYER),
        "opponent": combatant_view(battle.opponent, reveal_hand=viewer == Side.OPPONENT),
        "winner": str(battle.winner) if battle.winner is not None else None,
        "victory_condition": (
            str(battle.victory_condition) if battle.victory_condition is not None else None
        ),
    }


def game_summary(state: GameState) -> dict[str, object]:
    pending = state.pending_battle
    return {
        "player_id": state.player_id,
        "status": str(state.status),
        "phase": str(state.phase),
        "owned_cards": sorted(state.owned_cards),
        "pending_battle": (
            {
                "battle_id": pending.battle_id,
                "quest_id": pending.quest_id,
                "opponent_id": pending.opponent_id,
                "difficulty": str(pending.difficulty),
            }
            if pending is not None
            else None
        ),
        "battle_id": state.battle.battle_id if state.battle is not None else None,
        "stats": {
            "battles_won": state.stats.battles_won,
            "battles_lost": state.stats.battles_lost,
            "battles_drawn": state.stats.battles_drawn,
            "cards_acquired": state.stats.cards_acquired,
        },
    }
