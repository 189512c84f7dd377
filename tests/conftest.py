"""Pytest configuration and shared battle builders.

This adds the `src/` directory to `sys.path` so tests can import the
`fortress` package without requiring an editable install in CI, and
provides a ``builder`` fixture that assembles battle states from events.
"""

import sys
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from fortress.domain import events as ev  # noqa: E402
from fortress.domain.enums import Difficulty, InitiativeReason, Side  # noqa: E402
from fortress.domain.models import (  # noqa: E402
    BattleSettings,
    CardAbility,
    CombatantSetup,
    EmergencyReserve,
    GameState,
    InitiativeState,
    ShipProfile,
)
from fortress.domain.projector import rebuild  # noqa: E402

PLAYER_ID = "pilot-1"
BATTLE_ID = "battle-1"


def make_profile(
    card_id: str,
    *,
    attack: int = 3,
    defense: int = 2,
    hull: int = 5,
    agility: int = 3,
    energy_cost: int = 2,
    abilities: tuple[CardAbility, ...] = (),
) -> ShipProfile:
    return ShipProfile(
        card_id=card_id,
        name=card_id.replace("_", " ").title(),
        faction="test",
        attack=attack,
        defense=defense,
        hull=hull,
        agility=agility,
        energy_cost=energy_cost,
        abilities=abilities,
    )


class BattleBuilder:
    """Build battle streams directly from events, bypassing deck shuffles."""

    profile = staticmethod(make_profile)

    def start_event(
        self,
        player: list[ShipProfile],
        opponent: list[ShipProfile],
        *,
        first: Side = Side.PLAYER,
        opponent_hull: int = 12,
        round_limit: int = 5,
    ) -> ev.TacticalBattleStarted:
        initiative = InitiativeState(
            first_player=first,
            reason=InitiativeReason.AGILITY,
            player_agility=sum(p.agility for p in player[:4]),
            opponent_agility=sum(p.agility for p in opponent[:4]),
            second_player_bonus=1,
            reserve=EmergencyReserve(side=first.other, energy_grant=2, expires_on_turn=6),
        )
        return ev.TacticalBattleStarted(
            battle_id=BATTLE_ID,
            opponent_id="pirates",
            opponent_name="Pirate Raiders",
            difficulty=Difficulty.MEDIUM,
            settings=BattleSettings(
                round_limit=round_limit,
                max_hand_size=5,
                battlefield_slots=5,
                energy_maximum=10,
                energy_regeneration=2,
            ),
            player=CombatantSetup(
                deck=tuple(p.card_id for p in player),
                roster=tuple(player),
                flagship_hull=10,
                starting_energy=3 if first == Side.PLAYER else 4,
            ),
            opponent=CombatantSetup(
                deck=tuple(p.card_id for p in opponent),
                roster=tuple(opponent),
                flagship_hull=opponent_hull,
                starting_energy=3 if first == Side.OPPONENT else 4,
            ),
            initiative=initiative,
        )

    def lobby_events(self, player: list[ShipProfile]) -> list[ev.Event]:
        events: list[ev.Event] = [ev.GameStarted(player_id=PLAYER_ID)]
        events.extend(ev.CardGained(card=profile, source="starter") for profile in player)
        events.append(
            ev.BattleTriggered(
                battle_id=BATTLE_ID, opponent_id="pirates", difficulty=Difficulty.MEDIUM
            )
        )
        return events

    def playing_events(
        self,
        player: list[ShipProfile],
        opponent: list[ShipProfile],
        *,
        first: Side = Side.PLAYER,
        player_field: dict[int, str] | None = None,
        opponent_field: dict[int, str] | None = None,
        ready: bool = True,
        energy: dict[Side, int] | None = None,
        opponent_hull: int = 12,
        round_limit: int = 5,
        hand_size: int | None = None,
    ) -> list[ev.Event]:
        """Both sides draw, skip the mulligan, and ``first`` opens turn 1.

        ``hand_size`` limits how many cards each side draws; by default the
        whole deck ends up in hand.
        """

        start = self.start_event(
            player, opponent, first=first, opponent_hull=opponent_hull, round_limit=round_limit
        )
        events = [*self.lobby_events(player), start]
        for side, roster in ((Side.PLAYER, player), (Side.OPPONENT, opponent)):
            count = len(roster) if hand_size is None else hand_size
            events.extend(ev.CardDrawn(side=side, card_id=p.card_id) for p in roster[:count])
        events.append(ev.MulliganStarted(battle_id=BATTLE_ID))
        events.append(ev.MulliganResolved(side=Side.PLAYER))
        events.append(ev.MulliganResolved(side=Side.OPPONENT))
        opening = start.player if first == Side.PLAYER else start.opponent
        events.append(
            ev.TurnStarted(
                side=first,
                turn_number=1,
                energy_gained=0,
                new_energy_total=opening.starting_energy,
            )
        )
        profiles = {p.card_id: p for p in (*player, *opponent)}
        for side, field in ((Side.PLAYER, player_field), (Side.OPPONENT, opponent_field)):
            if not field:
                continue
            for position, card_id in sorted(field.items()):
                events.append(
                    ev.ShipDeployed(
                        side=side, card_id=card_id, position=position, profile=profiles[card_id]
                    )
                )
            if ready:
                events.append(ev.ShipsReadied(side=side, card_ids=tuple(field.values())))
        for side, total in (energy or {}).items():
            events.append(ev.EnergyGained(side=side, amount=0, new_total=total))
        return events

    def playing(self, player, opponent, **kwargs) -> GameState:
        return rebuild(self.playing_events(player, opponent, **kwargs))


@pytest.fixture
def builder() -> BattleBuilder:
    return BattleBuilder()
