"""Content catalog: static card and opponent-fleet lookups.

The decider consults the catalog only while building a new event; the
projector never does.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from .models import CardAbility, ShipProfile


@dataclass(frozen=True, slots=True)
class FleetDesign:
    """Template an opponent ship is stamped from."""

    design_id: str
    name: str
    attack: int
    defense: int
    hull: int
    agility: int
    energy_cost: int
    weight: int = 1
    abilities: tuple[CardAbility, ...] = ()


@dataclass(frozen=True, slots=True)
class OpponentFleet:
    opponent_id: str
    name: str
    faction: str
    designs: tuple[FleetDesign, ...]
    description: str = ""


class ContentCatalog(Protocol):
    """Read-only lookup used when constructing fat events."""

    def card(self, card_id: str) -> ShipProfile | None:
        """Return the base profile for a player-acquirable card."""
        ...

    def starter_cards(self) -> tuple[ShipProfile, ...]:
        """Cards granted when a new game starts."""
        ...

    def fleet(self, opponent_id: str) -> OpponentFleet | None:
        """Return the opponent fleet registered under ``opponent_id``."""
        ...


class InMemoryCatalog:
    """Dictionary-backed :class:`ContentCatalog`."""

    def __init__(
        self,
        cards: Iterable[ShipProfile],
        fleets: Iterable[OpponentFleet],
        starter_ids: Iterable[str] = (),
    ) -> None:
        self._cards = {card.card_id: card for card in cards}
        self._fleets = {fleet.opponent_id: fleet for fleet in fleets}
        self._starter_ids = tuple(starter_ids)
        missing = [card_id for card_id in self._starter_ids if card_id not in self._cards]
        if missing:
            raise ValueError(f"starter cards missing from catalog: {missing}")

    def card(self, card_id: str) -> ShipProfile | None:
        return self._cards.get(card_id)

    def starter_cards(self) -> tuple[ShipProfile, ...]:
        return tuple(self._cards[card_id] for card_id in self._starter_ids)

    def fleet(self, opponent_id: str) -> OpponentFleet | None:
        return self._fleets.get(opponent_id)

    def card_ids(self) -> list[str]:
        return sorted(self._cards)


@lru_cache
def default_catalog() -> InMemoryCatalog:
    """Catalog built from the bundled card content."""

    from fortress.content import cards

    return InMemoryCatalog(cards.PLAYER_CARDS, cards.OPPONENT_FLEETS, cards.STARTER_CARD_IDS)
