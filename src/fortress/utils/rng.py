"""Deterministic Random Number Generator (RNG) for Space Fortress.

Every random decision the rules engine makes (deck shuffles, opponent fleet
selection, initiative tiebreaks) is seeded from the battle it belongs to,
so the decider stays a pure function:
- Reproducibility: Same seed always produces same results
- Replay safety: The outcome is written into the event, never re-rolled
- Audit trail: Every helper reports the seed it used

Examples:
    >>> seed = generate_seed("battle-7", "initiative")
    >>> result = random_choice(seed, ["player", "opponent"])
    >>> result["seed"]
    'battle-7:initiative'

    >>> shuffle_items(generate_seed("battle-7", "deck", "player"), ["a", "b", "c"])["seed"]
    'battle-7:deck:player'
"""

import hashlib
import random
from collections.abc import Sequence
from typing import Any


def generate_seed(battle_id: str, context: str, *qualifiers: str) -> str:
    """Generate a deterministic seed for one decision in a battle.

    Format: "battle_id:context[:qualifier...]"

    Args:
        battle_id: Identifier of the battle the decision belongs to
        context: What the randomness is for (e.g., 'deck', 'initiative')
        *qualifiers: Extra discriminators such as the side

    Returns:
        Seed string for RNG

    Examples:
        >>> generate_seed("b1", "deck", "opponent")
        'b1:deck:opponent'

    Raises:
        ValueError: If battle_id or context is empty
    """
    if not battle_id:
        raise ValueError("battle_id must be non-empty")
    if not context:
        raise ValueError("context must be non-empty")

    return ":".join((battle_id, context, *qualifiers))


def _seed_to_int(seed: str) -> int:
    """Convert seed string to a stable 64-bit integer for random.Random().

    Args:
        seed: Seed string

    Returns:
        64-bit integer derived from SHA-256(seed)
    """
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    # Use first 8 bytes for a 64-bit integer
    return int.from_bytes(digest[:8], "big", signed=False)


def random_choice(seed: str, options: Sequence[Any]) -> dict[str, Any]:
    """Choose randomly from options with deterministic seed.

    Args:
        seed: Deterministic seed string
        options: Options to choose from (must be non-empty)

    Returns:
        Dictionary containing:
            - choice: The selected option
            - index: Index of the selected option
            - seed: The seed used

    Raises:
        ValueError: If options is empty
    """
    if not options:
        raise ValueError("options list cannot be empty")

    rng = random.Random(_seed_to_int(seed))
    index = rng.randint(0, len(options) - 1)

    return {
        "choice": options[index],
        "index": index,
        "seed": seed,
    }


def shuffle_items(seed: str, items: Sequence[Any]) -> dict[str, Any]:
    """Return a seeded permutation of ``items`` (the input is left untouched).

    Returns:
        Dictionary containing:
            - items: The shuffled list
            - seed: The seed used
    """
    shuffled = list(items)
    random.Random(_seed_to_int(seed)).shuffle(shuffled)
    return {"items": shuffled, "seed": seed}


def weighted_sample(seed: str, weighted: Sequence[tuple[Any, int]], count: int) -> dict[str, Any]:
    """Draw ``count`` items with replacement, each with probability proportional to its weight.

    Raises:
        ValueError: If there is nothing to draw from or a weight is not positive
    """
    if not weighted:
        raise ValueError("weighted options cannot be empty")
    if any(weight <= 0 for _, weight in weighted):
        raise ValueError("weights must be positive")

    rng = random.Random(_seed_to_int(seed))
    options = [option for option, _ in weighted]
    weights = [weight for _, weight in weighted]
    return {"items": rng.choices(options, weights=weights, k=count), "seed": seed}
