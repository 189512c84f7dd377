"""Tests for the deterministic RNG helpers.

Tests cover:
- Determinism (same seed -> same result)
- Variety (different seeds -> different results)
- Validation of empty inputs and bad weights
- Audit trail structure
- Property-based tests
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fortress.utils.rng import (
    generate_seed,
    random_choice,
    shuffle_items,
    weighted_sample,
)


class TestGenerateSeed:
    """Tests for generate_seed function."""

    def test_basic_seed_generation(self):
        assert generate_seed("battle-1", "deck", "player") == "battle-1:deck:player"

    def test_qualifiers_are_optional(self):
        assert generate_seed("battle-1", "initiative") == "battle-1:initiative"

    def test_different_parameters_produce_different_seeds(self):
        seeds = {
            generate_seed("b1", "deck", "player"),
            generate_seed("b1", "deck", "opponent"),
            generate_seed("b2", "deck", "player"),
            generate_seed("b1", "fleet", "player"),
        }
        assert len(seeds) == 4, "All seeds should be unique"

    def test_empty_battle_id_raises_error(self):
        with pytest.raises(ValueError, match="battle_id must be non-empty"):
            generate_seed("", "deck")

    def test_empty_context_raises_error(self):
        with pytest.raises(ValueError, match="context must be non-empty"):
            generate_seed("b1", "")

    @given(
        battle_id=st.text(min_size=1),
        context=st.text(min_size=1),
        qualifier=st.text(),
    )
    def test_seed_generation_properties(self, battle_id, context, qualifier):
        """Property-based test: seed generation always produces valid format."""
        assert generate_seed(battle_id, context, qualifier) == f"{battle_id}:{context}:{qualifier}"


class TestRandomChoice:
    """Tests for random_choice function."""

    def test_determinism(self):
        seed = generate_seed("b1", "initiative")
        assert random_choice(seed, ["player", "opponent"]) == random_choice(
            seed, ["player", "opponent"]
        )

    def test_audit_trail(self):
        result = random_choice("b1:pick", ["a", "b", "c"])
        assert result["choice"] == ["a", "b", "c"][result["index"]]
        assert result["seed"] == "b1:pick"

    def test_empty_options_raise(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            random_choice("b1:pick", [])

    def test_variety_across_seeds(self):
        picks = {random_choice(f"b{i}:pick", ["a", "b"])["choice"] for i in range(32)}
        assert picks == {"a", "b"}


class TestShuffleItems:
    """Tests for shuffle_items function."""

    def test_is_a_permutation(self):
        items = [f"card_{i}" for i in range(10)]
        shuffled = shuffle_items("b1:deck:player", items)["items"]
        assert sorted(shuffled) == sorted(items)

    def test_input_is_not_mutated(self):
        items = ["a", "b", "c", "d"]
        shuffle_items("b1:deck", items)
        assert items == ["a", "b", "c", "d"]

    def test_same_seed_same_order(self):
        items = list(range(20))
        assert shuffle_items("b1:deck", items) == shuffle_items("b1:deck", items)

    def test_different_seeds_change_the_order(self):
        items = list(range(20))
        orders = {tuple(shuffle_items(f"b{i}:deck", items)["items"]) for i in range(5)}
        assert len(orders) > 1


class TestWeightedSample:
    """Tests for weighted_sample function."""

    def test_sample_size_and_members(self):
        result = weighted_sample("b1:fleet", [("skiff", 3), ("hulk", 1)], 8)
        assert len(result["items"]) == 8
        assert set(result["items"]) <= {"skiff", "hulk"}
        assert result["seed"] == "b1:fleet"

    def test_heavier_weights_dominate(self):
        items = weighted_sample("b1:fleet", [("common", 99), ("rare", 1)], 200)["items"]
        assert items.count("common") > items.count("rare")

    def test_empty_options_raise(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            weighted_sample("b1:fleet", [], 3)

    def test_non_positive_weight_raises(self):
        with pytest.raises(ValueError, match="weights must be positive"):
            weighted_sample("b1:fleet", [("a", 1), ("b", 0)], 3)
