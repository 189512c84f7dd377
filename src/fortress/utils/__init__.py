"""Utility functions for the Space Fortress rules engine."""

from fortress.utils.rng import (
    generate_seed,
    random_choice,
    shuffle_items,
    weighted_sample,
)

__all__ = [
    "generate_seed",
    "random_choice",
    "shuffle_items",
    "weighted_sample",
]
