"""Weighted random selection helpers."""

import random
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


def weighted_index(rng: random.Random, weights: Sequence[float]) -> int | None:
    """Roulette-wheel sampling over cumulative weights.

    Returns None for an empty pool or a non-positive total.
    """
    positive = [max(0.0, w) for w in weights]
    total = sum(positive)
    if not positive or total <= 0:
        return None

    remaining = rng.random() * total
    for index, weight in enumerate(positive):
        remaining -= weight
        if remaining < 0:
            return index
    # Float residue lands on the last non-zero slot
    for index in range(len(positive) - 1, -1, -1):
        if positive[index] > 0:
            return index
    return None


def weighted_choice(
    rng: random.Random,
    candidates: Sequence[T],
    weight_fn: Callable[[T], float],
) -> T | None:
    """Pick one candidate weighted by ``weight_fn``; None when nothing qualifies."""
    if not candidates:
        return None
    index = weighted_index(rng, [weight_fn(c) for c in candidates])
    return candidates[index] if index is not None else None
