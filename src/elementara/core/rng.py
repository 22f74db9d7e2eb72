"""Deterministic RNG wrapper built on top of random.Random."""
from __future__ import annotations

from random import Random
from typing import List, Sequence, TypeVar

T_co = TypeVar("T_co")


class RNG:
    """Wrapper around random.Random that provides the game's dice helpers."""

    def __init__(self, seed: int | None = None) -> None:
        self._random = Random(seed)

    def randint(self, a: int, b: int) -> int:
        """Return a random integer N such that a <= N <= b."""
        return self._random.randint(a, b)

    def roll_die(self, sides: int = 6) -> int:
        """Roll a fair die with faces 1..sides."""
        return self._random.randint(1, sides)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self._random.random() < probability

    def choice(self, seq: Sequence[T_co]) -> T_co:
        """Return a random element from the non-empty sequence."""
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return self._random.choice(seq)

    def sample(self, seq: Sequence[T_co], count: int) -> List[T_co]:
        """Draw ``count`` distinct positions from ``seq`` by shuffling a copy."""
        if count > len(seq):
            raise ValueError(f"Cannot draw {count} items from a pool of {len(seq)}.")
        pool = list(seq)
        self._random.shuffle(pool)
        return pool[:count]
