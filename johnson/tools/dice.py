"""
Dice for Johnson.

Every random draw in the engine (damage rolls, picking which runner gets
hurt, runner generation) goes through a Dice instance so a seed makes a
whole contract reproducible.
"""

import random
from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass
class RollResult:
    """Result of a single roll."""
    sides: int
    value: int

    @property
    def is_max(self) -> bool:
        return self.value == self.sides


class Dice:
    """
    Seedable random source.

    Two Dice built with the same seed produce the same sequence of
    rolls and picks.
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def roll(self, sides: int) -> RollResult:
        """Roll a uniform integer in [1, sides]."""
        if sides < 1:
            raise ValueError(f"Cannot roll a die with {sides} sides")
        return RollResult(sides=sides, value=self._rng.randint(1, sides))

    def pick(self, items: Sequence[T]) -> T:
        """Pick one item uniformly at random."""
        if not items:
            raise ValueError("Cannot pick from an empty sequence")
        return self._rng.choice(items)

    def reseed(self, seed: int | None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)
