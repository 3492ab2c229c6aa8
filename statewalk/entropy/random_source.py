"""
Concrete entropy sources.

RandomSource draws from a seeded PRNG. ReplaySource feeds back a
recorded choice list, which is how a failing trial is reproduced.
"""

from __future__ import annotations
import random
from typing import Iterable

from ..errors import EntropyExhausted
from .source import EntropySource


class RandomSource(EntropySource):
    """
    Seeded pseudo-random source.

    Used for:
    - Normal trials
    - Tests that only need "some" randomness
    """

    def __init__(self, seed: int | None = None, max_draws: int | None = None):
        super().__init__(max_draws=max_draws)
        self.seed = seed
        self.rng = random.Random(seed)

    def _next_choice(self, n: int) -> int:
        return self.rng.randrange(n)


class ReplaySource(EntropySource):
    """
    Replays a fixed list of choices.

    Recorded values are reduced modulo the requested range, so a
    choice list stays replayable even if ranges change slightly.
    Running past the end of the list exhausts the source.
    """

    def __init__(self, choices: Iterable[int], max_draws: int | None = None):
        super().__init__(max_draws=max_draws)
        self.script = list(choices)
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.script) - self.position

    def _next_choice(self, n: int) -> int:
        if self.position >= len(self.script):
            raise EntropyExhausted(f"replay exhausted after {self.position} choices")

        value = self.script[self.position]
        self.position += 1
        return value % n
