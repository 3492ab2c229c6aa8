"""
Entropy Source - The interface trials draw randomness from.

An entropy source:
1. Hands out draws (every draw bumps a monotonic counter)
2. Records each raw choice, so a failing trial can be replayed
3. Records labeled groups of draws, so a shrinker can treat a
   group (e.g. "pick an action") as one unit

Implementations only provide _next_choice(); counting, limits and
recording live here.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from itertools import accumulate
from typing import Sequence, TypeVar

from ..errors import EntropyExhausted

T = TypeVar("T")

_FLOAT_BITS = 53


@dataclass
class DrawGroup:
    """A labeled span of draws [start, end)."""
    label: str
    start: int
    end: int | None = None
    user_facing: bool = False
    discarded: bool = False

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def size(self) -> int:
        return 0 if self.end is None else self.end - self.start


class EntropySource(ABC):
    """
    Abstract base class for entropy sources.

    Subclasses decide where choices come from (a PRNG, a recorded
    list, a shrinker's candidate). The draw counter only ever grows.
    """

    def __init__(self, max_draws: int | None = None):
        self.max_draws = max_draws
        self.choices: list[int] = []
        self.groups: list[DrawGroup] = []
        self._open: list[int] = []
        self._draws = 0

    @abstractmethod
    def _next_choice(self, n: int) -> int:
        """Return the next raw choice in range [0, n)."""

    @property
    def draws(self) -> int:
        """Number of draws consumed so far."""
        return self._draws

    @property
    def depth(self) -> int:
        """Number of currently open groups."""
        return len(self._open)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def begin_group(self, label: str, user_facing: bool = False) -> int:
        """Open a labeled group of draws and return its handle."""
        self.groups.append(DrawGroup(label=label, start=self._draws, user_facing=user_facing))
        handle = len(self.groups) - 1
        self._open.append(handle)
        return handle

    def end_group(self, handle: int, discard: bool = False) -> None:
        """
        Close an open group.

        Groups opened inside it and still open are closed first, as
        discarded. Unknown or already closed handles raise ValueError.
        """
        if handle not in self._open:
            raise ValueError(f"Group {handle} is not open")

        while self._open[-1] != handle:
            inner = self.groups[self._open.pop()]
            inner.end = self._draws
            inner.discarded = True

        self._open.pop()
        group = self.groups[handle]
        group.end = self._draws
        group.discarded = discard

    # ------------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------------

    def draw_below(self, n: int) -> int:
        """Draw an integer in range [0, n)."""
        if n < 1:
            raise ValueError(f"Cannot draw below {n}")
        if self.max_draws is not None and self._draws >= self.max_draws:
            raise EntropyExhausted(f"entropy source exhausted after {self._draws} draws")

        value = self._next_choice(n)
        self.choices.append(value)
        self._draws += 1
        return value

    def draw_int(self, lo: int, hi: int) -> int:
        """Draw an integer in the closed range [lo, hi]."""
        if hi < lo:
            raise ValueError(f"Empty range [{lo}, {hi}]")
        return lo + self.draw_below(hi - lo + 1)

    def draw_float(self) -> float:
        """Draw a float in [0, 1)."""
        return self.draw_below(1 << _FLOAT_BITS) / (1 << _FLOAT_BITS)

    def draw_bool(self, p: float = 0.5) -> bool:
        """Draw True with probability p."""
        if p == 0.5:
            return self.draw_below(2) == 1
        return self.draw_float() < p

    def sample(self, items: Sequence[T], weights: Sequence[float] | None = None) -> T:
        """
        Pick one item, uniformly or by weight.

        Always consumes exactly one draw.
        """
        if not items:
            raise ValueError("Cannot sample from an empty sequence")

        if weights is None:
            return items[self.draw_below(len(items))]

        if len(weights) != len(items):
            raise ValueError("weights and items differ in length")
        if any(w < 0 for w in weights):
            raise ValueError("weights must be non-negative")

        cumulative = list(accumulate(weights))
        total = cumulative[-1]
        if total <= 0:
            raise ValueError("weights must not all be zero")

        point = self.draw_float() * total
        return items[bisect_right(cumulative, point)]
