"""
Trial Context - Per-trial mutable state handed to every action.

A context:
- Owns the entropy source for the trial (never shared)
- Exposes the draw counter as a read-only query
- Accumulates deferred failures (ctx.error) until they are surfaced
- Records the names of actions that ran to completion
"""

from __future__ import annotations
from typing import Any, Sequence, TypeVar

from loguru import logger

from ..entropy import EntropySource
from ..errors import AssertionFailure, Inapplicable, StepRejected

T = TypeVar("T")


class TrialContext:
    """
    Everything an action or invariant check may touch during a trial.

    Usage:
        def push(ctx: TrialContext) -> None:
            if stack.full:
                ctx.skip("stack is full")
            value = ctx.draw_int(0, 100)
            stack.push(value)
            if stack.top != value:
                ctx.error(f"pushed {value}, top is {stack.top}")
    """

    def __init__(self, source: EntropySource):
        self.source = source
        self.failures: list[str] = []
        self.steps: list[str] = []

    def __repr__(self) -> str:
        return f"TrialContext(draws={self.draws}, steps={len(self.steps)}, failed={self.failed})"

    # ------------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------------

    @property
    def draws(self) -> int:
        return self.source.draws

    def draw_int(self, lo: int, hi: int) -> int:
        return self.source.draw_int(lo, hi)

    def draw_bool(self, p: float = 0.5) -> bool:
        return self.source.draw_bool(p)

    def draw_float(self) -> float:
        return self.source.draw_float()

    def sample(self, items: Sequence[T], weights: Sequence[float] | None = None, label: str = "") -> T:
        """Pick one of items via the entropy source."""
        value = self.source.sample(items, weights)
        if label:
            logger.trace("trial.draw label={} value={!r}", label, value)
        return value

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def skip(self, reason: str = "") -> None:
        """Declare the running action inapplicable to the current state."""
        raise Inapplicable(reason)

    def assume(self, condition: Any, reason: str = "assumption failed") -> None:
        """Skip the running action unless condition holds."""
        if not condition:
            raise Inapplicable(reason)

    def reject(self, reason: str = "") -> None:
        """Discard the current step entirely."""
        raise StepRejected(reason)

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def error(self, message: str) -> None:
        """Record a failure without stopping the action."""
        logger.debug("trial.error message={}", message)
        self.failures.append(message)

    def fatal(self, message: str) -> None:
        """Record a failure and stop the trial now."""
        self.failures.append(message)
        raise AssertionFailure(self.failures)

    def fail_on_error(self) -> None:
        """Raise if any failure was recorded."""
        if self.failures:
            raise AssertionFailure(self.failures)

    def note(self, message: str) -> None:
        logger.info("trial.note step={} message={}", len(self.steps), message)
