"""
Errors and Signals - Everything a trial can raise.

Two families:
1. Signals - recoverable control flow (an action is inapplicable,
   a step is rejected, the entropy source ran dry). The executor and
   the runner catch these; they never mean "bug found".
2. Failures - fatal outcomes that end a trial and get reported.

Assertion failures deliberately subclass AssertionError so that a
plain `assert` in an action or invariant check behaves the same as
ctx.fatal().
"""

from __future__ import annotations
from enum import Enum


NO_VALID_ACTION_MSG = "can't find a valid (non-skipped) action"


class FailureKind(Enum):
    """How a trial ended."""
    NONE = "none"
    ASSERTION = "assertion"
    NO_VALID_ACTION = "no_valid_action"
    TOO_MANY_REJECTIONS = "too_many_rejections"
    ENTROPY_EXHAUSTED = "entropy_exhausted"
    ERROR = "error"


class StatewalkError(Exception):
    """Base class for statewalk errors."""


class CatalogError(StatewalkError, ValueError):
    """Raised when an action catalog cannot be built from the given actions."""


# ============================================================================
# Signals
# ============================================================================

class Signal(Exception):
    """Base class for recoverable control-flow signals."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason)


class Inapplicable(Signal):
    """Raised by an action that does not apply to the current state."""


class StepRejected(Signal):
    """Raised by an action to discard the whole step at the trial level."""


class EntropyExhausted(Signal):
    """Raised by an entropy source that has no more draws to give."""


# ============================================================================
# Failures
# ============================================================================

class TrialFailure(StatewalkError):
    """A fatal, structural failure of a trial (not an assertion)."""
    kind: FailureKind = FailureKind.ERROR


class NoValidAction(TrialFailure):
    """Every attempt at a step was inapplicable after consuming entropy."""
    kind = FailureKind.NO_VALID_ACTION

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"{NO_VALID_ACTION_MSG} after {attempts} attempts")


class TooManyRejections(TrialFailure):
    """The trial rejected more steps than the configured limit."""
    kind = FailureKind.TOO_MANY_REJECTIONS

    def __init__(self, rejections: int):
        self.rejections = rejections
        super().__init__(f"too many rejected steps ({rejections})")


class AssertionFailure(AssertionError):
    """
    An assertion about the system under test did not hold.

    Carries every message recorded on the trial context, so deferred
    failures are not lost when several were recorded before surfacing.
    """

    def __init__(self, messages: list[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))
