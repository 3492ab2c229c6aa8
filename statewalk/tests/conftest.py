"""
Pytest fixtures for statewalk tests.
"""

import pytest
from typing import Callable

from ..entropy import RandomSource, ReplaySource
from ..machine.action import Action
from ..session.context import TrialContext


class CallLog:
    """Counts calls per action name, in order."""

    def __init__(self):
        self.calls: list[str] = []

    def count(self, name: str) -> int:
        return self.calls.count(name)

    def succeed(self, name: str) -> Action:
        def run(ctx):
            self.calls.append(name)
        return Action(name=name, run=run)

    def free_skip(self, name: str) -> Action:
        """Inapplicable before drawing anything."""
        def run(ctx):
            self.calls.append(name)
            ctx.skip("precondition")
        return Action(name=name, run=run)

    def costly_skip(self, name: str) -> Action:
        """Inapplicable after one draw."""
        def run(ctx):
            self.calls.append(name)
            ctx.draw_int(0, 9)
            ctx.skip("drew, then gave up")
        return Action(name=name, run=run)

    def raising(self, name: str, error: BaseException) -> Action:
        def run(ctx):
            self.calls.append(name)
            raise error
        return Action(name=name, run=run)


@pytest.fixture
def log() -> CallLog:
    return CallLog()


@pytest.fixture
def random_ctx() -> TrialContext:
    """Context over a seeded random source."""
    return TrialContext(RandomSource(seed=1234))


@pytest.fixture
def replay_ctx() -> Callable[[list[int]], TrialContext]:
    """Factory for contexts over a scripted choice list."""
    def make(choices: list[int]) -> TrialContext:
        return TrialContext(ReplaySource(choices))
    return make
