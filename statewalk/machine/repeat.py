"""
Repeat Driver - Runs a random sequence of actions (a "state machine" test).

The loop:
1. Run the invariant check once
2. Execute one step (one valid action)
3. Run the invariant check again
4. Repeat until the step budget is spent

Rejected steps do not count toward the budget, but too many of
them end the trial. Any fatal error unwinds immediately, skipping
the remaining steps and checks.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger

from .catalog import build_catalog
from .executor import ActionExecutor
from ..errors import TooManyRejections
from ..settings import DEFAULT_MAX_REJECTIONS, RunSettings

if TYPE_CHECKING:
    from ..session.context import TrialContext

CheckFunc = Callable[["TrialContext"], None]


@dataclass
class StepBudget:
    """Counts accepted and rejected steps for one trial."""
    steps: int
    max_rejections: int = DEFAULT_MAX_REJECTIONS
    accepted: int = 0
    rejections: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.steps - self.accepted)

    def more(self) -> bool:
        return self.accepted < self.steps

    def accept(self) -> None:
        self.accepted += 1

    def reject(self) -> None:
        self.rejections += 1
        if self.rejections > self.max_rejections:
            raise TooManyRejections(self.rejections)


class RepeatDriver:
    """
    Drives one trial: checks and actions, strictly interleaved.

    Usage:
        driver = RepeatDriver(catalog, check=check_invariants)
        driver.run(ctx)
    """

    def __init__(
        self,
        actions: Any,
        check: CheckFunc | None = None,
        settings: RunSettings | None = None,
    ):
        self.settings = settings or RunSettings()
        self.catalog = build_catalog(actions)
        self.check = check
        self.executor = ActionExecutor(
            catalog=self.catalog,
            max_costly_retries=self.settings.max_costly_retries,
            max_free_retries=self.settings.max_free_retries,
        )
        self.checks_run = 0
        self.budget: StepBudget | None = None

    def new_budget(self) -> StepBudget:
        return StepBudget(
            steps=self.settings.effective_steps,
            max_rejections=self.settings.max_rejections,
        )

    def run(self, ctx: TrialContext) -> StepBudget:
        """Run the trial. Returns the spent budget; raises on any fatal failure."""
        budget = self.budget = self.new_budget()
        logger.debug(
            "trial.start steps={} actions={}", budget.steps, len(self.catalog)
        )

        self._run_check(ctx)
        while budget.more():
            if self.executor.execute_step(ctx):
                budget.accept()
                self._run_check(ctx)
            else:
                budget.reject()

        logger.debug(
            "trial.finished steps={} rejections={} draws={}",
            budget.accepted, budget.rejections, ctx.draws,
        )
        return budget

    def _run_check(self, ctx: TrialContext) -> None:
        if self.check is not None:
            self.checks_run += 1
            self.check(ctx)
        ctx.fail_on_error()


def repeat(
    ctx: TrialContext,
    actions: Any,
    check: CheckFunc | None = None,
    settings: RunSettings | None = None,
) -> StepBudget:
    """
    Execute a random sequence of actions against ctx.

    check, if set, runs once initially and after every action;
    it should contain invariant checks.
    """
    return RepeatDriver(actions, check=check, settings=settings).run(ctx)
