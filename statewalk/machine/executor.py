"""
Action Executor - Draws, runs and classifies one action per step.

One step:
1. Open an "action" group on the entropy source
2. Sample an action from the catalog
3. Run it, remembering the draw counter at the start
4. Classify the outcome:
   - completed     -> close the group, accept the step
   - inapplicable  -> close the group (discarded) and try again;
                      attempts that consumed entropy and attempts
                      that did not have separate budgets
   - rejected      -> close the group, reject the step
   - anything else -> close the group, re-raise unchanged

A step that burns through its retry budget raises NoValidAction.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from .action import Action, ActionCatalog, Outcome, OutcomeKind
from ..errors import Inapplicable, NoValidAction, StepRejected
from ..settings import DEFAULT_MAX_COSTLY_RETRIES, DEFAULT_MAX_FREE_RETRIES

if TYPE_CHECKING:
    from ..session.context import TrialContext


ACTION_LABEL = "action"


def run_action(action: Action, ctx: TrialContext) -> Outcome:
    """
    Run one action against the context and classify what happened.

    Deferred failures recorded by the action are surfaced right after
    it returns, so they end up as a FATAL outcome like any assertion.
    """
    draws_before = ctx.draws
    try:
        action(ctx)
        ctx.fail_on_error()
    except Inapplicable as e:
        return Outcome.inapplicable(action, ctx.draws != draws_before, e.reason)
    except StepRejected as e:
        return Outcome.rejected(action, e.reason)
    except Exception as e:
        return Outcome.fatal(action, e)

    return Outcome.completed_by(action)


@dataclass
class ActionExecutor:
    """
    Runs one step of a state machine trial.

    Stateless between steps; the retry counters live in execute_step.
    """
    catalog: ActionCatalog
    max_costly_retries: int = DEFAULT_MAX_COSTLY_RETRIES
    max_free_retries: int = DEFAULT_MAX_FREE_RETRIES

    def execute_step(self, ctx: TrialContext) -> bool:
        """
        Run one valid action to completion.

        Returns True when an action completed, False when the step was
        rejected at the trial level. Raises NoValidAction when either the
        costly or the free retry budget runs out, and re-raises any other
        error from the action body.
        """
        costly = 0
        free = 0

        while True:
            outcome = self._attempt(ctx)

            if outcome.kind == OutcomeKind.COMPLETED:
                ctx.steps.append(outcome.action.name)
                logger.debug(
                    "trial.step n={} action={} free_retries={} costly_retries={}",
                    len(ctx.steps), outcome.action.name, free, costly,
                )
                return True

            if outcome.kind == OutcomeKind.REJECTED:
                logger.debug("trial.step.rejected action={} reason={}", outcome.action.name, outcome.reason)
                return False

            if outcome.kind == OutcomeKind.FATAL:
                logger.debug("trial.step.fatal action={} error={}", outcome.action.name, outcome.reason)
                outcome.raise_if_fatal()

            if outcome.is_free_skip:
                free += 1
                logger.trace("trial.retry.free action={} reason={}", outcome.action.name, outcome.reason)
                if free >= self.max_free_retries:
                    raise NoValidAction(free + costly)
                continue

            costly += 1
            logger.trace(
                "trial.retry.costly action={} attempt={} reason={}",
                outcome.action.name, costly, outcome.reason,
            )
            if costly >= self.max_costly_retries:
                raise NoValidAction(costly + free)

    def _attempt(self, ctx: TrialContext) -> Outcome:
        """Draw and run a single action inside its own group."""
        source = ctx.source
        handle = source.begin_group(ACTION_LABEL, user_facing=False)
        discard = False
        try:
            action = ctx.sample(self.catalog.actions, label=ACTION_LABEL)
            outcome = run_action(action, ctx)
            discard = outcome.kind in (OutcomeKind.INAPPLICABLE, OutcomeKind.REJECTED)
            return outcome
        finally:
            source.end_group(handle, discard=discard)
