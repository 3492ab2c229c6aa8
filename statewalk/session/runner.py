"""
Trial Runner - Runs one trial and reports how it ended.

The runner:
1. Builds the catalog (configuration errors raise right here)
2. Creates an entropy source and a trial context
3. Drives the trial with repeat()
4. Folds the way it ended into a TrialResult

The recorded choices in the result are enough to replay the trial
with a ReplaySource.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .context import TrialContext
from ..entropy import DrawGroup, EntropySource, RandomSource
from ..errors import EntropyExhausted, FailureKind, TrialFailure
from ..machine.repeat import CheckFunc, RepeatDriver
from ..settings import RunSettings


@dataclass
class TrialResult:
    """
    Result of running one trial.

    Contains:
    - Whether the trial passed
    - How it failed, if it did
    - The actions that completed, in order
    - The raw choices and draw groups, for replay and shrinking
    """
    success: bool
    failure_kind: FailureKind = FailureKind.NONE
    message: str | None = None
    error: BaseException | None = None

    steps: list[str] = field(default_factory=list)
    rejections: int = 0
    draws: int = 0
    choices: list[int] = field(default_factory=list)
    groups: list[DrawGroup] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return not self.success

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        error: BaseException,
        ctx: TrialContext,
        rejections: int = 0,
    ) -> TrialResult:
        """Create a failure result from the exception that ended the trial."""
        return cls(
            success=False,
            failure_kind=kind,
            message=str(error) or type(error).__name__,
            error=error,
            steps=list(ctx.steps),
            rejections=rejections,
            draws=ctx.draws,
            choices=list(ctx.source.choices),
            groups=list(ctx.source.groups),
        )


def classify_failure(error: BaseException) -> FailureKind:
    """Map the exception that ended a trial to a FailureKind."""
    if isinstance(error, TrialFailure):
        return error.kind
    if isinstance(error, EntropyExhausted):
        return FailureKind.ENTROPY_EXHAUSTED
    if isinstance(error, AssertionError):
        return FailureKind.ASSERTION
    return FailureKind.ERROR


def run_trial(
    actions: Any,
    check: CheckFunc | None = None,
    *,
    seed: int | None = None,
    settings: RunSettings | None = None,
    source: EntropySource | None = None,
) -> TrialResult:
    """
    Run a single state machine trial.

    Raises CatalogError for an unusable action set; every other way
    the trial can end is reported in the returned TrialResult.
    """
    settings = settings or RunSettings()
    driver = RepeatDriver(actions, check=check, settings=settings)

    if source is None:
        source = RandomSource(seed=seed, max_draws=settings.max_draws)
    ctx = TrialContext(source)

    try:
        budget = driver.run(ctx)
    except Exception as e:
        kind = classify_failure(e)
        logger.info(
            "trial.failed kind={} steps={} draws={} error={}",
            kind.value, len(ctx.steps), ctx.draws, e,
        )
        rejections = driver.budget.rejections if driver.budget else 0
        return TrialResult.failure(kind, e, ctx, rejections=rejections)

    logger.info("trial.passed steps={} draws={}", budget.accepted, ctx.draws)
    return TrialResult(
        success=True,
        steps=list(ctx.steps),
        rejections=budget.rejections,
        draws=ctx.draws,
        choices=list(source.choices),
        groups=list(source.groups),
    )
