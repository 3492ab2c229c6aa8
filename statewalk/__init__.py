"""
Statewalk - Randomized stateful-action testing

Runs random sequences of named actions against a system under test,
checking invariants between steps. Provides:
- Action catalogs with explicit registration
- An executor that filters out inapplicable actions with bounded retries
- A repeat driver interleaving actions and invariant checks
- Entropy sources that record every choice for replay
"""

from loguru import logger

from .errors import (
    AssertionFailure,
    CatalogError,
    EntropyExhausted,
    FailureKind,
    Inapplicable,
    NoValidAction,
    StepRejected,
    TooManyRejections,
)
from .entropy import RandomSource, ReplaySource
from .machine import Action, ActionCatalog, ActionRegistry, repeat
from .session import TrialContext, TrialResult, run_trial
from .logging_utils import configure_logging
from .settings import RunSettings

__version__ = "0.1.0"

logger.disable("statewalk")

__all__ = [
    "AssertionFailure",
    "CatalogError",
    "EntropyExhausted",
    "FailureKind",
    "Inapplicable",
    "NoValidAction",
    "StepRejected",
    "TooManyRejections",
    "RandomSource",
    "ReplaySource",
    "Action",
    "ActionCatalog",
    "ActionRegistry",
    "repeat",
    "TrialContext",
    "TrialResult",
    "run_trial",
    "RunSettings",
    "configure_logging",
]
