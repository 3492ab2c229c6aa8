"""
Machine - Stateful action execution.

The machine is the runtime that:
1. Holds the catalog of actions
2. Draws one action per step from the entropy source
3. Retries inapplicable actions within a bounded budget
4. Interleaves steps with invariant checks
"""

from .action import Action, ActionCatalog, Outcome, OutcomeKind
from .catalog import ActionProvider, ActionRegistry, build_catalog
from .executor import ActionExecutor, run_action
from .repeat import RepeatDriver, StepBudget, repeat

__all__ = [
    "Action",
    "ActionCatalog",
    "Outcome",
    "OutcomeKind",
    "ActionProvider",
    "ActionRegistry",
    "build_catalog",
    "ActionExecutor",
    "run_action",
    "RepeatDriver",
    "StepBudget",
    "repeat",
]
