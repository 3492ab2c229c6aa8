"""
Action System - Actions, the action catalog, and outcomes.

Actions are:
1. Named (the name is what shows up in step logs)
2. Immutable once constructed
3. Run against a TrialContext

Running an action produces an Outcome, a tagged result that
tells the executor whether to accept the step, retry it,
reject it, or unwind the trial.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Mapping

from ..errors import CatalogError

if TYPE_CHECKING:
    from ..session.context import TrialContext
    from .catalog import ActionProvider

ActionFunc = Callable[["TrialContext"], None]


class OutcomeKind(Enum):
    """Kinds of outcomes of running one action."""
    COMPLETED = "completed"
    INAPPLICABLE = "inapplicable"  # Skip me, try another
    REJECTED = "rejected"  # Discard the whole step
    FATAL = "fatal"  # Unwind the trial


@dataclass(frozen=True)
class Action:
    """A named operation that may run against the system under test."""
    name: str
    run: ActionFunc = field(compare=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise CatalogError("Action name must be a non-empty string")
        if not callable(self.run):
            raise CatalogError(f"Action '{self.name}' is not callable")

    def __call__(self, ctx: TrialContext) -> None:
        self.run(ctx)

    def __repr__(self) -> str:
        return repr(self.name)


@dataclass(frozen=True)
class Outcome:
    """
    Result of running one action.

    consumed_entropy is only meaningful for INAPPLICABLE: it tells
    whether the action drew anything before bailing out.
    """
    kind: OutcomeKind
    action: Action
    consumed_entropy: bool = False
    reason: str | None = None
    error: BaseException | None = None

    @property
    def completed(self) -> bool:
        return self.kind == OutcomeKind.COMPLETED

    @property
    def is_free_skip(self) -> bool:
        return self.kind == OutcomeKind.INAPPLICABLE and not self.consumed_entropy

    @classmethod
    def completed_by(cls, action: Action) -> Outcome:
        return cls(kind=OutcomeKind.COMPLETED, action=action)

    @classmethod
    def inapplicable(cls, action: Action, consumed_entropy: bool, reason: str = "") -> Outcome:
        return cls(
            kind=OutcomeKind.INAPPLICABLE,
            action=action,
            consumed_entropy=consumed_entropy,
            reason=reason or None,
        )

    @classmethod
    def rejected(cls, action: Action, reason: str = "") -> Outcome:
        return cls(kind=OutcomeKind.REJECTED, action=action, reason=reason or None)

    @classmethod
    def fatal(cls, action: Action, error: BaseException) -> Outcome:
        return cls(kind=OutcomeKind.FATAL, action=action, reason=str(error), error=error)

    def raise_if_fatal(self) -> None:
        """Re-raise the original error of a FATAL outcome."""
        if self.kind == OutcomeKind.FATAL and self.error is not None:
            raise self.error


class ActionCatalog:
    """
    An immutable, non-empty, ordered collection of actions.

    Recreated for every state machine test; holds references to the
    action callables, never copies of them.
    """

    def __init__(self, actions: Iterable[Action]):
        self._actions = tuple(actions)
        if not self._actions:
            raise CatalogError("state machine has no actions specified")
        for action in self._actions:
            if not isinstance(action, Action):
                raise CatalogError(f"Not an Action: {action!r}")

    @property
    def actions(self) -> tuple[Action, ...]:
        return self._actions

    @property
    def names(self) -> list[str]:
        return [action.name for action in self._actions]

    def get(self, name: str) -> Action | None:
        for action in self._actions:
            if action.name == name:
                return action
        return None

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __getitem__(self, index: int) -> Action:
        return self._actions[index]

    def __repr__(self) -> str:
        return f"ActionCatalog({self.names!r})"

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, ActionFunc]]) -> ActionCatalog:
        """Build a catalog from (name, function) pairs."""
        return cls(Action(name=name, run=func) for name, func in pairs)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, ActionFunc]) -> ActionCatalog:
        """Build a catalog from a name -> function mapping, in insertion order."""
        return cls.from_pairs(mapping.items())

    @classmethod
    def from_provider(cls, provider: ActionProvider) -> ActionCatalog:
        """Build a catalog from an object that enumerates its own actions."""
        enumerate_actions = getattr(provider, "actions", None)
        if not callable(enumerate_actions):
            raise CatalogError(f"{type(provider).__name__} does not provide actions()")

        pairs = list(enumerate_actions())
        if not pairs:
            raise CatalogError(
                f"state machine of type {type(provider).__name__} has no actions specified"
            )
        return cls.from_pairs(pairs)
