"""
Catalog Construction - Turn user-supplied actions into an ActionCatalog.

Actions are registered explicitly, never discovered by introspection:
- (name, function) pairs or a name -> function mapping
- An object implementing ActionProvider (it lists its own actions)
- An ActionRegistry filled with the @registry.action decorator

An empty result is a configuration error and raises CatalogError
before any trial starts.
"""

from __future__ import annotations
from functools import partial
from typing import Any, Callable, Iterable, Mapping, Protocol, runtime_checkable

from .action import Action, ActionCatalog, ActionFunc
from ..errors import CatalogError


@runtime_checkable
class ActionProvider(Protocol):
    """Something that can enumerate its own actions."""

    def actions(self) -> Iterable[tuple[str, ActionFunc]]: ...


class ActionRegistry:
    """
    Collects actions through a decorator.

    Usage (plain functions):
        registry = ActionRegistry()

        @registry.action
        def push(ctx): ...

        @registry.action("pop-empty")
        def pop(ctx): ...

        catalog = registry.catalog()

    Usage (methods):
        class Stack:
            registry = ActionRegistry()

            @registry.action
            def push(self, ctx): ...

        catalog = Stack.registry.bind(Stack())
    """

    def __init__(self) -> None:
        self._entries: list[tuple[str, Callable[..., None]]] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._entries]

    def register(self, name: str, func: Callable[..., None]) -> None:
        if not callable(func):
            raise CatalogError(f"Action '{name}' is not callable")
        self._entries.append((name, func))

    def action(self, func: Callable[..., None] | str | None = None, *, name: str | None = None):
        """
        Register a function as an action.

        Can be used bare (@registry.action) or with a name
        (@registry.action("name") / @registry.action(name="name")).
        """
        if isinstance(func, str):
            name, func = func, None

        def decorator(f: Callable[..., None]) -> Callable[..., None]:
            self.register(name or f.__name__, f)
            return f

        if func is None:
            return decorator
        return decorator(func)

    def catalog(self) -> ActionCatalog:
        """Catalog of the registered functions, called as f(ctx)."""
        if not self._entries:
            raise CatalogError("registry has no actions specified")
        return ActionCatalog.from_pairs(self._entries)

    def bind(self, instance: Any) -> ActionCatalog:
        """Catalog of the registered methods bound to instance, called as f(instance, ctx)."""
        if not self._entries:
            raise CatalogError(
                f"state machine of type {type(instance).__name__} has no actions specified"
            )
        return ActionCatalog.from_pairs(
            (name, partial(func, instance)) for name, func in self._entries
        )


def build_catalog(source: Any) -> ActionCatalog:
    """
    Build an ActionCatalog from any supported source.

    Accepts a catalog, an ActionRegistry, an ActionProvider, a mapping
    of name -> function, or an iterable of Actions / (name, function)
    pairs.
    """
    if isinstance(source, ActionCatalog):
        return source
    if isinstance(source, ActionRegistry):
        return source.catalog()
    if isinstance(source, ActionProvider):
        return ActionCatalog.from_provider(source)
    if isinstance(source, Mapping):
        return ActionCatalog.from_mapping(source)
    if isinstance(source, (str, bytes)) or not isinstance(source, Iterable):
        raise CatalogError(f"Cannot build actions from {type(source).__name__}")

    actions = []
    for item in source:
        if isinstance(item, Action):
            actions.append(item)
        elif isinstance(item, tuple) and len(item) == 2:
            actions.append(Action(name=item[0], run=item[1]))
        else:
            raise CatalogError(f"Not an action or (name, function) pair: {item!r}")
    return ActionCatalog(actions)
