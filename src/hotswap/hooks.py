"""Post-reload hooks."""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional


class ReloadHook(ABC):
    """
    Capability for classes that run code right after they are reloaded.

    When a concrete subclass is redefined successfully, the orchestrator
    creates a fresh instance with no arguments and calls execute() once.
    Useful for one-off repairs in a running process, such as flushing
    state that a broken code path failed to persist.
    """

    @abstractmethod
    def execute(self) -> None:
        """Run the hook logic."""
        pass


def find_hook(
    unit_id: str,
    target: Any,
    hooks: Optional[Mapping[str, Callable[[], Any]]] = None,
) -> Optional[Callable[[], Any]]:
    """
    Find the hook to run for a reloaded unit.

    An explicitly registered callable wins; otherwise a concrete
    ReloadHook subclass provides one.

    Args:
        unit_id: Identifier of the reloaded unit
        target: The unit's live object
        hooks: Explicit hook callables keyed by unit identifier

    Returns:
        A zero-argument callable, or None if the unit has no hook
    """
    if hooks and unit_id in hooks:
        return hooks[unit_id]

    if inspect.isclass(target) and issubclass(target, ReloadHook) and not inspect.isabstract(target):
        return lambda: target().execute()

    return None
