"""
Live redefinition of loaded modules and classes.

A Redefiner swaps the running definition of one or more units for the
content read by the UnitLocator. Each call is atomic: when it raises
RedefinitionError, every unit named in the call keeps its previous
definition.
"""

import builtins
import inspect
import logging
import types
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .exceptions import RedefinitionError
from .models import UnitSource

logger = logging.getLogger(__name__)

# Class attributes that describe the class object itself and are never copied.
_FIXED_CLASS_ATTRS = frozenset({
    "__dict__",
    "__weakref__",
    "__module__",
    "__qualname__",
    "__abstractmethods__",
    "_abc_impl",
    "__slots__",
})


class Redefiner(ABC):
    """Interface for live code replacement."""

    @abstractmethod
    def redefine_one(self, source: UnitSource) -> None:
        """
        Redefine a single unit.

        Args:
            source: Unit and its new content

        Raises:
            RedefinitionError: If the unit could not be redefined
        """
        pass

    @abstractmethod
    def redefine_many(self, sources: Sequence[UnitSource]) -> None:
        """
        Redefine several units as one atomic change.

        Args:
            sources: Units and their new content, in declared order

        Raises:
            RedefinitionError: If any unit could not be redefined; none of
                them are changed in that case
        """
        pass


class _Patch(ABC):
    """A prepared change to one unit that can be applied and rolled back."""

    unit_id: str

    @abstractmethod
    def apply(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass


class _ModulePatch(_Patch):
    """Re-executes a module's code in its own namespace."""

    def __init__(self, unit_id: str, module: types.ModuleType, code: types.CodeType):
        self.unit_id = unit_id
        self.module = module
        self.code = code
        self._saved: Optional[Dict[str, Any]] = None

    def apply(self) -> None:
        namespace = self.module.__dict__
        self._saved = dict(namespace)
        try:
            exec(self.code, namespace)
        except Exception as e:
            self.rollback()
            raise RedefinitionError([self.unit_id], f"module code raised {type(e).__name__}: {e}") from e

    def rollback(self) -> None:
        if self._saved is None:
            return
        namespace = self.module.__dict__
        namespace.clear()
        namespace.update(self._saved)
        self._saved = None


class _ClassPatch(_Patch):
    """
    Copies the members of a freshly executed class onto the live class.

    The live class object keeps its identity, so existing instances and
    references see the new methods. Functions are rebound to the live
    module globals and zero-argument super() cells point at the live
    class. Data attributes that already exist on the live class keep their
    live values. Nested classes are left alone; they are units of their own.
    """

    def __init__(
        self,
        unit_id: str,
        module: types.ModuleType,
        live: type,
        new: type,
        scratch: Dict[str, Any],
    ):
        self.unit_id = unit_id
        self.module = module
        self.live = live
        self.new = new
        self.scratch = scratch
        self._saved: Optional[Dict[str, Any]] = None
        self._added_globals: List[str] = []

    def check_compatible(self) -> None:
        """Reject changes the live class cannot absorb in place."""
        live_bases = [base.__qualname__ for base in self.live.__mro__[1:]]
        new_bases = [base.__qualname__ for base in self.new.__mro__[1:]]
        if live_bases != new_bases:
            raise RedefinitionError([self.unit_id], f"class hierarchy changed: {live_bases} -> {new_bases}")
        if self.live.__dict__.get("__slots__") != self.new.__dict__.get("__slots__"):
            raise RedefinitionError([self.unit_id], "__slots__ changed")

    def apply(self) -> None:
        self._saved = dict(self.live.__dict__)
        module_globals = self.module.__dict__
        try:
            # Names the new code needs that the live module does not have yet.
            for name, value in self.scratch.items():
                if name not in module_globals:
                    module_globals[name] = _rebind(value, self.scratch, module_globals, None, None)
                    self._added_globals.append(name)

            for name, value in self.new.__dict__.items():
                if name in _FIXED_CLASS_ATTRS:
                    continue
                current = self.live.__dict__.get(name)
                if inspect.isclass(value) and inspect.isclass(current):
                    continue
                # Class-level state (counters, caches) keeps its live value.
                if name in self.live.__dict__ and _is_class_state(name, current) and _is_class_state(name, value):
                    continue
                setattr(self.live, name, _rebind(value, self.scratch, module_globals, self.new, self.live))
        except Exception as e:
            self.rollback()
            raise RedefinitionError([self.unit_id], f"cannot patch class: {e}") from e

    def rollback(self) -> None:
        if self._saved is None:
            return
        for name in list(self.live.__dict__):
            if name not in self._saved and name not in _FIXED_CLASS_ATTRS:
                delattr(self.live, name)
        for name, value in self._saved.items():
            if name in _FIXED_CLASS_ATTRS:
                continue
            if self.live.__dict__.get(name) is not value:
                setattr(self.live, name, value)
        module_globals = self.module.__dict__
        for name in self._added_globals:
            module_globals.pop(name, None)
        self._added_globals = []
        self._saved = None


def _is_class_state(name: str, value: Any) -> bool:
    """Plain data held on a class, as opposed to methods and descriptors."""
    if name.startswith("__") and name.endswith("__"):
        return False
    if inspect.isclass(value) or callable(value):
        return False
    return not hasattr(type(value), "__get__")


def _rebind(value: Any, scratch: Dict[str, Any], module_globals: Dict[str, Any],
            new_cls: Optional[type], live_cls: Optional[type]) -> Any:
    """Point functions created by the scratch execution at the live module."""
    if isinstance(value, types.FunctionType):
        return _rebind_function(value, scratch, module_globals, new_cls, live_cls)
    if isinstance(value, staticmethod):
        return staticmethod(_rebind(value.__func__, scratch, module_globals, new_cls, live_cls))
    if isinstance(value, classmethod):
        return classmethod(_rebind(value.__func__, scratch, module_globals, new_cls, live_cls))
    if isinstance(value, property):
        return property(
            *(
                _rebind(accessor, scratch, module_globals, new_cls, live_cls) if accessor else None
                for accessor in (value.fget, value.fset, value.fdel)
            ),
            value.__doc__,
        )
    return value


def _rebind_function(func: types.FunctionType, scratch: Dict[str, Any], module_globals: Dict[str, Any],
                     new_cls: Optional[type], live_cls: Optional[type]) -> types.FunctionType:
    # Functions wrapped by decorators from other modules keep their own globals.
    if func.__globals__ is not scratch:
        return func

    closure = func.__closure__
    if closure and live_cls is not None and "__class__" in func.__code__.co_freevars:
        cells = list(closure)
        index = func.__code__.co_freevars.index("__class__")
        if cells[index].cell_contents is new_cls:
            cells[index] = types.CellType(live_cls)
        closure = tuple(cells)

    rebound = types.FunctionType(func.__code__, module_globals, func.__name__, func.__defaults__, closure)
    rebound.__kwdefaults__ = func.__kwdefaults__
    rebound.__qualname__ = func.__qualname__
    rebound.__doc__ = func.__doc__
    rebound.__module__ = func.__module__
    rebound.__dict__.update(func.__dict__)
    return rebound


class InPlaceRedefiner(Redefiner):
    """
    Redefines units inside the running interpreter.

    Module units are re-executed in their own namespace; if the code raises,
    the namespace is restored. Class units are executed in a scratch copy
    of their module and the new members are patched onto the live class.
    Every unit of a call is compiled and prepared before any of them is
    applied, and applied units are rolled back if a later one fails.

    Module level statements run again during redefinition, including for
    class units, so modules with import-time side effects should keep
    them idempotent.
    """

    def redefine_one(self, source: UnitSource) -> None:
        self._redefine([source])
        logger.debug(f"Redefined [{source.unit_id}]")

    def redefine_many(self, sources: Sequence[UnitSource]) -> None:
        if not sources:
            return
        self._redefine(list(sources))
        logger.debug(f"Redefined {[source.unit_id for source in sources]}")

    def _redefine(self, sources: List[UnitSource]) -> None:
        patches = self._prepare(sources)

        applied: List[_Patch] = []
        try:
            for patch in patches:
                patch.apply()
                applied.append(patch)
        except Exception as e:
            for patch in reversed(applied):
                patch.rollback()
            reason = e.reason if isinstance(e, RedefinitionError) else f"{type(e).__name__}: {e}"
            raise RedefinitionError([source.unit_id for source in sources], reason) from e

    def _prepare(self, sources: List[UnitSource]) -> List[_Patch]:
        """Compile every source and build its patch without touching live objects."""
        unit_ids = [source.unit_id for source in sources]
        scratch_cache: Dict[Tuple[str, str], Dict[str, Any]] = {}
        patches: List[_Patch] = []

        for source in sources:
            try:
                code = compile(source.data, source.origin, "exec", dont_inherit=True)
            except (SyntaxError, ValueError) as e:
                raise RedefinitionError(unit_ids, f"cannot compile {source.origin}: {e}") from e

            if source.is_module:
                patches.append(_ModulePatch(source.unit_id, source.module, code))
                continue

            key = (source.module_name, source.origin)
            scratch = scratch_cache.get(key)
            if scratch is None:
                scratch = self._execute_scratch(source, code, unit_ids)
                scratch_cache[key] = scratch

            new_cls = _lookup_qualname(scratch, source.qualname)
            if not inspect.isclass(new_cls):
                raise RedefinitionError(unit_ids, f"{source.qualname} is not defined by the new {source.origin}")

            patch = _ClassPatch(source.unit_id, source.module, source.target, new_cls, scratch)
            try:
                patch.check_compatible()
            except RedefinitionError as e:
                raise RedefinitionError(unit_ids, e.reason) from e
            patches.append(patch)

        return patches

    def _execute_scratch(self, source: UnitSource, code: types.CodeType, unit_ids: List[str]) -> Dict[str, Any]:
        """Run module code in a fresh namespace that mirrors the live module."""
        module = source.module
        scratch: Dict[str, Any] = {
            "__name__": module.__name__,
            "__file__": getattr(module, "__file__", source.origin),
            "__package__": getattr(module, "__package__", None),
            "__spec__": getattr(module, "__spec__", None),
            "__loader__": getattr(module, "__loader__", None),
            "__builtins__": builtins,
        }
        if hasattr(module, "__path__"):
            scratch["__path__"] = module.__path__

        try:
            exec(code, scratch)
        except Exception as e:
            raise RedefinitionError(unit_ids, f"module code raised {type(e).__name__}: {e}") from e
        return scratch


def _lookup_qualname(namespace: Dict[str, Any], qualname: str) -> Any:
    """Walk a dotted qualname starting from a module namespace."""
    head, *rest = qualname.split(".")
    target = namespace.get(head)
    for attr in rest:
        if target is None:
            return None
        target = getattr(target, attr, None)
    return target
