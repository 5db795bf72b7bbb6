"""Resolve unit identifiers to loaded objects and their current source."""

import importlib.machinery
import inspect
import logging
import sys
from types import ModuleType
from typing import Any, MutableMapping, Optional, Tuple

from .exceptions import UnitResolutionError
from .models import UnitSource

logger = logging.getLogger(__name__)


class UnitLocator:
    """
    Finds the live object behind a unit identifier and reads the current
    bytes of its defining module.

    An identifier is a dotted name. The longest prefix that names a loaded
    module selects the module; the rest is a class path inside it, so
    ``app.models`` is a module unit and ``app.models.Player.Stats`` a class
    unit. Only modules that are already imported are considered.

    Content is read through the module's loader, which works the same for
    plain source files and for modules imported from a zip archive.
    """

    def __init__(self, modules: Optional[MutableMapping[str, ModuleType]] = None):
        """
        Initialize the locator.

        Args:
            modules: Module table to search (defaults to sys.modules)
        """
        self.modules = sys.modules if modules is None else modules

    def resolve(self, unit_id: str) -> Tuple[ModuleType, Optional[str], Any]:
        """
        Find the live object for an identifier.

        Args:
            unit_id: Dotted unit identifier

        Returns:
            (module, qualname, target) - the defining module, the class
            qualname inside it (None for a module unit) and the object

        Raises:
            UnitResolutionError: If the identifier does not name a loaded
                module or a class inside one
        """
        parts = unit_id.split(".")
        if not unit_id or any(not part for part in parts):
            raise UnitResolutionError(unit_id, "malformed identifier")

        module = None
        split = len(parts)
        while split > 0:
            module = self.modules.get(".".join(parts[:split]))
            if module is not None:
                break
            split -= 1
        if module is None:
            raise UnitResolutionError(unit_id, "no loaded module matches")

        attrs = parts[split:]
        if not attrs:
            return module, None, module

        target: Any = module
        for attr in attrs:
            try:
                target = getattr(target, attr)
            except AttributeError:
                raise UnitResolutionError(
                    unit_id, f"{module.__name__} has no attribute path {'.'.join(attrs)}"
                ) from None

        if not inspect.isclass(target):
            raise UnitResolutionError(unit_id, "not a module or class")

        qualname = target.__qualname__
        if "<locals>" in qualname:
            raise UnitResolutionError(unit_id, "classes defined inside functions cannot be reloaded")

        # Re-exported classes are reloaded from the module that defines them.
        defining = self.modules.get(target.__module__)
        if defining is None:
            raise UnitResolutionError(unit_id, f"defining module {target.__module__} is not loaded")

        return defining, qualname, target

    def read_module(self, module: ModuleType, unit_id: str) -> Tuple[str, bytes]:
        """
        Read the current source bytes of a module.

        Args:
            module: Loaded module
            unit_id: Identifier used in error messages

        Returns:
            (origin, data)

        Raises:
            UnitResolutionError: If the module has no readable source
        """
        spec = getattr(module, "__spec__", None)
        loader = spec.loader if spec is not None else getattr(module, "__loader__", None)
        origin = spec.origin if spec is not None else getattr(module, "__file__", None)

        if loader is None or origin is None or not _has_location(spec, origin):
            raise UnitResolutionError(unit_id, f"module {module.__name__} has no source location")
        if not origin.endswith(tuple(importlib.machinery.SOURCE_SUFFIXES)):
            raise UnitResolutionError(unit_id, f"module {module.__name__} is not loaded from source: {origin}")
        if not hasattr(loader, "get_data"):
            raise UnitResolutionError(unit_id, f"loader of {module.__name__} cannot read content")

        try:
            data = loader.get_data(origin)
        except OSError as e:
            raise UnitResolutionError(unit_id, f"cannot read {origin}: {e}") from e

        return origin, data

    def locate(self, unit_id: str) -> UnitSource:
        """
        Resolve a unit and read its current content.

        Args:
            unit_id: Dotted unit identifier

        Returns:
            The unit's live object and source bytes

        Raises:
            UnitResolutionError: If the unit cannot be found or read
        """
        module, qualname, target = self.resolve(unit_id)
        origin, data = self.read_module(module, unit_id)
        logger.debug(f"Located unit [{unit_id}] in {origin} ({len(data)} bytes)")
        return UnitSource(
            unit_id=unit_id,
            module=module,
            qualname=qualname,
            origin=origin,
            data=data,
            target=target,
        )


def _has_location(spec, origin: str) -> bool:
    """Whether a module origin points at loadable content rather than a marker."""
    if origin in ("built-in", "frozen"):
        return False
    if spec is not None and not getattr(spec, "has_location", True):
        return False
    return True
