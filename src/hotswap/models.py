"""Data models for the hotswap package."""

from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Dict, Iterator, List, Optional, Tuple


SWITCH_PREFIX = "switch="
SWITCH_ON = "switch=on"


@dataclass(frozen=True)
class ReloadLine:
    """
    One reload instruction from the directive file.

    Attributes:
        units: Unit identifiers in declared order
        is_group: Whether the units must be redefined together in one call
        text: The directive line as written
    """
    units: Tuple[str, ...]
    is_group: bool = False
    text: str = ""

    def __post_init__(self):
        if not self.units:
            raise ValueError("a reload line needs at least one unit")
        if not self.is_group and len(self.units) != 1:
            raise ValueError(f"a single-unit line holds exactly one unit: {self.units}")


@dataclass
class DirectiveConfig:
    """
    Parsed directive file.

    Attributes:
        lines: Reload lines in file order, switch lines removed
        switch_lines: Every ``switch=`` line, in file order
    """
    lines: List[ReloadLine] = field(default_factory=list)
    switch_lines: List[str] = field(default_factory=list)

    @property
    def enabled(self) -> bool:
        """Processing is enabled when any switch line is exactly ``switch=on``."""
        return SWITCH_ON in self.switch_lines

    def unit_ids(self) -> List[str]:
        """All unit identifiers in file order."""
        return [unit_id for line in self.lines for unit_id in line.units]


@dataclass(frozen=True)
class UnitSource:
    """
    Current content of a loaded unit.

    Attributes:
        unit_id: Identifier as written in the directive
        module: Live module defining the unit
        qualname: Qualified class name inside the module, None for a module unit
        origin: Location the content was read from (file or archive member)
        data: Raw source bytes of the defining module
        target: The live module or class object
    """
    unit_id: str
    module: ModuleType = field(repr=False, compare=False)
    qualname: Optional[str]
    origin: str
    data: bytes = field(repr=False)
    target: Any = field(repr=False, compare=False, default=None)

    @property
    def module_name(self) -> str:
        return self.module.__name__

    @property
    def is_module(self) -> bool:
        """Whether the unit is a whole module rather than a class."""
        return self.qualname is None


class ReloadOutcome:
    """
    Units successfully redefined by one reload, in the order they succeeded.
    """

    def __init__(self):
        self._units: List[str] = []
        self._targets: Dict[str, Any] = {}

    def add(self, unit_id: str, target: Any = None) -> None:
        """Record a redefined unit and its live object."""
        if unit_id not in self._targets:
            self._units.append(unit_id)
        self._targets[unit_id] = target

    def target(self, unit_id: str) -> Any:
        """Live object of a recorded unit."""
        return self._targets.get(unit_id)

    def clear(self) -> None:
        self._units.clear()
        self._targets.clear()

    def copy(self) -> "ReloadOutcome":
        outcome = ReloadOutcome()
        for unit_id in self._units:
            outcome.add(unit_id, self._targets[unit_id])
        return outcome

    @property
    def units(self) -> List[str]:
        return list(self._units)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._units))

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, unit_id: str) -> bool:
        return unit_id in self._targets

    def __repr__(self) -> str:
        return f"ReloadOutcome({self._units!r})"
