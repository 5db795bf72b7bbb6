"""
Hotswap Package

Directive-driven live code reload for long-running Python processes.

Features:
- Directive file naming the modules and classes to reload
- switch=on guard so a stale directive never reloads anything
- Groups of units redefined together, all or nothing
- In-place class patching that keeps existing instances working
- Post-reload hooks for one-off repairs
- Reload on directive change, on request, or on a POSIX signal
"""

from .models import (
    ReloadLine,
    DirectiveConfig,
    UnitSource,
    ReloadOutcome,
    SWITCH_PREFIX,
    SWITCH_ON,
)

from .config import HotSwapConfig, DEFAULT_DIRECTIVE_FILENAME

from .exceptions import (
    HotSwapError,
    DirectiveError,
    DirectiveUnreadableError,
    DirectiveEmptyError,
    SwitchDisabledError,
    UnitResolutionError,
    RedefinitionError,
    HookExecutionError,
)

from .directive import DirectiveSource, parse_lines
from .locator import UnitLocator
from .redefiner import Redefiner, InPlaceRedefiner
from .hooks import ReloadHook, find_hook
from .orchestrator import ReloadOrchestrator
from .service import HotSwapService


__all__ = [
    # Models
    "ReloadLine",
    "DirectiveConfig",
    "UnitSource",
    "ReloadOutcome",
    "SWITCH_PREFIX",
    "SWITCH_ON",
    # Config
    "HotSwapConfig",
    "DEFAULT_DIRECTIVE_FILENAME",
    # Exceptions
    "HotSwapError",
    "DirectiveError",
    "DirectiveUnreadableError",
    "DirectiveEmptyError",
    "SwitchDisabledError",
    "UnitResolutionError",
    "RedefinitionError",
    "HookExecutionError",
    # Components
    "DirectiveSource",
    "parse_lines",
    "UnitLocator",
    "Redefiner",
    "InPlaceRedefiner",
    "ReloadHook",
    "find_hook",
    "ReloadOrchestrator",
    "HotSwapService",
]
