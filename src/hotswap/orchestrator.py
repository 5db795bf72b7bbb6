"""Reload pipeline driven by the directive file."""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .directive import DirectiveSource
from .exceptions import (
    DirectiveEmptyError,
    DirectiveUnreadableError,
    HookExecutionError,
    SwitchDisabledError,
)
from .hooks import find_hook
from .locator import UnitLocator
from .models import DirectiveConfig, ReloadOutcome, UnitSource
from .redefiner import InPlaceRedefiner, Redefiner

logger = logging.getLogger(__name__)


class ReloadOrchestrator:
    """
    Reloads the units named in the directive file.

    Flow of reload():
    1. Clear the outcome of the previous run
    2. Load the directive file (abort if unreadable or empty)
    3. Check the switch (abort quietly unless switch=on)
    4. Redefine each line: single units one by one, groups all-or-nothing
    5. Run post-reload hooks for every unit that was redefined

    Every failure is logged where it happens; nothing escapes reload().
    Calls are serialized, so concurrent triggers run one after another.
    """

    def __init__(
        self,
        directive: Union[DirectiveSource, str, Path],
        locator: Optional[UnitLocator] = None,
        redefiner: Optional[Redefiner] = None,
        hooks: Optional[Mapping[str, Callable[[], Any]]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            directive: Directive source, or path of the directive file
            locator: Unit locator (defaults to one over sys.modules)
            redefiner: Redefinition service (defaults to InPlaceRedefiner)
            hooks: Explicit hook callables keyed by unit identifier
        """
        if not isinstance(directive, DirectiveSource):
            directive = DirectiveSource(directive)
        self.directive = directive
        self.locator = locator or UnitLocator()
        self.redefiner = redefiner or InPlaceRedefiner()
        self.hooks: Dict[str, Callable[[], Any]] = dict(hooks or {})

        self._outcome = ReloadOutcome()
        self._lock = threading.RLock()

    @property
    def outcome(self) -> ReloadOutcome:
        """Units redefined by the most recent reload()."""
        with self._lock:
            return self._outcome.copy()

    def register_hook(self, unit_id: str, hook: Callable[[], Any]) -> None:
        """Run ``hook`` after ``unit_id`` is reloaded successfully."""
        self.hooks[unit_id] = hook

    def reload(self) -> ReloadOutcome:
        """
        Reload the units named in the directive file.

        Returns:
            Snapshot of the units redefined by this call
        """
        with self._lock:
            self._outcome.clear()

            config = self._load_config()
            if config is None:
                return self._outcome.copy()

            for line in config.lines:
                if line.is_group:
                    self._reload_group(list(line.units))
                else:
                    self._reload_single(line.units[0])

            self._run_hooks()

            logger.info(f"Reload finished, {len(self._outcome)} unit(s) redefined: {self._outcome.units}")
            return self._outcome.copy()

    def _load_config(self) -> Optional[DirectiveConfig]:
        """Load the directive and check its switch; None aborts the run."""
        path = self.directive.path
        try:
            config = self.directive.load()
        except DirectiveUnreadableError as e:
            logger.error(f"Reload failed, cannot read directive file [{path}]: {e}")
            return None
        except DirectiveEmptyError:
            logger.error(f"Reload failed, directive file [{path}] has no content lines")
            return None

        try:
            self._check_switch(config)
        except SwitchDisabledError as e:
            logger.warning(f"Reload skipped: {e}")
            return None

        return config

    def _check_switch(self, config: DirectiveConfig) -> None:
        if len(config.switch_lines) > 1:
            logger.warning(
                f"Directive file [{self.directive.path}] has {len(config.switch_lines)} switch lines, "
                f"switch=on wins if present: {config.switch_lines}"
            )
        if not config.enabled:
            raise SwitchDisabledError(f"switch is not on in directive file [{self.directive.path}]")

    def _reload_single(self, unit_id: str) -> None:
        """Redefine one unit."""
        try:
            source = self.locator.locate(unit_id)
        except Exception as e:
            logger.error(f"Single reload failed for [{unit_id}]: {e}")
            return

        try:
            self.redefiner.redefine_one(source)
        except Exception as e:
            logger.error(f"Single reload failed for [{unit_id}], redefinition error: {e}", exc_info=True)
            return

        self._outcome.add(unit_id, source.target)
        logger.info(f"Single reload succeeded for [{unit_id}]")

    def _reload_group(self, unit_ids: List[str]) -> None:
        """Redefine a group of units together, or not at all."""
        sources: List[UnitSource] = []
        for index, unit_id in enumerate(unit_ids, start=1):
            try:
                sources.append(self.locator.locate(unit_id))
            except Exception as e:
                logger.error(f"Group reload failed for {unit_ids}, member {index} [{unit_id}] not resolved: {e}")
                return

        try:
            self.redefiner.redefine_many(sources)
        except Exception as e:
            logger.error(f"Group reload failed for {unit_ids}, redefinition error: {e}", exc_info=True)
            return

        for source in sources:
            self._outcome.add(source.unit_id, source.target)
        logger.info(f"Group reload succeeded for {unit_ids}")

    def _run_hooks(self) -> None:
        """Run the hook of every reloaded unit, in reload order."""
        for unit_id in self._outcome:
            hook = find_hook(unit_id, self._outcome.target(unit_id), self.hooks)
            if hook is None:
                continue
            try:
                self._invoke_hook(unit_id, hook)
            except HookExecutionError as e:
                logger.error(str(e), exc_info=e.__cause__)
                continue
            logger.info(f"Reload hook for [{unit_id}] executed")

    def _invoke_hook(self, unit_id: str, hook: Callable[[], Any]) -> None:
        try:
            hook()
        except Exception as e:
            raise HookExecutionError(unit_id, f"{type(e).__name__}: {e}") from e
