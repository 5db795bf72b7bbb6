"""Hot swap service: directive watch, reload trigger and tick driving."""

import logging
import signal
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from filewatch import ChangeKind, TickScheduler, WatchRegistry

from .config import HotSwapConfig
from .directive import DirectiveSource
from .locator import UnitLocator
from .models import ReloadOutcome
from .orchestrator import ReloadOrchestrator
from .redefiner import Redefiner

logger = logging.getLogger(__name__)


class HotSwapService:
    """
    Wires a directive file watch to a reload orchestrator.

    The service owns neither a global registry nor a thread by default:
    the embedding process calls tick() from its own loop, or starts a
    TickScheduler with start_scheduler(). Editing the directive file
    triggers a reload once the watcher's debounce window elapses; a
    reload can also be requested from any thread or a signal handler with
    request_reload(), and runs on the next tick.
    """

    def __init__(
        self,
        config: Optional[HotSwapConfig] = None,
        registry: Optional[WatchRegistry] = None,
        orchestrator: Optional[ReloadOrchestrator] = None,
        locator: Optional[UnitLocator] = None,
        redefiner: Optional[Redefiner] = None,
        hooks: Optional[Mapping[str, Callable[[], Any]]] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Service configuration
            registry: Watch registry to register the directive file in
            orchestrator: Orchestrator to run (built from config if omitted)
            locator: Unit locator for a built orchestrator
            redefiner: Redefinition service for a built orchestrator
            hooks: Explicit hook callables for a built orchestrator
        """
        self.config = config or HotSwapConfig()
        self.registry = registry or WatchRegistry(self.config.watcher)
        self.orchestrator = orchestrator or ReloadOrchestrator(
            DirectiveSource(self.config.directive_path, self.config.directive_encoding),
            locator=locator,
            redefiner=redefiner,
            hooks=hooks,
        )

        self._running = False
        self._reload_requested = threading.Event()
        self._scheduler: Optional[TickScheduler] = None
        self._lock = threading.Lock()

    @property
    def directive_path(self) -> Path:
        return self.orchestrator.directive.path.resolve()

    def start(self) -> bool:
        """
        Start watching the directive file.

        Returns:
            True if the watch is registered (or already was), False if the
            directive file does not exist or cannot be watched
        """
        with self._lock:
            if self._running:
                return True

            path = self.directive_path
            if not path.is_file():
                logger.warning(f"Hot swap service not started, directive file [{path}] does not exist")
                return False

            if not self.registry.register(
                path,
                self.config.watch_kinds,
                self._on_directive_changed,
                self.config.watcher.notify_interval,
            ):
                logger.warning(f"Hot swap service not started, cannot watch directive file [{path}]")
                return False

            self._running = True

        logger.info(f"Hot swap service started, directive file is [{path}]")
        return True

    def stop(self) -> None:
        """Stop the scheduler (if any) and the directive watch."""
        self.stop_scheduler()

        with self._lock:
            if not self._running:
                return
            self._running = False

        self.registry.deregister(self.directive_path)
        logger.info("Hot swap service stopped")

    def _on_directive_changed(self, changes: Dict[Path, ChangeKind]) -> None:
        """Watcher callback for the directive file."""
        for path, kind in changes.items():
            logger.info(f"Directive file {kind.name.lower()}: {path}")
        self.orchestrator.reload()

    def reload(self) -> ReloadOutcome:
        """Run a reload now on the calling thread."""
        return self.orchestrator.reload()

    def request_reload(self) -> None:
        """
        Ask for a reload on the next tick.

        Safe to call from other threads and from signal handlers.
        """
        self._reload_requested.set()

    def tick(self) -> None:
        """Run a requested reload, then tick every watcher."""
        if self._reload_requested.is_set():
            self._reload_requested.clear()
            logger.info("Running requested reload")
            self.orchestrator.reload()
        self.registry.tick_all()

    def install_signal_trigger(self, signal_name: Optional[str] = None) -> bool:
        """
        Make a POSIX signal request a reload.

        Must be called from the main thread.

        Args:
            signal_name: Signal name such as ``"SIGUSR2"`` (defaults to
                config.reload_signal)

        Returns:
            True if the handler was installed, False if the platform has
            no such signal
        """
        name = signal_name or self.config.reload_signal
        signum = getattr(signal, name, None)
        if signum is None:
            logger.warning(f"Signal {name} is not available on this platform, reload trigger not installed")
            return False

        signal.signal(signum, lambda _signum, _frame: self.request_reload())
        logger.info(f"Reload trigger installed on {name}")
        return True

    def start_scheduler(self) -> TickScheduler:
        """
        Drive tick() from a background thread.

        Returns:
            The running scheduler
        """
        with self._lock:
            if self._scheduler is None:
                self._scheduler = TickScheduler(
                    self.tick,
                    self.config.watcher.tick_interval_ms,
                    name="HotSwapTicker",
                )
            scheduler = self._scheduler

        if not scheduler.is_running:
            scheduler.start()
        return scheduler

    def stop_scheduler(self) -> None:
        with self._lock:
            scheduler = self._scheduler
            self._scheduler = None
        if scheduler is not None:
            scheduler.stop()

    @property
    def is_running(self) -> bool:
        """Check if the directive watch is active."""
        return self._running

    def close(self) -> None:
        """Stop the service and release all watchers of its registry."""
        self.stop()
        self.registry.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
