"""Thread-safe table of change watchers keyed by path."""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config import WatcherConfig
from .models import ChangeCallback, ChangeKind
from .watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class WatchRegistry:
    """
    Thread-safe registry of change watchers.

    At most one watcher exists per path. The owner drives every watcher by
    calling tick_all() on a steady cadence; registration and ticking share
    one lock so the table never changes underneath a tick.
    """

    def __init__(self, config: Optional[WatcherConfig] = None):
        """
        Initialize the registry.

        Args:
            config: Configuration passed to every watcher created here
        """
        self.config = config or WatcherConfig()
        self._watchers: Dict[Path, ChangeWatcher] = {}
        self._lock = threading.RLock()

    def register(
        self,
        path: Union[str, Path],
        kinds: ChangeKind,
        callback: ChangeCallback,
        notify_interval: Optional[int] = None,
    ) -> bool:
        """
        Start watching a path.

        Args:
            path: File or directory to watch
            kinds: Mask of change kinds to report
            callback: Called with the coalesced changes
            notify_interval: Ticks to wait once changes are pending

        Returns:
            True if the watcher was created, False if the path is already
            registered or the watcher failed to initialize
        """
        path = Path(path).resolve()

        with self._lock:
            if path in self._watchers:
                logger.error(f"Path already registered for watching: {path}")
                return False

            try:
                watcher = ChangeWatcher(path, kinds, callback, notify_interval, self.config)
            except ValueError as e:
                logger.error(f"Cannot watch {path}: {e}")
                return False
            if not watcher.init():
                return False

            self._watchers[path] = watcher
            logger.info(f"Registered watcher for {path}")
            return True

    def deregister(self, path: Union[str, Path]) -> bool:
        """
        Stop watching a path.

        Args:
            path: Path passed to register()

        Returns:
            True if a watcher was removed, False if none was registered
        """
        path = Path(path).resolve()

        with self._lock:
            watcher = self._watchers.pop(path, None)

        if watcher is None:
            return False

        watcher.close()
        logger.info(f"Deregistered watcher for {path}")
        return True

    def tick_all(self) -> None:
        """Tick every registered watcher once."""
        with self._lock:
            for watcher in list(self._watchers.values()):
                watcher.tick()

    def get(self, path: Union[str, Path]) -> Optional[ChangeWatcher]:
        """
        Get the watcher registered for a path.

        Args:
            path: Path to look up

        Returns:
            The watcher, or None
        """
        path = Path(path).resolve()

        with self._lock:
            return self._watchers.get(path)

    def paths(self) -> List[Path]:
        """
        Get the registered paths.

        Returns:
            List of watched paths
        """
        with self._lock:
            return list(self._watchers.keys())

    def close(self) -> int:
        """
        Deregister and stop all watchers.

        Returns:
            Number of watchers stopped
        """
        with self._lock:
            watchers = list(self._watchers.values())
            self._watchers.clear()

        for watcher in watchers:
            watcher.close()
        return len(watchers)

    def __len__(self) -> int:
        """Return the number of registered watchers."""
        with self._lock:
            return len(self._watchers)

    def __contains__(self, path: Union[str, Path]) -> bool:
        """Check if a path is registered."""
        return self.get(path) is not None
