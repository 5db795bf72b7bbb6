"""Tick-driven watcher for a single file or directory."""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from watchdog.observers import Observer

from .config import WatcherConfig
from .exceptions import InvalidWatchKindsError, WatchPathNotFoundError
from .fs_watcher import ChangeEventHandler, RawEventBuffer, is_write_complete
from .models import CREATE_OR_MODIFY, ChangeCallback, ChangeKind, RawChangeEvent

logger = logging.getLogger(__name__)


class ChangeWatcher:
    """
    Watches one file or directory and reports coalesced changes.

    A watchdog observer collects raw events in the background. Nothing is
    delivered until the owner calls tick(): each tick drains the raw
    events into a per-path accumulator, and once changes are pending the
    callback fires after ``notify_interval`` ticks with the latest kind
    seen for every path.

    Watching a single file watches its parent directory and drops events
    for any other entry in it.
    """

    def __init__(
        self,
        path: Union[str, Path],
        kinds: ChangeKind,
        callback: ChangeCallback,
        notify_interval: Optional[int] = None,
        config: Optional[WatcherConfig] = None,
    ):
        """
        Initialize the watcher. Call init() before ticking it.

        Args:
            path: File or directory to watch
            kinds: Mask of change kinds to report
            callback: Called with a path -> ChangeKind mapping
            notify_interval: Ticks to wait once changes are pending
                (defaults to config.notify_interval)
            config: Watcher configuration
        """
        self.config = config or WatcherConfig()
        self.path = Path(path).resolve()
        self.kinds = kinds
        self.callback = callback
        if notify_interval is None:
            notify_interval = self.config.notify_interval
        self.notify_interval = notify_interval
        if self.notify_interval < 1:
            raise ValueError(f"notify_interval must be at least 1: {self.notify_interval}")

        self.filename: Optional[str] = None
        self.watch_dir: Optional[Path] = None

        self._wait_ticks = 0
        self._changes: Dict[Path, ChangeKind] = {}
        self._buffer = RawEventBuffer(self.config.max_pending_events)
        self.handler = ChangeEventHandler(self._buffer)
        self._observer: Optional[Observer] = None

    def init(self) -> bool:
        """
        Start watching the path.

        Returns:
            True if the watch is active, False if the path does not exist,
            the kind mask is empty or the observer could not be started
        """
        try:
            self._arm()
        except (WatchPathNotFoundError, InvalidWatchKindsError) as e:
            logger.error(f"Watcher initialization failed: {e}")
            return False
        except OSError as e:
            logger.error(f"Watcher initialization failed, cannot register [{self.path}]: {e}")
            return False

        logger.debug(f"Watching {self.watch_dir} for {self.path} ({self.kinds})")
        return True

    def _arm(self) -> None:
        """Resolve the watched directory and start the observer."""
        if not self.path.exists():
            raise WatchPathNotFoundError(f"Path does not exist: {self.path}")
        if not self.kinds:
            raise InvalidWatchKindsError(f"No change kinds selected for: {self.path}")

        if self.path.is_file():
            self.filename = self.path.name
            self.watch_dir = self.path.parent
        else:
            self.watch_dir = self.path

        observer = Observer()
        observer.schedule(self.handler, str(self.watch_dir), recursive=False)
        try:
            observer.start()
        except OSError:
            observer.stop()
            raise
        self._observer = observer

    def tick(self) -> None:
        """Poll pending events, then deliver changes if the window has elapsed."""
        self.check_events()
        self.notify_if_due()

    def check_events(self) -> None:
        """Move the latest batch of raw events into the accumulator."""
        events, overflowed = self._buffer.poll()
        if overflowed:
            logger.warning(f"Change events overflowed for {self.path}, some changes may have been missed")

        for raw_event in events:
            try:
                self._accept(raw_event)
            except OSError as e:
                logger.error(f"Error handling {raw_event.kind.name.lower()} event for {raw_event.path}: {e}")

    def _accept(self, raw_event: RawChangeEvent) -> None:
        """Filter one raw event and record it."""
        kind = raw_event.kind
        if kind not in self.kinds:
            return

        path = raw_event.path
        if not path.is_absolute():
            path = self.watch_dir / path
        if path == self.watch_dir:
            return

        if self.filename is not None:
            if path.name != self.filename:
                return
        elif self.config.should_ignore(path):
            return

        # A create or modify for a file that is still held by its writer is
        # dropped; the writer's final modification reports it again.
        if kind in CREATE_OR_MODIFY and self.config.probe_writes and not is_write_complete(path):
            logger.debug(f"Skipping {kind.name.lower()} event for {path}: write in progress")
            return

        self._changes[path] = kind
        logger.info(f"Detected {kind.name.lower()} change on {path}")

    def notify_if_due(self) -> None:
        """Fire the callback once changes have been pending for notify_interval ticks."""
        if not self._changes:
            return

        self._wait_ticks += 1
        if self._wait_ticks < self.notify_interval:
            return

        self._wait_ticks = 0
        changes = self._changes
        self._changes = {}

        try:
            self.callback(changes)
        except Exception as e:
            logger.error(f"Change callback failed for watched path {self.path}: {e}", exc_info=True)

    @property
    def wait_ticks(self) -> int:
        """Ticks elapsed in the current accumulation window."""
        return self._wait_ticks

    @property
    def pending_changes(self) -> Dict[Path, ChangeKind]:
        """Copy of the changes accumulated but not yet delivered."""
        return dict(self._changes)

    @property
    def is_active(self) -> bool:
        """Whether the observer is running."""
        return self._observer is not None and self._observer.is_alive()

    def close(self) -> None:
        """Stop the observer and drop pending state."""
        observer = self._observer
        self._observer = None
        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)
        self._changes.clear()
        self._wait_ticks = 0

    def __repr__(self) -> str:
        return f"ChangeWatcher(path={str(self.path)!r}, kinds={self.kinds})"
