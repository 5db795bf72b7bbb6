"""
Filewatch Package

Tick-driven change watchers for files and directories.

Features:
- One watchdog observer per watched path, file or directory
- Change kinds: CREATED, DELETED, MODIFIED, combinable as a mask
- Per-path coalescing: the latest kind wins inside a window
- Debounce windows counted in scheduler ticks, not wall-clock time
- Write-in-progress probe to avoid reading half-written files
- Registry with at most one watcher per path
"""

from .models import (
    ChangeKind,
    ChangeCallback,
    RawChangeEvent,
    CREATE_OR_MODIFY,
    ALL_CHANGES,
)

from .config import WatcherConfig, DEFAULT_NOTIFY_INTERVAL

from .exceptions import (
    WatcherError,
    WatchRegistrationError,
    WatchPathNotFoundError,
    InvalidWatchKindsError,
    SchedulerAlreadyRunningError,
)

from .fs_watcher import ChangeEventHandler, RawEventBuffer, is_write_complete
from .watcher import ChangeWatcher
from .registry import WatchRegistry
from .scheduler import TickScheduler


__all__ = [
    # Models
    "ChangeKind",
    "ChangeCallback",
    "RawChangeEvent",
    "CREATE_OR_MODIFY",
    "ALL_CHANGES",
    # Config
    "WatcherConfig",
    "DEFAULT_NOTIFY_INTERVAL",
    # Exceptions
    "WatcherError",
    "WatchRegistrationError",
    "WatchPathNotFoundError",
    "InvalidWatchKindsError",
    "SchedulerAlreadyRunningError",
    # Components
    "ChangeEventHandler",
    "RawEventBuffer",
    "is_write_complete",
    "ChangeWatcher",
    "WatchRegistry",
    "TickScheduler",
]
