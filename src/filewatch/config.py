"""Configuration for the filewatch package."""

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


DEFAULT_NOTIFY_INTERVAL = 3


@dataclass
class WatcherConfig:
    """
    Configuration options for change watchers.

    Attributes:
        notify_interval: Ticks to accumulate changes before the callback fires
        tick_interval_ms: Cadence used by a TickScheduler driving the watchers
        probe_writes: Drop create/modify events for files a writer still holds
        max_pending_events: Raw events buffered between two polls before overflow
        ignore_patterns: Glob patterns for entries ignored in directory watches
    """
    notify_interval: int = DEFAULT_NOTIFY_INTERVAL
    tick_interval_ms: int = 33
    probe_writes: bool = True
    max_pending_events: int = 4096
    ignore_patterns: List[str] = field(default_factory=lambda: [
        "*.swp",
        "*.swo",
        "*~",
        ".#*",
        "__pycache__",
        ".DS_Store",
        "Thumbs.db",
    ])

    def __post_init__(self):
        if self.notify_interval < 1:
            raise ValueError(f"notify_interval must be at least 1: {self.notify_interval}")
        if self.tick_interval_ms < 1:
            raise ValueError(f"tick_interval_ms must be at least 1: {self.tick_interval_ms}")
        if self.max_pending_events < 1:
            raise ValueError(f"max_pending_events must be at least 1: {self.max_pending_events}")

    def should_ignore(self, path: Path) -> bool:
        """
        Check if a path should be ignored based on ignore patterns.

        Args:
            path: Path to check

        Returns:
            True if the path should be ignored
        """
        name = path.name
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.ignore_patterns)
