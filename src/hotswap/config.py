"""
Configuration for the hotswap package.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from filewatch import CREATE_OR_MODIFY, ChangeKind, WatcherConfig


DEFAULT_DIRECTIVE_FILENAME = "hotswap.txt"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class HotSwapConfig:
    """Main configuration for the hot swap service."""
    # Directive file naming the units to reload
    directive_path: Path = field(default_factory=lambda: Path(DEFAULT_DIRECTIVE_FILENAME))
    directive_encoding: str = "utf-8-sig"

    # Changes to the directive file that trigger a reload
    watch_kinds: ChangeKind = CREATE_OR_MODIFY

    # Signal that requests a reload on the next tick (POSIX only)
    reload_signal: str = "SIGUSR2"

    # Watcher tuning (notify interval, tick cadence, write probe)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)

    def __post_init__(self):
        if isinstance(self.directive_path, str):
            self.directive_path = Path(self.directive_path)
        if isinstance(self.watch_kinds, str):
            self.watch_kinds = ChangeKind.parse(self.watch_kinds)
        if isinstance(self.watcher, dict):
            self.watcher = WatcherConfig(**self.watcher)

    @classmethod
    def from_env(cls, environ=None) -> "HotSwapConfig":
        """
        Build a configuration from ``HOTSWAP_*`` environment variables.

        Recognized variables: HOTSWAP_DIRECTIVE, HOTSWAP_WATCH_KINDS,
        HOTSWAP_RELOAD_SIGNAL, HOTSWAP_NOTIFY_INTERVAL,
        HOTSWAP_TICK_INTERVAL_MS, HOTSWAP_PROBE_WRITES. Unset variables keep
        their defaults.

        Args:
            environ: Mapping to read instead of os.environ
        """
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("HOTSWAP_DIRECTIVE"):
            config.directive_path = Path(env["HOTSWAP_DIRECTIVE"])
        if env.get("HOTSWAP_WATCH_KINDS"):
            config.watch_kinds = ChangeKind.parse(env["HOTSWAP_WATCH_KINDS"])
        if env.get("HOTSWAP_RELOAD_SIGNAL"):
            config.reload_signal = env["HOTSWAP_RELOAD_SIGNAL"]

        watcher_overrides = {}
        if env.get("HOTSWAP_NOTIFY_INTERVAL"):
            watcher_overrides["notify_interval"] = int(env["HOTSWAP_NOTIFY_INTERVAL"])
        if env.get("HOTSWAP_TICK_INTERVAL_MS"):
            watcher_overrides["tick_interval_ms"] = int(env["HOTSWAP_TICK_INTERVAL_MS"])
        if env.get("HOTSWAP_PROBE_WRITES"):
            watcher_overrides["probe_writes"] = env["HOTSWAP_PROBE_WRITES"].strip().lower() in _TRUE_VALUES
        if watcher_overrides:
            config.watcher = WatcherConfig(**watcher_overrides)

        return config
