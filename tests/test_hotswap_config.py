"""Tests for hotswap config module."""

import pytest
from pathlib import Path

from filewatch import ChangeKind, WatcherConfig, CREATE_OR_MODIFY, ALL_CHANGES
from hotswap.config import HotSwapConfig


class TestHotSwapConfig:
    """Tests for HotSwapConfig class."""

    def test_default_values(self):
        config = HotSwapConfig()
        assert config.directive_path == Path("hotswap.txt")
        assert config.directive_encoding == "utf-8-sig"
        assert config.watch_kinds == CREATE_OR_MODIFY
        assert config.reload_signal == "SIGUSR2"
        assert config.watcher.notify_interval == 3

    def test_coerces_strings(self):
        config = HotSwapConfig(directive_path="conf/reload.txt", watch_kinds="all")

        assert config.directive_path == Path("conf/reload.txt")
        assert config.watch_kinds == ALL_CHANGES

    def test_watcher_from_dict(self):
        config = HotSwapConfig(watcher={"notify_interval": 5, "probe_writes": False})

        assert isinstance(config.watcher, WatcherConfig)
        assert config.watcher.notify_interval == 5
        assert config.watcher.probe_writes is False

    def test_invalid_kinds_rejected(self):
        with pytest.raises(ValueError):
            HotSwapConfig(watch_kinds="renamed")


class TestHotSwapConfigFromEnv:
    """Tests for HotSwapConfig.from_env()."""

    def test_empty_environment_gives_defaults(self):
        config = HotSwapConfig.from_env({})

        assert config.directive_path == Path("hotswap.txt")
        assert config.watcher == WatcherConfig()

    def test_all_variables(self):
        config = HotSwapConfig.from_env({
            "HOTSWAP_DIRECTIVE": "/etc/app/hotswap.txt",
            "HOTSWAP_WATCH_KINDS": "created,modified,deleted",
            "HOTSWAP_RELOAD_SIGNAL": "SIGHUP",
            "HOTSWAP_NOTIFY_INTERVAL": "6",
            "HOTSWAP_TICK_INTERVAL_MS": "50",
            "HOTSWAP_PROBE_WRITES": "false",
        })

        assert config.directive_path == Path("/etc/app/hotswap.txt")
        assert config.watch_kinds == ALL_CHANGES
        assert config.reload_signal == "SIGHUP"
        assert config.watcher.notify_interval == 6
        assert config.watcher.tick_interval_ms == 50
        assert config.watcher.probe_writes is False

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("On", True), ("0", False), ("no", False)])
    def test_probe_writes_values(self, value, expected):
        config = HotSwapConfig.from_env({"HOTSWAP_PROBE_WRITES": value})
        assert config.watcher.probe_writes is expected

    def test_invalid_interval_rejected(self):
        with pytest.raises(ValueError):
            HotSwapConfig.from_env({"HOTSWAP_NOTIFY_INTERVAL": "0"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("HOTSWAP_DIRECTIVE", "from_env.txt")
        config = HotSwapConfig.from_env()
        assert config.directive_path == Path("from_env.txt")
