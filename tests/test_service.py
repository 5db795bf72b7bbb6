"""Tests for hot swap service module."""

import os
import signal
import threading
import pytest
from pathlib import Path
from unittest.mock import Mock

from watchdog.events import FileModifiedEvent, FileMovedEvent

from filewatch import ALL_CHANGES, TickScheduler, WatchRegistry, WatcherConfig
from hotswap.config import HotSwapConfig
from hotswap.directive import DirectiveSource
from hotswap.models import ReloadOutcome
from hotswap.orchestrator import ReloadOrchestrator
from hotswap.service import HotSwapService


@pytest.fixture
def directive_path(tmp_path):
    path = tmp_path.resolve() / "hotswap.txt"
    path.write_text("switch=on\napp.models\n", encoding="utf-8")
    return path


def make_service(directive_path, notify_interval=3):
    config = HotSwapConfig(
        directive_path=directive_path,
        watcher=WatcherConfig(notify_interval=notify_interval, tick_interval_ms=1),
    )
    orchestrator = Mock(spec=ReloadOrchestrator)
    orchestrator.directive = DirectiveSource(directive_path)
    orchestrator.reload.return_value = ReloadOutcome()
    return HotSwapService(config, orchestrator=orchestrator), orchestrator


class TestHotSwapService:
    """Tests for HotSwapService class."""

    def test_create_service(self, directive_path):
        service, _ = make_service(directive_path)

        assert service.is_running is False
        assert service.directive_path == directive_path
        assert len(service.registry) == 0

    def test_builds_orchestrator_from_config(self, directive_path):
        service = HotSwapService(HotSwapConfig(directive_path=directive_path))

        assert isinstance(service.orchestrator, ReloadOrchestrator)
        assert service.directive_path == directive_path

    def test_start_registers_directive_watch(self, directive_path):
        service, _ = make_service(directive_path)

        try:
            assert service.start() is True
            assert service.is_running
            assert directive_path in service.registry
            watcher = service.registry.get(directive_path)
            assert watcher.notify_interval == 3
            assert watcher.kinds == service.config.watch_kinds
        finally:
            service.close()

    def test_start_twice(self, directive_path):
        service, _ = make_service(directive_path)

        try:
            assert service.start() is True
            assert service.start() is True
            assert len(service.registry) == 1
        finally:
            service.close()

    def test_start_without_directive_file(self, tmp_path):
        service, _ = make_service(tmp_path / "missing.txt")

        assert service.start() is False
        assert service.is_running is False
        assert len(service.registry) == 0

    def test_stop_deregisters(self, directive_path):
        service, _ = make_service(directive_path)
        service.start()

        service.stop()

        assert service.is_running is False
        assert len(service.registry) == 0

    def test_stop_when_not_started(self, directive_path):
        service, _ = make_service(directive_path)
        service.stop()
        assert service.is_running is False

    def test_directive_change_triggers_reload(self, directive_path):
        service, orchestrator = make_service(directive_path, notify_interval=3)
        service.start()
        try:
            watcher = service.registry.get(directive_path)
            watcher.handler.on_modified(FileModifiedEvent(str(directive_path)))

            service.tick()
            service.tick()
            orchestrator.reload.assert_not_called()

            service.tick()
            orchestrator.reload.assert_called_once_with()
        finally:
            service.close()

    def test_atomic_save_triggers_reload(self, directive_path):
        service, orchestrator = make_service(directive_path, notify_interval=1)
        service.start()
        try:
            watcher = service.registry.get(directive_path)
            watcher.handler.on_moved(FileMovedEvent(str(directive_path) + ".tmp", str(directive_path)))

            service.tick()

            orchestrator.reload.assert_called_once_with()
        finally:
            service.close()

    def test_request_reload_runs_on_next_tick(self, directive_path):
        service, orchestrator = make_service(directive_path)

        service.request_reload()
        orchestrator.reload.assert_not_called()

        service.tick()
        service.tick()

        orchestrator.reload.assert_called_once_with()

    def test_reload_now(self, directive_path):
        service, orchestrator = make_service(directive_path)

        outcome = service.reload()

        assert outcome is orchestrator.reload.return_value

    def test_start_scheduler(self, directive_path):
        service, orchestrator = make_service(directive_path)
        reloaded = threading.Event()
        orchestrator.reload.side_effect = lambda: reloaded.set()

        scheduler = service.start_scheduler()
        try:
            assert isinstance(scheduler, TickScheduler)
            assert scheduler.is_running
            assert service.start_scheduler() is scheduler

            service.request_reload()
            assert reloaded.wait(timeout=5.0)
        finally:
            service.stop_scheduler()

        assert scheduler.is_running is False

    def test_install_unknown_signal(self, directive_path):
        service, _ = make_service(directive_path)
        assert service.install_signal_trigger("SIGNOTREAL") is False

    @pytest.mark.skipif(not hasattr(signal, "SIGUSR2"), reason="SIGUSR2 not available")
    def test_signal_requests_reload(self, directive_path):
        service, orchestrator = make_service(directive_path)
        previous = signal.getsignal(signal.SIGUSR2)
        try:
            assert service.install_signal_trigger() is True
            os.kill(os.getpid(), signal.SIGUSR2)

            service.tick()

            orchestrator.reload.assert_called_once_with()
        finally:
            signal.signal(signal.SIGUSR2, previous)

    def test_context_manager(self, directive_path):
        with make_service(directive_path)[0] as service:
            service.start()
            registry = service.registry
            assert len(registry) == 1

        assert service.is_running is False
        assert len(registry) == 0

    def test_shared_registry(self, directive_path, tmp_path):
        registry = WatchRegistry()
        other = tmp_path / "other"
        other.mkdir()
        registry.register(other, ALL_CHANGES, lambda changes: None)
        config = HotSwapConfig(directive_path=directive_path)
        service = HotSwapService(config, registry=registry)
        try:
            service.start()
            assert len(registry) == 2

            service.stop()
            assert len(registry) == 1
        finally:
            registry.close()