#!/usr/bin/env python3
"""
CLI for checking directive files and running hot swap.

Usage:
    hotswap check hotswap.txt --import myapp.handlers --resolve
    hotswap watch ./config --kinds created,modified
    hotswap run --directive hotswap.txt --import myapp.server
    hotswap reload --directive hotswap.txt --import myapp.handlers
"""

import argparse
import importlib
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from filewatch import ChangeKind, WatchRegistry

from .config import HotSwapConfig
from .directive import DirectiveSource
from .exceptions import DirectiveError, UnitResolutionError
from .locator import UnitLocator
from .orchestrator import ReloadOrchestrator
from .service import HotSwapService

logger = logging.getLogger("hotswap.cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.should_exit = False
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.should_exit = True


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _import_modules(names: List[str], search_paths: List[str]) -> bool:
    """Import the modules whose units may be reloaded."""
    for search_path in reversed(search_paths):
        sys.path.insert(0, str(Path(search_path).resolve()))

    for name in names:
        try:
            importlib.import_module(name)
        except Exception as e:
            logger.error(f"Cannot import module {name}: {e}")
            return False
        logger.debug(f"Imported {name}")
    return True


def _build_config(args) -> HotSwapConfig:
    """Environment configuration with command line overrides."""
    config = HotSwapConfig.from_env()
    if getattr(args, "directive", None):
        config.directive_path = Path(args.directive)
    if getattr(args, "notify_interval", None) is not None:
        config.watcher.notify_interval = args.notify_interval
    if getattr(args, "tick_interval", None) is not None:
        config.watcher.tick_interval_ms = args.tick_interval
    return config


def cmd_check(args) -> int:
    """Parse a directive file and print the reload plan."""
    source = DirectiveSource(args.directive)
    try:
        directive = source.load()
    except DirectiveError as e:
        print(f"Error: {e}")
        return 1

    print(f"Directive: {source.path.resolve()}")
    print(f"Switch:    {'on' if directive.enabled else 'off'} {directive.switch_lines or ['(missing)']}")
    if len(directive.switch_lines) > 1:
        print("Warning:   more than one switch line")
    print(f"Lines:     {len(directive.lines)}")

    if args.resolve and not _import_modules(args.modules, args.path):
        return 1

    locator = UnitLocator()
    failures = 0
    for index, line in enumerate(directive.lines, start=1):
        label = "group " if line.is_group else "single"
        print(f"  {index:>3}. {label} {'; '.join(line.units)}")
        if not args.resolve:
            continue
        for unit_id in line.units:
            try:
                unit = locator.locate(unit_id)
            except UnitResolutionError as e:
                failures += 1
                print(f"         x {unit_id}: {e.reason}")
                continue
            kind = "module" if unit.is_module else "class"
            print(f"         ok {unit_id} ({kind}, {unit.origin})")

    if failures:
        print(f"{failures} unit(s) cannot be resolved")
        return 1
    return 0


def cmd_watch(args) -> int:
    """Print coalesced changes for a file or directory until interrupted."""
    path = Path(args.path).resolve()
    if not path.exists():
        logger.error(f"Path does not exist: {path}")
        return 1

    try:
        kinds = ChangeKind.parse(args.kinds)
    except ValueError as e:
        logger.error(str(e))
        return 1

    config = _build_config(args)

    def report(changes: Dict[Path, ChangeKind]) -> None:
        for changed, kind in sorted(changes.items()):
            print(f"{kind.name.lower():<8} {changed}", flush=True)

    registry = WatchRegistry(config.watcher)
    if not registry.register(path, kinds, report, config.watcher.notify_interval):
        return 1

    shutdown = GracefulShutdown()
    interval = config.watcher.tick_interval_ms / 1000.0

    logger.info(f"Watching {path} for {kinds}")
    logger.info("Press Ctrl+C to stop")
    try:
        while not shutdown.should_exit:
            registry.tick_all()
            time.sleep(interval)
    finally:
        registry.close()

    logger.info("Watch stopped")
    return 0


def cmd_run(args) -> int:
    """Import modules and reload them whenever the directive file changes."""
    if not _import_modules(args.modules, args.path):
        return 1

    config = _build_config(args)

    with HotSwapService(config) as service:
        if not service.start():
            return 1

        shutdown = GracefulShutdown()
        service.install_signal_trigger()
        service.start_scheduler()

        logger.info(f"Hot swap running, edit {service.directive_path} to reload")
        logger.info("Press Ctrl+C to stop")

        while not shutdown.should_exit:
            time.sleep(0.5)

    logger.info("Hot swap stopped")
    return 0


def cmd_reload(args) -> int:
    """Run one reload and print the units that were redefined."""
    if not _import_modules(args.modules, args.path):
        return 1

    config = _build_config(args)
    orchestrator = ReloadOrchestrator(DirectiveSource(config.directive_path, config.directive_encoding))
    outcome = orchestrator.reload()

    print(f"Reloaded {len(outcome)} unit(s)")
    for unit_id in outcome:
        print(f"  - {unit_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hotswap",
        description="Directive-driven live code reload",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a directive file and resolve its units
  hotswap check hotswap.txt --import myapp.handlers --resolve

  # Print changes under a directory
  hotswap watch ./config --kinds all

  # Reload units whenever hotswap.txt changes
  hotswap run --directive hotswap.txt --import myapp.server
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_import_args(sub):
        sub.add_argument("-i", "--import", dest="modules", action="append", default=[],
                         help="Module to import before resolving units (repeatable)")
        sub.add_argument("-p", "--path", action="append", default=[],
                         help="Directory to prepend to sys.path (repeatable)")

    # Check command
    check_parser = subparsers.add_parser("check", help="Parse a directive file and print the plan")
    check_parser.add_argument("directive", help="Directive file path")
    check_parser.add_argument("--resolve", action="store_true", help="Resolve every unit after importing modules")
    add_import_args(check_parser)
    check_parser.set_defaults(func=cmd_check)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Print coalesced changes for a path")
    watch_parser.add_argument("path", help="File or directory to watch")
    watch_parser.add_argument("--kinds", default="all", help="Change kinds: created,deleted,modified or all")
    watch_parser.add_argument("--notify-interval", type=int, default=None, help="Ticks to wait before reporting")
    watch_parser.add_argument("--tick-interval", type=int, default=None, help="Tick interval in ms")
    watch_parser.set_defaults(func=cmd_watch)

    # Run command
    run_parser = subparsers.add_parser("run", help="Reload units whenever the directive file changes")
    run_parser.add_argument("--directive", default=None, help="Directive file path (or HOTSWAP_DIRECTIVE env)")
    run_parser.add_argument("--notify-interval", type=int, default=None, help="Ticks to wait before reloading")
    run_parser.add_argument("--tick-interval", type=int, default=None, help="Tick interval in ms")
    add_import_args(run_parser)
    run_parser.set_defaults(func=cmd_run)

    # Reload command
    reload_parser = subparsers.add_parser("reload", help="Run one reload now")
    reload_parser.add_argument("--directive", default=None, help="Directive file path (or HOTSWAP_DIRECTIVE env)")
    add_import_args(reload_parser)
    reload_parser.set_defaults(func=cmd_reload)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    try:
        return args.func(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
