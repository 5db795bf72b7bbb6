"""Background thread that calls a tick function at a fixed cadence."""

import logging
import threading
from typing import Callable, Optional

from .exceptions import SchedulerAlreadyRunningError

logger = logging.getLogger(__name__)


class TickScheduler:
    """
    Calls a tick function on a daemon thread every ``interval_ms``.

    The watchers themselves never start threads; an embedding process that
    has no scheduling loop of its own can use this to drive
    WatchRegistry.tick_all(). Errors raised by the tick function are
    logged and do not stop the loop.
    """

    def __init__(
        self,
        tick: Callable[[], None],
        interval_ms: int = 33,
        name: str = "TickScheduler",
    ):
        """
        Initialize the scheduler.

        Args:
            tick: Function called once per cycle
            interval_ms: Delay between the end of one tick and the next
            name: Thread name
        """
        if interval_ms < 1:
            raise ValueError(f"interval_ms must be at least 1: {interval_ms}")

        self.tick = tick
        self.interval_ms = interval_ms
        self.name = name
        self.ticks = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """
        Start ticking in the background.

        Raises:
            SchedulerAlreadyRunningError: If already running
        """
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                raise SchedulerAlreadyRunningError(f"{self.name} is already running")

            self._stop_event.clear()
            self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
            self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """
        Stop ticking and wait for the thread to finish.

        Args:
            timeout: Seconds to wait for the thread
        """
        self._stop_event.set()

        with self._lock:
            thread = self._thread
            self._thread = None

        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _loop(self) -> None:
        """Worker loop that calls the tick function until stopped."""
        interval = self.interval_ms / 1000.0
        logger.debug(f"{self.name} started, interval={interval}s")

        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.error(f"{self.name} tick error: {e}", exc_info=True)
            self.ticks += 1

            self._stop_event.wait(timeout=interval)

        logger.debug(f"{self.name} stopped after {self.ticks} ticks")

    @property
    def is_running(self) -> bool:
        """Check if the scheduler thread is alive."""
        thread = self._thread
        return thread is not None and thread.is_alive()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
