"""Bridge between watchdog observers and tick-driven change watchers."""

import logging
import os
import stat
import threading
from pathlib import Path
from typing import List, Tuple, Union

from watchdog.events import (
    FileSystemEventHandler,
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
)

from .models import ChangeKind, RawChangeEvent

logger = logging.getLogger(__name__)


class RawEventBuffer:
    """
    Bounded, thread-safe buffer of raw events between two polls.

    The observer thread pushes; the tick thread drains the whole batch
    with a single non-blocking poll. Events pushed while the buffer is
    full are dropped and the overflow is reported by the next poll.
    """

    def __init__(self, max_events: int = 4096):
        """
        Initialize the buffer.

        Args:
            max_events: Maximum number of events held between polls
        """
        self.max_events = max_events
        self._events: List[RawChangeEvent] = []
        self._overflowed = False
        self._lock = threading.Lock()

    def push(self, event: RawChangeEvent) -> bool:
        """
        Append an event to the current batch.

        Args:
            event: The raw event

        Returns:
            True if buffered, False if dropped because the buffer is full
        """
        with self._lock:
            if len(self._events) >= self.max_events:
                self._overflowed = True
                return False
            self._events.append(event)
            return True

    def poll(self) -> Tuple[List[RawChangeEvent], bool]:
        """
        Take the pending batch without blocking.

        Returns:
            (events, overflowed) - the buffered events in arrival order and
            whether any event was dropped since the previous poll
        """
        with self._lock:
            events = self._events
            overflowed = self._overflowed
            self._events = []
            self._overflowed = False
            return events, overflowed

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class ChangeEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog events to RawChangeEvent."""

    def __init__(self, buffer: RawEventBuffer):
        super().__init__()
        self.buffer = buffer

    def _emit(self, kind: ChangeKind, src_path: Union[str, bytes], is_directory: bool):
        """Push a RawChangeEvent into the buffer."""
        raw_event = RawChangeEvent(
            kind=kind,
            path=Path(os.fsdecode(src_path)),
            is_directory=is_directory,
        )
        if not self.buffer.push(raw_event):
            logger.debug(f"Dropped {kind.name.lower()} event for {raw_event.path}: buffer full")

    def on_created(self, event):
        is_dir = isinstance(event, DirCreatedEvent)
        self._emit(ChangeKind.CREATED, event.src_path, is_dir)

    def on_deleted(self, event):
        is_dir = isinstance(event, DirDeletedEvent)
        self._emit(ChangeKind.DELETED, event.src_path, is_dir)

    def on_modified(self, event):
        is_dir = isinstance(event, DirModifiedEvent)
        self._emit(ChangeKind.MODIFIED, event.src_path, is_dir)

    def on_moved(self, event):
        # A rename is reported as the source going away and the destination appearing,
        # so "write temp file then rename" saves surface as a creation of the target.
        is_dir = isinstance(event, DirMovedEvent)
        self._emit(ChangeKind.DELETED, event.src_path, is_dir)
        self._emit(ChangeKind.CREATED, event.dest_path, is_dir)


def is_write_complete(path: Path) -> bool:
    """
    Check that no writer currently holds a file.

    Only regular files are probed; directories, FIFOs, sockets and device
    nodes are reported as complete, since opening a FIFO would block until
    a writer appears. On POSIX a non-blocking shared advisory lock is
    attempted; it fails while a writer holds an exclusive ``flock``.
    Writers that never take a lock (most editors, plain ``open("w")``)
    are invisible to this check, so their events are delivered as soon as
    the debounce window closes. Elsewhere the file is opened for
    appending, which fails while another process has it open for writing
    without sharing.

    Args:
        path: File to probe

    Returns:
        True if the file can be read safely, False if it is still being
        written or has vanished
    """
    try:
        if not stat.S_ISREG(os.stat(path).st_mode):
            return True

        if os.name == "posix":
            import fcntl

            with open(path, "rb") as f:
                try:
                    fcntl.flock(f.fileno(), fcntl.LOCK_SH | fcntl.LOCK_NB)
                except BlockingIOError:
                    return False
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            return True

        with open(path, "ab"):
            pass
        return True
    except FileNotFoundError:
        return False
    except PermissionError:
        return False
