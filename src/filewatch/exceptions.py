"""Custom exceptions for the filewatch package."""


class WatcherError(Exception):
    """Base exception for all watcher errors."""
    pass


class WatchRegistrationError(WatcherError):
    """A path could not be registered for change notifications."""
    pass


class WatchPathNotFoundError(WatchRegistrationError):
    """The path to watch does not exist."""
    pass


class InvalidWatchKindsError(WatchRegistrationError):
    """The subscription mask selects no change kinds."""
    pass


class SchedulerAlreadyRunningError(WatcherError):
    """Tick scheduler is already running."""
    pass
