"""
Custom exceptions for the hotswap package.
"""


class HotSwapError(Exception):
    """Base exception for hotswap errors."""
    pass


class DirectiveError(HotSwapError):
    """Error related to the directive file."""
    pass


class DirectiveUnreadableError(DirectiveError):
    """Directive file is missing or cannot be read."""
    pass


class DirectiveEmptyError(DirectiveError):
    """Directive file has no content lines."""
    pass


class SwitchDisabledError(DirectiveError):
    """Directive file does not enable processing with switch=on."""
    pass


class UnitResolutionError(HotSwapError):
    """A unit could not be found or its content could not be read."""
    def __init__(self, unit_id: str, reason: str):
        super().__init__(f"Cannot resolve unit [{unit_id}]: {reason}")
        self.unit_id = unit_id
        self.reason = reason


class RedefinitionError(HotSwapError):
    """Redefining one or more units failed; their definitions are unchanged."""
    def __init__(self, unit_ids, reason: str):
        self.unit_ids = list(unit_ids)
        self.reason = reason
        super().__init__(f"Cannot redefine {self.unit_ids}: {reason}")


class HookExecutionError(HotSwapError):
    """A post-reload hook raised."""
    def __init__(self, unit_id: str, reason: str):
        super().__init__(f"Reload hook for [{unit_id}] failed: {reason}")
        self.unit_id = unit_id
        self.reason = reason
