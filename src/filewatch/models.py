"""Data models for the filewatch package."""

from dataclasses import dataclass, field
from enum import Flag
from pathlib import Path
from typing import Callable, Dict
import time


class ChangeKind(Flag):
    """
    Kinds of change reported for a watched path.

    Members combine into a subscription mask, e.g.
    ``ChangeKind.CREATED | ChangeKind.MODIFIED``. Use ``kind in mask``
    to test whether a mask covers a kind.
    """
    CREATED = 1
    DELETED = 2
    MODIFIED = 4

    @classmethod
    def parse(cls, text: str) -> "ChangeKind":
        """
        Parse a comma separated list of kind names into a mask.

        Accepts member names in any case plus the aliases ``all`` and
        ``create_or_modify``.

        Args:
            text: Text such as ``"created,modified"``

        Returns:
            The combined mask

        Raises:
            ValueError: If a name is not recognized or the text is empty
        """
        mask = cls(0)
        for token in text.split(","):
            name = token.strip().upper()
            if not name:
                continue
            if name == "ALL":
                mask |= ALL_CHANGES
            elif name == "CREATE_OR_MODIFY":
                mask |= CREATE_OR_MODIFY
            elif name in cls.__members__:
                mask |= cls[name]
            else:
                raise ValueError(f"Unknown change kind: {token.strip()}")
        if not mask:
            raise ValueError(f"No change kinds in: {text!r}")
        return mask


CREATE_OR_MODIFY = ChangeKind.CREATED | ChangeKind.MODIFIED
ALL_CHANGES = ChangeKind.CREATED | ChangeKind.DELETED | ChangeKind.MODIFIED

# Callback invoked with the coalesced changes, keyed by absolute path.
ChangeCallback = Callable[[Dict[Path, ChangeKind]], None]


@dataclass
class RawChangeEvent:
    """
    Raw event from the filesystem observer before filtering.

    Attributes:
        kind: The single change kind this event reports
        path: Path of the changed entry
        is_directory: Whether the entry is a directory
        timestamp: Unix timestamp when the event was observed
    """
    kind: ChangeKind
    path: Path
    is_directory: bool = False
    timestamp: float = field(default_factory=time.time)
