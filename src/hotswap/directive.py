"""
Directive file reading and parsing.

Format (UTF-8, one instruction per line):

    # comment
    switch=on
    myapp.handlers.LoginHandler
    myapp.models.Player;myapp.models.Player.Inventory

Blank lines and ``#`` lines are ignored. ``switch=on`` enables the file;
any other ``switch=`` value, or no switch line, disables it. A line with
``;`` names a group of units reloaded together.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from .exceptions import DirectiveEmptyError, DirectiveUnreadableError
from .models import SWITCH_PREFIX, DirectiveConfig, ReloadLine

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
GROUP_SEPARATOR = ";"


def parse_lines(lines: Iterable[str]) -> DirectiveConfig:
    """
    Parse directive lines into a DirectiveConfig.

    Every ``switch=`` line is collected as a directive and never treated
    as a unit identifier, wherever it appears. Empty members of a group
    line are dropped; a group line with no members left is skipped.

    Args:
        lines: Raw or pre-filtered lines

    Returns:
        The parsed configuration
    """
    config = DirectiveConfig()

    for raw in lines:
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        if line.startswith(SWITCH_PREFIX):
            config.switch_lines.append(line)
            continue

        if GROUP_SEPARATOR in line:
            members = tuple(m.strip() for m in line.split(GROUP_SEPARATOR) if m.strip())
            if not members:
                logger.warning(f"Ignoring directive line without unit names: {line!r}")
                continue
            config.lines.append(ReloadLine(units=members, is_group=True, text=line))
        else:
            config.lines.append(ReloadLine(units=(line,), text=line))

    return config


class DirectiveSource:
    """Reads the directive file from disk."""

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8-sig"):
        self.path = Path(path)
        self.encoding = encoding

    def read_lines(self) -> List[str]:
        """
        Read the content lines of the directive file.

        Returns:
            Trimmed lines, without blank and comment lines

        Raises:
            DirectiveUnreadableError: If the file is missing or unreadable
        """
        try:
            text = self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DirectiveUnreadableError(f"Cannot read directive file {self.path}: {e}") from e

        lines = []
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith(COMMENT_PREFIX):
                continue
            lines.append(line)
        return lines

    def load(self) -> DirectiveConfig:
        """
        Read and parse the directive file.

        Returns:
            The parsed configuration

        Raises:
            DirectiveUnreadableError: If the file is missing or unreadable
            DirectiveEmptyError: If the file has no content lines
        """
        lines = self.read_lines()
        if not lines:
            raise DirectiveEmptyError(f"Directive file {self.path} has no content lines")
        return parse_lines(lines)

    def __repr__(self) -> str:
        return f"DirectiveSource({str(self.path)!r})"
