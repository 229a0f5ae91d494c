"""Formatting of walker entries into path lists"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union
from .types import Entry, Importance
from .walker import TreeWalker

SEPARATORS = ("/", "\\")


def normalize_separator(path: str, separator: Optional[str] = None) -> str:
    """Rewrite the forward slashes of a walker path to ``separator`` (default: os.sep).

    Backslashes are left alone: on POSIX they are part of file names.
    """
    if separator not in SEPARATORS:
        separator = os.sep
    if separator == "/":
        return path
    return path.replace("/", separator)


def is_reported(entry: Entry, want_ignored: bool) -> bool:
    important = entry.important is not Importance.NONE
    if want_ignored:
        return entry.ignored and not important
    return important or not entry.ignored


def report(
    entries: Iterable[Entry],
    want_ignored: bool = False,
    relative: bool = False,
    separator: Optional[str] = None,
) -> List[str]:
    """Turn entries into path strings, keeping the walk order.

    Args:
        entries: Entries as produced by TreeWalker.walk
        want_ignored: Report ignored entries instead of kept ones
        relative: Report paths relative to the walk root
        separator: "/" or "\\"; anything else means the platform separator

    Returns:
        One path per selected entry
    """
    paths = []
    for entry in entries:
        if not is_reported(entry, want_ignored):
            continue
        path = entry.relative_path if relative else entry.absolute_path
        paths.append(normalize_separator(path, separator))
    return paths


def parse_ignore(
    root: Union[str, Path],
    ignored: bool = False,
    relative: bool = False,
    separator: Optional[str] = None,
    **kwargs,
) -> List[str]:
    """Walk ``root`` and report its kept (or ignored) paths.

    Keyword arguments go to TreeWalker.
    """
    return report(TreeWalker(**kwargs).walk(root), ignored, relative, separator)
