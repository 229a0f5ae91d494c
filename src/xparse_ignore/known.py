"""Built-in ignore and importance rules that apply without any rule file"""

import re
from typing import Optional
from .fs import FileSystem, join_path
from .types import BuiltinClassification

# Version control and package manager directories
KNOWN_IGNORE_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".github",
        "node_modules",
    }
)
KNOWN_IGNORE_FILES = frozenset(
    {
        "yarn.lock",
        "yarn-error.log",
        "package-lock.json",
        "npm-debug.log",
    }
)
KNOWN_IMPORTANT_DIRS = frozenset()
KNOWN_IMPORTANT_FILES = frozenset({".gitignore"})

# A "vendor" directory is only a dependency folder next to one of these
MANIFEST_MARKERS = ("composer.json",)

# name.xx, name.xx.ext: pinned, always kept
PINNED_RE = re.compile(r"\.xx(\.|$)")
# z__name.xx, z__name.xx.ext: temporary, always ignored
TEMP_RE = re.compile(r"^z__.*\.xx(\.|$)")
LOG_RE = re.compile(r".*\.log$")


def is_known_ignored(
    name: str,
    is_directory: bool,
    parent: Optional[str] = None,
    fs: Optional[FileSystem] = None,
) -> bool:
    """Check the built-in ignore tables.

    Args:
        name: Base name of the path
        is_directory: Whether the path is a directory
        parent: Directory containing the path, needed for the vendor check
        fs: Filesystem used for the vendor check
    """
    if is_directory:
        if name in KNOWN_IGNORE_DIRS:
            return True
        if name == "vendor" and parent is not None and fs is not None:
            return any(fs.exists(join_path(parent, marker)) for marker in MANIFEST_MARKERS)
        return False

    if name in KNOWN_IGNORE_FILES:
        return True
    if TEMP_RE.search(name):
        return True
    return bool(LOG_RE.match(name))


def is_known_important(name: str, is_directory: bool) -> bool:
    """Check the built-in importance tables. Temporary names are never important."""
    if is_directory:
        if name in KNOWN_IMPORTANT_DIRS:
            return True
        return bool(PINNED_RE.search(name))

    if name in KNOWN_IMPORTANT_FILES:
        return True
    return bool(PINNED_RE.search(name)) and not TEMP_RE.search(name)


def classify_builtin(
    name: str,
    is_directory: bool,
    parent: Optional[str] = None,
    fs: Optional[FileSystem] = None,
) -> BuiltinClassification:
    """Classify a path name against the built-in tables only."""
    return BuiltinClassification(
        ignored=is_known_ignored(name, is_directory, parent, fs),
        important=is_known_important(name, is_directory),
    )
