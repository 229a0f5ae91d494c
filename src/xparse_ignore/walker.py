"""TreeWalker class"""

import logging
import threading
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union
from .fs import FileSystem, LocalFileSystem, join_path
from .ignore import RULE_FILE_NAME, RuleScopeBuilder, match_chain
from .known import classify_builtin
from .types import DirEntry, Entry, Importance, RootError, ScopeChain

logger = logging.getLogger(__name__)


class _Frame(NamedTuple):
    """A directory waiting to be visited."""

    directory: str
    relative: str
    chain: ScopeChain  # Scopes of the ancestors, not of this directory
    forced_important: bool
    listing: List[DirEntry]


class TreeWalker:
    """Classifies every path under a root as kept or ignored.

    The walk is depth first. All children of a directory are classified
    and emitted (in listing order) before any kept subdirectory is entered.
    Ignored directories that are not important are never entered.
    """

    def __init__(
        self,
        fs: Optional[FileSystem] = None,
        rule_file: str = RULE_FILE_NAME,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.fs = fs or LocalFileSystem()
        self.scopes = RuleScopeBuilder(self.fs, rule_file)
        self.cancel_event = cancel_event

    def walk(self, root: Union[str, Path]) -> Iterator[Entry]:
        """Yield one Entry per visited path.

        Raises:
            RootError: if the root is not a readable directory. This happens
                on the first ``next()``, before any entry is produced.
        """
        root_dir = self.fs.resolve_root(root)
        try:
            listing = self.fs.list_directory(root_dir)
        except OSError as e:
            raise RootError(f"Cannot list root directory ({root_dir}): {e}") from e

        stack = [_Frame(root_dir, "", (), False, listing)]
        while stack:
            if self.cancel_event is not None and self.cancel_event.is_set():
                logger.info(f"Walk of {root_dir} cancelled")
                return

            frame = stack.pop()
            logger.debug(f"Walking directory: {frame.directory}")
            scope = self.scopes.build(
                frame.directory, frame.relative, frame.forced_important
            )
            chain = frame.chain + (scope,)

            subdirs = []
            for child in frame.listing:
                entry, child_listing = self._classify(child, frame, chain)
                yield entry
                if child_listing is not None:
                    subdirs.append(
                        _Frame(
                            entry.absolute_path,
                            entry.relative_path,
                            chain,
                            entry.important is not Importance.NONE,
                            child_listing,
                        )
                    )
            # Reversed so the first subdirectory is visited first
            stack.extend(reversed(subdirs))

    def _classify(
        self, child: DirEntry, frame: _Frame, chain: ScopeChain
    ) -> Tuple[Entry, Optional[List[DirEntry]]]:
        """Classify one child and, for a kept directory, list its contents.

        Listing happens here so a read failure can be recorded on the
        directory's own entry.
        """
        name = child.name
        is_dir = child.is_directory
        relative = f"{frame.relative}/{name}" if frame.relative else name
        absolute = join_path(frame.directory, name)

        builtin = classify_builtin(name, is_dir, frame.directory, self.fs)
        match = match_chain(chain, relative, is_dir)

        if frame.forced_important:
            important = Importance.INHERITED
        elif builtin.important:
            important = Importance.BUILTIN
        elif match.negated:
            important = Importance.NEGATED_RULE
        else:
            important = Importance.NONE
        ignored = builtin.ignored or match.ignored
        kept = important is not Importance.NONE or not ignored

        listing = None
        error = None
        if is_dir and kept:
            try:
                listing = self.fs.list_directory(absolute)
            except OSError as e:
                error = str(e)
                logger.warning(f"Cannot list directory {absolute}, skipped: {e}")
        elif is_dir:
            logger.debug(f"Pruned ignored directory: {relative}")

        entry = Entry(
            absolute_path=absolute,
            relative_path=relative,
            basename=name,
            is_directory=is_dir,
            ignored=ignored,
            ignored_by=match.ignored_by,
            important=important,
            important_by=match.important_by,
            error=error,
        )
        return entry, listing


def walk_tree(root: Union[str, Path], **kwargs) -> List[Entry]:
    """Walk ``root`` and collect every entry. Keyword arguments go to TreeWalker."""
    return list(TreeWalker(**kwargs).walk(root))
