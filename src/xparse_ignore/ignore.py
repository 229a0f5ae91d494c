"""RuleScopeBuilder class and scope chain evaluation"""

import logging
from typing import List, Optional
from .fs import FileSystem, LocalFileSystem, join_path
from .patterns import compile_lines
from .types import ChainMatch, Rule, RuleScope, ScopeChain

logger = logging.getLogger(__name__)

RULE_FILE_NAME = ".gitignore"


def parse_ignore_text(content: str) -> List[str]:
    """Parse the content of an ignore file into a list of pattern lines.

    Handles:
    - Empty lines and lines starting with # (ignored)
    - Surrounding whitespace (trimmed)
    - Repeated lines (only the first one is kept)

    Returns:
        Unique pattern lines in file order
    """
    patterns = []
    seen = set()
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line in seen:
            continue
        seen.add(line)
        patterns.append(line)
    return patterns


class RuleScopeBuilder:
    """Builds the RuleScope of one directory from its rule file.

    Exactly one file is read per call; nothing is cached between calls.
    """

    def __init__(
        self, fs: Optional[FileSystem] = None, rule_file: str = RULE_FILE_NAME
    ):
        self.fs = fs or LocalFileSystem()
        self.rule_file = rule_file

    def build(
        self,
        directory: str,
        directory_relative: str = "",
        forced_important: bool = False,
    ) -> RuleScope:
        """Load ``directory``'s rule file into a RuleScope.

        Args:
            directory: Absolute directory path with forward slashes
            directory_relative: The same directory relative to the walk root
            forced_important: Whether an ancestor made this directory important

        Returns:
            RuleScope whose rules keep file order; empty if there is no
            readable rule file
        """
        rule_path = join_path(directory, self.rule_file)
        content = self.fs.read_text(rule_path)
        rules = ()
        if content:
            rules = compile_lines(parse_ignore_text(content), directory_relative)
            logger.debug(f"Loaded {len(rules)} rule(s) from {rule_path}")
        return RuleScope(
            directory=directory,
            directory_relative=directory_relative,
            rules=rules,
            forced_important=forced_important,
        )


def relative_to_scope(relative_path: str, scope: RuleScope) -> Optional[str]:
    """Slice a root-relative path so it is relative to the scope's directory.

    Returns None when the path is not below the scope.
    """
    prefix = scope.directory_relative
    if not prefix:
        return relative_path
    if not relative_path.startswith(prefix + "/"):
        return None
    return relative_path[len(prefix) + 1 :]


def match_chain(chain: ScopeChain, relative_path: str, is_directory: bool) -> ChainMatch:
    """Evaluate every rule of a scope chain against one path.

    Scopes are visited root to leaf and rules in file order. The last
    matching rule decides: a negation un-ignores, anything else ignores.

    Args:
        chain: Scopes from the walk root down to the path's directory
        relative_path: Path relative to the walk root, forward slashes
        is_directory: Whether the path is a directory

    Returns:
        ChainMatch with the polarity of the last match and every matching
        pattern, split by polarity
    """
    last: Optional[Rule] = None
    ignored_by: List[str] = []
    important_by: List[str] = []

    for scope in chain:
        test = relative_to_scope(relative_path, scope)
        if test is None:
            continue
        for rule in scope.rules:
            if rule.directory_only and not is_directory:
                continue
            if not rule.matches(test):
                continue
            last = rule
            found = important_by if rule.negated else ignored_by
            if rule.raw_pattern not in found:
                found.append(rule.raw_pattern)

    if last is None:
        return ChainMatch(ignored=False, negated=False)
    return ChainMatch(
        ignored=not last.negated,
        negated=last.negated,
        ignored_by=tuple(ignored_by),
        important_by=tuple(important_by),
    )
