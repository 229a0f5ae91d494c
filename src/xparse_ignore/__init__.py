"""Classify the paths of a directory tree using its .gitignore files."""

__version__ = "0.1.0"

from .types import Entry, Importance, PatternError, RootError, Rule, RuleScope
from .patterns import compile_pattern
from .ignore import RuleScopeBuilder, match_chain
from .known import classify_builtin
from .walker import TreeWalker, walk_tree
from .reporter import parse_ignore, report
from .backup import backup

__all__ = [
    "Entry",
    "Importance",
    "PatternError",
    "RootError",
    "Rule",
    "RuleScope",
    "RuleScopeBuilder",
    "TreeWalker",
    "backup",
    "classify_builtin",
    "compile_pattern",
    "match_chain",
    "parse_ignore",
    "report",
    "walk_tree",
]
