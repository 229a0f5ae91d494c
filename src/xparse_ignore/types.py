"""Type definitions used across the codebase."""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple
import re


class XParseIgnoreError(Exception):
    """Base class for errors raised by xparse_ignore."""


class RootError(XParseIgnoreError):
    """The walk root (or a backup source/destination) is not usable."""


class PatternError(XParseIgnoreError, ValueError):
    """An ignore line could not be compiled into a rule."""


class TokenKind(Enum):
    """Kinds of tokens an ignore pattern is split into."""

    LITERAL = 1  # Plain text, matched verbatim
    WILDCARD = 2  # *  - any run of characters except /
    DOUBLE_WILDCARD = 3  # ** - any run of characters including /
    SINGLE_CHAR = 4  # ?  - exactly one character except /


class Token(NamedTuple):
    kind: TokenKind
    text: str = ""


class Rule(NamedTuple):
    """Represents one compiled ignore line with its properties."""

    raw_pattern: str  # Original line, trimmed
    negated: bool  # True if pattern starts with !
    directory_only: bool  # True if pattern ends with /
    anchored: bool  # True if pattern starts with / (after ! and before the body)
    matcher: re.Pattern  # Compiled full-string matcher
    source_dir: str = ""  # Directory defining this rule (relative to walk root)

    def matches(self, test: str) -> bool:
        """Check a path relative to the rule's directory against this rule.

        Anchored rules only see the whole string. Unanchored rules are tried
        against every segment suffix, so ``b.log`` is found in ``a/b.log``.
        """
        if self.matcher.fullmatch(test):
            return True
        if self.anchored:
            return False
        start = test.find("/")
        while start != -1:
            if self.matcher.fullmatch(test, start + 1):
                return True
            start = test.find("/", start + 1)
        return False


class RuleScope(NamedTuple):
    """The rules contributed by one directory's rule file."""

    directory: str  # Absolute, forward-slash separated
    directory_relative: str  # Relative to the walk root, "" for the root itself
    rules: Tuple[Rule, ...]
    forced_important: bool = False


ScopeChain = Tuple[RuleScope, ...]


class ChainMatch(NamedTuple):
    """Result of testing one path against a whole scope chain."""

    ignored: bool  # Last matching rule was an ignore rule
    negated: bool  # Last matching rule was a negation
    ignored_by: Tuple[str, ...] = ()
    important_by: Tuple[str, ...] = ()


class BuiltinClassification(NamedTuple):
    ignored: bool
    important: bool


class DirEntry(NamedTuple):
    """One child returned by a directory listing."""

    name: str
    is_directory: bool


class Importance(Enum):
    """Why an entry is kept regardless of ignore rules."""

    NONE = 0
    BUILTIN = 1  # Built-in important name
    NEGATED_RULE = 2  # Last matching rule was a negation
    INHERITED = 3  # An ancestor directory is important


@dataclass(frozen=True)
class Entry:
    """One visited path and the decision trail that classified it."""

    absolute_path: str
    relative_path: str
    basename: str
    is_directory: bool
    ignored: bool
    ignored_by: Tuple[str, ...] = ()
    important: Importance = Importance.NONE
    important_by: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def kept(self) -> bool:
        """Important entries are kept even when ignored."""
        return self.important is not Importance.NONE or not self.ignored
