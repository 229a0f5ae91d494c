"""Compilation of .gitignore lines into Rule objects"""

import logging
import re
from typing import Iterable, List, Tuple
from .types import PatternError, Rule, Token, TokenKind

logger = logging.getLogger(__name__)


def tokenize(body: str) -> List[Token]:
    """Split a pattern body into literal and wildcard tokens.

    A run of two or more ``*`` is a single double wildcard.
    """
    tokens: List[Token] = []
    literal = ""
    i = 0
    while i < len(body):
        char = body[i]
        if char == "*" or char == "?":
            if literal:
                tokens.append(Token(TokenKind.LITERAL, literal))
                literal = ""
            if char == "?":
                tokens.append(Token(TokenKind.SINGLE_CHAR))
                i += 1
                continue
            end = i
            while end < len(body) and body[end] == "*":
                end += 1
            if end - i > 1:
                tokens.append(Token(TokenKind.DOUBLE_WILDCARD))
            else:
                tokens.append(Token(TokenKind.WILDCARD))
            i = end
            continue
        literal += char
        i += 1
    if literal:
        tokens.append(Token(TokenKind.LITERAL, literal))
    return tokens


def tokens_to_regex(tokens: List[Token]) -> str:
    """Translate tokens into a regex meant for ``fullmatch``.

    ``**/`` becomes "zero or more whole segments" so ``a/**/b`` also
    matches ``a/b``.
    """
    parts = []
    skip_slash = False
    for i, token in enumerate(tokens):
        if token.kind is TokenKind.LITERAL:
            text = token.text
            if skip_slash:
                text = text[1:]
                skip_slash = False
            parts.append(re.escape(text))
        elif token.kind is TokenKind.WILDCARD:
            parts.append("[^/]*")
        elif token.kind is TokenKind.SINGLE_CHAR:
            parts.append("[^/]")
        else:
            following = tokens[i + 1] if i + 1 < len(tokens) else None
            if (
                following is not None
                and following.kind is TokenKind.LITERAL
                and following.text.startswith("/")
            ):
                parts.append("(?:.*/)?")
                skip_slash = True
            else:
                parts.append(".*")
    return "".join(parts)


def compile_pattern(line: str, source_dir: str = "") -> Rule:
    """Compile a single ignore line into a Rule.

    Args:
        line: One line of a rule file, already known not to be blank or a comment
        source_dir: Directory of the rule file, relative to the walk root

    Raises:
        PatternError: if nothing is left to match once the markers are removed,
            or the translated regex does not compile
    """
    raw = line.strip()
    body = raw

    negated = body.startswith("!")
    if negated:
        body = body[1:]
    # \! and \# stand for a literal leading ! or #
    if body.startswith("\\"):
        body = body[1:]

    directory_only = body.endswith("/")
    if directory_only:
        body = body[:-1]

    anchored = body.startswith("/")
    if anchored:
        body = body[1:]

    if not body:
        raise PatternError(f"Empty ignore pattern: {raw!r}")

    regex = tokens_to_regex(tokenize(body))
    try:
        matcher = re.compile(regex)
    except re.error as e:
        raise PatternError(f"Invalid ignore pattern {raw!r}: {e}") from e

    return Rule(
        raw_pattern=raw,
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
        matcher=matcher,
        source_dir=source_dir,
    )


def compile_lines(lines: Iterable[str], source_dir: str = "") -> Tuple[Rule, ...]:
    """Compile lines in order, dropping the ones that fail with a warning."""
    rules = []
    for line in lines:
        try:
            rules.append(compile_pattern(line, source_dir))
        except PatternError as e:
            where = source_dir or "."
            logger.warning(f"{e} (in {where}), rule dropped")
    return tuple(rules)
