"""
Glob pattern compilation for metric filters.

Patterns use shell-style wildcards (``*``, ``?``, ``[abc]``, ``[!abc]``) plus
brace alternation (``{cpu,mem}``). A list of patterns is compiled into a single
matcher that reports whether a string matches any of them. Compiled matchers
hold no mutable state and can be shared between threads.
"""

import fnmatch
import re
from typing import FrozenSet, Iterable, List, Optional, Pattern

GLOB_META_CHARS = "*?[{"


class GlobError(ValueError):
    """Raised when a glob pattern has invalid syntax."""


class ExactMatcher:
    """Matches strings equal to one of a set of literal values."""

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[str]):
        self._values: FrozenSet[str] = frozenset(values)

    def match(self, value: str) -> bool:
        return value in self._values


class GlobMatcher:
    """Matches strings against a set of compiled glob patterns."""

    __slots__ = ("_regex",)

    def __init__(self, regex: Pattern):
        self._regex = regex

    def match(self, value: str) -> bool:
        return self._regex.match(value) is not None


def has_meta(pattern: str) -> bool:
    """Return True when the pattern contains any glob syntax."""
    return any(ch in pattern for ch in GLOB_META_CHARS)


def _bracket_end(pattern: str, index: int) -> int:
    """Index of the ']' closing the class opened at ``index``, or -1."""
    cursor = index + 1
    if cursor < len(pattern) and pattern[cursor] == "!":
        cursor += 1
    # A ']' right after the opening bracket is a literal member.
    if cursor < len(pattern) and pattern[cursor] == "]":
        cursor += 1
    return pattern.find("]", cursor)


def _split_alternatives(body: str) -> List[str]:
    options = []
    depth = 0
    current = []
    index = 0
    while index < len(body):
        ch = body[index]
        if ch == "[":
            close = _bracket_end(body, index)
            if close != -1:
                current.append(body[index:close + 1])
                index = close + 1
                continue
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        if ch == "," and depth == 0:
            options.append("".join(current))
            current = []
        else:
            current.append(ch)
        index += 1
    options.append("".join(current))
    return options


def expand_braces(pattern: str) -> List[str]:
    """
    Expand brace alternation into plain glob patterns.

    ``"cpu{0,1}_*"`` becomes ``["cpu0_*", "cpu1_*"]``. Nested braces are
    supported. Braces inside a character class are literal.

    Raises:
        GlobError: If a '{' is never closed
    """
    depth = 0
    start = 0
    index = 0
    while index < len(pattern):
        ch = pattern[index]
        if ch == "[":
            close = _bracket_end(pattern, index)
            if close != -1:
                index = close + 1
                continue
        elif ch == "{":
            if depth == 0:
                start = index
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
            if depth == 0:
                prefix = pattern[:start]
                suffix = pattern[index + 1:]
                expanded = []
                for option in _split_alternatives(pattern[start + 1:index]):
                    expanded.extend(expand_braces(prefix + option + suffix))
                return expanded
        index += 1
    if depth:
        raise GlobError(f"unexpected end of input: unclosed '{{' in {pattern!r}")
    return [pattern]


def _check_brackets(pattern: str) -> None:
    index = 0
    length = len(pattern)
    while index < length:
        if pattern[index] == "[":
            close = _bracket_end(pattern, index)
            if close == -1:
                raise GlobError(f"unexpected end of input: unclosed '[' in {pattern!r}")
            index = close
        index += 1


def compile_glob(pattern: str) -> GlobMatcher:
    """
    Compile a single glob pattern.

    Raises:
        GlobError: If the pattern has invalid syntax
    """
    return _compile_patterns([pattern])


def _compile_patterns(patterns: List[str]) -> GlobMatcher:
    alternatives = []
    for pattern in patterns:
        _check_brackets(pattern)
        alternatives.extend(fnmatch.translate(p) for p in expand_braces(pattern))
    try:
        regex = re.compile("|".join(alternatives))
    except re.error as e:
        raise GlobError(f"invalid glob pattern in {patterns!r}: {e}") from e
    return GlobMatcher(regex)


def compile_filter(patterns: Optional[Iterable[str]]):
    """
    Compile a list of glob patterns into a single matcher.

    Args:
        patterns: Glob patterns; None or empty means "no filter"

    Returns:
        None when there are no patterns, an ExactMatcher when no pattern uses
        glob syntax, otherwise a GlobMatcher

    Raises:
        GlobError: If any pattern has invalid syntax
    """
    if not patterns:
        return None
    patterns = list(patterns)
    if not patterns:
        return None
    if not any(has_meta(p) for p in patterns):
        return ExactMatcher(patterns)
    return _compile_patterns(patterns)
