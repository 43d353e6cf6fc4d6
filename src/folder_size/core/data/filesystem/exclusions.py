"""Glob ignore patterns matched against absolute, forward-slash paths."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from typing import Final

from folder_size.types.aliases import StrPath

_RANGE_RE: Final[re.Pattern[str]] = re.compile(r"^(-?\d+)\.\.(-?\d+)$")

# Regex fragment for "zero or more whole path segments" (globstar)
_GLOBSTAR: Final[str] = "(?:[^/]*/)*"


def normalize_path(path: StrPath) -> str:
    """Convert a native path to the forward-slash form used for matching.

    Args:
        path: Native filesystem path

    Returns:
        Path string with the OS separator replaced by ``/``
    """
    text = os.fspath(path)
    if os.sep != "/":
        text = text.replace(os.sep, "/")
    if os.altsep is not None and os.altsep != "/":
        text = text.replace(os.altsep, "/")
    return text


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives and ``{1..3}`` numeric ranges.

    Braces without a comma or a range are kept literally, as are unbalanced
    braces and braces escaped with a backslash.

    Args:
        pattern: Glob pattern

    Returns:
        Every pattern the braces expand to, in order

    Examples:
        >>> expand_braces("/src/{a,b}/*.js")
        ['/src/a/*.js', '/src/b/*.js']
        >>> expand_braces("/logs/{1..3}")
        ['/logs/1', '/logs/2', '/logs/3']
    """
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            close, parts = _split_brace(pattern, i)
            if close != -1:
                alternatives = _brace_alternatives(parts)
                if alternatives is not None:
                    prefix = pattern[:i]
                    suffix = pattern[close + 1 :]
                    expanded: list[str] = []
                    for alternative in alternatives:
                        expanded.extend(expand_braces(prefix + alternative + suffix))
                    return expanded
        i += 1
    return [pattern]


def _split_brace(pattern: str, start: int) -> tuple[int, list[str]]:
    """Find the brace closing the one at ``start`` and split its top-level parts."""
    depth = 0
    parts: list[str] = []
    current_start = start + 1
    i = start + 1
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                parts.append(pattern[current_start:i])
                return i, parts
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(pattern[current_start:i])
            current_start = i + 1
        i += 1
    return -1, []


def _brace_alternatives(parts: list[str]) -> list[str] | None:
    if len(parts) > 1:
        return parts
    match = _RANGE_RE.match(parts[0])
    if match is None:
        return None
    first, last = int(match.group(1)), int(match.group(2))
    step = 1 if last >= first else -1
    return [str(value) for value in range(first, last + step, step)]


def _class_end(pattern: str, start: int) -> int:
    """Return the index of the ``]`` closing the class opened at ``start``, or -1."""
    i = start + 1
    if i < len(pattern) and pattern[i] in "!^":
        i += 1
    # A leading "]" is a literal member of the class
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    while i < len(pattern) and pattern[i] != "]":
        if pattern[i] == "\\":
            i += 1
        i += 1
    return i if i < len(pattern) else -1


def _translate_class(body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]

    members: list[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            members.append(re.escape(body[i + 1]))
            i += 2
            continue
        members.append("\\" + char if char in "\\[]^" else char)
        i += 1

    inner = "".join(members)
    if negate:
        return f"[^/{inner}]"
    return f"(?!/)[{inner}]"


def translate_glob(pattern: str) -> str:
    """Translate one brace-free glob into a regular expression body.

    Path separators are never matched by ``*``, ``?`` or classes. A ``**``
    that forms a whole segment matches zero or more segments, and a trailing
    ``/**`` also matches the directory itself. Dotfiles are matched like any
    other name.

    Args:
        pattern: Glob pattern without brace expressions

    Returns:
        Regular expression source (without anchors)
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]

        if char == "\\":
            if i + 1 < n:
                out.append(re.escape(pattern[i + 1]))
                i += 2
            else:
                out.append(re.escape("\\"))
                i += 1
            continue

        if char == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            starts_segment = i == 0 or pattern[i - 1] == "/"
            ends_segment = j == n or pattern[j] == "/"
            if j - i >= 2 and starts_segment and ends_segment:
                if j == n:
                    if out and out[-1] == "/":
                        out[-1] = "(?:/.*)?"
                    else:
                        out.append(".*")
                    i = j
                else:
                    out.append(_GLOBSTAR)
                    i = j + 1
                continue
            out.append("[^/]*")
            i = j
            continue

        if char == "?":
            out.append("[^/]")
            i += 1
            continue

        if char == "[":
            end = _class_end(pattern, i)
            if end == -1:
                out.append(re.escape(char))
                i += 1
            else:
                out.append(_translate_class(pattern[i + 1 : end]))
                i = end + 1
            continue

        out.append(re.escape(char))
        i += 1

    return "".join(out)


class GlobPattern:
    """Single ignore pattern compiled to an anchored regular expression.

    Leading ``!`` characters negate the pattern (each one toggles), and a
    pattern starting with ``#`` is a comment that matches nothing.
    """

    def __init__(self, pattern: str, case_sensitive: bool = True) -> None:
        """Initialize the glob pattern.

        Args:
            pattern: The pattern string
            case_sensitive: Whether pattern matching is case-sensitive
        """
        self.pattern: str = pattern
        self.case_sensitive: bool = case_sensitive
        self.negated: bool = False
        self.comment: bool = False
        self._compiled: re.Pattern[str] | None = None

    def compile(self) -> None:
        """Compile the glob pattern."""
        body = self.pattern
        self.comment = body.startswith("#")

        negated = False
        while body.startswith("!"):
            negated = not negated
            body = body[1:]
        self.negated = negated

        alternatives = [translate_glob(expanded) for expanded in expand_braces(body)]
        flags = 0 if self.case_sensitive else re.IGNORECASE
        self._compiled = re.compile("(?:" + "|".join(alternatives) + r")\Z", flags)

    def matches(self, path: StrPath) -> bool:
        """Check if the pattern matches the path.

        Args:
            path: Native or forward-slash path to check

        Returns:
            True if the pattern matches, False otherwise
        """
        if self._compiled is None:
            self.compile()

        assert self._compiled is not None  # Should never be None after compile()
        if self.comment:
            return False

        hit = self._compiled.match(normalize_path(path)) is not None
        return hit != self.negated

    def __repr__(self) -> str:
        return f"GlobPattern({self.pattern!r})"


class IgnoreMatcher:
    """Set of ignore patterns; a path is ignored when any pattern matches."""

    def __init__(self, patterns: Iterable[str] = (), case_sensitive: bool = True) -> None:
        """Initialize the matcher.

        Args:
            patterns: Initial glob patterns
            case_sensitive: Whether pattern matching is case-sensitive
        """
        self.case_sensitive: bool = case_sensitive
        self._patterns: list[GlobPattern] = []
        self.add_patterns(patterns)

    def add_pattern(self, pattern: str) -> None:
        """Add and compile one glob pattern.

        Args:
            pattern: Glob pattern string
        """
        glob = GlobPattern(pattern, self.case_sensitive)
        glob.compile()
        self._patterns.append(glob)

    def add_patterns(self, patterns: Iterable[str]) -> None:
        """Add multiple glob patterns.

        Args:
            patterns: Iterable of glob pattern strings
        """
        for pattern in patterns:
            self.add_pattern(pattern)

    def should_ignore(self, path: StrPath) -> bool:
        """Check if a path should be pruned from size computation.

        Args:
            path: Path to check

        Returns:
            True if any pattern matches the path
        """
        if not self._patterns:
            return False

        normalized = normalize_path(path)
        return any(pattern.matches(normalized) for pattern in self._patterns)

    @property
    def patterns(self) -> list[str]:
        """Pattern strings in insertion order."""
        return [glob.pattern for glob in self._patterns]

    def clear(self) -> None:
        """Clear all patterns."""
        self._patterns.clear()

    def __len__(self) -> int:
        return len(self._patterns)
