"""Instance path pattern matching.

Patterns use two wildcards: ``*`` matches any run of characters, including
none, and ``?`` matches exactly one character. Every other character, dots and
brackets included, matches itself. A pattern without wildcards only matches
the identical path.
"""

import re
from functools import lru_cache

__all__ = ["has_wildcard", "is_match"]

_WILDCARDS = frozenset("*?")


def has_wildcard(pattern: str) -> bool:
    return any(c in _WILDCARDS for c in pattern)


def is_match(pattern: str, path: str) -> bool:
    """Check whether an instance path matches a pattern.

    Args:
        pattern: The scope pattern stored on an override or alias.
        path: The full instance path being resolved.

    Returns:
        True if the path matches.

    Example:
        >>> is_match("agent?.driver0", "agent1.driver0")
        True
        >>> is_match("agent?.driver0", "agent10.driver0")
        False
        >>> is_match("*", "")
        True
    """
    if pattern == "*":
        return True
    if not has_wildcard(pattern):
        return pattern == path
    return _compile(pattern).fullmatch(path) is not None


@lru_cache(maxsize=None)
def _compile(pattern: str) -> re.Pattern:
    parts = []
    for c in pattern:
        if c == "*":
            parts.append(".*")
        elif c == "?":
            parts.append(".")
        else:
            parts.append(re.escape(c))
    return re.compile("".join(parts), re.DOTALL)
