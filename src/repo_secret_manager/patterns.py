"""
Base-name filter used when indexing.

A pattern is a single glob (``*.json``) or a parenthesized, pipe-separated
alternation of globs (``(*.js|*.json)``). ``*`` matches any run of characters,
``?`` exactly one. Every other character is literal, so there are no
character classes. Matching is case-sensitive and covers the whole base name.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache


def split_alternatives(pattern: str) -> list[str]:
    """Expand ``(a|b)`` into ``["a", "b"]``; a plain glob yields itself."""
    if len(pattern) >= 2 and pattern.startswith("(") and pattern.endswith(")"):
        return [p.strip() for p in pattern[1:-1].split("|")]
    return [pattern]


@lru_cache(maxsize=256)
def glob_to_regex(glob: str) -> re.Pattern[str]:
    """Translate one glob into an anchored regular expression."""
    parts = []
    for char in glob:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def matches(file_name: str, pattern: str) -> bool:
    """
    Check whether a file's base name matches the pattern.

    Args:
        file_name: File name or path; only the base name is tested
        pattern: Glob or ``(glob|glob|...)`` alternation

    Returns:
        True if any alternative matches the whole base name
    """
    base_name = os.path.basename(file_name.replace("\\", "/").rstrip("/"))
    return any(
        glob_to_regex(alternative).fullmatch(base_name) is not None
        for alternative in split_alternatives(pattern)
    )
