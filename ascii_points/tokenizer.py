"""
Separator-driven line tokenizer.

A line is split on any run of one or more separator characters, so
``"1,,2"`` with separators ``","`` gives ``["1", "2"]``. Leading and
trailing separators never produce empty tokens, and a line made only of
separators or whitespace gives no tokens at all (a blank line).

Line terminators and surrounding whitespace are trimmed before splitting,
so ``"1,2,3\\n"`` tokenizes the same way whether or not ``"\\n"`` is in
the separator set. Tokens are stripped of surrounding whitespace.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import lru_cache

DEFAULT_SEPARATORS = " \t\n,"


@lru_cache(maxsize=32)
def _token_pattern(separators: str) -> re.Pattern[str]:
    """Compile a pattern matching one maximal run of non-separator characters."""
    if not separators:
        raise ValueError("Separator set must contain at least one character")
    return re.compile(f"[^{re.escape(''.join(sorted(set(separators))))}]+")


def tokenize(line: str, separators: str = DEFAULT_SEPARATORS) -> Iterator[str]:
    """Lazily yield the tokens of one line.

    Args:
        line: One text line, with or without its line terminator.
        separators: The separator characters; any run of them is one
            boundary.

    Yields:
        Non-empty token strings, left to right.
    """
    pattern = _token_pattern(separators)
    for match in pattern.finditer(line.strip()):
        # Whitespace left between non-whitespace separators ("1, ,2" with ",")
        # is not a value.
        token = match.group().strip()
        if token:
            yield token


def count_tokens(line: str, separators: str = DEFAULT_SEPARATORS) -> int:
    """Return the number of tokens on *line*."""
    return sum(1 for _ in tokenize(line, separators))


def is_blank(line: str, separators: str = DEFAULT_SEPARATORS) -> bool:
    """Return True if *line* contains no tokens."""
    return next(tokenize(line, separators), None) is None
