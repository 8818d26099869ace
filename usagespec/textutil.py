"""Small string helpers used when reading usage text."""

from __future__ import annotations

import re

_ANY_SPACE = re.compile(r"[ \t\r\n\v\f]+")


def trim(text: str, whitespace: str = " \t\n") -> str:
    """Strip the given whitespace characters from both ends."""
    return text.strip(whitespace)


def split(text: str, pos: int = 0) -> list[str]:
    """Split on ASCII whitespace, starting at ``pos``."""
    return [part for part in _ANY_SPACE.split(text[pos:]) if part]


def partition(text: str, point: str) -> tuple[str, str, str]:
    """Split around the first ``point``; the whole text is first if absent."""
    return text.partition(point)


def regex_split(text: str, pattern) -> list[str]:
    """Return the pieces of ``text`` between matches of ``pattern``.

    An empty piece before a leading match is kept; an empty tail after the
    last match is dropped.
    """
    regex = re.compile(pattern)
    pieces: list[str] = []
    last = 0
    found = False
    for match in regex.finditer(text):
        pieces.append(text[last:match.start()])
        last = match.end()
        found = True
    if not found:
        return [text]
    if last < len(text):
        pieces.append(text[last:])
    return pieces