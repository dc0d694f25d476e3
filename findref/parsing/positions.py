"""Offset to line/column translation."""

from __future__ import annotations

from bisect import bisect_right
from typing import List

from ..models import Position


class PositionIndex:
    """Maps flat character offsets of one file to 1-based line/column pairs.

    Only ``\\n`` starts a new line; a bare ``\\r`` is an ordinary character.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._line_starts: List[int] = [0]
        position = text.find("\n")
        while position != -1:
            self._line_starts.append(position + 1)
            position = text.find("\n", position + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self._text)))
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line=line + 1, column=offset - self._line_starts[line] + 1)

    def line(self, offset: int) -> int:
        return self.position(offset).line


def line_context(text: str, offset: int) -> str:
    """Return the trimmed line of ``text`` containing ``offset``."""
    if not text:
        return ""
    offset = max(0, min(offset, len(text)))
    line_start = text.rfind("\n", 0, offset) + 1
    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    return text[line_start:line_end].strip()


__all__ = ["PositionIndex", "line_context"]
