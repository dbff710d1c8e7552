"""
aspect_weaver.position
======================

Line/column positions and their mapping to character offsets.

Positions are the coordinates the analysis pass reports: both components are
1-indexed, the column counts characters on the current line, and a newline
character starts the next line at column 1.

Public API
----------
    Position        - ordered (line, column) pair
    resolve_offset  - (line, column) -> offset of that character in a text
    position_at     - offset -> (line, column), the inverse of resolve_offset
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from aspect_weaver.errors import PositionNotFound


@dataclass(frozen=True, order=True)
class Position:
    """A 1-indexed source position, ordered by line and then column."""

    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 1 or self.column < 1:
            raise ValueError(
                f"positions are 1-indexed, got {self.line}:{self.column}"
            )

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


def resolve_offset(text: str, pos: Position, *, source: Optional[str] = None) -> int:
    """Return the offset of the character at *pos* in *text*.

    The scan is linear from the start of *text*.  A position one past the
    last character does not name a character and is not found.

    Raises
    ------
    PositionNotFound
        When the end of *text* is reached without meeting *pos*.
    """
    line = 1
    column = 1
    for offset, char in enumerate(text):
        if line == pos.line and column == pos.column:
            return offset
        if char == "\n":
            line += 1
            column = 1
        else:
            column += 1
    raise PositionNotFound(pos.line, pos.column, source=source)


def position_at(text: str, offset: int) -> Position:
    """Return the position of the character at *offset* in *text*."""
    if not 0 <= offset < len(text):
        raise IndexError(f"offset {offset} outside text of length {len(text)}")
    prefix = text[:offset]
    line = prefix.count("\n") + 1
    column = offset - (prefix.rfind("\n") + 1) + 1
    return Position(line, column)


__all__ = ["Position", "resolve_offset", "position_at"]
