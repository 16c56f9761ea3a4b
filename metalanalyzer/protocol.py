"""Positions, ranges and locations as used by the language server protocol."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Position:
    """A zero-based line and character offset in a text document."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """A span of text between two positions, end exclusive."""

    start: Position
    end: Position

    @classmethod
    def empty_at(cls, position: Position) -> "Range":
        """Return a zero-width range located at ``position``."""
        return cls(position, position)


@dataclass(frozen=True)
class Location:
    """A range inside the document identified by ``uri``."""

    uri: str
    range: Range