"""Positions and locations inside a document."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based (line, column) pair, ordered lexicographically."""

    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 0 or self.column < 0:
            msg = f"Position must be non-negative, got ({self.line}, {self.column})"
            raise ValueError(msg)

    def __str__(self) -> str:
        return f"{self.line},{self.column}"


@dataclass(frozen=True)
class Location:
    """Span between two positions, both ends inclusive."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            msg = f"Location end {self.end} precedes start {self.start}"
            raise ValueError(msg)

    def contains(self, position: Position) -> bool:
        """Return True if position lies within the span, bounds included."""
        return self.start <= position <= self.end
