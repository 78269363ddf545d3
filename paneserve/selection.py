"""Text selection over grid lines."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator


@dataclass(frozen=True, order=True)
class Position:
    """A grid position; lines may be negative (scrollback), ordered by line then column."""

    line: int
    column: int


def _origin() -> Position:
    return Position(0, 0)


@dataclass
class Selection:
    """A selection including ``start`` and everything before ``end``; empty when equal."""

    start: Position = field(default_factory=_origin)
    end: Position = field(default_factory=_origin)
    active: bool = False

    def begin(self, position: Position) -> None:
        self.active = True
        self.start = position
        self.end = position

    def to(self, position: Position) -> None:
        self.end = position

    def finish(self, position: Position | None = None) -> None:
        self.active = False
        if position is not None:
            self.end = position

    def _ordered(self) -> tuple[Position, Position]:
        if self.start <= self.end:
            return self.start, self.end
        return self.end, self.start

    def contains(self, row: int, col: int) -> bool:
        start, end = self._ordered()
        if start.line < row < end.line:
            return True
        if start.line == end.line:
            return row == start.line and start.column <= col < end.column
        if start.line == row and col >= start.column:
            return True
        return end.line == row and col < end.column

    def is_empty(self) -> bool:
        return self.start == self.end

    def reset(self) -> None:
        self.start = Position(0, 0)
        self.end = self.start

    def sorted(self) -> "Selection":
        start, end = self._ordered()
        return Selection(start, end, self.active)

    def line_indices(self) -> range:
        start, end = self._ordered()
        return range(start.line, end.line + 1)

    def move_up(self, lines: int) -> None:
        self.start = replace(self.start, line=self.start.line - lines)
        if not self.active:
            self.end = replace(self.end, line=self.end.line - lines)

    def move_down(self, lines: int) -> None:
        self.start = replace(self.start, line=self.start.line + lines)
        if not self.active:
            self.end = replace(self.end, line=self.end.line + lines)

    def diff(self, other: "Selection", max_lines: int) -> Iterator[int]:
        """Yield, in ascending order, the line indices below ``max_lines`` that need redrawing.

        These are the visible lines covered by exactly one of the two selections, plus
        the first and last lines of both.
        """
        lines = {self.start.line, self.end.line, other.start.line, other.end.line}
        old_lines = set(self._visible_indices(max_lines))
        new_lines = set(other._visible_indices(max_lines))
        lines |= old_lines ^ new_lines
        return (line for line in sorted(lines) if 0 <= line < max_lines)

    def _visible_indices(self, max_lines: int) -> range:
        start, end = self._ordered()
        return range(max(start.line, 0), min(end.line, max_lines))