from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

from gemgarden.errors import InvalidRequest

Position = Tuple[int, int]

# Sentinel token for a cleared cell.
EMPTY = -1


@dataclass(slots=True)
class Board:
    """Fixed-size grid of gem kinds.

    cells[row][col] holds a kind in ``[0, kind_count)`` or ``EMPTY``.
    kind_count is kept alongside the grid so refill and shuffle draw from the
    same palette the board was generated with.
    """
    rows: int
    cols: int
    kind_count: int
    cells: List[List[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise InvalidRequest(f"Board dimensions must be positive, got {self.rows}x{self.cols}")
        if self.kind_count <= 0:
            raise InvalidRequest(f"kind_count must be positive, got {self.kind_count}")
        if not self.cells:
            self.cells = [[EMPTY] * self.cols for _ in range(self.rows)]
        elif len(self.cells) != self.rows or any(len(row) != self.cols for row in self.cells):
            raise InvalidRequest("cells do not match board dimensions")

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], kind_count: int | None = None) -> "Board":
        cells = [list(row) for row in rows]
        if kind_count is None:
            kind_count = max((value for row in cells for value in row), default=0) + 1
        return cls(rows=len(cells), cols=len(cells[0]) if cells else 0, kind_count=kind_count, cells=cells)

    def in_bounds(self, pos: Position) -> bool:
        row, col = pos
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check(self, pos: Position) -> None:
        if not self.in_bounds(pos):
            raise InvalidRequest(f"Position {pos} outside {self.rows}x{self.cols} board")

    def get(self, pos: Position) -> int:
        self._check(pos)
        return self.cells[pos[0]][pos[1]]

    def set(self, pos: Position, token: int) -> None:
        self._check(pos)
        self.cells[pos[0]][pos[1]] = token

    def swap(self, a: Position, b: Position) -> None:
        self._check(a)
        self._check(b)
        (ar, ac), (br, bc) = a, b
        self.cells[ar][ac], self.cells[br][bc] = self.cells[br][bc], self.cells[ar][ac]

    def is_empty(self, pos: Position) -> bool:
        return self.get(pos) == EMPTY

    def positions(self) -> Iterator[Position]:
        """Row-major iteration over every cell position."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield (row, col)

    def snapshot(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(row) for row in self.cells)

    def copy(self) -> "Board":
        return Board(rows=self.rows, cols=self.cols, kind_count=self.kind_count,
                     cells=[list(row) for row in self.cells])
