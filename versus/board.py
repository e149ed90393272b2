"""
Immutable grid shared by both games.

The board stores a flat row-major tuple of cells. Constructors accept the
nested per-row encoding, the flat 1-D encoding, text fixtures and numpy
arrays, so every caller sees the same ``get``/``with_move`` surface.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from versus.errors import IllegalMove, InvalidBoard
from versus.types import (
    CELL_VALUES,
    CELLS_BY_SYMBOL,
    EMPTY,
    SYMBOLS,
    Cell,
    Player,
    Position,
    is_valid_player,
)


@dataclass(frozen=True)
class Board:
    """Fixed-size grid of tri-state cells (copy-on-write)."""

    rows: int
    cols: int
    cells: Tuple[Cell, ...]

    def __post_init__(self) -> None:
        """Validate dimensions and cell values."""
        if self.rows <= 0 or self.cols <= 0:
            raise InvalidBoard(f"Board dimensions must be positive, got {self.rows}x{self.cols}")
        if not isinstance(self.cells, tuple) or len(self.cells) != self.rows * self.cols:
            raise InvalidBoard(f"Board needs a tuple of {self.rows * self.cols} cells")
        if any(c not in CELL_VALUES for c in self.cells):
            raise InvalidBoard(f"Cells must be one of {CELL_VALUES}")

    # ----------------------------
    # Constructors
    # ----------------------------
    @classmethod
    def empty(cls, rows: int, cols: int) -> 'Board':
        return cls(rows, cols, (EMPTY,) * (rows * cols))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> 'Board':
        """Build from nested per-row lists (row 0 first)."""
        if not rows or any(len(r) != len(rows[0]) for r in rows):
            raise InvalidBoard("Rows must be non-empty and of equal length")
        return cls(len(rows), len(rows[0]), tuple(int(v) for r in rows for v in r))

    @classmethod
    def from_flat(cls, cells: Sequence[int], rows: int, cols: int) -> 'Board':
        """Build from a flat row-major sequence."""
        return cls(rows, cols, tuple(int(v) for v in cells))

    @classmethod
    def from_strings(cls, lines: Iterable[str]) -> 'Board':
        """Build from text rows using '.', 'X' and 'O' (spaces ignored)."""
        parsed: List[List[int]] = []
        for line in lines:
            compact = line.replace(' ', '')
            try:
                parsed.append([CELLS_BY_SYMBOL[ch] for ch in compact.upper()])
            except KeyError as exc:
                raise InvalidBoard(f"Unknown cell symbol {exc.args[0]!r} in {line!r}") from None
        return cls.from_rows(parsed)

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'Board':
        """Build from a 2-D numpy array."""
        arr = np.asarray(array)
        if arr.ndim != 2:
            raise InvalidBoard(f"Expected a 2-D array, got shape {arr.shape}")
        return cls(int(arr.shape[0]), int(arr.shape[1]), tuple(int(v) for v in arr.ravel()))

    # ----------------------------
    # Access
    # ----------------------------
    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(f"({row}, {col}) is outside a {self.rows}x{self.cols} board")
        return self.cells[row * self.cols + col]

    def row(self, row: int) -> Tuple[Cell, ...]:
        start = row * self.cols
        return self.cells[start:start + self.cols]

    def column(self, col: int) -> Tuple[Cell, ...]:
        return self.cells[col::self.cols]

    def positions(self, value: Cell) -> List[Position]:
        """All (row, col) holding ``value``, row-major."""
        cols = self.cols
        return [divmod(i, cols) for i, v in enumerate(self.cells) if v == value]

    def count(self, player: Player) -> int:
        return self.cells.count(player)

    def empty_count(self) -> int:
        return self.cells.count(EMPTY)

    def stones(self) -> int:
        """Number of occupied cells."""
        return len(self.cells) - self.cells.count(EMPTY)

    # ----------------------------
    # Copy-on-write updates
    # ----------------------------
    def with_move(self, row: int, col: int, player: Player) -> 'Board':
        """New board with ``player`` placed on an empty cell."""
        if not is_valid_player(player):
            raise InvalidBoard(f"Invalid player {player!r}")
        if self.get(row, col) != EMPTY:
            raise IllegalMove(f"Cell ({row}, {col}) is already occupied")
        cells = list(self.cells)
        cells[row * self.cols + col] = player
        return Board(self.rows, self.cols, tuple(cells))

    def with_flips(self, positions: Iterable[Position], player: Player) -> 'Board':
        """New board with occupied ``positions`` recoloured to ``player``."""
        cells = list(self.cells)
        for row, col in positions:
            idx = row * self.cols + col
            if cells[idx] == EMPTY:
                raise IllegalMove(f"Cannot flip empty cell ({row}, {col})")
            cells[idx] = player
        return Board(self.rows, self.cols, tuple(cells))

    # ----------------------------
    # Export
    # ----------------------------
    def to_rows(self) -> List[List[Cell]]:
        return [list(self.row(r)) for r in range(self.rows)]

    def to_array(self) -> np.ndarray:
        return np.array(self.cells, dtype=np.int8).reshape(self.rows, self.cols)

    def render(self, show_indices: bool = True) -> str:
        """ASCII grid, row 0 on top."""
        lines: List[str] = []
        if show_indices:
            lines.append("  " + " ".join(str(c) for c in range(self.cols)))
        for r in range(self.rows):
            body = " ".join(SYMBOLS[v] for v in self.row(r))
            lines.append(f"{r} {body}" if show_indices else body)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render(show_indices=False)
