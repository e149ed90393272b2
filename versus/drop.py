from __future__ import annotations

import numbers
from typing import List, Optional, Tuple

from versus.board import Board
from versus.errors import IllegalMove
from versus.types import DROP_COLS, DROP_ROWS, EMPTY, DropMove, Player, opponent

CONNECT: int = 4

# Horizontal, vertical and both diagonals; each axis is scanned both ways
AXES: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


def _run_length(board: Board, row: int, col: int, dr: int, dc: int, player: Player) -> int:
    """Contiguous ``player`` cells from (row, col) exclusive, walking (dr, dc)."""
    n: int = 0
    r, c = row + dr, col + dc
    while board.in_bounds(r, c) and board.get(r, c) == player:
        n += 1
        r += dr
        c += dc
    return n


class DropRules:
    """Rules of the gravity-drop game (Connect-Four style).

    Row 0 is the top of the board; tokens settle into the highest row index
    that is still empty in their column.
    """

    name = "drop"

    def __init__(self, rows: int = DROP_ROWS, cols: int = DROP_COLS, connect: int = CONNECT) -> None:
        self.rows = rows
        self.cols = cols
        self.connect = connect
        center = cols // 2
        self.column_order: Tuple[int, ...] = tuple(
            sorted(range(cols), key=lambda c: (abs(c - center), c))
        )

    def initial_board(self) -> Board:
        return Board.empty(self.rows, self.cols)

    def legal_moves(self, board: Board, player: Optional[Player] = None) -> List[DropMove]:
        """Columns that are not full, ascending."""
        return [c for c in range(board.cols) if board.get(0, c) == EMPTY]

    def ordered_moves(self, board: Board, player: Optional[Player] = None) -> List[DropMove]:
        """Legal columns, center first."""
        return [c for c in self.column_order if board.get(0, c) == EMPTY]

    def drop_row(self, board: Board, col: int) -> Optional[int]:
        """Lowest empty row of ``col``, or None if the column is full."""
        for r in range(board.rows - 1, -1, -1):
            if board.get(r, col) == EMPTY:
                return r
        return None

    def apply_move(self, board: Board, col: DropMove, player: Player) -> Board:
        if not isinstance(col, numbers.Integral) or not 0 <= col < board.cols:
            raise IllegalMove(f"Column {col!r} is outside the board")
        col = int(col)
        row = self.drop_row(board, col)
        if row is None:
            raise IllegalMove(f"Column {col} is full")
        return board.with_move(row, col, player)

    def is_win(self, board: Board, last_row: int, last_col: int, player: Player) -> bool:
        """True if the token at (last_row, last_col) completes a line for ``player``."""
        for dr, dc in AXES:
            total = 1 + _run_length(board, last_row, last_col, dr, dc, player) \
                + _run_length(board, last_row, last_col, -dr, -dc, player)
            if total >= self.connect:
                return True
        return False

    def is_winning_move(self, board: Board, col: DropMove, player: Player) -> bool:
        """Win check after ``col`` was played; the token is the topmost one."""
        for r in range(board.rows):
            if board.get(r, col) != EMPTY:
                return board.get(r, col) == player and self.is_win(board, r, col, player)
        return False

    def has_winner(self, board: Board, player: Player) -> bool:
        """Full-board scan for a line of ``player``."""
        for r in range(board.rows):
            for c in range(board.cols):
                if board.get(r, c) != player:
                    continue
                for dr, dc in AXES:
                    if 1 + _run_length(board, r, c, dr, dc, player) >= self.connect:
                        return True
        return False

    def is_full(self, board: Board) -> bool:
        return all(board.get(0, c) != EMPTY for c in range(board.cols))

    def is_draw(self, board: Board) -> bool:
        return self.is_full(board) and not self.has_winner(board, 1) and not self.has_winner(board, -1)

    def is_terminal(self, board: Board) -> bool:
        return self.is_full(board) or self.has_winner(board, 1) or self.has_winner(board, -1)

    def winning_columns(self, board: Board, player: Player) -> List[DropMove]:
        """Columns where ``player`` wins immediately."""
        wins: List[DropMove] = []
        for col in self.legal_moves(board):
            row = self.drop_row(board, col)
            if row is not None and self.is_win(board.with_move(row, col, player), row, col, player):
                wins.append(col)
        return wins

    def gives_opponent_win(self, board: Board, col: DropMove, player: Player) -> bool:
        """True if playing ``col`` leaves the opponent an immediate win."""
        child = self.apply_move(board, col, player)
        return bool(self.winning_columns(child, opponent(player)))


# Convenience functional API

_DEFAULT = DropRules()


def initial_board() -> Board:
    return _DEFAULT.initial_board()


def legal_moves(board: Board) -> List[DropMove]:
    return _DEFAULT.legal_moves(board)


def apply_move(board: Board, col: DropMove, player: Player) -> Board:
    return _DEFAULT.apply_move(board, col, player)


def is_win(board: Board, last_row: int, last_col: int, player: Player) -> bool:
    return _DEFAULT.is_win(board, last_row, last_col, player)


def is_draw(board: Board) -> bool:
    return _DEFAULT.is_draw(board)
