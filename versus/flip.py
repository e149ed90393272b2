from __future__ import annotations

from typing import List, Optional, Tuple

from versus.board import Board
from versus.errors import IllegalMove
from versus.types import EMPTY, FLIP_SIZE, PLAYER_A, PLAYER_B, FlipMove, Player, Position, opponent

# All 8 compass directions
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


def _bracket(board: Board, row: int, col: int, dr: int, dc: int, player: Player) -> List[Position]:
    """Opponent run starting next to (row, col) closed by a ``player`` disc.

    Returns the run to flip, or an empty list if the direction does not
    bracket (no opponent disc, or the run hits an empty cell or the edge).
    """
    other: Player = opponent(player)
    run: List[Position] = []
    r, c = row + dr, col + dc
    while board.in_bounds(r, c) and board.get(r, c) == other:
        run.append((r, c))
        r += dr
        c += dc
    if run and board.in_bounds(r, c) and board.get(r, c) == player:
        return run
    return []


class FlipRules:
    """Rules of the flip game (Othello / Reversi style) on a square grid."""

    name = "flip"

    def __init__(self, size: int = FLIP_SIZE) -> None:
        if size < 4 or size % 2:
            raise ValueError("Flip board size must be an even number >= 4")
        self.rows = size
        self.cols = size

    def initial_board(self) -> Board:
        """Standard start: two discs each on the center diagonal."""
        mid = self.rows // 2
        board = Board.empty(self.rows, self.cols)
        board = board.with_move(mid - 1, mid - 1, PLAYER_B).with_move(mid, mid, PLAYER_B)
        return board.with_move(mid - 1, mid, PLAYER_A).with_move(mid, mid - 1, PLAYER_A)

    def flips_for(self, board: Board, row: int, col: int, player: Player) -> List[Position]:
        """Discs that placing ``player`` at (row, col) would flip."""
        if board.get(row, col) != EMPTY:
            return []
        flips: List[Position] = []
        for dr, dc in DIRECTIONS:
            flips.extend(_bracket(board, row, col, dr, dc, player))
        return flips

    def is_legal(self, board: Board, row: int, col: int, player: Player) -> bool:
        if not board.in_bounds(row, col) or board.get(row, col) != EMPTY:
            return False
        return any(_bracket(board, row, col, dr, dc, player) for dr, dc in DIRECTIONS)

    def legal_moves(self, board: Board, player: Player) -> List[FlipMove]:
        """Empty cells that bracket at least one opponent run, row-major."""
        return [(r, c) for r, c in board.positions(EMPTY) if self.is_legal(board, r, c, player)]

    def has_legal_move(self, board: Board, player: Player) -> bool:
        for r, c in board.positions(EMPTY):
            if self.is_legal(board, r, c, player):
                return True
        return False

    def apply_move(self, board: Board, move: FlipMove, player: Player) -> Board:
        """Place a disc and flip every bracketed run atomically."""
        try:
            row, col = move
        except (TypeError, ValueError):
            raise IllegalMove(f"Flip moves are (row, col) pairs, got {move!r}") from None
        if not board.in_bounds(row, col):
            raise IllegalMove(f"({row}, {col}) is outside the board")
        if board.get(row, col) != EMPTY:
            raise IllegalMove(f"Cell ({row}, {col}) is already occupied")
        flips = self.flips_for(board, row, col, player)
        if not flips:
            raise IllegalMove(f"({row}, {col}) flips nothing for player {player}")
        return board.with_move(row, col, player).with_flips(flips, player)

    def is_terminal(self, board: Board) -> bool:
        """Neither side can move."""
        return not self.has_legal_move(board, PLAYER_A) and not self.has_legal_move(board, PLAYER_B)

    def winner(self, board: Board) -> Player:
        """Side with strictly more discs, 0 for a draw."""
        a, b = board.count(PLAYER_A), board.count(PLAYER_B)
        if a > b:
            return PLAYER_A
        if b > a:
            return PLAYER_B
        return 0

    def result(self, board: Board) -> Optional[Player]:
        """Winner (0 for a draw) if the game is over, else None."""
        if not self.is_terminal(board):
            return None
        return self.winner(board)

    def is_winning_move(self, board: Board, move: FlipMove, player: Player) -> bool:
        """True if ``move`` ended the game with ``player`` ahead."""
        if board.count(player) <= board.count(opponent(player)):
            return False
        return self.is_terminal(board)


# Convenience functional API

_DEFAULT = FlipRules()


def initial_board() -> Board:
    return _DEFAULT.initial_board()


def legal_moves(board: Board, player: Player) -> List[FlipMove]:
    return _DEFAULT.legal_moves(board, player)


def apply_move(board: Board, move: FlipMove, player: Player) -> Board:
    return _DEFAULT.apply_move(board, move, player)


def is_terminal(board: Board) -> bool:
    return _DEFAULT.is_terminal(board)
