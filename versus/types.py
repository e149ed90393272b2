"""
Type definitions and protocols for the decision engine.

This module provides:
- Type aliases and the fixed cell encoding shared by both games
- The capability protocol consumed by the search core
- Dataclasses for search statistics and selector decisions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Protocol, Tuple, Union

if TYPE_CHECKING:
    from versus.board import Board

# Cell encoding (row-major, row 0 is the top row)
EMPTY = 0
PLAYER_A = 1   # 'X', moves first; black in the flip game
PLAYER_B = -1  # 'O'; white in the flip game
VALID_PLAYERS = (PLAYER_A, PLAYER_B)
CELL_VALUES = (PLAYER_B, EMPTY, PLAYER_A)

SYMBOLS = {EMPTY: '.', PLAYER_A: 'X', PLAYER_B: 'O'}
CELLS_BY_SYMBOL = {'.': EMPTY, '_': EMPTY, 'X': PLAYER_A, 'O': PLAYER_B}

# Basic type aliases
Player = int  # PLAYER_A or PLAYER_B
Cell = int    # EMPTY, PLAYER_A or PLAYER_B
Position = Tuple[int, int]  # (row, col)
DropMove = int              # column index
FlipMove = Position         # (row, col)
Move = Union[DropMove, FlipMove]
SearchOutcome = Tuple[float, Optional[Move]]  # (score, best_move)

# Game geometry
DROP_ROWS = 6
DROP_COLS = 7
FLIP_SIZE = 8

# Terminal score; larger than any heuristic sum the evaluators can produce
WIN_SCORE = 1e9


def opponent(player: Player) -> Player:
    """The other player."""
    return -player


def is_valid_player(player: Any) -> bool:
    """Check if a value is a valid player identifier."""
    return player in VALID_PLAYERS and not isinstance(player, bool)


class GameProtocol(Protocol):
    """Capability interface consumed by the search core."""

    name: str

    def legal_moves(self, board: Board, player: Player) -> List[Move]:
        ...

    def apply_move(self, board: Board, move: Move, player: Player) -> Board:
        ...

    def is_winning_move(self, board: Board, move: Move, player: Player) -> bool:
        ...

    def is_terminal(self, board: Board) -> bool:
        ...

    def evaluate(self, board: Board, player: Player) -> float:
        ...


@dataclass
class SearchStats:
    """Counters collected during one search."""
    nodes: int = 0
    leaves: int = 0
    cutoffs: int = 0
    terminal_hits: int = 0
    max_depth: int = 0


@dataclass
class Decision:
    """What the move selector chose and why."""
    move: Optional[Move]
    source: str  # "win", "block", "center", "search", "fallback" or "none"
    score: Optional[float] = None
    depth: int = 0
    candidates: List[Move] = field(default_factory=list)
    stats: SearchStats = field(default_factory=SearchStats)
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"
