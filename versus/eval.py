"""
Heuristic evaluators for both games.

Each evaluator turns a board into a numpy feature vector seen from one
player's side, then scores it as the dot product with a weight table.
Evaluators hold no state besides their weights and do no I/O.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from config import DropWeights, FlipWeights, SearchConfig, get_weight_table
from versus.board import Board
from versus.drop import AXES, DropRules
from versus.flip import DIRECTIONS, FlipRules
from versus.types import EMPTY, Player, Position, opponent

# Formation templates as (row, col) offsets; row grows downwards
SEVEN_TEMPLATES: Tuple[Tuple[Tuple[int, int], ...], ...] = (
    ((0, 1), (0, 2), (1, 1), (2, 0)),
    ((0, 0), (0, 1), (1, 1), (2, 2)),
)
ELL_TEMPLATES: Tuple[Tuple[Tuple[int, int], ...], ...] = (
    ((0, 0), (1, 0), (1, 1)),
    ((0, 1), (1, 1), (1, 0)),
)


class Evaluator(ABC):
    """Abstract evaluator interface for position scoring."""

    @abstractmethod
    def features(self, board: Board, player: Player) -> np.ndarray:  # pragma: no cover
        """Raw feature vector from ``player``'s side."""
        raise NotImplementedError

    @abstractmethod
    def evaluate_position(self, board: Board, player: Player) -> float:  # pragma: no cover
        """Evaluate a single board position for the given player."""
        raise NotImplementedError

    def __call__(self, board: Board, player: Player) -> float:
        return self.evaluate_position(board, player)

    def batch_predict(self, boards: Sequence[Board],
                      players: Union[Sequence[Player], np.ndarray]) -> np.ndarray:
        """Scores for several positions at once."""
        if len(boards) == 0:
            return np.zeros(0, dtype=np.float64)
        feats = np.stack([self.features(b, int(p)) for b, p in zip(boards, players)])
        return feats @ self._weights


# ============================
# Drop game
# ============================
@lru_cache(maxsize=None)
def _windows(rows: int, cols: int, length: int) -> Tuple[Tuple[int, ...], ...]:
    """Flat cell indices of every straight window of ``length`` cells."""
    out: List[Tuple[int, ...]] = []
    for r in range(rows):
        for c in range(cols):
            for dr, dc in AXES:
                end_r, end_c = r + dr * (length - 1), c + dc * (length - 1)
                if 0 <= end_r < rows and 0 <= end_c < cols:
                    out.append(tuple((r + dr * i) * cols + (c + dc * i) for i in range(length)))
    return tuple(out)


class DropEvaluator(Evaluator):
    """Window patterns, center control, formations, gaps and height."""

    def __init__(self, weights: Optional[DropWeights] = None, rules: Optional[DropRules] = None) -> None:
        self.weights: DropWeights = weights or get_weight_table("drop.default")  # type: ignore[assignment]
        self.rules: DropRules = rules or DropRules()
        self._weights: np.ndarray = self.weights.vector()

    def window_counts(self, board: Board, player: Player) -> Tuple[int, int, int, int, int, int]:
        """(own4, own3, own2, opp4, opp3, opp2) over all pure windows."""
        length: int = self.rules.connect
        other: Player = opponent(player)
        cells = board.cells
        own4 = own3 = own2 = opp4 = opp3 = opp2 = 0
        for window in _windows(board.rows, board.cols, length):
            mine = theirs = 0
            for idx in window:
                v = cells[idx]
                if v == player:
                    mine += 1
                elif v == other:
                    theirs += 1
            if mine and theirs:
                continue
            if mine == length:
                own4 += 1
            elif mine == length - 1:
                own3 += 1
            elif mine == length - 2:
                own2 += 1
            elif theirs == length:
                opp4 += 1
            elif theirs == length - 1:
                opp3 += 1
            elif theirs == length - 2:
                opp2 += 1
        return own4, own3, own2, opp4, opp3, opp2

    def center_score(self, board: Board, player: Player) -> int:
        """Center column occupancy, deeper rows weigh more."""
        col: int = board.cols // 2
        score: int = 0
        for r, v in enumerate(board.column(col)):
            if v == player:
                score += r + 1
            elif v == -player:
                score -= r + 1
        return score

    @staticmethod
    def count_formations(board: Board, player: Player,
                         templates: Tuple[Tuple[Tuple[int, int], ...], ...]) -> int:
        count: int = 0
        for r in range(board.rows):
            for c in range(board.cols):
                for template in templates:
                    if all(board.in_bounds(r + dr, c + dc) and board.get(r + dr, c + dc) == player
                           for dr, dc in template):
                        count += 1
        return count

    @staticmethod
    def count_connections(board: Board, player: Player) -> int:
        """Per own token, axes on which it touches another own token."""
        count: int = 0
        for r, c in board.positions(player):
            for dr, dc in AXES:
                for sign in (1, -1):
                    nr, nc = r + sign * dr, c + sign * dc
                    if board.in_bounds(nr, nc) and board.get(nr, nc) == player:
                        count += 1
                        break
        return count

    def count_dangerous_gaps(self, board: Board, player: Player) -> int:
        """Playable cells sitting on an own token where the opponent would win."""
        other: Player = opponent(player)
        count: int = 0
        for col in self.rules.legal_moves(board):
            row = self.rules.drop_row(board, col)
            if row is None or row == board.rows - 1 or board.get(row + 1, col) != player:
                continue
            if self.rules.is_win(board.with_move(row, col, other), row, col, other):
                count += 1
        return count

    def height_score(self, board: Board, player: Player) -> int:
        if board.stones() >= self.weights.height_penalty_until:
            return 0
        return sum(board.rows - 1 - r for r, _ in board.positions(player))

    def features(self, board: Board, player: Player) -> np.ndarray:
        own4, own3, own2, opp4, opp3, opp2 = self.window_counts(board, player)
        return np.array([
            own4, own3, own2, opp4, opp3, opp2,
            self.center_score(board, player),
            self.count_formations(board, player, SEVEN_TEMPLATES),
            self.count_formations(board, player, ELL_TEMPLATES),
            self.count_connections(board, player),
            self.count_dangerous_gaps(board, player),
            self.height_score(board, player),
        ], dtype=np.float64)

    def evaluate_position(self, board: Board, player: Player) -> float:
        return float(np.dot(self.features(board, player), self._weights))


# ============================
# Flip game
# ============================
@lru_cache(maxsize=None)
def _flip_geometry(size: int) -> Dict[str, object]:
    last: int = size - 1
    corners: Tuple[Position, ...] = ((0, 0), (0, last), (last, 0), (last, last))
    edges = frozenset((r, c) for r in range(size) for c in range(size)
                      if r in (0, last) or c in (0, last))
    mid: int = size // 2
    center = frozenset(((mid - 1, mid - 1), (mid - 1, mid), (mid, mid - 1), (mid, mid)))
    orthogonal: Dict[Position, Tuple[Position, ...]] = {}
    diagonal: Dict[Position, Position] = {}
    for r, c in corners:
        dr = 1 if r == 0 else -1
        dc = 1 if c == 0 else -1
        orthogonal[(r, c)] = ((r + dr, c), (r, c + dc))
        diagonal[(r, c)] = (r + dr, c + dc)
    return {
        "corners": corners,
        "edges": edges,
        "center": center,
        "orthogonal": orthogonal,
        "diagonal": diagonal,
    }


class FlipEvaluator(Evaluator):
    """Positional, mobility and phase features for the flip game."""

    def __init__(self, weights: Optional[FlipWeights] = None, rules: Optional[FlipRules] = None) -> None:
        self.weights: FlipWeights = weights or get_weight_table("flip.default")  # type: ignore[assignment]
        self.rules: FlipRules = rules or FlipRules()
        self._weights: np.ndarray = self.weights.vector()

    def corner_neighbours(self, board: Board, corner: Position, include_diagonal: bool = True) -> List[Position]:
        geo = _flip_geometry(board.rows)
        cells = list(geo["orthogonal"][corner])  # type: ignore[index]
        if include_diagonal:
            cells.append(geo["diagonal"][corner])  # type: ignore[index]
        return cells

    def detect_trap(self, board: Board, player: Player) -> bool:
        """An empty corner with an opponent disc right next to it."""
        other: Player = opponent(player)
        for corner in _flip_geometry(board.rows)["corners"]:  # type: ignore[union-attr]
            if board.get(*corner) != EMPTY:
                continue
            for cell in self.corner_neighbours(board, corner, self.weights.trap_diagonal):
                if board.get(*cell) == other:
                    return True
        return False

    @staticmethod
    def chain_score(board: Board, player: Player) -> int:
        """Same-colour 8-neighbour count, summed over discs."""
        count: int = 0
        for r, c in board.positions(player):
            for dr, dc in DIRECTIONS:
                nr, nc = r + dr, c + dc
                if board.in_bounds(nr, nc) and board.get(nr, nc) == player:
                    count += 1
        return count

    def features(self, board: Board, player: Player) -> np.ndarray:
        geo = _flip_geometry(board.rows)
        other: Player = opponent(player)
        corners = geo["corners"]
        edges = geo["edges"]
        center = geo["center"]

        corner_diff = edge_diff = center_diff = 0
        for r in range(board.rows):
            for c in range(board.cols):
                v = board.get(r, c)
                if v == EMPTY:
                    continue
                sign = 1 if v == player else -1
                if (r, c) in corners:  # type: ignore[operator]
                    corner_diff += sign
                if (r, c) in edges:  # type: ignore[operator]
                    edge_diff += sign
                if (r, c) in center:  # type: ignore[operator]
                    center_diff += sign

        adjacent_diff: int = 0
        for corner in corners:  # type: ignore[union-attr]
            if board.get(*corner) != EMPTY:
                continue
            for cell in self.corner_neighbours(board, corner):
                v = board.get(*cell)
                if v == player:
                    adjacent_diff += 1
                elif v == other:
                    adjacent_diff -= 1

        empties: int = board.empty_count()
        own: int = board.count(player)
        endgame: bool = empties <= self.weights.endgame_empties

        return np.array([
            corner_diff,
            edge_diff,
            adjacent_diff,
            center_diff,
            1 if empties % 2 == 0 else -1,
            self.chain_score(board, player) - self.chain_score(board, other),
            len(self.rules.legal_moves(board, player)),
            len(self.rules.legal_moves(board, other)),
            1 if self.detect_trap(board, player) else 0,
            0 if endgame else own,
            own if endgame else 0,
        ], dtype=np.float64)

    def evaluate_position(self, board: Board, player: Player) -> float:
        return float(np.dot(self.features(board, player), self._weights))


# Factory to get an Evaluator-conforming object

def get_evaluator(game: str, weights: Optional[str] = None) -> Evaluator:
    if game not in ("drop", "flip"):
        raise ValueError(f"Unknown game '{game}'")
    table = SearchConfig(game=game, weights=weights).weight_table()  # type: ignore[arg-type]
    if game == "drop":
        return DropEvaluator(table)  # type: ignore[arg-type]
    return FlipEvaluator(table)  # type: ignore[arg-type]


__all__ = [
    "Evaluator",
    "DropEvaluator",
    "FlipEvaluator",
    "get_evaluator",
    "SEVEN_TEMPLATES",
    "ELL_TEMPLATES",
]
