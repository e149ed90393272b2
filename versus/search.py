"""
Generic minimax search with optional alpha-beta pruning.

The search only talks to a game through its capability interface
(``legal_moves``, ``apply_move``, ``is_winning_move``, ``evaluate``), so the
same code drives both games. Scores are always from the root player's side.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from config import SearchConfig, get_engine_settings
from versus.board import Board
from versus.types import WIN_SCORE, GameProtocol, Move, Player, SearchOutcome, SearchStats, opponent


def minimax(game: GameProtocol, board: Board, depth: int, alpha: float, beta: float,
            maximizing: bool, root_player: Player, prune: bool = True,
            root_moves: Optional[Sequence[Move]] = None,
            stats: Optional[SearchStats] = None, ply: int = 0) -> SearchOutcome:
    """Minimax value and best move of ``board``.

    ``maximizing`` is True when ``root_player`` is the side to move.
    ``root_moves`` restricts the moves tried at this node only. A move that
    wins on the spot scores ``WIN_SCORE + depth`` (negated for the
    opponent) without further search, so faster wins rank higher.
    """
    if stats is None:
        stats = SearchStats()
    stats.nodes += 1
    if ply > stats.max_depth:
        stats.max_depth = ply

    side: Player = root_player if maximizing else opponent(root_player)
    moves: List[Move] = list(root_moves) if root_moves is not None else game.legal_moves(board, side)
    if depth <= 0 or not moves:
        stats.leaves += 1
        return game.evaluate(board, root_player), None

    best: float = -math.inf if maximizing else math.inf
    best_move: Optional[Move] = None
    for move in moves:
        child = game.apply_move(board, move, side)
        if game.is_winning_move(child, move, side):
            stats.terminal_hits += 1
            score = WIN_SCORE + depth if maximizing else -(WIN_SCORE + depth)
        else:
            score, _ = minimax(game, child, depth - 1, alpha, beta, not maximizing,
                               root_player, prune, None, stats, ply + 1)
        if maximizing:
            if score > best:
                best, best_move = score, move
            alpha = max(alpha, best)
        else:
            if score < best:
                best, best_move = score, move
            beta = min(beta, best)
        if prune and beta <= alpha:
            stats.cutoffs += 1
            break
    return best, best_move


def resolve_depth(config: SearchConfig, board: Board) -> int:
    """Search depth for ``board``: fixed, or by game phase for the drop game."""
    if config.depth is not None:
        depth = config.depth
    elif config.game == "flip":
        depth = get_engine_settings().flip_depth
    else:
        stones = board.stones()
        early, mid, late = config.phase_depths
        mid_at, late_at = config.phase_stones
        if stones < mid_at:
            depth = early
        elif stones < late_at:
            depth = mid
        else:
            depth = late
    return max(1, min(depth, config.max_depth))


class SearchStrategy(ABC):
    """Abstract interface for search strategies."""

    @abstractmethod
    def search(self, game: GameProtocol, board: Board, player: Player, depth: int,
               moves: Optional[Sequence[Move]] = None) -> SearchOutcome:  # pragma: no cover
        raise NotImplementedError


class AlphaBetaSearchStrategy(SearchStrategy):
    """Root driver around ``minimax``; keeps the stats of the last search."""

    def __init__(self, prune: bool = True) -> None:
        self.prune = prune
        self.stats = SearchStats()

    def search(self, game: GameProtocol, board: Board, player: Player, depth: int,
               moves: Optional[Sequence[Move]] = None) -> SearchOutcome:
        self.stats = SearchStats()
        return minimax(game, board, depth, -math.inf, math.inf, True, player,
                       prune=self.prune, root_moves=moves, stats=self.stats)


def get_search_strategy(alpha_beta: bool = True) -> SearchStrategy:
    """Factory for the default search strategy (alpha-beta unless disabled)."""
    return AlphaBetaSearchStrategy(prune=alpha_beta)


__all__ = [
    "SearchStrategy",
    "AlphaBetaSearchStrategy",
    "get_search_strategy",
    "minimax",
    "resolve_depth",
]
