"""
Move selector: the public entry point of the engine.

``select_move`` validates its inputs, runs the drop-game short-circuit
ladder or a plain search for the flip game, and always answers with a
legal move (or None when there is none). Any unexpected exception raised
while deciding is logged and answered with a uniformly random legal move.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional

from config import SearchConfig, get_engine_settings
from versus.board import Board
from versus.drop import DropRules
from versus.errors import InternalSearchFailure, InvalidBoard
from versus.games import Game, get_game
from versus.search import get_search_strategy, resolve_depth
from versus.types import (
    DROP_COLS,
    DROP_ROWS,
    FLIP_SIZE,
    Decision,
    Move,
    Player,
    is_valid_player,
    opponent,
)

logger = logging.getLogger(__name__)


def game_for_board(board: Board) -> str:
    """Game name implied by the board's dimensions."""
    if (board.rows, board.cols) == (DROP_ROWS, DROP_COLS):
        return "drop"
    if (board.rows, board.cols) == (FLIP_SIZE, FLIP_SIZE):
        return "flip"
    raise InvalidBoard(f"No game is played on a {board.rows}x{board.cols} board")


class Engine:
    """Stateless move selector; safe to share between games."""

    def choose(self, board: Board, player: Player, config: Optional[SearchConfig] = None,
               rng: Optional[random.Random] = None) -> Decision:
        """Full decision record for ``player`` to move on ``board``."""
        if not is_valid_player(player):
            raise InvalidBoard(f"Invalid player {player!r}")
        if config is None:
            config = SearchConfig.for_game(game_for_board(board))  # type: ignore[arg-type]
        game = get_game(config)
        if not game.fits(board):
            raise InvalidBoard(
                f"The {game.name} game needs a {game.rows}x{game.cols} board, got {board.rows}x{board.cols}"
            )

        legal: List[Move] = game.rules.legal_moves(board, player)  # type: ignore[assignment]
        if not legal:
            logger.debug("%s: no legal moves for player %d", game.name, player)
            return Decision(move=None, source="none")

        try:
            decision = self._decide(game, board, player, config)
            if decision.move not in legal:
                raise InternalSearchFailure(f"Search produced illegal move {decision.move!r}")
            return decision
        except Exception as exc:
            if isinstance(exc, InternalSearchFailure):
                failure = exc
            else:
                failure = InternalSearchFailure(repr(exc))
                failure.__cause__ = exc
            return self._fallback(game, legal, failure, rng)

    def _decide(self, game: Game, board: Board, player: Player, config: SearchConfig) -> Decision:
        candidates: List[Move] = game.legal_moves(board, player)
        if isinstance(game.rules, DropRules):
            rules: DropRules = game.rules
            ordered = rules.column_order

            wins = sorted(rules.winning_columns(board, player), key=ordered.index)
            if wins:
                logger.debug("drop: winning column %d", wins[0])
                return Decision(move=wins[0], source="win", candidates=list(wins))

            threats = sorted(rules.winning_columns(board, opponent(player)), key=ordered.index)
            if threats:
                logger.debug("drop: blocking column %d", threats[0])
                return Decision(move=threats[0], source="block", candidates=list(threats))

            if config.safety_filter:
                safe = [c for c in candidates if not rules.gives_opponent_win(board, c, player)]  # type: ignore[arg-type]
                if safe:
                    candidates = safe

            center = board.cols // 2
            if board.stones() <= config.opening_center_stones and center in candidates:
                logger.debug("drop: opening center column")
                return Decision(move=center, source="center", candidates=list(candidates))

        depth = resolve_depth(config, board)
        strategy = get_search_strategy(config.alpha_beta)
        score, move = strategy.search(game, board, player, depth, candidates)
        if move is None:
            raise InternalSearchFailure("Search returned no move")
        stats = getattr(strategy, "stats", None)
        logger.debug("%s: depth %d picked %r (score %.1f)", game.name, depth, move, score)
        decision = Decision(move=move, source="search", score=score, depth=depth, candidates=list(candidates))
        if stats is not None:
            decision.stats = stats
        return decision

    def _fallback(self, game: Game, legal: List[Move], failure: InternalSearchFailure,
                  rng: Optional[random.Random]) -> Decision:
        """Fault path: uniformly random legal move, logged with the traceback."""
        if rng is None:
            rng = random.Random(get_engine_settings().fallback_seed)
        move = rng.choice(legal)
        logger.warning("%s: search failed (%s); playing random move %r", game.name, failure, move,
                       exc_info=failure.__cause__ or failure)
        return Decision(move=move, source="fallback", candidates=list(legal), error=str(failure))


_ENGINE = Engine()


def get_engine() -> Engine:
    """Get the shared engine instance."""
    return _ENGINE


def select_move(board: Board, player: Player, config: Optional[SearchConfig] = None,
                rng: Optional[random.Random] = None) -> Optional[Move]:
    """Move for ``player`` on ``board``, or None when there is no legal move.

    Raises InvalidBoard if the board does not fit the configured game or the
    player is not one of the two valid identifiers.
    """
    return _ENGINE.choose(board, player, config, rng).move


__all__ = ["Engine", "get_engine", "select_move", "game_for_board"]
