"""
Game loop driver: plays one game between two agents.

The loop owns the turn order and the flip-game pass rule; the engine only
ever reports that a side has no legal move.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple

from config import GameName, SearchConfig
from versus.board import Board
from versus.drop import DropRules
from versus.engine import Engine, get_engine
from versus.errors import IllegalMove, InvalidBoard
from versus.games import Game, get_game
from versus.types import PLAYER_A, PLAYER_B, SYMBOLS, Move, Player, opponent

logger = logging.getLogger(__name__)


class Agent(Protocol):
    """Anything that picks a move for ``player`` on ``board``."""

    def choose(self, game: Game, board: Board, player: Player) -> Optional[Move]:
        ...


class EnginePlayer:
    """Agent backed by the move selector."""

    def __init__(self, config: Optional[SearchConfig] = None, engine: Optional[Engine] = None,
                 rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.engine = engine or get_engine()
        self.rng = rng

    def choose(self, game: Game, board: Board, player: Player) -> Optional[Move]:
        config = self.config or SearchConfig.for_game(game.name)  # type: ignore[arg-type]
        return self.engine.choose(board, player, config, self.rng).move


class RandomPlayer:
    """Uniformly random legal move."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def choose(self, game: Game, board: Board, player: Player) -> Optional[Move]:
        moves = game.rules.legal_moves(board, player)
        if not moves:
            return None
        return self.rng.choice(moves)


@dataclass
class GameRecord:
    """Outcome of one played game."""
    game: str
    winner: Optional[Player]  # 0 for a draw, None if stopped early
    board: Board
    moves: List[Tuple[Player, Move]] = field(default_factory=list)
    passes: int = 0

    @property
    def plies(self) -> int:
        return len(self.moves)

    def summary(self) -> str:
        if self.winner is None:
            outcome = "unfinished"
        elif self.winner == 0:
            outcome = "draw"
        else:
            outcome = f"{SYMBOLS[self.winner]} wins"
        return f"{self.game}: {outcome} after {self.plies} moves ({self.passes} passes)"


def play_game(game_name: GameName, players: Sequence[Agent], config: Optional[SearchConfig] = None,
              max_plies: Optional[int] = None, board: Optional[Board] = None,
              first: Player = PLAYER_A) -> GameRecord:
    """Play ``players[0]`` (side A) against ``players[1]`` (side B).

    ``board`` and ``first`` resume from a given position instead of the
    initial one.
    """
    if len(players) != 2:
        raise ValueError("play_game needs exactly two players")
    game = get_game(config or SearchConfig.for_game(game_name))
    agents = {PLAYER_A: players[0], PLAYER_B: players[1]}
    if board is None:
        board = game.initial_board()
    elif not game.fits(board):
        raise InvalidBoard(f"The {game.name} game needs a {game.rows}x{game.cols} board")
    record = GameRecord(game=game.name, winner=None, board=board)
    side: Player = first

    while not game.is_terminal(board):
        if max_plies is not None and record.plies >= max_plies:
            logger.info("%s: stopped after %d moves", game.name, record.plies)
            record.board = board
            return record
        if not game.rules.legal_moves(board, side):
            # Only the flip game gets here: the game is not over, so the opponent can move
            logger.debug("%s: %s passes", game.name, SYMBOLS[side])
            record.passes += 1
            side = opponent(side)
            continue
        move = agents[side].choose(game, board, side)
        if move is None:
            raise IllegalMove(f"{SYMBOLS[side]} returned no move while legal moves exist")
        board = game.apply_move(board, move, side)
        record.moves.append((side, move))
        if isinstance(game.rules, DropRules) and game.is_winning_move(board, move, side):
            record.winner = side
            break
        side = opponent(side)

    record.board = board
    if record.winner is None:
        record.winner = _final_winner(game, board)
    logger.info("%s", record.summary())
    return record


def _final_winner(game: Game, board: Board) -> Player:
    if isinstance(game.rules, DropRules):
        for player in (PLAYER_A, PLAYER_B):
            if game.rules.has_winner(board, player):
                return player
        return 0
    return game.rules.winner(board)


__all__ = ["Agent", "EnginePlayer", "RandomPlayer", "GameRecord", "play_game"]
