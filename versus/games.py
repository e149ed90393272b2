"""
Game bundles: one rules plug-in paired with one evaluator.

A ``Game`` is the capability object the search core consumes. The drop
game hands out center-first move ordering; the flip game keeps row-major.
"""
from __future__ import annotations

from typing import List, Optional, Union

from config import SearchConfig
from versus.board import Board
from versus.drop import DropRules
from versus.eval import DropEvaluator, Evaluator, FlipEvaluator
from versus.flip import FlipRules
from versus.types import Move, Player

Rules = Union[DropRules, FlipRules]


class Game:
    """Rules plus evaluator behind the search capability interface."""

    def __init__(self, rules: Rules, evaluator: Evaluator) -> None:
        self.rules = rules
        self.evaluator = evaluator
        self.name: str = rules.name

    @property
    def rows(self) -> int:
        return self.rules.rows

    @property
    def cols(self) -> int:
        return self.rules.cols

    def initial_board(self) -> Board:
        return self.rules.initial_board()

    def legal_moves(self, board: Board, player: Player) -> List[Move]:
        """Legal moves in search order."""
        if isinstance(self.rules, DropRules):
            return list(self.rules.ordered_moves(board, player))
        return list(self.rules.legal_moves(board, player))

    def apply_move(self, board: Board, move: Move, player: Player) -> Board:
        return self.rules.apply_move(board, move, player)  # type: ignore[arg-type]

    def is_winning_move(self, board: Board, move: Move, player: Player) -> bool:
        return self.rules.is_winning_move(board, move, player)  # type: ignore[arg-type]

    def is_terminal(self, board: Board) -> bool:
        return self.rules.is_terminal(board)

    def evaluate(self, board: Board, player: Player) -> float:
        return self.evaluator.evaluate_position(board, player)

    def fits(self, board: Board) -> bool:
        """Board has this game's dimensions."""
        return board.rows == self.rows and board.cols == self.cols

    def __repr__(self) -> str:
        return f"Game({self.name!r}, {self.rows}x{self.cols})"


def drop_game(weights: Optional[str] = None) -> Game:
    rules = DropRules()
    table = SearchConfig(game="drop", weights=weights).weight_table()
    return Game(rules, DropEvaluator(table, rules))  # type: ignore[arg-type]


def flip_game(weights: Optional[str] = None) -> Game:
    rules = FlipRules()
    table = SearchConfig(game="flip", weights=weights).weight_table()
    return Game(rules, FlipEvaluator(table, rules))  # type: ignore[arg-type]


def get_game(config: SearchConfig) -> Game:
    """Game bundle for a search configuration."""
    if config.game == "drop":
        return drop_game(config.weights)
    return flip_game(config.weights)


__all__ = ["Game", "Rules", "drop_game", "flip_game", "get_game"]
