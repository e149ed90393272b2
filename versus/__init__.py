"""Versus package: computer opponent for the drop and flip games.

Usage examples:
    from versus import Board, select_move
    from versus import DropRules, FlipRules
    from versus import play_game, EnginePlayer, RandomPlayer
"""
from __future__ import annotations

# Board and rules
from .board import Board
from .drop import DropRules
from .flip import FlipRules
from .errors import VersusError, IllegalMove, InvalidBoard, InternalSearchFailure
from .types import EMPTY, PLAYER_A, PLAYER_B, Decision, SearchStats, opponent

# Evaluation and search
from .eval import DropEvaluator, FlipEvaluator, get_evaluator
from .games import Game, get_game
from .search import minimax, resolve_depth

# Engine API
from .engine import Engine, get_engine, select_move

# Game loop
from .match import EnginePlayer, GameRecord, RandomPlayer, play_game
