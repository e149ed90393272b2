import logging
import random

import pytest

from config import SearchConfig
from versus import engine as engine_mod
from versus.board import Board
from versus.drop import DropRules
from versus.drop import initial_board as drop_start
from versus.engine import get_engine, game_for_board, select_move
from versus.errors import InvalidBoard
from versus.flip import FlipRules
from versus.flip import initial_board as flip_start
from versus.search import SearchStrategy
from versus.types import PLAYER_A, PLAYER_B, WIN_SCORE, opponent

OPENING_MOVES = {(2, 3), (3, 2), (4, 5), (5, 4)}
DROP = SearchConfig(game="drop", depth=2)
FLIP = SearchConfig(game="flip", depth=2)

# Helpers

def drop_board(*lines):
    rows = ["......."] * (6 - len(lines)) + list(lines)
    return Board.from_strings(rows)


class BrokenStrategy(SearchStrategy):
    def search(self, game, board, player, depth, moves=None):
        raise RuntimeError("boom")


class IllegalStrategy(SearchStrategy):
    def search(self, game, board, player, depth, moves=None):
        return 0.0, 99


def random_positions(rules, seed, count):
    """Boards reached by random play, with the side to move."""
    rng = random.Random(seed)
    board, side = rules.initial_board(), PLAYER_A
    out = []
    while len(out) < count and not rules.is_terminal(board):
        moves = rules.legal_moves(board, side)
        out.append((board, side))
        if moves:
            board = rules.apply_move(board, rng.choice(moves), side)
        side = opponent(side)
    return out


# ----------------------------
# Drop game ladder
# ----------------------------

def test_takes_immediate_win():
    board = drop_board("......O", ".XXX.OO")
    decision = get_engine().choose(board, PLAYER_A, DROP)
    assert decision.move in (0, 4)
    assert decision.source == "win"


def test_blocks_opponent_win():
    board = drop_board("XX.....", "OOO...X")
    decision = get_engine().choose(board, PLAYER_A, DROP)
    assert decision.move == 3
    assert decision.source == "block"


def test_win_preferred_over_block():
    # X completes column 0 while O threatens column 4
    board = drop_board("X......", "X......", "XOOO..O")
    decision = get_engine().choose(board, PLAYER_A, DROP)
    assert decision.move == 0
    assert decision.source == "win"
    assert select_move(board, PLAYER_B, DROP) == 4


def test_safety_filter_removes_losing_columns():
    board = drop_board("OOO....", "XXO..XX")
    decision = get_engine().choose(board, PLAYER_A, DROP)
    assert decision.source == "search"
    assert 3 not in decision.candidates
    assert decision.move != 3

    unfiltered = get_engine().choose(board, PLAYER_A, SearchConfig(game="drop", depth=2, safety_filter=False))
    assert 3 in unfiltered.candidates
    assert unfiltered.move != 3


def test_safety_filter_keeps_all_columns_when_every_column_loses():
    # O completes the top row above whichever of columns 2 and 4 X fills
    board = Board.from_strings([
        "OO.O.OO",
        "OO.X.OX",
        "XXOOXXO",
        "OOXXXOX",
        "XXOOOXO",
        "OOXXOOX",
    ])
    rules = DropRules()
    assert rules.winning_columns(board, PLAYER_A) == []
    assert rules.winning_columns(board, PLAYER_B) == []
    assert all(rules.gives_opponent_win(board, c, PLAYER_A) for c in (2, 4))

    decision = get_engine().choose(board, PLAYER_A, DROP)
    assert decision.source == "search"
    assert sorted(decision.candidates) == rules.legal_moves(board) == [2, 4]
    assert decision.move == 2
    assert decision.score == -(WIN_SCORE + 1)


def test_center_in_opening():
    assert get_engine().choose(drop_start(), PLAYER_A, DROP).source == "center"
    assert select_move(drop_start(), PLAYER_A, DROP) == 3
    one = DropRules().apply_move(drop_start(), 0, PLAYER_A)
    assert select_move(one, PLAYER_B, DROP) == 3
    late = SearchConfig(game="drop", depth=1, opening_center_stones=0)
    assert get_engine().choose(one, PLAYER_B, late).source == "search"


def test_drop_search_reports_depth_and_stats():
    board = drop_board("..O....", ".XXO...", "OXOX...")
    decision = get_engine().choose(board, PLAYER_B, SearchConfig(game="drop"))
    assert decision.source == "search"
    assert decision.depth == 3
    assert decision.stats.nodes > 0


def test_full_drop_board_returns_none():
    board = Board.from_strings(["XXOOXXO", "OOXXOOX"] * 3)
    decision = get_engine().choose(board, PLAYER_A, DROP)
    assert decision.move is None
    assert decision.source == "none"


# ----------------------------
# Flip game
# ----------------------------

def test_flip_opening_move_is_canonical():
    assert select_move(flip_start(), PLAYER_A, FLIP) in OPENING_MOVES


def test_flip_default_config_inferred_from_board():
    decision = get_engine().choose(flip_start(), PLAYER_A)
    assert decision.move in OPENING_MOVES
    assert decision.depth == 4


def test_flip_no_legal_move_returns_none():
    board = Board.empty(8, 8).with_move(0, 1, PLAYER_A).with_move(0, 0, PLAYER_B)
    assert select_move(board, PLAYER_A, FLIP) is None
    assert select_move(board, PLAYER_B, FLIP) == (0, 2)


# ----------------------------
# Contract
# ----------------------------

@pytest.mark.parametrize("seed", [1, 2])
def test_drop_move_is_legal_or_none(seed):
    rules = DropRules()
    config = SearchConfig(game="drop", depth=1)
    for board, side in random_positions(rules, seed, 12):
        move = select_move(board, side, config)
        legal = rules.legal_moves(board, side)
        assert (move is None) == (not legal)
        assert move is None or move in legal


@pytest.mark.parametrize("seed", [1, 2])
def test_flip_move_is_legal_or_none(seed):
    rules = FlipRules()
    config = SearchConfig(game="flip", depth=1)
    for board, side in random_positions(rules, seed, 12):
        move = select_move(board, side, config)
        legal = rules.legal_moves(board, side)
        assert (move is None) == (not legal)
        assert move is None or move in legal


def test_deterministic_on_normal_path():
    board = drop_board("..O....", ".XXO...", "OXOX...")
    first = select_move(board, PLAYER_A, DROP)
    assert all(select_move(board, PLAYER_A, DROP) == first for _ in range(3))
    flip = select_move(flip_start(), PLAYER_A, FLIP)
    assert select_move(flip_start(), PLAYER_A, FLIP) == flip


def test_pruning_does_not_change_choice():
    board = drop_board("X......", "O..X...", "O.XO.O.", "XOXXOX.")
    pruned = get_engine().choose(board, PLAYER_B, SearchConfig(game="drop", depth=3))
    plain = get_engine().choose(board, PLAYER_B, SearchConfig(game="drop", depth=3, alpha_beta=False))
    assert (pruned.move, pruned.score) == (plain.move, plain.score)
    assert pruned.stats.nodes <= plain.stats.nodes


def test_invalid_inputs_rejected():
    with pytest.raises(InvalidBoard):
        select_move(flip_start(), PLAYER_A, DROP)
    with pytest.raises(InvalidBoard):
        select_move(drop_start(), 0, DROP)
    with pytest.raises(InvalidBoard):
        select_move(drop_start(), True, DROP)
    with pytest.raises(InvalidBoard):
        select_move(Board.empty(5, 5), PLAYER_A)


def test_game_for_board():
    assert game_for_board(drop_start()) == "drop"
    assert game_for_board(flip_start()) == "flip"


# ----------------------------
# Fault path
# ----------------------------

def test_search_failure_falls_back_to_random_legal_move(monkeypatch, caplog):
    monkeypatch.setattr(engine_mod, "get_search_strategy", lambda alpha_beta=True: BrokenStrategy())
    caplog.set_level(logging.WARNING, logger="versus.engine")

    decision = get_engine().choose(flip_start(), PLAYER_A, FLIP, rng=random.Random(0))

    assert decision.is_fallback
    assert decision.move in OPENING_MOVES
    assert "boom" in decision.error
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings and "search failed" in warnings[0].getMessage()
    assert warnings[0].exc_info is not None


def test_fallback_uses_injected_rng(monkeypatch):
    monkeypatch.setattr(engine_mod, "get_search_strategy", lambda alpha_beta=True: BrokenStrategy())
    first = select_move(flip_start(), PLAYER_A, FLIP, rng=random.Random(7))
    second = select_move(flip_start(), PLAYER_A, FLIP, rng=random.Random(7))
    assert first == second


def test_ladder_failure_falls_back(monkeypatch):
    def explode(self, board, player):
        raise KeyError("ladder")

    monkeypatch.setattr(DropRules, "winning_columns", explode)
    board = drop_board("..O....", ".XXO...", "OXOX...")
    decision = get_engine().choose(board, PLAYER_A, DROP, rng=random.Random(3))
    assert decision.source == "fallback"
    assert decision.move in DropRules().legal_moves(board)


def test_illegal_search_result_falls_back(monkeypatch):
    monkeypatch.setattr(engine_mod, "get_search_strategy", lambda alpha_beta=True: IllegalStrategy())
    decision = get_engine().choose(flip_start(), PLAYER_A, FLIP, rng=random.Random(1))
    assert decision.is_fallback
    assert decision.move in OPENING_MOVES
