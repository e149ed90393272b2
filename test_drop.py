import pytest

from versus.board import Board
from versus.drop import DropRules, apply_move, initial_board, is_draw, is_win, legal_moves
from versus.errors import IllegalMove
from versus.types import PLAYER_A, PLAYER_B

RULES = DropRules()

# Helpers

def drop_board(*lines):
    """Six text rows, top first; missing top rows are empty."""
    rows = ["......."] * (6 - len(lines)) + list(lines)
    return Board.from_strings(rows)


# A 6x7 full board with no four in a row for either side
DRAW_ROWS = ["XXOOXXO", "OOXXOOX"] * 3


def test_initial_board_is_empty_6x7():
    board = initial_board()
    assert (board.rows, board.cols) == (6, 7)
    assert board.stones() == 0
    assert legal_moves(board) == list(range(7))


def test_ordered_moves_center_out():
    assert RULES.ordered_moves(initial_board()) == [3, 2, 4, 1, 5, 0, 6]


def test_tokens_fall_to_lowest_empty_row():
    board = apply_move(initial_board(), 2, PLAYER_A)
    assert board.get(5, 2) == PLAYER_A
    board = apply_move(board, 2, PLAYER_B)
    assert board.get(4, 2) == PLAYER_B
    assert RULES.drop_row(board, 2) == 3


def test_full_column_not_legal_and_rejected():
    board = initial_board()
    for i in range(6):
        board = apply_move(board, 0, PLAYER_A if i % 2 == 0 else PLAYER_B)
    assert 0 not in legal_moves(board)
    assert RULES.drop_row(board, 0) is None
    with pytest.raises(IllegalMove):
        apply_move(board, 0, PLAYER_A)


@pytest.mark.parametrize("col", [-1, 7, "3", None, 2.5])
def test_bad_columns_rejected(col):
    with pytest.raises(IllegalMove):
        apply_move(initial_board(), col, PLAYER_A)


@pytest.mark.parametrize("lines,last,expected", [
    # horizontal
    (["XXXX..."], (5, 3), True),
    (["...XXXX"], (5, 3), True),
    # vertical
    (["X......", "X......", "X......", "X......"], (2, 0), True),
    # diagonal down-right
    (["X......", "OX.....", "OOX....", "OOOX..."], (2, 0), True),
    (["X......", "OX.....", "OOX....", "OOOX..."], (5, 3), True),
    # diagonal down-left
    (["...X...", "..XO...", ".XOO...", "XOOO..."], (2, 3), True),
    (["...X...", "..XO...", ".XOO...", "XOOO..."], (4, 1), True),
    # not four
    (["XXX...."], (5, 2), False),
    (["XX.X..."], (5, 3), False),
    (["XXXO..."], (5, 2), False),
    (["X......", "X......", "X......", "O......"], (2, 0), False),
    (["..X....", ".XO....", "XOO...."], (3, 2), False),
])
def test_four_direction_wins(lines, last, expected):
    board = drop_board(*lines)
    assert is_win(board, last[0], last[1], PLAYER_A) is expected


def test_win_for_other_player_not_reported():
    board = drop_board("OOOO...")
    assert is_win(board, 5, 0, PLAYER_B)
    assert not is_win(board, 5, 0, PLAYER_A)


def test_is_winning_move_uses_topmost_token():
    board = apply_move(drop_board("XXX...."), 3, PLAYER_A)
    assert RULES.is_winning_move(board, 3, PLAYER_A)
    assert not RULES.is_winning_move(board, 3, PLAYER_B)
    assert not RULES.is_winning_move(board, 5, PLAYER_A)


def test_draw_and_terminal():
    board = Board.from_strings(DRAW_ROWS)
    assert not RULES.has_winner(board, PLAYER_A)
    assert not RULES.has_winner(board, PLAYER_B)
    assert is_draw(board)
    assert RULES.is_terminal(board)
    assert legal_moves(board) == []


def test_win_is_terminal_not_draw():
    board = drop_board("XXXX...", "OOO....")
    assert RULES.has_winner(board, PLAYER_A)
    assert RULES.is_terminal(board)
    assert not is_draw(board)
    assert not RULES.is_terminal(initial_board())


def test_winning_columns():
    board = drop_board(".XXX...")
    assert sorted(RULES.winning_columns(board, PLAYER_A)) == [0, 4]
    assert RULES.winning_columns(board, PLAYER_B) == []


def test_gives_opponent_win():
    # Playing column 3 lets O complete row 4 on top of it
    board = drop_board("OOO....", "XXO..XX")
    assert RULES.winning_columns(board, PLAYER_B) == []
    assert RULES.gives_opponent_win(board, 3, PLAYER_A)
    assert not RULES.gives_opponent_win(board, 6, PLAYER_A)
