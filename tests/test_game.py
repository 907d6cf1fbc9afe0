"""Unit tests for GridXO game rules."""

import pytest

from gridxo.game import (
    Board,
    CellOccupiedError,
    GameState,
    OutOfBoundsError,
    Status,
    apply_move,
    check_win,
    empty_cells,
    is_draw,
    new_board,
    winning_lines,
)


def board_from(*rows):
    return Board.from_rows([list(row) for row in rows])


# X, O, X / X, O, O / O, X, X with no line for either side
DRAW_SEQUENCE = [(0, 0), (0, 1), (0, 2), (1, 1), (1, 0), (1, 2), (2, 1), (2, 0), (2, 2)]


def test_new_board_is_empty():
    board = new_board(4)
    assert board.size == 4
    assert len(empty_cells(board)) == 16
    assert board.rows() == [[""] * 4 for _ in range(4)]


@pytest.mark.parametrize("size", [0, 2, 11])
def test_new_board_rejects_unsupported_sizes(size):
    with pytest.raises(ValueError):
        new_board(size)


def test_apply_move_returns_new_board():
    board = new_board(3)
    updated = apply_move(board, 1, 2, "X")
    assert updated.mark(1, 2) == "X"
    assert board.mark(1, 2) == " "
    assert (1, 2) not in empty_cells(updated)


def test_apply_move_never_overwrites():
    board = new_board(3)
    for index, (row, col) in enumerate(DRAW_SEQUENCE):
        board = apply_move(board, row, col, "X" if index % 2 == 0 else "O")
    snapshot = board.rows()
    for row in range(3):
        for col in range(3):
            with pytest.raises(CellOccupiedError) as excinfo:
                apply_move(board, row, col, "O")
            assert (excinfo.value.row, excinfo.value.col) == (row, col)
    assert board.rows() == snapshot


@pytest.mark.parametrize("row, col", [(-1, 0), (0, -1), (3, 0), (0, 3)])
def test_apply_move_out_of_bounds(row, col):
    with pytest.raises(OutOfBoundsError):
        apply_move(new_board(3), row, col, "X")


def test_apply_move_rejects_unknown_mark():
    with pytest.raises(ValueError):
        apply_move(new_board(3), 0, 0, "Z")


def test_two_in_a_row_is_not_a_win():
    board = board_from("XX ", "   ", "   ")
    assert check_win(board, 0, 1) is None


@pytest.mark.parametrize(
    "rows, last, cells",
    [
        (("XXX", "OO ", "   "), (0, 2), ((0, 0), (0, 1), (0, 2))),
        (("OX ", "OX ", "O  "), (2, 0), ((0, 0), (1, 0), (2, 0))),
        (("X O", " XO", "  X"), (1, 1), ((0, 0), (1, 1), (2, 2))),
        (("XXO", " O ", "O X"), (0, 2), ((0, 2), (1, 1), (2, 0))),
    ],
)
def test_check_win_lines(rows, last, cells):
    board = board_from(*rows)
    win = check_win(board, *last)
    assert win is not None
    assert win.player == board.mark(*last)
    assert win.cells == cells


def test_check_win_on_larger_board():
    board = board_from("O   ", " O  ", "  O ", "XXXO")
    win = check_win(board, 3, 3)
    assert win is not None
    assert win.player == "O"
    assert win.cells == ((0, 0), (1, 1), (2, 2), (3, 3))
    assert check_win(board, 3, 0) is None


def test_check_win_only_inspects_lines_through_last_move():
    board = board_from("XXX", "O  ", " O ")
    assert check_win(board, 2, 1) is None
    assert check_win(board, 0, 0) is not None


def test_check_win_on_empty_cell():
    assert check_win(new_board(3), 1, 1) is None


@pytest.mark.parametrize("row, col", [(-1, -1), (3, 0), (0, 3), (-1, 2)])
def test_check_win_rejects_cells_off_the_board(row, col):
    board = board_from("   ", "O O", "XXX")
    with pytest.raises(OutOfBoundsError):
        check_win(board, row, col)


def test_is_draw_rejects_last_move_off_the_board():
    full = board_from("XOX", "XOO", "OXX")
    with pytest.raises(OutOfBoundsError):
        is_draw(full, (-1, -1))


def test_is_draw():
    full = board_from("XOX", "XOO", "OXX")
    assert is_draw(full)
    assert is_draw(full, (2, 2))

    won = board_from("XXX", "OOX", "XOO")
    assert not is_draw(won)
    assert not is_draw(won, (0, 2))

    assert not is_draw(board_from("XOX", "XOO", "OX "))


def test_winning_lines_cover_rows_columns_and_diagonals():
    lines = list(winning_lines(4))
    assert len(lines) == 4 + 4 + 2
    assert all(len(line) == 4 for line in lines)


def test_game_state_switches_players_and_detects_win():
    game = GameState.start(3)
    for row, col in [(0, 0), (1, 0), (0, 1), (1, 1)]:
        game.play_move(row, col)
    assert game.current_player == "X"
    game.play_move(0, 2)

    assert game.winner == "X"
    assert game.current_player == "X"
    result = game.result()
    assert result.status is Status.WIN
    assert result.cells == ((0, 0), (0, 1), (0, 2))

    with pytest.raises(ValueError, match="already finished"):
        game.play_move(2, 2)


def test_game_state_detects_draw():
    game = GameState.start(3)
    for row, col in DRAW_SEQUENCE:
        game.play_move(row, col)
    assert game.drawn
    assert game.winner is None
    assert game.result().status is Status.DRAW


def test_failed_move_keeps_turn():
    game = GameState.start(3)
    game.play_move(0, 0)
    with pytest.raises(CellOccupiedError):
        game.play_move(0, 0)
    assert game.current_player == "O"
    assert game.last_move == (0, 0)


def test_state_round_trip_preserves_cells_and_player():
    game = GameState.start(5)
    for row, col in [(0, 0), (4, 4), (2, 3)]:
        game.play_move(row, col)

    restored = GameState.from_dict(game.to_dict())

    assert restored.board == game.board
    assert restored.current_player == "O"
    assert restored.last_move == (2, 3)
    assert restored.result() == game.result()


def test_state_round_trip_after_win():
    game = GameState.start(3)
    for row, col in [(0, 0), (1, 0), (1, 1), (2, 0), (2, 2)]:
        game.play_move(row, col)

    restored = GameState.from_dict(game.to_dict())

    assert restored.winner == "X"
    assert restored.winning_cells == ((0, 0), (1, 1), (2, 2))
    assert restored.to_dict() == game.to_dict()


@pytest.mark.parametrize(
    "payload",
    [
        {"board": [["", ""], ["", ""]]},
        {"board": [["", "", ""], ["", ""], ["", "", ""]]},
        {"board": [["Q", "", ""], ["", "", ""], ["", "", ""]]},
        {"board": [["", "", ""], ["", "", ""], ["", "", ""]], "currentPlayer": "Z"},
        {"board": [1, 2, 3]},
        {"board": "XOX"},
        {},
    ],
)
def test_state_from_dict_rejects_malformed_payloads(payload):
    with pytest.raises(ValueError):
        GameState.from_dict(payload)
