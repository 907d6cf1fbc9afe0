"""Tests for the GridXO computer opponent."""

import random

import pytest

from gridxo.ai import (
    MEDIUM_RULES,
    ComputerPlayer,
    Difficulty,
    minimax_move,
    run_rules,
    select_move,
    take_center,
    take_win,
)
from gridxo.game import Board, GameState, new_board


def board_from(*rows):
    return Board.from_rows([list(row) for row in rows])


def play_out(x_player, o_player, size=3):
    game = GameState.start(size)
    while not game.finished:
        seat = x_player if game.current_player == "X" else o_player
        game.play_move(*seat.choose(game))
    return game


CORNERS_AND_CENTER = {(0, 0), (0, 2), (2, 0), (2, 2), (1, 1)}


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_full_board_has_no_move(difficulty):
    board = board_from("XOX", "XOO", "OXX")
    assert select_move(board, "X", difficulty) is None


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_moves_land_on_empty_cells(difficulty):
    board = board_from("XO ", " X ", "O  ")
    rng = random.Random(3)
    for _ in range(20):
        assert select_move(board, "O", difficulty, rng) in board.empty_cells()


def test_easy_plays_every_empty_cell_eventually():
    board = board_from("XO ", "   ", "   ")
    rng = random.Random(11)
    seen = {select_move(board, "X", "easy", rng) for _ in range(200)}
    assert seen == set(board.empty_cells())


def test_medium_blocks_open_row():
    board = board_from("XX ", "   ", "   ")
    assert select_move(board, "O", Difficulty.MEDIUM) == (0, 2)


def test_medium_prefers_winning_over_blocking():
    board = board_from("XX ", "OO ", "X  ")
    assert select_move(board, "O", Difficulty.MEDIUM) == (1, 2)


def test_medium_takes_center_then_corner():
    assert select_move(new_board(3), "X", Difficulty.MEDIUM) == (1, 1)
    assert select_move(new_board(4), "X", Difficulty.MEDIUM) == (2, 2)

    board = board_from("   ", " X ", "   ")
    rng = random.Random(5)
    for _ in range(10):
        assert select_move(board, "O", Difficulty.MEDIUM, rng) in {
            (0, 0),
            (0, 2),
            (2, 0),
            (2, 2),
        }


def test_medium_falls_back_to_any_cell():
    board = board_from("X O", "OXX", "X O")
    # Neither side can complete a line and centre and corners are taken
    assert take_win(board, "O", random.Random()) is None
    assert take_win(board, "X", random.Random()) is None
    rng = random.Random(7)
    moves = {select_move(board, "O", Difficulty.MEDIUM, rng) for _ in range(50)}
    assert moves == {(0, 1), (2, 1)}


def test_rule_chain_stops_at_first_decision():
    calls = []

    def never(board, player, rng):
        calls.append("never")
        return None

    def always(board, player, rng):
        calls.append("always")
        return (0, 0)

    def unreachable(board, player, rng):
        raise AssertionError("rule after a decision must not run")

    rng = random.Random()
    move = run_rules(new_board(3), "X", [never, always, unreachable], rng)
    assert move == (0, 0)
    assert calls == ["never", "always"]
    assert run_rules(new_board(3), "X", [never], rng) is None
    assert MEDIUM_RULES[2] is take_center


def test_hard_opening_is_corner_or_center():
    move = select_move(new_board(3), "X", Difficulty.HARD)
    assert move in CORNERS_AND_CENTER


def test_hard_answers_corner_opening_with_center():
    board = board_from("X  ", "   ", "   ")
    # Every reply other than the centre loses against perfect play
    assert minimax_move(board, "O") == (1, 1)


def test_hard_prefers_immediate_win():
    board = board_from("XX ", "OO ", "   ")
    assert select_move(board, "X", Difficulty.HARD) == (0, 2)


def test_hard_blocks_fork():
    # X holds opposite corners; O must take an edge rather than a corner
    board = board_from("X  ", " O ", "  X")
    assert minimax_move(board, "O") in {(0, 1), (1, 0), (1, 2), (2, 1)}


def test_hard_is_deterministic():
    board = board_from("X  ", "   ", "   ")
    assert {select_move(board, "O", Difficulty.HARD) for _ in range(3)} == {(1, 1)}


def test_hard_falls_back_to_medium_on_larger_boards():
    board = board_from("XXX ", "    ", "    ", "    ")
    assert select_move(board, "O", Difficulty.HARD) == (0, 3)
    assert select_move(new_board(5), "O", Difficulty.HARD) == (2, 2)


def test_hard_vs_hard_draws():
    game = play_out(
        ComputerPlayer("X", Difficulty.HARD), ComputerPlayer("O", Difficulty.HARD)
    )
    assert game.drawn
    assert game.winner is None


@pytest.mark.parametrize("opponent", [Difficulty.EASY, Difficulty.MEDIUM])
@pytest.mark.parametrize("seed", range(4))
def test_hard_never_loses(opponent, seed):
    hard_first = play_out(
        ComputerPlayer("X", Difficulty.HARD),
        ComputerPlayer("O", opponent, rng=random.Random(seed)),
    )
    assert hard_first.winner in ("X", None)

    hard_second = play_out(
        ComputerPlayer("X", opponent, rng=random.Random(seed)),
        ComputerPlayer("O", Difficulty.HARD),
    )
    assert hard_second.winner in ("O", None)


def test_computer_player_waits_for_its_turn():
    game = GameState.start(3)
    ai = ComputerPlayer(player="O", difficulty="easy")
    assert ai.difficulty is Difficulty.EASY
    with pytest.raises(ValueError, match="turn"):
        ai.choose(game)


def test_computer_player_refuses_finished_game():
    game = GameState.start(3)
    for row, col in [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]:
        game.play_move(row, col)
    with pytest.raises(ValueError, match="finished"):
        ComputerPlayer(player="X").choose(game)


def test_larger_board_games_finish():
    game = play_out(
        ComputerPlayer("X", Difficulty.MEDIUM, rng=random.Random(1)),
        ComputerPlayer("O", Difficulty.HARD, rng=random.Random(2)),
        size=5,
    )
    assert game.finished


def test_unknown_difficulty_is_rejected():
    with pytest.raises(ValueError):
        select_move(new_board(3), "X", "impossible")
