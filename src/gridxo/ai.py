"""Computer opponent for GridXO: random, rule-based, and alpha-beta minimax play."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from .game import EMPTY, Board, GameState, Move, Player, check_win, opponent

logger = logging.getLogger(__name__)

# Exhaustive search is only run on the classic board
MINIMAX_SIZE = 3
WIN_SCORE = 10


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ---------- Medium: ordered rule chain ----------

# A rule either proposes a move or returns None to defer to the next rule.
MoveRule = Callable[[Board, Player, random.Random], Optional[Move]]


def _completing_move(board: Board, player: Player) -> Optional[Move]:
    for row, col in board.empty_cells():
        if check_win(board.place(row, col, player), row, col):
            return row, col
    return None


def take_win(board: Board, player: Player, rng: random.Random) -> Optional[Move]:
    return _completing_move(board, player)


def block_opponent(board: Board, player: Player, rng: random.Random) -> Optional[Move]:
    return _completing_move(board, opponent(player))


def take_center(board: Board, player: Player, rng: random.Random) -> Optional[Move]:
    center = board.size // 2
    if board.mark(center, center) == EMPTY:
        return center, center
    return None


def take_corner(board: Board, player: Player, rng: random.Random) -> Optional[Move]:
    last = board.size - 1
    corners = [(0, 0), (0, last), (last, 0), (last, last)]
    free = [(r, c) for r, c in corners if board.mark(r, c) == EMPTY]
    return rng.choice(free) if free else None


def take_random(board: Board, player: Player, rng: random.Random) -> Optional[Move]:
    cells = board.empty_cells()
    return rng.choice(cells) if cells else None


MEDIUM_RULES: Sequence[MoveRule] = (
    take_win,
    block_opponent,
    take_center,
    take_corner,
    take_random,
)


def run_rules(
    board: Board,
    player: Player,
    rules: Sequence[MoveRule],
    rng: random.Random,
) -> Optional[Move]:
    for rule in rules:
        move = rule(board, player, rng)
        if move is not None:
            return move
    return None


# ---------- Hard: minimax with alpha-beta ----------


def minimax_move(board: Board, player: Player) -> Optional[Move]:
    """Best move for ``player`` by exhaustive search; ties go to the first cell."""
    best_score = -math.inf
    best_move: Optional[Move] = None
    for row, col in board.empty_cells():
        child = board.place(row, col, player)
        score = _minimax(child, (row, col), 0, False, player, best_score, math.inf)
        if score > best_score:
            best_score, best_move = score, (row, col)
    return best_move


def _minimax(
    board: Board,
    last: Move,
    depth: int,
    maximizing: bool,
    player: Player,
    alpha: float,
    beta: float,
) -> float:
    # Terminal: only the previous placement can have completed a line
    win = check_win(board, *last)
    if win:
        return WIN_SCORE - depth if win.player == player else depth - WIN_SCORE
    moves = board.empty_cells()
    if not moves:
        return 0

    if maximizing:
        value = -math.inf
        for move in moves:
            child = board.place(*move, player)
            value = max(
                value, _minimax(child, move, depth + 1, False, player, alpha, beta)
            )
            alpha = max(alpha, value)
            if beta <= alpha:
                break
        return value

    value = math.inf
    other = opponent(player)
    for move in moves:
        child = board.place(*move, other)
        value = min(value, _minimax(child, move, depth + 1, True, player, alpha, beta))
        beta = min(beta, value)
        if beta <= alpha:
            break
    return value


# ---------- Public API ----------


def select_move(
    board: Board,
    player: Player,
    difficulty: Difficulty | str,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Propose a move for ``player``, or None when the board is full."""
    if not board.empty_cells():
        return None
    rng = rng or random.Random()
    difficulty = Difficulty(difficulty)

    if difficulty is Difficulty.EASY:
        return take_random(board, player, rng)
    if difficulty is Difficulty.HARD and board.size == MINIMAX_SIZE:
        return minimax_move(board, player)
    # Medium, and Hard on boards too large to search exhaustively
    return run_rules(board, player, MEDIUM_RULES, rng)


@dataclass
class ComputerPlayer:
    """AI seat bound to one mark and one difficulty.

      - ComputerPlayer(player="O", difficulty=Difficulty.HARD)
      - choose(game) -> (row, col)
    """

    player: Player
    difficulty: Difficulty = Difficulty.MEDIUM
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        self.difficulty = Difficulty(self.difficulty)

    def choose(self, game: GameState) -> Move:
        if game.finished:
            raise ValueError("Game already finished")
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")

        move = select_move(game.board, self.player, self.difficulty, self.rng)
        if move is None:
            raise RuntimeError("No valid moves available")
        logger.debug(
            "AI %s (%s) chose %s on %dx%d board",
            self.player,
            self.difficulty.value,
            move,
            game.board.size,
            game.board.size,
        )
        return move
