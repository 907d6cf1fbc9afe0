"""GridXO package exposing game rules, AI helpers, and the web application."""

from .ai import ComputerPlayer, Difficulty, select_move
from .game import GameState, apply_move, check_win, is_draw, new_board
from .ui import app

__all__ = [
    "ComputerPlayer",
    "Difficulty",
    "GameState",
    "app",
    "apply_move",
    "check_win",
    "is_draw",
    "new_board",
    "select_move",
]
