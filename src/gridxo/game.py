"""Core rules for GridXO (tic-tac-toe on N x N boards)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

Player = str  # "X" or "O"
Move = Tuple[int, int]  # (row, col)

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")
MIN_SIZE = 3
MAX_SIZE = 10


def opponent(player: Player) -> Player:
    return "O" if player == "X" else "X"


# ---------- Errors ----------


class MoveError(ValueError):
    """A move that cannot be placed on the board."""

    def __init__(self, message: str, row: int, col: int):
        super().__init__(message)
        self.row = row
        self.col = col


class OutOfBoundsError(MoveError):
    def __init__(self, row: int, col: int, size: int):
        super().__init__(
            f"Cell ({row}, {col}) is outside the {size}x{size} board", row, col
        )


class CellOccupiedError(MoveError):
    def __init__(self, row: int, col: int):
        super().__init__(f"Cell ({row}, {col}) is already occupied", row, col)


# ---------- Board ----------


@dataclass(frozen=True)
class Board:
    # 'X', 'O', or ' ' (space) for empty
    cells: Tuple[Tuple[str, ...], ...]

    @property
    def size(self) -> int:
        return len(self.cells)

    def mark(self, row: int, col: int) -> str:
        return self.cells[row][col]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def is_full(self) -> bool:
        return all(c != EMPTY for r in self.cells for c in r)

    def empty_cells(self) -> List[Move]:
        return [
            (r, c)
            for r, row in enumerate(self.cells)
            for c, v in enumerate(row)
            if v == EMPTY
        ]

    def place(self, row: int, col: int, player: Player) -> "Board":
        """Return a copy of the board with ``player`` placed at (row, col)."""
        if player not in PLAYERS:
            raise ValueError(f"Unknown player mark {player!r}")
        if not self.in_bounds(row, col):
            raise OutOfBoundsError(row, col, self.size)
        if self.cells[row][col] != EMPTY:
            raise CellOccupiedError(row, col)
        updated = self.cells[row][:col] + (player,) + self.cells[row][col + 1 :]
        return Board(self.cells[:row] + (updated,) + self.cells[row + 1 :])

    def rows(self) -> List[List[str]]:
        """Wire form: 'X', 'O', or '' for empty."""
        return [[c if c in PLAYERS else "" for c in row] for row in self.cells]

    @classmethod
    def from_rows(cls, rows: List[List[str]]) -> "Board":
        if not isinstance(rows, (list, tuple)):
            raise ValueError("Board must be a list of rows")
        size = len(rows)
        if not MIN_SIZE <= size <= MAX_SIZE:
            raise ValueError(f"Board size must be between {MIN_SIZE} and {MAX_SIZE}")
        cells = []
        for row in rows:
            if not isinstance(row, (list, tuple)) or len(row) != size:
                raise ValueError("Board must be square")
            for v in row:
                if v not in PLAYERS and v not in ("", EMPTY):
                    raise ValueError(f"Unknown cell value {v!r}")
            cells.append(tuple(v if v in PLAYERS else EMPTY for v in row))
        return cls(tuple(cells))


@dataclass(frozen=True)
class Win:
    player: Player
    cells: Tuple[Move, ...]


def new_board(size: int = 3) -> Board:
    if not MIN_SIZE <= size <= MAX_SIZE:
        raise ValueError(f"Board size must be between {MIN_SIZE} and {MAX_SIZE}")
    return Board(tuple((EMPTY,) * size for _ in range(size)))


def apply_move(board: Board, row: int, col: int, player: Player) -> Board:
    return board.place(row, col, player)


def empty_cells(board: Board) -> List[Move]:
    return board.empty_cells()


def winning_lines(size: int) -> Iterator[Tuple[Move, ...]]:
    """Every row, column and both diagonals of a size x size board."""
    for r in range(size):
        yield tuple((r, c) for c in range(size))
    for c in range(size):
        yield tuple((r, c) for r in range(size))
    yield tuple((i, i) for i in range(size))
    yield tuple((i, size - 1 - i) for i in range(size))


def _uniform(board: Board, line: Tuple[Move, ...], player: Player) -> bool:
    return all(board.cells[r][c] == player for r, c in line)


def check_win(board: Board, last_row: int, last_col: int) -> Optional[Win]:
    """Check the lines through the last move only.

    A win can only be completed by the cell just played, so the row, the
    column and whichever diagonals pass through (last_row, last_col) cover
    every possibility.
    """
    if not board.in_bounds(last_row, last_col):
        raise OutOfBoundsError(last_row, last_col, board.size)
    player = board.cells[last_row][last_col]
    if player == EMPTY:
        return None
    n = board.size

    candidates = [
        tuple((last_row, c) for c in range(n)),
        tuple((r, last_col) for r in range(n)),
    ]
    if last_row == last_col:
        candidates.append(tuple((i, i) for i in range(n)))
    if last_row + last_col == n - 1:
        candidates.append(tuple((i, n - 1 - i) for i in range(n)))

    for line in candidates:
        if _uniform(board, line, player):
            return Win(player=player, cells=line)
    return None


def find_win(board: Board) -> Optional[Win]:
    """Full scan for a uniform line, for boards without a known last move."""
    for line in winning_lines(board.size):
        r, c = line[0]
        v = board.cells[r][c]
        if v != EMPTY and _uniform(board, line, v):
            return Win(player=v, cells=line)
    return None


def is_draw(board: Board, last_move: Optional[Move] = None) -> bool:
    if not board.is_full():
        return False
    if last_move is not None:
        return check_win(board, *last_move) is None
    return find_win(board) is None


# ---------- Result ----------


class Status(str, Enum):
    IN_PROGRESS = "in_progress"
    WIN = "win"
    DRAW = "draw"


@dataclass(frozen=True)
class GameResult:
    status: Status
    winner: Optional[Player] = None
    cells: Tuple[Move, ...] = ()


IN_PROGRESS = GameResult(Status.IN_PROGRESS)
DRAW = GameResult(Status.DRAW)


# ---------- Game ----------


@dataclass
class GameState:
    """Explicit state of one game, owned by whoever drives the turn loop."""

    board: Board = field(default_factory=new_board)
    current_player: Player = "X"
    winner: Optional[Player] = None
    drawn: bool = False
    winning_cells: Tuple[Move, ...] = ()
    last_move: Optional[Move] = None

    @classmethod
    def start(cls, size: int = 3) -> "GameState":
        return cls(board=new_board(size))

    @property
    def finished(self) -> bool:
        return bool(self.winner) or self.drawn

    def play_move(self, row: int, col: int) -> None:
        """Place the current player's mark, then resolve win/draw or pass the turn."""
        if self.finished:
            raise ValueError("Game already finished")

        self.board = self.board.place(row, col, self.current_player)
        self.last_move = (row, col)

        win = check_win(self.board, row, col)
        if win:
            self.winner = win.player
            self.winning_cells = win.cells
            return
        if is_draw(self.board, self.last_move):
            self.drawn = True
            return

        self.current_player = opponent(self.current_player)

    def result(self) -> GameResult:
        if self.winner:
            return GameResult(Status.WIN, self.winner, self.winning_cells)
        if self.drawn:
            return DRAW
        return IN_PROGRESS

    # ---- persistence ----

    def to_dict(self) -> Dict[str, object]:
        return {
            "board": self.board.rows(),
            "currentPlayer": self.current_player,
            "winner": self.winner,
            "drawn": self.drawn,
            "winningCells": [list(c) for c in self.winning_cells],
            "lastMove": list(self.last_move) if self.last_move else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        board = Board.from_rows(data.get("board"))
        current = data.get("currentPlayer", "X")
        if current not in PLAYERS:
            raise ValueError(f"Unknown player mark {current!r}")
        winner = data.get("winner")
        if winner is not None and winner not in PLAYERS:
            raise ValueError(f"Unknown player mark {winner!r}")
        last = data.get("lastMove")
        return cls(
            board=board,
            current_player=current,
            winner=winner,
            drawn=bool(data.get("drawn", False)),
            winning_cells=tuple(
                (int(r), int(c)) for r, c in data.get("winningCells") or []
            ),
            last_move=(int(last[0]), int(last[1])) if last else None,
        )
