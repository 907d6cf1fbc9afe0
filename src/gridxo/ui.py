"""FastAPI-powered web UI for playing GridXO in the browser."""

from __future__ import annotations

import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

import threading

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import ComputerPlayer, Difficulty
from .game import MAX_SIZE, MIN_SIZE, GameState
from .settings import GameMode, Scores, Settings, SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active GridXO game, its settings and its AI opponent."""

    game: GameState
    settings: Settings
    ai: Optional[ComputerPlayer]
    scores: Scores = field(default_factory=Scores)
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
SETTINGS_STORE = SettingsStore()
app = FastAPI(
    title="GridXO", description="Tic-tac-toe on any board size, in the browser"
)


AI_THINK_DELAY: Tuple[float, float] = (0.3, 0.6)


class NewGameRequest(BaseModel):
    """Request payload for starting a new game; omitted fields use stored settings."""

    model_config = ConfigDict(populate_by_name=True)

    board_size: Optional[int] = Field(
        default=None, alias="boardSize", ge=MIN_SIZE, le=MAX_SIZE
    )
    mode: Optional[GameMode] = None
    ai_plays_as: Optional[Literal["X", "O"]] = Field(default=None, alias="aiPlaysAs")
    difficulty: Optional[Difficulty] = None


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    row: int = Field(description="0-indexed row")
    col: int = Field(description="0-indexed column")


class DifficultyRequest(BaseModel):
    """Request payload for changing the AI tier of a running game."""

    difficulty: Difficulty


def _build_ai(settings: Settings) -> Optional[ComputerPlayer]:
    if settings.game_mode != "human-vs-ai":
        return None
    return ComputerPlayer(
        player=settings.ai_plays_as, difficulty=settings.ai_difficulty
    )


def _ai_to_move(session: GameSession) -> bool:
    return bool(
        session.ai
        and not session.game.finished
        and session.game.current_player == session.ai.player
    )


def _create_session(request: NewGameRequest) -> Tuple[str, GameSession]:
    """Create a new game session from the request and the stored settings."""

    def apply_choices(settings: Settings) -> None:
        if request.board_size is not None:
            settings.board_size = request.board_size
        if request.mode is not None:
            settings.game_mode = request.mode
        if request.ai_plays_as is not None:
            settings.ai_plays_as = request.ai_plays_as
        if request.difficulty is not None:
            settings.ai_difficulty = request.difficulty

    settings = SETTINGS_STORE.update(apply_choices)

    session = GameSession(
        game=GameState.start(settings.board_size),
        settings=settings,
        ai=_build_ai(settings),
        scores=settings.scores.model_copy(),
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created game %s: %dx%d, %s, AI %s/%s",
        session_id,
        settings.board_size,
        settings.board_size,
        settings.game_mode,
        settings.ai_plays_as,
        settings.ai_difficulty.value,
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _save_scores(scores: Scores) -> None:
    def replace_scores(settings: Settings) -> None:
        settings.scores = scores.model_copy()

    SETTINGS_STORE.update(replace_scores)


def _record_move(session: GameSession, player: str, row: int, col: int) -> None:
    """Log the move and, once the game is decided, update the scoreboard."""

    session.move_log.append({"player": player, "row": row, "col": col})
    game = session.game
    if not game.finished:
        return
    session.scores.record(game.winner)
    _save_scores(session.scores)
    if game.winner:
        logger.info("Game won by %s in %d moves", game.winner, len(session.move_log))
    else:
        logger.info("Game drawn after %d moves", len(session.move_log))


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            if not session.ai or not _ai_to_move(session):
                return
            row, col = session.ai.choose(session.game)
            session.game.play_move(row, col)
            _record_move(session, session.ai.player, row, col)
        finally:
            session.ai_pending = False


def _schedule_ai(
    game_id: str, session: GameSession, background_tasks: Optional[BackgroundTasks]
) -> None:
    # Caller holds session.lock
    if _ai_to_move(session):
        session.ai_pending = True
        if background_tasks is not None:
            background_tasks.add_task(_run_ai_turn, game_id)


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        result = game.result()
        settings = session.settings
        state: Dict[str, object] = {
            "id": game_id,
            "boardSize": game.board.size,
            "board": game.board.rows(),
            "currentPlayer": game.current_player,
            "status": result.status.value,
            "winner": game.winner,
            "drawn": game.drawn,
            "winningCells": [list(cell) for cell in result.cells],
            "lastMove": list(game.last_move) if game.last_move else None,
            "moveLog": list(session.move_log),
            "mode": settings.game_mode,
            "aiPlaysAs": session.ai.player if session.ai else None,
            "difficulty": settings.ai_difficulty.value,
            "aiPending": session.ai_pending,
            "scores": session.scores.model_dump(by_alias=True),
        }
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    row: int,
    col: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    with session.lock:
        game = session.game
        if game.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if _ai_to_move(session):
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        player = game.current_player
        try:
            game.play_move(row, col)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        _record_move(session, player, row, col)
        _schedule_ai(game_id, session, background_tasks)


@app.post("/api/game")
def create_game(
    request: NewGameRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    game_id, session = _create_session(request)
    with session.lock:
        _schedule_ai(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.row, request.col, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/new")
def restart_game(game_id: str, background_tasks: BackgroundTasks) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        session.game = GameState.start(session.settings.board_size)
        session.move_log = []
        _schedule_ai(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/scores/reset")
def reset_scores(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.scores = Scores()
        _save_scores(session.scores)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/difficulty")
def change_difficulty(game_id: str, request: DifficultyRequest) -> Dict[str, object]:
    """Switch the AI tier for the rest of the current game without restarting it."""
    session = _get_session(game_id)
    with session.lock:
        session.settings.ai_difficulty = request.difficulty
        if session.ai:
            session.ai.difficulty = request.difficulty
    return _serialize_session(game_id, session)


@app.get("/api/settings")
def get_settings() -> Dict[str, object]:
    return SETTINGS_STORE.load().model_dump(by_alias=True, mode="json")


@app.put("/api/settings")
def update_settings(settings: Settings) -> Dict[str, object]:
    SETTINGS_STORE.save(settings)
    return settings.model_dump(by_alias=True, mode="json")


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>GridXO</title>
    <link rel=\"preconnect\" href=\"https://fonts.googleapis.com\" />
    <link rel=\"preconnect\" href=\"https://fonts.gstatic.com\" crossorigin />
    <link
      href=\"https://fonts.googleapis.com/css2?family=Poppins:wght@400;500;600;700&display=swap\"
      rel=\"stylesheet\"
    />
    <style>
      :root {
        color-scheme: light;
        font-family: 'Poppins', system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        font-weight: 400;
        --color-x: #e74c3c;
        --color-o: #3498db;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(760px, 100%);
      }
      h1 {
        margin: 0 0 0.5rem;
        font-size: clamp(1.8rem, 2.4vw + 1.2rem, 2.6rem);
        text-align: center;
        letter-spacing: 0.06em;
        color: #0c1a33;
      }
      .tagline {
        text-align: center;
        margin: 0 0 1.5rem;
        color: rgba(19, 32, 58, 0.75);
        font-weight: 500;
      }
      .settings {
        display: grid;
        grid-template-columns: repeat(auto-fit, minmax(160px, 1fr));
        gap: 0.75rem 1rem;
        margin-bottom: 1.5rem;
      }
      .settings label {
        display: flex;
        flex-direction: column;
        font-size: 0.85rem;
        font-weight: 500;
        gap: 0.3rem;
      }
      .settings label.inline {
        flex-direction: row;
        align-items: center;
      }
      select,
      input[type=\"color\"] {
        border-radius: 10px;
        border: 1px solid rgba(19, 32, 58, 0.2);
        padding: 0.35rem 0.5rem;
        font: inherit;
        background: #fff;
      }
      .controls {
        display: flex;
        justify-content: center;
        gap: 0.75rem;
        margin-bottom: 1rem;
      }
      button {
        border: none;
        border-radius: 999px;
        padding: 0.6rem 1.4rem;
        font: inherit;
        font-weight: 600;
        color: #fff;
        background: linear-gradient(135deg, #4c6ef5, #5f3dc4);
        cursor: pointer;
      }
      button.secondary {
        background: rgba(19, 32, 58, 0.08);
        color: #13203a;
      }
      button:disabled {
        opacity: 0.6;
        cursor: not-allowed;
      }
      #status {
        text-align: center;
        font-weight: 600;
        font-size: 1.15rem;
        min-height: 1.6rem;
      }
      #ai-thinking,
      #message {
        text-align: center;
        min-height: 1.3rem;
        font-size: 0.9rem;
        color: rgba(19, 32, 58, 0.7);
      }
      #message {
        color: #c92a2a;
      }
      .board-grid {
        display: grid;
        gap: 6px;
        margin: 1rem auto;
        width: min(480px, 100%);
        aspect-ratio: 1;
      }
      .cell {
        border-radius: 10px;
        padding: 0;
        background: #f1f3ff;
        color: #13203a;
        font-size: clamp(1rem, 6vw, 2.6rem);
        font-weight: 700;
        display: flex;
        align-items: center;
        justify-content: center;
      }
      .cell:focus-visible {
        outline: 3px solid #4c6ef5;
        outline-offset: 2px;
      }
      .cell.x {
        color: var(--color-x);
      }
      .cell.o {
        color: var(--color-o);
      }
      .cell.winning {
        background: #fff3bf;
      }
      .board-grid.thinking .cell {
        cursor: progress;
      }
      .scores {
        display: flex;
        justify-content: center;
        gap: 1.5rem;
        font-weight: 600;
      }
      .scores .x {
        color: var(--color-x);
      }
      .scores .o {
        color: var(--color-o);
      }
      .sr-only {
        position: absolute;
        width: 1px;
        height: 1px;
        overflow: hidden;
        clip: rect(0, 0, 0, 0);
      }
    </style>
  </head>
  <body>
    <main>
      <h1>GridXO</h1>
      <p class=\"tagline\">Tic-tac-toe on any board from 3x3 to 10x10.</p>
      <section class=\"settings\" aria-label=\"Settings\">
        <label>Board size
          <select id=\"board-size\"></select>
        </label>
        <label>Mode
          <select id=\"game-mode\">
            <option value=\"human-vs-ai\">Human vs AI</option>
            <option value=\"human-vs-human\">Human vs Human</option>
          </select>
        </label>
        <label>AI plays as
          <select id=\"ai-plays-as\">
            <option value=\"X\">X (moves first)</option>
            <option value=\"O\">O</option>
          </select>
        </label>
        <label>AI difficulty
          <select id=\"ai-difficulty\">
            <option value=\"easy\">Easy</option>
            <option value=\"medium\">Medium</option>
            <option value=\"hard\">Hard</option>
          </select>
        </label>
        <label>X colour
          <input id=\"color-x\" type=\"color\" />
        </label>
        <label>O colour
          <input id=\"color-o\" type=\"color\" />
        </label>
        <label>Sound theme
          <select id=\"sound-theme\">
            <option value=\"classic\">Classic</option>
            <option value=\"arcade\">Arcade</option>
            <option value=\"chime\">Chime</option>
          </select>
        </label>
        <label>Volume
          <input id=\"volume\" type=\"range\" min=\"0\" max=\"1\" step=\"0.05\" />
        </label>
        <label class=\"inline\">
          <input id=\"muted\" type=\"checkbox\" /> Mute
        </label>
      </section>
      <div class=\"controls\">
        <button id=\"new-game\">New game</button>
        <button id=\"reset-scores\" class=\"secondary\">Reset scores</button>
      </div>
      <div id=\"status\" aria-live=\"polite\"></div>
      <div id=\"ai-thinking\"></div>
      <div id=\"message\" role=\"status\"></div>
      <div id=\"board\" class=\"board-grid\" role=\"grid\" aria-label=\"Game board\"></div>
      <div class=\"scores\">
        <span class=\"x\">X: <span id=\"score-x\">0</span></span>
        <span class=\"o\">O: <span id=\"score-o\">0</span></span>
        <span>Draws: <span id=\"score-draws\">0</span></span>
      </div>
    </main>
    <script>
      const boardSizeEl = document.getElementById('board-size');
      const gameModeEl = document.getElementById('game-mode');
      const aiPlaysAsEl = document.getElementById('ai-plays-as');
      const aiDifficultyEl = document.getElementById('ai-difficulty');
      const colorXEl = document.getElementById('color-x');
      const colorOEl = document.getElementById('color-o');
      const soundThemeEl = document.getElementById('sound-theme');
      const volumeEl = document.getElementById('volume');
      const mutedEl = document.getElementById('muted');
      const newGameButton = document.getElementById('new-game');
      const resetScoresButton = document.getElementById('reset-scores');
      const boardContainer = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const thinkingEl = document.getElementById('ai-thinking');
      const messageEl = document.getElementById('message');

      let settings = null;
      let gameId = null;
      let gameState = null;
      let aiPollHandle = null;
      let isRequestPending = false;
      let focusedCell = { row: 0, col: 0 };

      for (let size = 3; size <= 10; size++) {
        const option = document.createElement('option');
        option.value = String(size);
        option.textContent = `${size} x ${size}`;
        boardSizeEl.appendChild(option);
      }

      const audio = (() => {
        let context = null;
        const moveTones = {
          classic: { X: 440, O: 330 },
          arcade: { X: 660, O: 440 },
          chime: { X: 880, O: 554 },
        };
        const winTones = {
          classic: { X: [440, 554, 659], O: [330, 415, 523] },
          arcade: { X: [660, 831, 988], O: [440, 554, 659] },
          chime: { X: [880, 1109, 1319], O: [554, 698, 831] },
        };

        function tone(frequency, duration) {
          if (!settings || settings.sound.muted || settings.sound.volume === 0) return;
          try {
            context = context || new (window.AudioContext || window.webkitAudioContext)();
            const oscillator = context.createOscillator();
            const gain = context.createGain();
            oscillator.connect(gain);
            gain.connect(context.destination);
            oscillator.frequency.setValueAtTime(frequency, context.currentTime);
            gain.gain.setValueAtTime(0, context.currentTime);
            gain.gain.linearRampToValueAtTime(settings.sound.volume * 0.1, context.currentTime + 0.01);
            gain.gain.exponentialRampToValueAtTime(0.001, context.currentTime + duration);
            oscillator.start(context.currentTime);
            oscillator.stop(context.currentTime + duration);
          } catch (error) {
            console.warn('Audio unavailable', error);
          }
        }

        return {
          move(player) {
            tone(moveTones[settings.sound.theme][player], 0.1);
          },
          win(player) {
            winTones[settings.sound.theme][player].forEach((freq, index) => {
              setTimeout(() => tone(freq, 0.3), index * 150);
            });
          },
          draw() {
            [220, 247, 262, 220].forEach((freq, index) => {
              setTimeout(() => tone(freq, 0.2), index * 100);
            });
          },
        };
      })();

      function applyColors() {
        document.documentElement.style.setProperty('--color-x', settings.colors.X);
        document.documentElement.style.setProperty('--color-o', settings.colors.O);
      }

      function renderSettings() {
        boardSizeEl.value = String(settings.boardSize);
        gameModeEl.value = settings.gameMode;
        aiPlaysAsEl.value = settings.aiPlaysAs;
        aiDifficultyEl.value = settings.aiDifficulty;
        colorXEl.value = settings.colors.X;
        colorOEl.value = settings.colors.O;
        soundThemeEl.value = settings.sound.theme;
        volumeEl.value = String(settings.sound.volume);
        mutedEl.checked = settings.sound.muted;
        const aiMode = settings.gameMode === 'human-vs-ai';
        aiPlaysAsEl.disabled = !aiMode;
        aiDifficultyEl.disabled = !aiMode;
        applyColors();
      }

      function readSettings() {
        return {
          ...settings,
          boardSize: Number.parseInt(boardSizeEl.value, 10),
          gameMode: gameModeEl.value,
          aiPlaysAs: aiPlaysAsEl.value,
          aiDifficulty: aiDifficultyEl.value,
          colors: { X: colorXEl.value, O: colorOEl.value },
          sound: {
            theme: soundThemeEl.value,
            volume: Number.parseFloat(volumeEl.value),
            muted: mutedEl.checked,
          },
          scores: gameState ? gameState.scores : settings.scores,
        };
      }

      async function saveSettings({ restart = false } = {}) {
        try {
          const response = await fetch('/api/settings', {
            method: 'PUT',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify(readSettings()),
          });
          if (!response.ok) {
            throw new Error('Unable to save settings');
          }
          settings = await response.json();
          renderSettings();
          if (restart) {
            await startGame();
          }
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        }
      }

      async function loadSettings() {
        const response = await fetch('/api/settings');
        settings = await response.json();
        renderSettings();
      }

      function stopAiPolling() {
        if (aiPollHandle) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle) return;
        aiPollHandle = setTimeout(pollAiState, 250);
      }

      async function startGame() {
        if (isRequestPending) return;
        isRequestPending = true;
        stopAiPolling();
        messageEl.textContent = '';
        newGameButton.disabled = true;
        try {
          const response = await fetch('/api/game', {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({
              boardSize: settings.boardSize,
              mode: settings.gameMode,
              aiPlaysAs: settings.aiPlaysAs,
              difficulty: settings.aiDifficulty,
            }),
          });
          if (!response.ok) {
            throw new Error('Unable to start game');
          }
          gameState = null;
          focusedCell = { row: 0, col: 0 };
          setState(await response.json());
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          newGameButton.disabled = false;
          isRequestPending = false;
        }
      }

      async function restartGame() {
        if (!gameId) {
          await startGame();
          return;
        }
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          const response = await fetch(`/api/game/${gameId}/new`, { method: 'POST' });
          if (!response.ok) {
            const payload = await response.json().catch(() => ({}));
            messageEl.textContent = payload?.detail || 'Unable to start a new game';
            return;
          }
          gameState = null;
          focusedCell = { row: 0, col: 0 };
          setState(await response.json());
        } catch (error) {
          messageEl.textContent = 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      async function pollAiState() {
        aiPollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (!response.ok) return;
          setState(await response.json());
        } catch (error) {
          console.error('Polling failed', error);
        } finally {
          if (gameState?.aiPending) {
            ensureAiPolling();
          }
        }
      }

      async function sendMove(row, col) {
        if (!gameState || gameState.status !== 'in_progress' || isRequestPending) return;
        if (gameState.aiPending || gameState.aiPlaysAs === gameState.currentPlayer) {
          messageEl.textContent = "It's not your turn yet.";
          return;
        }
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          const response = await fetch(`/api/game/${gameId}/move`, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ row, col }),
          });
          if (!response.ok) {
            const payload = await response.json().catch(() => ({}));
            messageEl.textContent = payload?.detail || 'Invalid move';
            return;
          }
          setState(await response.json());
        } catch (error) {
          messageEl.textContent = 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      async function resetScores() {
        if (!gameId) return;
        const response = await fetch(`/api/game/${gameId}/scores/reset`, { method: 'POST' });
        if (response.ok) {
          setState(await response.json());
        }
      }

      function playSounds(previous, next) {
        const seen = previous ? previous.moveLog.length : 0;
        next.moveLog.slice(seen).forEach((move) => audio.move(move.player));
        const wasOver = previous && previous.status !== 'in_progress';
        if (!wasOver && next.status === 'win') {
          audio.win(next.winner);
        } else if (!wasOver && next.status === 'draw') {
          audio.draw();
        }
      }

      function setState(data) {
        const previous = gameState && gameState.id === data.id ? gameState : null;
        gameId = data.id;
        gameState = data;
        playSounds(previous, data);
        renderBoard();
        renderStatus();
        renderScores();
        if (gameState.aiPending) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function renderBoard() {
        boardContainer.innerHTML = '';
        if (!gameState) return;
        const size = gameState.boardSize;
        boardContainer.style.gridTemplateColumns = `repeat(${size}, 1fr)`;
        boardContainer.classList.toggle('thinking', gameState.aiPending);
        const winning = new Set(gameState.winningCells.map(([r, c]) => `${r}-${c}`));
        gameState.board.forEach((row, r) => {
          row.forEach((mark, c) => {
            const cell = document.createElement('button');
            cell.classList.add('cell');
            cell.dataset.row = String(r);
            cell.dataset.col = String(c);
            cell.setAttribute('role', 'gridcell');
            cell.tabIndex = r === focusedCell.row && c === focusedCell.col ? 0 : -1;
            cell.setAttribute(
              'aria-label',
              `Row ${r + 1}, column ${c + 1}, ${mark ? `player ${mark}` : 'empty'}`
            );
            if (mark) {
              cell.classList.add(mark === 'X' ? 'x' : 'o');
              cell.textContent = mark;
            }
            if (winning.has(`${r}-${c}`)) {
              cell.classList.add('winning');
            }
            cell.addEventListener('click', () => {
              focusedCell = { row: r, col: c };
              sendMove(r, c);
            });
            cell.addEventListener('keydown', (event) => handleCellKeydown(event, r, c));
            boardContainer.appendChild(cell);
          });
        });
      }

      function renderStatus() {
        thinkingEl.textContent = gameState.aiPending ? 'AI is thinking…' : '';
        if (gameState.status === 'win') {
          statusEl.textContent = `Player ${gameState.winner} wins!`;
        } else if (gameState.status === 'draw') {
          statusEl.textContent = "It's a draw!";
        } else {
          statusEl.textContent = `Player ${gameState.currentPlayer}'s turn`;
        }
      }

      function renderScores() {
        document.getElementById('score-x').textContent = gameState.scores.X;
        document.getElementById('score-o').textContent = gameState.scores.O;
        document.getElementById('score-draws').textContent = gameState.scores.draws;
      }

      function moveFocus(row, col) {
        const size = gameState.boardSize;
        focusedCell = {
          row: Math.max(0, Math.min(size - 1, row)),
          col: Math.max(0, Math.min(size - 1, col)),
        };
        boardContainer.querySelectorAll('.cell').forEach((cell) => {
          const active =
            Number(cell.dataset.row) === focusedCell.row &&
            Number(cell.dataset.col) === focusedCell.col;
          cell.tabIndex = active ? 0 : -1;
          if (active) cell.focus();
        });
      }

      function handleCellKeydown(event, row, col) {
        const moves = {
          ArrowUp: [row - 1, col],
          ArrowDown: [row + 1, col],
          ArrowLeft: [row, col - 1],
          ArrowRight: [row, col + 1],
        };
        if (moves[event.key]) {
          event.preventDefault();
          moveFocus(...moves[event.key]);
        } else if (event.key === 'Enter' || event.key === ' ') {
          event.preventDefault();
          sendMove(row, col);
        }
      }

      async function changeDifficulty() {
        await saveSettings();
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}/difficulty`, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ difficulty: aiDifficultyEl.value }),
          });
          if (response.ok) {
            setState(await response.json());
          }
        } catch (error) {
          messageEl.textContent = 'Network error. Please try again.';
        }
      }

      [boardSizeEl, gameModeEl, aiPlaysAsEl].forEach((el) => {
        el.addEventListener('change', () => saveSettings({ restart: true }));
      });
      aiDifficultyEl.addEventListener('change', changeDifficulty);
      [colorXEl, colorOEl, soundThemeEl, volumeEl, mutedEl].forEach((el) => {
        el.addEventListener('change', () => saveSettings());
      });
      newGameButton.addEventListener('click', restartGame);
      resetScoresButton.addEventListener('click', resetScores);

      loadSettings()
        .then(startGame)
        .catch(() => {
          messageEl.textContent = 'Unable to reach the server.';
        });
    </script>
  </body>
</html>
"""
