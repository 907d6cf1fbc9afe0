"""Persisted player preferences and scoreboard for the GridXO web UI."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .ai import Difficulty
from .game import MAX_SIZE, MIN_SIZE

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".gridxo" / "settings.json"

# Shared by every store: request threads and background AI turns both write
_STORE_LOCK = threading.RLock()

GameMode = Literal["human-vs-ai", "human-vs-human"]
SoundTheme = Literal["classic", "arcade", "chime"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Colors(_CamelModel):
    x: str = Field(default="#e74c3c", alias="X")
    o: str = Field(default="#3498db", alias="O")

    @field_validator("x", "o")
    @classmethod
    def ensure_hex_color(cls, value: str) -> str:
        body = value[1:] if value.startswith("#") else ""
        if len(body) != 6 or any(ch not in "0123456789abcdefABCDEF" for ch in body):
            raise ValueError(f"Colour {value!r} must look like #rrggbb")
        return value.lower()


class Sound(_CamelModel):
    theme: SoundTheme = "classic"
    volume: float = Field(default=0.5, ge=0.0, le=1.0)
    muted: bool = False


class Scores(_CamelModel):
    x: int = Field(default=0, ge=0, alias="X")
    o: int = Field(default=0, ge=0, alias="O")
    draws: int = Field(default=0, ge=0)

    def record(self, winner: Optional[str]) -> None:
        if winner == "X":
            self.x += 1
        elif winner == "O":
            self.o += 1
        else:
            self.draws += 1


class Settings(_CamelModel):
    """Everything the page remembers between visits."""

    board_size: int = Field(default=3, ge=MIN_SIZE, le=MAX_SIZE, alias="boardSize")
    game_mode: GameMode = Field(default="human-vs-ai", alias="gameMode")
    ai_plays_as: Literal["X", "O"] = Field(default="O", alias="aiPlaysAs")
    ai_difficulty: Difficulty = Field(default=Difficulty.MEDIUM, alias="aiDifficulty")
    colors: Colors = Field(default_factory=Colors)
    sound: Sound = Field(default_factory=Sound)
    scores: Scores = Field(default_factory=Scores)


class SettingsStore:
    """JSON file holding a single :class:`Settings` document.

    Reads and writes never raise: a broken or missing file yields defaults
    and a failed write is logged, so a bad disk never interrupts a game.
    Writes go through a temporary file and ``os.replace`` so readers never
    see a partial document.
    """

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            env_path = os.environ.get("GRIDXO_SETTINGS_PATH")
            path = Path(env_path) if env_path else DEFAULT_SETTINGS_PATH
        self.path = Path(path)

    def load(self) -> Settings:
        with _STORE_LOCK:
            try:
                raw = self.path.read_bytes()
            except FileNotFoundError:
                return Settings()
            except OSError as exc:
                logger.warning("Could not read settings from %s: %s", self.path, exc)
                return Settings()

        try:
            return Settings.model_validate_json(raw)
        except (ValidationError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring invalid settings in %s: %s", self.path, exc)
            return Settings()

    def save(self, settings: Settings) -> None:
        payload = settings.model_dump_json(by_alias=True, indent=2)
        with _STORE_LOCK:
            tmp_name: Optional[str] = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.path.parent, prefix=self.path.name, suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self.path)
                tmp_name = None
            except OSError as exc:
                logger.warning("Could not save settings to %s: %s", self.path, exc)
            finally:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

    def update(self, change: Callable[[Settings], None]) -> Settings:
        """Load, apply ``change`` and save as one step."""
        with _STORE_LOCK:
            settings = self.load()
            change(settings)
            self.save(settings)
            return settings
