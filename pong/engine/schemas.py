"""
Match state, settings and input types shared by the Pong match engine.
Field geometry and tuning constants live here so every step reads the same values.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

# ---- Field geometry (pixels) ----
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 500
PADDLE_WIDTH = 10
PADDLE_HEIGHT = 80
PADDLE_OFFSET = 30  # gap between each side wall and its paddle
BALL_RADIUS = 8

# ---- Motion tuning ----
PADDLE_SPEED = 400.0  # px/s
BALL_SPEED_INCREMENT = 20.0  # added on every paddle return
MAX_BOUNCE_ANGLE = 0.75  # |vy| / speed at an edge hit

# ---- Timers (seconds) ----
COUNTDOWN_SECONDS = 3.5
SCORE_PAUSE_SECONDS = 0.8
SCORE_FLASH_SECONDS = 0.5

PLAYER1_LABEL = "Player 1"
PLAYER2_LABEL = "Player 2"
COMPUTER_LABEL = "Computer"

PADDLE_MIN_Y = 0.0
PADDLE_MAX_Y = float(CANVAS_HEIGHT - PADDLE_HEIGHT)
PADDLE_CENTER_Y = CANVAS_HEIGHT / 2 - PADDLE_HEIGHT / 2


class Phase(str, Enum):
    """Coarse lifecycle state of a match."""
    MENU = "menu"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    GAME_OVER = "gameover"


class GameMode(str, Enum):
    LOCAL = "local"
    COMPUTER = "computer"


class FlashSide(str, Enum):
    """Which score label flashes after a point."""
    LEFT = "left"
    RIGHT = "right"


# ball_speed / max_ball_speed per difficulty preset
SPEED_PRESETS: dict[str, tuple[float, float]] = {
    "chill": (200.0, 400.0),
    "normal": (300.0, 600.0),
    "fast": (400.0, 800.0),
}
DEFAULT_SPEED_PRESET = "normal"


def preset_for_speeds(ball_speed: float, max_ball_speed: float) -> str | None:
    """Name of the preset matching these speeds, or None for custom speeds."""
    for name, speeds in SPEED_PRESETS.items():
        if speeds == (ball_speed, max_ball_speed):
            return name
    return None


@dataclass(frozen=True)
class InputSnapshot:
    """Decoded controls for one tick. Consumed by update() and discarded."""
    paddle1_up: bool = False
    paddle1_down: bool = False
    paddle2_up: bool = False
    paddle2_down: bool = False

    def merge(self, other: InputSnapshot) -> InputSnapshot:
        """OR two snapshots, e.g. human keys for paddle 1 plus AI keys for paddle 2."""
        return InputSnapshot(
            paddle1_up=self.paddle1_up or other.paddle1_up,
            paddle1_down=self.paddle1_down or other.paddle1_down,
            paddle2_up=self.paddle2_up or other.paddle2_up,
            paddle2_down=self.paddle2_down or other.paddle2_down,
        )


IDLE = InputSnapshot()


@dataclass(frozen=True)
class GameSettings:
    """Per-match configuration. Supplied by the caller when the countdown starts."""
    win_score: int = 5
    ball_speed: float = SPEED_PRESETS[DEFAULT_SPEED_PRESET][0]
    max_ball_speed: float = SPEED_PRESETS[DEFAULT_SPEED_PRESET][1]
    mode: GameMode = GameMode.COMPUTER

    def __post_init__(self) -> None:
        if self.win_score <= 0:
            raise ValueError(f"win_score must be positive, got {self.win_score}")
        if self.ball_speed <= 0:
            raise ValueError(f"ball_speed must be positive, got {self.ball_speed}")
        if self.max_ball_speed < self.ball_speed:
            raise ValueError(
                f"max_ball_speed ({self.max_ball_speed}) must be >= ball_speed ({self.ball_speed})"
            )

    @classmethod
    def from_preset(
        cls, preset: str, win_score: int = 5, mode: GameMode = GameMode.COMPUTER
    ) -> GameSettings:
        if preset not in SPEED_PRESETS:
            raise ValueError(f"Unknown speed preset: {preset}")
        ball_speed, max_ball_speed = SPEED_PRESETS[preset]
        return cls(win_score=win_score, ball_speed=ball_speed, max_ball_speed=max_ball_speed, mode=mode)

    @property
    def player2_label(self) -> str:
        return COMPUTER_LABEL if self.mode == GameMode.COMPUTER else PLAYER2_LABEL

    @property
    def speed_preset(self) -> str | None:
        return preset_for_speeds(self.ball_speed, self.max_ball_speed)


@dataclass
class MatchState:
    """
    Mutable snapshot of one match. The caller's loop is its only writer;
    renderers read it (or snapshot()) between ticks.
    """
    phase: Phase = Phase.MENU
    # Paddles: Y of the TOP edge
    paddle1_y: float = PADDLE_CENTER_Y
    paddle2_y: float = PADDLE_CENTER_Y
    # Ball: center and velocity
    ball_x: float = CANVAS_WIDTH / 2
    ball_y: float = CANVAS_HEIGHT / 2
    ball_vx: float = 0.0
    ball_vy: float = 0.0
    current_ball_speed: float = 0.0
    score1: int = 0
    score2: int = 0
    winner_label: str = ""
    play_time_seconds: float = 0.0
    countdown_seconds_remaining: float = 0.0
    countdown_label: str = ""
    score_pause_remaining: float = 0.0
    score_flash_side: FlashSide | None = None
    score_flash_remaining: float = 0.0
    # Progression counters, read by the caller at game over
    ball_returns: int = 0
    max_deficit: int = 0
    reached_deuce: bool = False

    @classmethod
    def create(cls) -> MatchState:
        """Fresh Menu-phase state with zeroed scores and centered positions."""
        return cls()

    def center_positions(self) -> None:
        self.paddle1_y = PADDLE_CENTER_Y
        self.paddle2_y = PADDLE_CENTER_Y
        self.ball_x = CANVAS_WIDTH / 2
        self.ball_y = CANVAS_HEIGHT / 2
        self.ball_vx = 0.0
        self.ball_vy = 0.0

    def snapshot(self) -> dict[str, Any]:
        """Plain dict copy for renderers and live feeds."""
        d = asdict(self)
        d["phase"] = self.phase.value
        d["score_flash_side"] = self.score_flash_side.value if self.score_flash_side else None
        return d


@dataclass(frozen=True)
class ScoreEvent:
    """Emitted by the engine on the tick a point is scored."""
    point_index: int  # 1-based, counts points in this match
    scorer: int  # 1 or 2
    scorer_label: str
    score_before: tuple[int, int]
    score_after: tuple[int, int]
    ball_returns: int  # cumulative for the match
    max_deficit: int
    reached_deuce: bool
    match_over: bool
