"""
Pong Match Engine: deterministic, frame-stepped paddle/ball physics, the
match phase state machine, scoring statistics and a beatable AI opponent.
"""
from .schemas import (
    CANVAS_WIDTH,
    CANVAS_HEIGHT,
    PADDLE_WIDTH,
    PADDLE_HEIGHT,
    PADDLE_OFFSET,
    PADDLE_SPEED,
    BALL_RADIUS,
    BALL_SPEED_INCREMENT,
    MAX_BOUNCE_ANGLE,
    COUNTDOWN_SECONDS,
    SCORE_PAUSE_SECONDS,
    SCORE_FLASH_SECONDS,
    PLAYER1_LABEL,
    PLAYER2_LABEL,
    COMPUTER_LABEL,
    SPEED_PRESETS,
    IDLE,
    Phase,
    GameMode,
    FlashSide,
    InputSnapshot,
    GameSettings,
    MatchState,
    ScoreEvent,
    preset_for_speeds,
)
from .rng import SeededRNG
from .phases import (
    InvalidTransition,
    can_transition,
    countdown_label,
    start_countdown,
    start_playing,
    end_game,
    return_to_menu,
)
from .physics import Rect, rects_overlap, bounce_angle_factor, apply_paddle_bounce, resolve_paddle_collisions
from .scoring import is_deuce, player1_deficit, record_point
from .engine import update, step_countdown, step_playing
from .ai import AIConfig, compute_computer_input
from .runner import MatchRunner, FixedStepClock, SparringPartner, async_run_realtime, idle_controller
from .result import MatchResult, MatchSummary, result_from_state, result_to_dict, summarize_match

__all__ = [
    "CANVAS_WIDTH",
    "CANVAS_HEIGHT",
    "PADDLE_WIDTH",
    "PADDLE_HEIGHT",
    "PADDLE_OFFSET",
    "PADDLE_SPEED",
    "BALL_RADIUS",
    "BALL_SPEED_INCREMENT",
    "MAX_BOUNCE_ANGLE",
    "COUNTDOWN_SECONDS",
    "SCORE_PAUSE_SECONDS",
    "SCORE_FLASH_SECONDS",
    "PLAYER1_LABEL",
    "PLAYER2_LABEL",
    "COMPUTER_LABEL",
    "SPEED_PRESETS",
    "IDLE",
    "Phase",
    "GameMode",
    "FlashSide",
    "InputSnapshot",
    "GameSettings",
    "MatchState",
    "ScoreEvent",
    "preset_for_speeds",
    "SeededRNG",
    "InvalidTransition",
    "can_transition",
    "countdown_label",
    "start_countdown",
    "start_playing",
    "end_game",
    "return_to_menu",
    "Rect",
    "rects_overlap",
    "bounce_angle_factor",
    "apply_paddle_bounce",
    "resolve_paddle_collisions",
    "is_deuce",
    "player1_deficit",
    "record_point",
    "update",
    "step_countdown",
    "step_playing",
    "AIConfig",
    "compute_computer_input",
    "MatchRunner",
    "FixedStepClock",
    "async_run_realtime",
    "idle_controller",
    "SparringPartner",
    "MatchResult",
    "MatchSummary",
    "result_from_state",
    "result_to_dict",
    "summarize_match",
]
