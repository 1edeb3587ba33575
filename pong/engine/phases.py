"""
Phase state machine: menu -> countdown -> playing -> gameover -> menu.
The caller triggers every edge except playing -> gameover, which the
physics step takes the instant a score reaches win_score.
"""
from __future__ import annotations

import logging

from .rng import SeededRNG
from .schemas import (
    COUNTDOWN_SECONDS,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    GameSettings,
    MatchState,
    Phase,
)

logger = logging.getLogger(__name__)

_VALID_TRANSITIONS: dict[Phase, set[Phase]] = {
    Phase.MENU: {Phase.COUNTDOWN},
    Phase.COUNTDOWN: {Phase.PLAYING},
    Phase.PLAYING: {Phase.GAME_OVER},
    Phase.GAME_OVER: {Phase.MENU},
}


class InvalidTransition(ValueError):
    """Raised when a phase change is not an edge of the match cycle."""

    def __init__(self, current: Phase, target: Phase, reason: str | None = None) -> None:
        msg = f"Cannot move from {current.value} to {target.value}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.current = current
        self.target = target


def can_transition(current: Phase, target: Phase) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def _require(state: MatchState, target: Phase) -> None:
    if not can_transition(state.phase, target):
        raise InvalidTransition(state.phase, target)


def countdown_label(remaining: float) -> str:
    """Display label for the countdown; a pure function of remaining time."""
    if remaining > 3:
        return "3"
    if remaining > 2:
        return "2"
    if remaining > 1:
        return "1"
    return "GO!"


def serve_ball(state: MatchState, settings: GameSettings, direction: int, rng: SeededRNG) -> None:
    """Center the ball and launch it at base speed toward direction (+1 right, -1 left)."""
    state.ball_x = CANVAS_WIDTH / 2
    state.ball_y = CANVAS_HEIGHT / 2
    state.current_ball_speed = settings.ball_speed
    state.ball_vx = settings.ball_speed * direction
    state.ball_vy = settings.ball_speed * rng.uniform(-0.5, 0.5)


def start_countdown(state: MatchState, settings: GameSettings) -> None:
    """MENU -> COUNTDOWN"""
    _require(state, Phase.COUNTDOWN)
    state.phase = Phase.COUNTDOWN
    state.countdown_seconds_remaining = COUNTDOWN_SECONDS
    state.countdown_label = countdown_label(COUNTDOWN_SECONDS)
    state.current_ball_speed = settings.ball_speed
    state.play_time_seconds = 0.0
    state.center_positions()
    logger.debug("countdown started (win_score=%d, mode=%s)", settings.win_score, settings.mode.value)


def start_playing(state: MatchState, settings: GameSettings, rng: SeededRNG | None = None) -> None:
    """
    COUNTDOWN -> PLAYING, once update() has run the countdown down to zero.
    Opening serve goes to a random side with a random vertical component.
    """
    _require(state, Phase.PLAYING)
    if state.countdown_seconds_remaining > 0:
        raise InvalidTransition(
            state.phase,
            Phase.PLAYING,
            f"countdown still running ({state.countdown_seconds_remaining:.3f}s left)",
        )
    rng = rng or SeededRNG()
    state.phase = Phase.PLAYING
    serve_ball(state, settings, rng.sign(), rng)
    logger.debug("playing: serve vx=%.1f vy=%.1f", state.ball_vx, state.ball_vy)


def end_game(state: MatchState, winner_label: str) -> None:
    """PLAYING -> GAMEOVER. Freezes the ball and records the winner once."""
    _require(state, Phase.GAME_OVER)
    state.phase = Phase.GAME_OVER
    state.winner_label = winner_label
    state.ball_vx = 0.0
    state.ball_vy = 0.0
    state.score_pause_remaining = 0.0
    logger.debug("game over: %s wins %d-%d", winner_label, state.score1, state.score2)


def return_to_menu(state: MatchState) -> None:
    """
    GAMEOVER -> MENU. Zeroes scores and progression counters, clears
    winner/flash/pause, re-centers positions. Calling it again from MENU
    yields the same state.
    """
    if state.phase != Phase.MENU:
        _require(state, Phase.MENU)
    state.phase = Phase.MENU
    state.score1 = 0
    state.score2 = 0
    state.winner_label = ""
    state.play_time_seconds = 0.0
    state.countdown_seconds_remaining = 0.0
    state.countdown_label = ""
    state.current_ball_speed = 0.0
    state.score_flash_side = None
    state.score_flash_remaining = 0.0
    state.score_pause_remaining = 0.0
    state.ball_returns = 0
    state.max_deficit = 0
    state.reached_deuce = False
    state.center_positions()
