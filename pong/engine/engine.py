"""
Single per-tick entry point. update() dispatches on the match phase to
step_countdown / step_playing; menu and gameover only decay the score flash.
"""
from __future__ import annotations

from .phases import countdown_label
from .physics import (
    ball_is_finite,
    integrate_ball,
    move_paddles,
    recover_ball,
    resolve_paddle_collisions,
    resolve_wall_collision,
)
from .rng import SeededRNG
from .schemas import GameSettings, InputSnapshot, MatchState, Phase, ScoreEvent
from .scoring import resolve_scoring


def decay_score_flash(state: MatchState, dt: float) -> None:
    if state.score_flash_remaining > 0:
        state.score_flash_remaining -= dt
        if state.score_flash_remaining <= 0:
            state.score_flash_remaining = 0.0
            state.score_flash_side = None


def step_countdown(state: MatchState, dt: float, inputs: InputSnapshot) -> None:
    """Run the countdown down (floored at zero); paddles stay controllable, ball stays put."""
    state.countdown_seconds_remaining = max(0.0, state.countdown_seconds_remaining - dt)
    state.countdown_label = countdown_label(state.countdown_seconds_remaining)
    move_paddles(state, dt, inputs)


def step_playing(
    state: MatchState,
    dt: float,
    inputs: InputSnapshot,
    settings: GameSettings,
    rng: SeededRNG,
) -> ScoreEvent | None:
    # Freeze everything for a beat after a point
    if state.score_pause_remaining > 0:
        state.score_pause_remaining = max(0.0, state.score_pause_remaining - dt)
        return None

    state.play_time_seconds += dt
    move_paddles(state, dt, inputs)
    integrate_ball(state, dt)
    if not ball_is_finite(state):
        recover_ball(state, settings)
        return None
    resolve_wall_collision(state)
    resolve_paddle_collisions(state, settings)
    return resolve_scoring(state, settings, rng)


def update(
    state: MatchState,
    dt: float,
    inputs: InputSnapshot,
    settings: GameSettings,
    rng: SeededRNG | None = None,
) -> ScoreEvent | None:
    """
    Advance the match by dt seconds. Returns the ScoreEvent if a point was
    scored this tick, else None. The caller observes
    countdown_seconds_remaining <= 0 and calls start_playing itself.
    """
    if dt < 0:
        raise ValueError(f"dt must be >= 0, got {dt}")
    decay_score_flash(state, dt)
    match state.phase:
        case Phase.COUNTDOWN:
            step_countdown(state, dt, inputs)
            return None
        case Phase.PLAYING:
            return step_playing(state, dt, inputs, settings, rng or SeededRNG())
        case _:
            return None
