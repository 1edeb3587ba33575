"""
Physics step helpers: paddle motion, ball integration, wall and paddle
collisions, and the normalized-vector bounce response.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .schemas import (
    BALL_RADIUS,
    BALL_SPEED_INCREMENT,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    MAX_BOUNCE_ANGLE,
    PADDLE_HEIGHT,
    PADDLE_MAX_Y,
    PADDLE_MIN_Y,
    PADDLE_OFFSET,
    PADDLE_SPEED,
    PADDLE_WIDTH,
    GameSettings,
    InputSnapshot,
    MatchState,
)

logger = logging.getLogger(__name__)

LEFT_PADDLE_X = float(PADDLE_OFFSET)
RIGHT_PADDLE_X = float(CANVAS_WIDTH - PADDLE_OFFSET - PADDLE_WIDTH)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box; x, y is the top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


def rects_overlap(a: Rect, b: Rect) -> bool:
    """True if the boxes overlap on both axes. Touching edges count as overlap."""
    return a.x <= b.right and a.right >= b.x and a.y <= b.bottom and a.bottom >= b.y


def ball_rect(state: MatchState) -> Rect:
    return Rect(state.ball_x - BALL_RADIUS, state.ball_y - BALL_RADIUS, 2 * BALL_RADIUS, 2 * BALL_RADIUS)


def paddle_rect(paddle_x: float, paddle_y: float) -> Rect:
    return Rect(paddle_x, paddle_y, PADDLE_WIDTH, PADDLE_HEIGHT)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def move_paddles(state: MatchState, dt: float, inputs: InputSnapshot) -> None:
    """Apply held keys, then clamp both paddles to the canvas."""
    step = PADDLE_SPEED * dt
    if inputs.paddle1_up:
        state.paddle1_y -= step
    if inputs.paddle1_down:
        state.paddle1_y += step
    if inputs.paddle2_up:
        state.paddle2_y -= step
    if inputs.paddle2_down:
        state.paddle2_y += step
    state.paddle1_y = clamp(state.paddle1_y, PADDLE_MIN_Y, PADDLE_MAX_Y)
    state.paddle2_y = clamp(state.paddle2_y, PADDLE_MIN_Y, PADDLE_MAX_Y)


def integrate_ball(state: MatchState, dt: float) -> None:
    state.ball_x += state.ball_vx * dt
    state.ball_y += state.ball_vy * dt


def resolve_wall_collision(state: MatchState) -> bool:
    """Reflect off the top/bottom walls. Returns True if the ball touched a wall."""
    if state.ball_y - BALL_RADIUS <= 0:
        state.ball_y = float(BALL_RADIUS)
        state.ball_vy = abs(state.ball_vy)
        return True
    if state.ball_y + BALL_RADIUS >= CANVAS_HEIGHT:
        state.ball_y = float(CANVAS_HEIGHT - BALL_RADIUS)
        state.ball_vy = -abs(state.ball_vy)
        return True
    return False


def bounce_angle_factor(paddle_y: float, ball_y: float) -> float:
    """
    Impact offset from paddle center, clamped to [-1, 1] (-1 = top edge,
    +1 = bottom edge), scaled by MAX_BOUNCE_ANGLE.
    """
    half = PADDLE_HEIGHT / 2
    offset = (ball_y - (paddle_y + half)) / half
    return clamp(offset, -1.0, 1.0) * MAX_BOUNCE_ANGLE


def apply_paddle_bounce(
    state: MatchState,
    paddle_y: float,
    direction: int,
    settings: GameSettings,
) -> None:
    """
    Ramp speed (capped at max_ball_speed) and set an exit vector whose
    magnitude is exactly current_ball_speed. direction is +1 leaving the
    left paddle, -1 leaving the right one.
    """
    state.current_ball_speed = min(state.current_ball_speed + BALL_SPEED_INCREMENT, settings.max_ball_speed)
    factor = bounce_angle_factor(paddle_y, state.ball_y)
    state.ball_vy = state.current_ball_speed * factor
    state.ball_vx = state.current_ball_speed * math.sqrt(1 - factor * factor) * direction
    # Flush against the paddle face so the next tick cannot re-collide
    if direction == 1:
        state.ball_x = LEFT_PADDLE_X + PADDLE_WIDTH + BALL_RADIUS
    else:
        state.ball_x = RIGHT_PADDLE_X - BALL_RADIUS


def resolve_paddle_collisions(state: MatchState, settings: GameSettings) -> int:
    """
    Left paddle only while the ball moves left, right paddle only while it
    moves right. Returns the number of returns made this tick (0 or 1).
    """
    hits = 0
    if state.ball_vx < 0 and rects_overlap(ball_rect(state), paddle_rect(LEFT_PADDLE_X, state.paddle1_y)):
        state.ball_returns += 1
        apply_paddle_bounce(state, state.paddle1_y, 1, settings)
        hits += 1
    if state.ball_vx > 0 and rects_overlap(ball_rect(state), paddle_rect(RIGHT_PADDLE_X, state.paddle2_y)):
        state.ball_returns += 1
        apply_paddle_bounce(state, state.paddle2_y, -1, settings)
        hits += 1
    return hits


def ball_is_finite(state: MatchState) -> bool:
    return all(math.isfinite(v) for v in (state.ball_x, state.ball_y, state.ball_vx, state.ball_vy))


def recover_ball(state: MatchState, settings: GameSettings) -> None:
    """Re-center a ball whose position or velocity went NaN/inf."""
    logger.warning(
        "non-finite ball state (x=%r y=%r vx=%r vy=%r); re-centering",
        state.ball_x, state.ball_y, state.ball_vx, state.ball_vy,
    )
    direction = -1 if state.ball_vx < 0 else 1  # NaN compares False -> serve right
    state.ball_x = CANVAS_WIDTH / 2
    state.ball_y = CANVAS_HEIGHT / 2
    state.current_ball_speed = settings.ball_speed
    state.ball_vx = settings.ball_speed * direction
    state.ball_vy = 0.0
