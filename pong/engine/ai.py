"""
Built-in computer opponent for the right paddle.

Tracking is deliberately imperfect: no prediction of where the ball will
arrive, and a dead-zone around the paddle center so it does not twitch.
Given the same state it always returns the same input.
"""
from __future__ import annotations

from dataclasses import dataclass

from .schemas import CANVAS_HEIGHT, PADDLE_HEIGHT, InputSnapshot, MatchState


@dataclass(frozen=True)
class AIConfig:
    dead_zone: float = 20.0  # px around paddle center while tracking the ball
    center_dead_zone: float = 30.0  # px around canvas center while drifting back


def track_target(paddle_y: float, target_y: float, dead_zone: float) -> tuple[bool, bool]:
    """(up, down) that moves a paddle's center toward target_y, idle inside the dead-zone."""
    center = paddle_y + PADDLE_HEIGHT / 2
    if target_y < center - dead_zone:
        return True, False
    if target_y > center + dead_zone:
        return False, True
    return False, False


def compute_computer_input(state: MatchState, config: AIConfig | None = None) -> InputSnapshot:
    """
    Synthetic input for paddle 2. Follows the ball while it approaches,
    otherwise drifts back toward the vertical center. Paddle 1 keys are
    always False.
    """
    cfg = config or AIConfig()
    if state.ball_vx > 0:
        up, down = track_target(state.paddle2_y, state.ball_y, cfg.dead_zone)
    else:
        up, down = track_target(state.paddle2_y, CANVAS_HEIGHT / 2, cfg.center_dead_zone)
    return InputSnapshot(paddle2_up=up, paddle2_down=down)
