"""
Scoring: detects a ball leaving the field, updates scores and the derived
progression counters (max deficit, deuce), then ends the game or serves
the next point toward the player who lost the rally.
"""
from __future__ import annotations

import logging

from .phases import end_game, serve_ball
from .rng import SeededRNG
from .schemas import (
    BALL_RADIUS,
    CANVAS_WIDTH,
    PLAYER1_LABEL,
    SCORE_FLASH_SECONDS,
    SCORE_PAUSE_SECONDS,
    FlashSide,
    GameSettings,
    MatchState,
    ScoreEvent,
)

logger = logging.getLogger(__name__)


def is_deuce(score1: int, score2: int, win_score: int) -> bool:
    """Both players at or one point below the winning score."""
    return score1 >= win_score - 1 and score2 >= win_score - 1


def player1_deficit(score1: int, score2: int) -> int:
    """Opponent's lead over player 1 (0 when player 1 is level or ahead)."""
    return max(0, score2 - score1)


def ball_exit_side(state: MatchState) -> int | None:
    """Scorer (1 or 2) if the ball has fully left the field, else None."""
    if state.ball_x + BALL_RADIUS < 0:
        return 2
    if state.ball_x - BALL_RADIUS > CANVAS_WIDTH:
        return 1
    return None


def record_point(
    state: MatchState,
    scorer: int,
    settings: GameSettings,
    rng: SeededRNG,
) -> ScoreEvent:
    """Apply one scored point; returns the ScoreEvent for it."""
    score_before = (state.score1, state.score2)
    if scorer == 1:
        state.score1 += 1
        state.score_flash_side = FlashSide.LEFT
        label = PLAYER1_LABEL
    else:
        state.score2 += 1
        state.score_flash_side = FlashSide.RIGHT
        label = settings.player2_label
    state.score_flash_remaining = SCORE_FLASH_SECONDS

    state.max_deficit = max(state.max_deficit, player1_deficit(state.score1, state.score2))
    if is_deuce(state.score1, state.score2, settings.win_score):
        state.reached_deuce = True

    scorer_total = state.score1 if scorer == 1 else state.score2
    match_over = scorer_total >= settings.win_score
    if match_over:
        end_game(state, label)
    else:
        state.score_pause_remaining = SCORE_PAUSE_SECONDS
        # Loser of the rally receives the next serve
        serve_ball(state, settings, 1 if scorer == 1 else -1, rng)

    event = ScoreEvent(
        point_index=state.score1 + state.score2,
        scorer=scorer,
        scorer_label=label,
        score_before=score_before,
        score_after=(state.score1, state.score2),
        ball_returns=state.ball_returns,
        max_deficit=state.max_deficit,
        reached_deuce=state.reached_deuce,
        match_over=match_over,
    )
    logger.debug("point to %s: %d-%d", label, state.score1, state.score2)
    return event


def resolve_scoring(state: MatchState, settings: GameSettings, rng: SeededRNG) -> ScoreEvent | None:
    scorer = ball_exit_side(state)
    if scorer is None:
        return None
    return record_point(state, scorer, settings, rng)
