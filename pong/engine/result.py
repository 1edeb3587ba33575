"""
Match result payload read at game over and handed to the progression
service, plus a per-match summary built from the point events.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .schemas import PLAYER1_LABEL, GameSettings, MatchState, Phase, ScoreEvent


@dataclass(frozen=True)
class MatchResult:
    """Everything the progression collaborator needs from a finished match."""
    score1: int
    score2: int
    winner_label: str
    player1_won: bool
    ball_returns: int
    max_deficit: int
    reached_deuce: bool
    play_time_seconds: float
    mode: str
    win_score: int
    speed_preset: str | None = None


def result_from_state(state: MatchState, settings: GameSettings) -> MatchResult:
    if state.phase != Phase.GAME_OVER:
        raise ValueError(f"Match result is only available at game over (phase={state.phase.value})")
    return MatchResult(
        score1=state.score1,
        score2=state.score2,
        winner_label=state.winner_label,
        player1_won=state.winner_label == PLAYER1_LABEL,
        ball_returns=state.ball_returns,
        max_deficit=state.max_deficit,
        reached_deuce=state.reached_deuce,
        play_time_seconds=state.play_time_seconds,
        mode=settings.mode.value,
        win_score=settings.win_score,
        speed_preset=settings.speed_preset,
    )


def result_to_dict(r: MatchResult) -> dict[str, Any]:
    """MatchResult to a JSON-serializable dict (camelCase keys of the match API)."""
    return {
        "gameMode": r.mode,
        "player1Score": r.score1,
        "player2Score": r.score2,
        "winner": "player1" if r.player1_won else "player2",
        "winnerLabel": r.winner_label,
        "winScore": r.win_score,
        "speedPreset": r.speed_preset,
        "durationSeconds": int(r.play_time_seconds),
        "ballReturns": r.ball_returns,
        "maxDeficit": r.max_deficit,
        "reachedDeuce": r.reached_deuce,
    }


@dataclass
class MatchSummary:
    """Per-match rally summary."""
    total_points: int
    total_returns: int
    longest_rally: int
    avg_rally_returns: float


def summarize_match(events: list[ScoreEvent]) -> MatchSummary:
    """Rally lengths come from the cumulative ball_returns on consecutive events."""
    if not events:
        return MatchSummary(total_points=0, total_returns=0, longest_rally=0, avg_rally_returns=0.0)
    rallies: list[int] = []
    prev = 0
    for e in events:
        rallies.append(e.ball_returns - prev)
        prev = e.ball_returns
    return MatchSummary(
        total_points=len(events),
        total_returns=events[-1].ball_returns,
        longest_rally=max(rallies),
        avg_rally_returns=sum(rallies) / len(rallies),
    )
