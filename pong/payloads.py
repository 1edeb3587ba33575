"""
Outgoing match-result payload, validated before it is handed to the
progression/persistence service.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from pong.engine.result import MatchResult, result_to_dict
from pong.engine.schemas import COMPUTER_LABEL, PLAYER2_LABEL

# Win scores the match API accepts
ALLOWED_WIN_SCORES = (3, 5, 7, 11)


class MatchResultPayload(BaseModel):
    gameMode: Literal["local", "computer"]
    player2Name: str = Field(..., min_length=1, max_length=100)
    player1Score: int = Field(..., ge=0)
    player2Score: int = Field(..., ge=0)
    winner: Literal["player1", "player2"]
    winScore: int
    speedPreset: Literal["chill", "normal", "fast"]
    durationSeconds: int | None = Field(None, ge=0)
    ballReturns: int = Field(0, ge=0)
    maxDeficit: int = Field(0, ge=0)
    reachedDeuce: bool = False

    @model_validator(mode="after")
    def _check_scores(self) -> MatchResultPayload:
        if self.winScore not in ALLOWED_WIN_SCORES:
            raise ValueError(f"Win score must be one of {ALLOWED_WIN_SCORES}")
        winner_score = self.player1Score if self.winner == "player1" else self.player2Score
        if winner_score != self.winScore:
            raise ValueError("Winner must have the winning score")
        return self


def build_result_payload(result: MatchResult, player2_name: str | None = None) -> MatchResultPayload:
    """
    Payload for a finished match. player2_name defaults to "Computer" in
    computer mode and "Player 2" in local mode. Raises
    pydantic.ValidationError for matches the API would reject (custom
    speeds, unsupported win scores).
    """
    d = result_to_dict(result)
    if player2_name is None:
        player2_name = COMPUTER_LABEL if result.mode == "computer" else PLAYER2_LABEL
    return MatchResultPayload(
        gameMode=d["gameMode"],
        player2Name=player2_name,
        player1Score=d["player1Score"],
        player2Score=d["player2Score"],
        winner=d["winner"],
        winScore=d["winScore"],
        speedPreset=d["speedPreset"],
        durationSeconds=d["durationSeconds"],
        ballReturns=d["ballReturns"],
        maxDeficit=d["maxDeficit"],
        reachedDeuce=d["reachedDeuce"],
    )
