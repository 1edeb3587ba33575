"""
Match configuration at the boundary: pydantic models validate caller or
environment input and build the immutable GameSettings the engine consumes.
"""
from __future__ import annotations

import os
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, model_validator

from pong.engine.schemas import DEFAULT_SPEED_PRESET, SPEED_PRESETS, GameMode, GameSettings

DEFAULT_WIN_SCORE = 5
MAX_WIN_SCORE = 99

SpeedPreset = Literal["chill", "normal", "fast"]


class MatchSettingsModel(BaseModel):
    """
    Settings request. Speeds come from speed_preset unless given explicitly;
    explicit values override the preset one by one.
    """
    win_score: int = Field(DEFAULT_WIN_SCORE, ge=1, le=MAX_WIN_SCORE)
    speed_preset: SpeedPreset = DEFAULT_SPEED_PRESET
    ball_speed: float | None = Field(None, gt=0)
    max_ball_speed: float | None = Field(None, gt=0)
    mode: GameMode = GameMode.COMPUTER

    def resolved_speeds(self) -> tuple[float, float]:
        base, cap = SPEED_PRESETS[self.speed_preset]
        return (
            self.ball_speed if self.ball_speed is not None else base,
            self.max_ball_speed if self.max_ball_speed is not None else cap,
        )

    @model_validator(mode="after")
    def _check_speed_cap(self) -> MatchSettingsModel:
        ball_speed, max_ball_speed = self.resolved_speeds()
        if max_ball_speed < ball_speed:
            raise ValueError(f"max_ball_speed ({max_ball_speed}) must be >= ball_speed ({ball_speed})")
        return self

    def to_settings(self) -> GameSettings:
        ball_speed, max_ball_speed = self.resolved_speeds()
        return GameSettings(
            win_score=self.win_score,
            ball_speed=ball_speed,
            max_ball_speed=max_ball_speed,
            mode=self.mode,
        )


def load_settings(data: Mapping[str, Any] | None = None) -> GameSettings:
    """Validate a plain mapping (e.g. parsed JSON). Raises pydantic.ValidationError."""
    return MatchSettingsModel(**dict(data or {})).to_settings()


def settings_model_from_env(environ: Mapping[str, str] | None = None) -> MatchSettingsModel:
    """
    Read PONG_WIN_SCORE, PONG_SPEED (preset), PONG_MODE, PONG_BALL_SPEED and
    PONG_MAX_BALL_SPEED. Unset variables use defaults.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = {
        "win_score": env.get("PONG_WIN_SCORE", str(DEFAULT_WIN_SCORE)),
        "speed_preset": env.get("PONG_SPEED", DEFAULT_SPEED_PRESET).strip().lower(),
        "mode": env.get("PONG_MODE", GameMode.COMPUTER.value).strip().lower(),
    }
    if env.get("PONG_BALL_SPEED"):
        data["ball_speed"] = env["PONG_BALL_SPEED"]
    if env.get("PONG_MAX_BALL_SPEED"):
        data["max_ball_speed"] = env["PONG_MAX_BALL_SPEED"]
    return MatchSettingsModel(**data)


def settings_from_env(environ: Mapping[str, str] | None = None) -> GameSettings:
    return settings_model_from_env(environ).to_settings()
