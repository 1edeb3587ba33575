"""
Run a headless match and print the live score after every point, then the
validated result payload the progression service would receive.

Defaults come from the PONG_* environment variables (see pong.config);
command-line options override them.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from pydantic import ValidationError

from pong.config import MatchSettingsModel, settings_model_from_env
from pong.engine.ai import compute_computer_input
from pong.engine.result import result_from_state, summarize_match
from pong.engine.runner import DEFAULT_TICK_SECONDS, MatchRunner, SparringPartner
from pong.engine.schemas import GameSettings, ScoreEvent
from pong.payloads import ALLOWED_WIN_SCORES, build_result_payload

# Ten simulated minutes at the default tick
DEFAULT_MAX_TICKS = 36_000


def _print_point(event: ScoreEvent) -> None:
    s1, s2 = event.score_after
    tag = "  (deuce)" if event.reached_deuce and not event.match_over else ""
    print(f"  Point {event.point_index:>2} → {event.scorer_label:<9} {s1}-{s2}   returns so far: {event.ball_returns}{tag}")


def run(
    settings: GameSettings,
    seed: int | None = None,
    tick_seconds: float = DEFAULT_TICK_SECONDS,
    max_ticks: int | None = DEFAULT_MAX_TICKS,
) -> int:
    # No humans at the keyboard: the built-in AI takes paddle 2 in local mode too
    runner = MatchRunner(
        settings,
        seed=seed,
        tick_seconds=tick_seconds,
        controller_1=SparringPartner(seed=seed),
        controller_2=compute_computer_input,
    )
    print(f"\n  Player 1  vs  {settings.player2_label}  [first to {settings.win_score}, seed={seed}]")
    print("  " + "-" * 56)
    for _ in runner.run(max_ticks=max_ticks, on_point=_print_point):
        pass
    if runner.state.winner_label == "":
        print(f"\n  Stopped after {runner.ticks} ticks at {runner.state.score1}-{runner.state.score2}.")
        return 1
    summary = summarize_match(runner.events)
    print("  " + "-" * 56)
    print(f"  {runner.state.winner_label} wins {runner.state.score1}-{runner.state.score2}")
    print(f"  Longest rally: {summary.longest_rally} returns   Avg: {summary.avg_rally_returns:.1f}")
    payload = build_result_payload(result_from_state(runner.state, settings))
    print(json.dumps(payload.model_dump(), indent=2))
    return 0


def _resolve_settings(parser: argparse.ArgumentParser, args: argparse.Namespace) -> GameSettings:
    try:
        base = settings_model_from_env()
        updates: dict[str, Any] = {}
        if args.win_score is not None:
            updates["win_score"] = args.win_score
        if args.mode is not None:
            updates["mode"] = args.mode
        if args.speed is not None:
            updates.update(speed_preset=args.speed, ball_speed=None, max_ball_speed=None)
        settings = MatchSettingsModel(**{**base.model_dump(), **updates}).to_settings()
    except ValidationError as e:
        parser.error(f"invalid match settings: {e}")
    if settings.win_score not in ALLOWED_WIN_SCORES:
        parser.error(f"win score must be one of {ALLOWED_WIN_SCORES}, got {settings.win_score}")
    if settings.speed_preset is None:
        parser.error("custom ball speeds have no result payload; use a speed preset")
    return settings


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a headless Pong match with live scoring.")
    parser.add_argument("--win-score", type=int, choices=ALLOWED_WIN_SCORES, default=None, help="Points needed to win")
    parser.add_argument("--speed", choices=("chill", "normal", "fast"), default=None, help="Ball speed preset")
    parser.add_argument("--mode", choices=("local", "computer"), default=None, help="Game mode")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    parser.add_argument("--tick", type=float, default=DEFAULT_TICK_SECONDS, help="Fixed step in seconds")
    parser.add_argument("--max-ticks", type=int, default=DEFAULT_MAX_TICKS, help="Stop after this many ticks")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    if args.tick <= 0:
        parser.error(f"--tick must be positive, got {args.tick}")
    if args.max_ticks <= 0:
        parser.error(f"--max-ticks must be positive, got {args.max_ticks}")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = _resolve_settings(parser, args)
    return run(settings, seed=args.seed, tick_seconds=args.tick, max_ticks=args.max_ticks)


if __name__ == "__main__":
    sys.exit(main())
