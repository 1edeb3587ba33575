"""
Tests for the headless runner, fixed-step clock, live pacing, match results
and the command-line driver.
"""
from __future__ import annotations

import asyncio
import json

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pong.engine.runner import (
    FixedStepClock,
    MatchRunner,
    SparringPartner,
    async_run_realtime,
    idle_controller,
)
from pong.engine.result import MatchSummary, result_from_state, result_to_dict, summarize_match
from pong.engine.schemas import GameMode, GameSettings, InputSnapshot, MatchState, Phase, ScoreEvent
from pong.engine.ai import compute_computer_input
from pong.run_match import DEFAULT_MAX_TICKS, main


def _event(point_index: int, ball_returns: int) -> ScoreEvent:
    return ScoreEvent(
        point_index=point_index,
        scorer=1,
        scorer_label="Player 1",
        score_before=(point_index - 1, 0),
        score_after=(point_index, 0),
        ball_returns=ball_returns,
        max_deficit=0,
        reached_deuce=False,
        match_over=False,
    )


# ---- Fixed-step clock ----
class TestFixedStepClock:
    def test_accumulates_whole_ticks(self):
        clock = FixedStepClock(0.25, max_frame_seconds=1.0)
        assert clock.advance(0.5) == 2
        assert clock.advance(0.125) == 0
        assert clock.alpha == pytest.approx(0.5)
        assert clock.advance(0.125) == 1
        assert clock.alpha == pytest.approx(0.0)

    def test_caps_long_frames(self):
        clock = FixedStepClock(0.25, max_frame_seconds=0.5)
        assert clock.advance(10.0) == 2

    def test_negative_frame_ignored(self):
        clock = FixedStepClock(0.25)
        assert clock.advance(-1.0) == 0

    def test_rejects_bad_tick(self):
        with pytest.raises(ValueError):
            FixedStepClock(0.0)


# ---- Runner ----
class TestMatchRunner:
    def test_default_controllers_follow_mode(self):
        assert MatchRunner(GameSettings(mode=GameMode.COMPUTER)).controller_2 is compute_computer_input
        assert MatchRunner(GameSettings(mode=GameMode.LOCAL)).controller_2 is idle_controller

    def test_countdown_then_play(self):
        runner = MatchRunner(GameSettings(), seed=1)
        runner.tick()
        assert runner.state.phase == Phase.COUNTDOWN
        for _ in range(300):
            runner.tick()
            if runner.state.phase == Phase.PLAYING:
                break
        assert runner.state.phase == Phase.PLAYING
        assert runner.state.ball_vx != 0

    def test_keys_routed_per_paddle(self):
        def both_up(state: MatchState) -> InputSnapshot:
            return InputSnapshot(paddle1_up=True, paddle2_up=True)

        runner = MatchRunner(GameSettings(mode=GameMode.LOCAL), controller_1=both_up, controller_2=idle_controller)
        assert runner.gather_inputs() == InputSnapshot(paddle1_up=True)
        runner = MatchRunner(GameSettings(mode=GameMode.LOCAL), controller_1=idle_controller, controller_2=both_up)
        assert runner.gather_inputs() == InputSnapshot(paddle2_up=True)

    def test_same_seed_same_match(self):
        settings = GameSettings(win_score=3)
        r1 = MatchRunner(settings, seed=2024, controller_1=SparringPartner(seed=2024))
        r2 = MatchRunner(settings, seed=2024, controller_1=SparringPartner(seed=2024))
        e1 = list(r1.run(max_ticks=100_000))
        e2 = list(r2.run(max_ticks=100_000))
        assert e1 and e1 == e2
        assert r1.state.phase == Phase.GAME_OVER
        assert r1.state.snapshot() == r2.state.snapshot()

    def test_max_ticks_and_callback(self):
        seen = []
        runner = MatchRunner(GameSettings(win_score=11, mode=GameMode.LOCAL), seed=3)
        events = list(runner.run(max_ticks=500, on_point=seen.append))
        assert runner.ticks == 500
        assert seen == events
        assert runner.events == events

    def test_full_match_result(self):
        settings = GameSettings(win_score=3, mode=GameMode.LOCAL)
        runner = MatchRunner(settings, seed=10)
        list(runner.run(max_ticks=200_000))
        result = result_from_state(runner.state, settings)
        assert max(result.score1, result.score2) == 3
        assert result.player1_won == (result.score1 == 3)
        assert result.mode == "local"
        assert result.play_time_seconds > 0
        payload = result_to_dict(result)
        assert json.loads(json.dumps(payload)) == payload
        assert payload["winner"] == ("player1" if result.player1_won else "player2")
        assert payload["speedPreset"] == "normal"

    def test_rejects_bad_tick(self):
        with pytest.raises(ValueError):
            MatchRunner(GameSettings(), tick_seconds=0)


# ---- Sparring partner ----
def _approach_state(ball_y: float = 250.0, ball_vx: float = -300.0, score=(0, 0)) -> MatchState:
    s = MatchState.create()
    s.phase = Phase.PLAYING
    s.paddle1_y = 0.0
    s.ball_y = ball_y
    s.ball_vx = ball_vx
    s.score1, s.score2 = score
    return s


class TestSparringPartner:
    def test_tracks_when_not_lapsing(self):
        partner = SparringPartner(seed=1, lapse_chance=0.0)
        assert partner(_approach_state(ball_y=400.0)) == InputSnapshot(paddle1_down=True)

    def test_lapse_holds_still_for_whole_approach(self):
        partner = SparringPartner(seed=1, lapse_chance=1.0)
        s = _approach_state(ball_y=400.0)
        for _ in range(5):
            assert partner(s) == InputSnapshot()
        assert partner.lapses == 1

    def test_drifts_to_center_when_receding(self):
        partner = SparringPartner(seed=1, lapse_chance=1.0)
        assert partner(_approach_state(ball_vx=300.0)) == InputSnapshot(paddle1_down=True)
        assert partner.lapses == 0

    def test_rolls_once_per_approach_and_per_serve(self):
        partner = SparringPartner(seed=1, lapse_chance=1.0)
        partner(_approach_state())
        partner(_approach_state())
        assert partner.lapses == 1
        partner(_approach_state(ball_vx=300.0))
        partner(_approach_state())
        assert partner.lapses == 2
        # serve toward paddle 1 after a point, with no receding tick between
        partner(_approach_state(score=(0, 1)))
        assert partner.lapses == 3

    def test_never_touches_paddle2(self):
        partner = SparringPartner(seed=2)
        for vx in (-300.0, 300.0, 0.0):
            out = partner(_approach_state(ball_vx=vx))
            assert out.paddle2_up is False and out.paddle2_down is False

    def test_same_seed_same_lapses(self):
        a, b = SparringPartner(seed=9), SparringPartner(seed=9)
        for i in range(40):
            vx = -300.0 if i % 2 == 0 else 300.0
            assert a(_approach_state(ball_vx=vx)) == b(_approach_state(ball_vx=vx))
        assert a.lapses == b.lapses

    def test_rejects_bad_lapse_chance(self):
        with pytest.raises(ValueError):
            SparringPartner(lapse_chance=1.5)

    @pytest.mark.parametrize("preset", ["chill", "normal", "fast"])
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_match_against_ai_finishes(self, preset, seed):
        settings = GameSettings.from_preset(preset, win_score=3)
        runner = MatchRunner(
            settings,
            seed=seed,
            controller_1=SparringPartner(seed=seed),
            controller_2=compute_computer_input,
        )
        list(runner.run(max_ticks=DEFAULT_MAX_TICKS))
        assert runner.state.phase == Phase.GAME_OVER
        assert max(runner.state.score1, runner.state.score2) == 3


# ---- Live pacing ----
class TestAsyncRealtime:
    def test_yields_snapshots(self):
        runner = MatchRunner(GameSettings(), seed=4)

        async def collect():
            return [snap async for snap in async_run_realtime(runner, frame_seconds=0.001, time_scale=20.0, max_frames=3)]

        snaps = asyncio.run(collect())
        assert len(snaps) == 3
        assert all(isinstance(s, dict) and "phase" in s for s in snaps)
        assert snaps[-1]["phase"] in ("menu", "countdown", "playing")


# ---- Results ----
class TestResults:
    def test_result_requires_game_over(self):
        with pytest.raises(ValueError):
            result_from_state(MatchState.create(), GameSettings())

    def test_summarize_match(self):
        summary = summarize_match([_event(1, 2), _event(2, 2), _event(3, 7)])
        assert summary.total_points == 3
        assert summary.total_returns == 7
        assert summary.longest_rally == 5
        assert summary.avg_rally_returns == pytest.approx(7 / 3)

    def test_summarize_empty(self):
        assert summarize_match([]) == MatchSummary(0, 0, 0, 0.0)


# ---- CLI ----
@pytest.fixture
def clean_env(monkeypatch):
    for name in ("PONG_WIN_SCORE", "PONG_SPEED", "PONG_MODE", "PONG_BALL_SPEED", "PONG_MAX_BALL_SPEED"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _printed_payload(out: str) -> dict:
    return json.loads(out[out.index("{"):])


class TestCli:
    def test_default_args_finish_a_match(self, clean_env, capsys):
        code = main(["--seed", "1"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Player 1  vs  Computer" in out
        payload = _printed_payload(out)
        assert payload["winScore"] == 5
        assert payload["player2Name"] == "Computer"
        assert payload["speedPreset"] == "normal"
        winner_score = payload["player1Score"] if payload["winner"] == "player1" else payload["player2Score"]
        assert winner_score == 5

    def test_options_override_env(self, clean_env, capsys):
        clean_env.setenv("PONG_WIN_SCORE", "7")
        clean_env.setenv("PONG_MODE", "local")
        code = main(["--win-score", "3", "--seed", "5", "--speed", "fast"])
        payload = _printed_payload(capsys.readouterr().out)
        assert code == 0
        assert payload["winScore"] == 3
        assert payload["gameMode"] == "local"
        assert payload["player2Name"] == "Player 2"
        assert payload["speedPreset"] == "fast"

    def test_env_supplies_defaults(self, clean_env, capsys):
        clean_env.setenv("PONG_WIN_SCORE", "3")
        clean_env.setenv("PONG_SPEED", "chill")
        assert main(["--seed", "2"]) == 0
        payload = _printed_payload(capsys.readouterr().out)
        assert (payload["winScore"], payload["speedPreset"]) == (3, "chill")

    @pytest.mark.parametrize(
        "argv",
        [
            ["--win-score", "0"],
            ["--win-score", "4"],
            ["--tick", "0"],
            ["--tick", "-0.01"],
            ["--max-ticks", "0"],
        ],
    )
    def test_bad_options_exit_with_message(self, clean_env, argv):
        with pytest.raises(SystemExit) as exc:
            main(argv)
        assert exc.value.code == 2

    @pytest.mark.parametrize(
        "env",
        [
            {"PONG_WIN_SCORE": "many"},
            {"PONG_WIN_SCORE": "4"},
            {"PONG_BALL_SPEED": "250", "PONG_MAX_BALL_SPEED": "500"},
        ],
    )
    def test_bad_env_exits_with_message(self, clean_env, env):
        for name, value in env.items():
            clean_env.setenv(name, value)
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2
