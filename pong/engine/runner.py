"""
Headless match driver: the caller side of the engine. Owns one MatchState,
starts the countdown, observes it and starts play, gathers controller input
every tick and calls update(). Separates simulation time (fixed ticks) from
wall-clock time for live consumers.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Callable, Iterator

from .ai import AIConfig, compute_computer_input, track_target
from .engine import update
from .phases import start_countdown, start_playing
from .rng import SeededRNG
from .schemas import (
    CANVAS_HEIGHT,
    IDLE,
    GameMode,
    GameSettings,
    InputSnapshot,
    MatchState,
    Phase,
    ScoreEvent,
)

logger = logging.getLogger(__name__)

Controller = Callable[[MatchState], InputSnapshot]

DEFAULT_TICK_SECONDS = 1 / 60
MAX_FRAME_SECONDS = 0.25


def idle_controller(state: MatchState) -> InputSnapshot:
    return IDLE


class SparringPartner:
    """
    Stand-in for a human on paddle 1: the dead-zone tracker, mirrored, with
    seeded lapses. Each time the ball starts heading left (a new rally or a
    fresh serve) it rolls once; on a lapse the paddle stays where it is
    until the ball turns around. Two tracking AIs never miss each other at
    the slower presets, so lapses are what end the rallies.
    """

    def __init__(
        self,
        seed: int | None = None,
        lapse_chance: float = 0.3,
        config: AIConfig | None = None,
    ) -> None:
        if not 0.0 <= lapse_chance <= 1.0:
            raise ValueError("lapse_chance must be within [0, 1]")
        self.rng = SeededRNG(seed)
        self.lapse_chance = lapse_chance
        self.config = config or AIConfig()
        self.lapses = 0
        self._approaching = False
        self._points = 0
        self._lapsing = False

    def __call__(self, state: MatchState) -> InputSnapshot:
        approaching = state.ball_vx < 0
        points = state.score1 + state.score2
        if approaching and (not self._approaching or points != self._points):
            self._lapsing = self.rng.random() < self.lapse_chance
            if self._lapsing:
                self.lapses += 1
        self._approaching = approaching
        self._points = points

        if approaching:
            if self._lapsing:
                return IDLE
            up, down = track_target(state.paddle1_y, state.ball_y, self.config.dead_zone)
        else:
            up, down = track_target(state.paddle1_y, CANVAS_HEIGHT / 2, self.config.center_dead_zone)
        return InputSnapshot(paddle1_up=up, paddle1_down=down)


class FixedStepClock:
    """
    Turns variable frame deltas into a whole number of fixed ticks.
    Leftover time carries into the next frame; one long frame is capped so
    a stall cannot queue an unbounded burst of ticks.
    """

    def __init__(self, tick_seconds: float = DEFAULT_TICK_SECONDS, max_frame_seconds: float = MAX_FRAME_SECONDS) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self.tick_seconds = tick_seconds
        self.max_frame_seconds = max_frame_seconds
        self._accumulator = 0.0

    @property
    def alpha(self) -> float:
        """Fraction of a tick left over, for render interpolation."""
        return self._accumulator / self.tick_seconds

    def advance(self, frame_seconds: float) -> int:
        frame = min(max(0.0, frame_seconds), self.max_frame_seconds)
        self._accumulator += frame
        ticks = int(self._accumulator // self.tick_seconds)
        self._accumulator -= ticks * self.tick_seconds
        return ticks


class MatchRunner:
    """
    Runs a match tick by tick. Paddle 1 keys come only from controller_1 and
    paddle 2 keys only from controller_2. In computer mode controller_2
    defaults to the built-in AI; in local mode it defaults to idle.
    """

    def __init__(
        self,
        settings: GameSettings,
        seed: int | None = None,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        controller_1: Controller | None = None,
        controller_2: Controller | None = None,
    ) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self.settings = settings
        self.tick_seconds = tick_seconds
        self.rng = SeededRNG(seed)
        self.state = MatchState.create()
        self.controller_1 = controller_1 or idle_controller
        if controller_2 is None:
            controller_2 = compute_computer_input if settings.mode == GameMode.COMPUTER else idle_controller
        self.controller_2 = controller_2
        self.ticks = 0
        self.events: list[ScoreEvent] = []

    def gather_inputs(self) -> InputSnapshot:
        left = self.controller_1(self.state)
        right = self.controller_2(self.state)
        return InputSnapshot(
            paddle1_up=left.paddle1_up,
            paddle1_down=left.paddle1_down,
            paddle2_up=right.paddle2_up,
            paddle2_down=right.paddle2_down,
        )

    def tick(self) -> ScoreEvent | None:
        """One fixed step. Starts the countdown from the menu and play once it elapses."""
        if self.state.phase == Phase.MENU:
            start_countdown(self.state, self.settings)
        elif self.state.phase == Phase.COUNTDOWN and self.state.countdown_seconds_remaining <= 0:
            start_playing(self.state, self.settings, self.rng)
        if self.state.phase == Phase.GAME_OVER:
            return None
        event = update(self.state, self.tick_seconds, self.gather_inputs(), self.settings, self.rng)
        self.ticks += 1
        if event is not None:
            self.events.append(event)
            if event.match_over:
                logger.info(
                    "match over after %d ticks: %s wins %d-%d (%d returns)",
                    self.ticks, self.state.winner_label, self.state.score1, self.state.score2,
                    self.state.ball_returns,
                )
        return event

    def run(
        self,
        max_ticks: int | None = None,
        on_point: Callable[[ScoreEvent], None] | None = None,
    ) -> Iterator[ScoreEvent]:
        """
        Run to game over (or until max_ticks). Yields a ScoreEvent per point;
        optionally calls on_point(event) for each.
        """
        while self.state.phase != Phase.GAME_OVER:
            if max_ticks is not None and self.ticks >= max_ticks:
                logger.debug("tick limit %d reached at %d-%d", max_ticks, self.state.score1, self.state.score2)
                break
            event = self.tick()
            if event is None:
                continue
            if on_point:
                on_point(event)
            yield event


async def async_run_realtime(
    runner: MatchRunner,
    frame_seconds: float | None = None,
    time_scale: float = 1.0,
    max_frames: int | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Async generator: steps the runner at wall-clock pace (scaled by
    time_scale) and yields a state snapshot per frame until game over.
    """
    frame = frame_seconds if frame_seconds is not None else runner.tick_seconds
    clock = FixedStepClock(runner.tick_seconds)
    last = time.monotonic()
    frames = 0
    while runner.state.phase != Phase.GAME_OVER:
        if max_frames is not None and frames >= max_frames:
            break
        await asyncio.sleep(frame)
        now = time.monotonic()
        for _ in range(clock.advance((now - last) * time_scale)):
            runner.tick()
            if runner.state.phase == Phase.GAME_OVER:
                break
        last = now
        frames += 1
        yield runner.state.snapshot()
