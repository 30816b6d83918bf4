from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from ..config import GameConfig
from ..session import GameSession

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    """Configuration for the simulation loop.

    Attributes:
        tick_rate: Updates per second. run_steps() advances 1/tick_rate seconds per step.
        max_steps: If provided and > 0, the loop will automatically stop after this many updates.
    """

    tick_rate: float = 10.0
    max_steps: Optional[int] = None

    @property
    def tick_seconds(self) -> float:
        return 1.0 / self.tick_rate

    @classmethod
    def from_game_config(cls, config: GameConfig, max_steps: Optional[int] = None) -> "EngineConfig":
        return cls(tick_rate=1.0 / config.tick_seconds, max_steps=max_steps)


class GameEngine:
    """Drives a GameSession at a fixed period.

    The loop itself holds no game state, so tests step it with run_steps() and a
    front end can call update() from its own scheduler instead of run().
    """

    def __init__(self, session: GameSession, config: Optional[EngineConfig] = None) -> None:
        if config is None:
            config = EngineConfig.from_game_config(session.config)
        if config.tick_rate <= 0:
            raise ValueError("tick_rate must be > 0")
        self.session = session
        self.config = config
        self._running: bool = False
        self._paused: bool = False
        self._step: int = 0
        self._last_time: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def step(self) -> int:
        return self._step

    def start(self) -> None:
        """Start the engine loop state.

        Safe to call multiple times; subsequent calls are no-ops.
        """
        if self._running:
            logger.debug("GameEngine.start() called while already running")
            return
        self._running = True
        self._paused = False
        self._step = 0
        self._last_time = time.perf_counter()
        logger.info("GameEngine started (tick_rate=%s, max_steps=%s)", self.config.tick_rate, self.config.max_steps)

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info("GameEngine stopped at step=%s", self._step)

    def pause(self) -> None:
        if self._running and not self._paused:
            self._paused = True
            logger.info("GameEngine paused at step=%s", self._step)

    def resume(self) -> None:
        if self._paused:
            self._paused = False
            self._last_time = time.perf_counter()
            logger.info("GameEngine resumed")

    def update(self, dt: float) -> None:
        """Perform a single update tick.

        Args:
            dt: Delta time in seconds since last update.
        """
        if not self._running or self._paused:
            logger.debug("update() ignored (running=%s, paused=%s)", self._running, self._paused)
            return
        self._step += 1
        self.session.update(dt)

        if self.session.game_over:
            logger.info("Game over at step=%d", self._step)
            self.stop()
        elif self.config.max_steps is not None and self._step >= self.config.max_steps:
            self.stop()

    def run_steps(self, steps: int) -> int:
        """Advance up to `steps` fixed ticks without sleeping. Returns ticks executed."""
        if not self._running:
            self.start()
        before = self._step
        dt = self.config.tick_seconds
        for _ in range(steps):
            if not self._running or self._paused:
                break
            self.update(dt)
        return self._step - before

    def run(self) -> None:
        """Run a blocking real-time loop until stopped, game over or max_steps."""
        self.start()
        target_dt = self.config.tick_seconds

        while self._running:
            now = time.perf_counter()
            dt = 0.0 if self._last_time is None else now - self._last_time
            self._last_time = now

            self.update(dt)

            remaining = target_dt - (time.perf_counter() - now)
            if remaining > 0:
                time.sleep(remaining)

        logger.info("Loop complete (steps=%d)", self._step)
