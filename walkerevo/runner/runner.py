from __future__ import annotations

import asyncio
import time

from loguru import logger
import numpy as np

from walkerevo.config.models import SimulationConfig
from walkerevo.evolution.engine import EvolutionEngine
from walkerevo.physics.kinematic import KinematicWorld
from walkerevo.physics.world import PhysicsWorld
from walkerevo.runner.scheduler import EvaluationScheduler
from walkerevo.utils.trackers import LogWriter, NullWriter, TBWriter
from walkerevo.walkers.population import Population

__all__ = ["SimulationRunner"]


class SimulationRunner:
    """Owns the world, the population and the two components driving it.

    ``step`` advances the world once; ``run`` keeps stepping from an asyncio
    task, yielding to the event loop every ``steps_per_yield`` steps, until
    ``max_generations`` is reached or ``stop`` is called.
    """

    def __init__(
        self,
        config: SimulationConfig,
        world: PhysicsWorld | None = None,
        writer: LogWriter | None = None,
    ) -> None:
        self.config = config
        self.world = world if world is not None else KinematicWorld()
        self.writer = writer if writer is not None else self._make_writer(config)
        self.rng = np.random.default_rng(config.evolution.seed)

        self.population = Population(config.evolution.population_size, config.walker, self.rng)
        self.engine = EvolutionEngine(
            self.population, config.evolution, self.rng, writer=self.writer.bind(["evolution"])
        )
        self.scheduler = EvaluationScheduler(self.population, self.world, self.engine, config.scheduler)
        self.scheduler.attach()

        self._running = False
        self._paused = False
        self._report_sim_time = 0.0
        self._report_wall_time = time.monotonic()

        logger.info(
            "[SimulationRunner] Init | world={}, population={}, seed={}",
            type(self.world).__name__,
            config.evolution.population_size,
            config.evolution.seed,
        )

    @staticmethod
    def _make_writer(config: SimulationConfig) -> LogWriter:
        if config.tracking.enabled:
            return TBWriter(config.tracking.logdir)
        return NullWriter()

    @property
    def generation(self) -> int:
        return self.engine.metrics.total_generations

    def step(self, dt: float | None = None) -> None:
        dt = self.config.physics_dt if dt is None else dt
        self.world.step(dt)
        self._maybe_report_speedup()

    async def run(self) -> None:
        logger.info("[SimulationRunner] Start")
        self._running = True
        self._report_sim_time = self.scheduler.metrics.simulated_time
        self._report_wall_time = time.monotonic()

        try:
            while self._running:
                if self._paused:
                    await asyncio.sleep(0.05)
                    continue

                if self._reached_generation_cap():
                    logger.info("[SimulationRunner] Stop: max_generations={}", self.config.max_generations)
                    break

                try:
                    for _ in range(self.config.steps_per_yield):
                        self.step()
                        if self._reached_generation_cap():
                            break
                except Exception as exc:
                    logger.exception("[SimulationRunner] Step failed: {}", exc)
                    raise

                await asyncio.sleep(0)
        finally:
            self._running = False
            logger.info(
                "[SimulationRunner] Stopped | generations={}, simulated={:.1f}s",
                self.generation,
                self.scheduler.metrics.simulated_time,
            )

    def stop(self) -> None:
        """Request the run loop to exit after the current batch of steps."""
        self._running = False

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_running(self) -> bool:
        return self._running

    async def get_status(self) -> dict[str, object]:
        """Light, non-blocking status for health checks."""
        return {
            "running": self._running,
            "paused": self._paused,
            "round": self.scheduler.round_index,
            "in_flight": self.scheduler.in_flight,
            **self.scheduler.metrics.to_dict(),
            **self.engine.metrics.to_dict(),
        }

    def close(self) -> None:
        self.scheduler.detach()
        self.scheduler.shutdown()
        self.world.reset()
        self.writer.close()
        logger.info("[SimulationRunner] Closed")

    def _reached_generation_cap(self) -> bool:
        cap = self.config.max_generations
        return cap is not None and self.generation >= cap

    def _maybe_report_speedup(self) -> None:
        simulated = self.scheduler.metrics.simulated_time - self._report_sim_time
        if simulated < self.config.speedup_report_interval:
            return
        now = time.monotonic()
        wall = now - self._report_wall_time
        speedup = simulated / wall if wall > 0 else float("inf")
        logger.info(
            "[SimulationRunner] Effective speedup {:.1f}x | simulated={:.1f}s, wall={:.2f}s",
            speedup,
            simulated,
            wall,
        )
        self.writer.bind(["runner"]).scalar("speedup", speedup, step=self.scheduler.metrics.steps)
        self._report_sim_time = self.scheduler.metrics.simulated_time
        self._report_wall_time = now
