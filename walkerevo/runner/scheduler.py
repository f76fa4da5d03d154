from __future__ import annotations

from loguru import logger

from walkerevo.config.models import SchedulerConfig
from walkerevo.evolution.engine import EvolutionEngine, GenerationReport
from walkerevo.physics.owners import WalkerOwner
from walkerevo.physics.world import BodyHandle, PhysicsWorld
from walkerevo.runner.metrics import SchedulerMetrics
from walkerevo.walkers.population import Population

__all__ = ["EvaluationScheduler"]


class EvaluationScheduler:
    """Drives evaluations from the world's pre-step hook.

    Every step: tick the evaluating walkers, retire those whose time is up,
    admit idle walkers in slot order up to ``parallel_evaluations`` and, once
    the whole population has been evaluated and nothing is in flight, hand
    off to the evolution engine for exactly one generation.
    """

    def __init__(
        self,
        population: Population,
        world: PhysicsWorld,
        engine: EvolutionEngine,
        config: SchedulerConfig,
    ) -> None:
        self.population = population
        self.world = world
        self.engine = engine
        self.config = config

        self.metrics = SchedulerMetrics()
        self.round_index = 0
        self.last_report: GenerationReport | None = None

        self._in_flight = 0
        self._evaluated: set[int] = set()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def attach(self) -> None:
        self.world.set_pre_step_callback(self.on_step)
        self.world.set_contact_callback(self.on_contact)
        logger.info(
            "[EvaluationScheduler] Attached | population={}, parallel={}, duration={}s",
            len(self.population),
            self.config.parallel_evaluations,
            self.config.evaluation_duration,
        )

    def detach(self) -> None:
        self.world.set_pre_step_callback(None)
        self.world.set_contact_callback(None)

    def shutdown(self) -> None:
        """Release every walker still under evaluation; the round is abandoned."""
        for walker in self.population.evaluating():
            walker.release()
        if self._in_flight:
            logger.info("[EvaluationScheduler] Released {} walker(s) in flight", self._in_flight)
        self._in_flight = 0

    def evaluating_indices(self) -> list[int]:
        return [walker.index for walker in self.population if walker.is_evaluating]

    # world hooks

    def on_contact(self, a: BodyHandle, b: BodyHandle) -> None:
        for body in (a, b):
            owner = self.world.owner_of(body)
            if isinstance(owner, WalkerOwner):
                self.population[owner.index].record_touch(owner.segment)

    def on_step(self, dt: float) -> None:
        dt = min(dt, self.config.max_step_delta)
        self.metrics.steps += 1
        self.metrics.simulated_time += dt

        for walker in self.population:
            walker.tick(dt)

        self._maintain()
        self._launch()

        if self._round_complete():
            self._finish_round()

    # internals

    def _maintain(self) -> None:
        for walker in self.population:
            if walker.is_evaluating and walker.evaluation_time >= self.config.evaluation_duration:
                walker.deactivate()
                self._in_flight -= 1
                self._evaluated.add(walker.index)
                self.metrics.evaluations_completed += 1
                logger.debug(
                    "[EvaluationScheduler] Walker {} finished | distance={:.3f} m",
                    walker.index,
                    walker.distance(),
                )

    def _launch(self) -> None:
        for walker in self.population:
            if self._in_flight >= self.config.parallel_evaluations:
                break
            if (
                walker.is_evaluating
                or walker.evaluation_time != 0
                or walker.index in self._evaluated
            ):
                continue

            if self.config.rebuild_on_activation:
                walker = self.population.respawn(walker.index)
            walker.activate(self.world, self.config.start_position)
            self._in_flight += 1
            self.metrics.evaluations_started += 1
            self.metrics.peak_in_flight = max(self.metrics.peak_in_flight, self._in_flight)
            logger.debug("[EvaluationScheduler] Walker {} started", walker.index)

    def _round_complete(self) -> bool:
        return self._in_flight == 0 and len(self._evaluated) == len(self.population)

    def _finish_round(self) -> None:
        logger.debug("[EvaluationScheduler] Round {} complete", self.round_index)
        self.last_report = self.engine.run_generation()

        for walker in self.population:
            walker.evaluation_time = 0.0
        self._evaluated.clear()
        self.round_index += 1
        self.metrics.rounds_completed += 1
