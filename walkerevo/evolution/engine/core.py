from __future__ import annotations

from loguru import logger
import numpy as np

from walkerevo.config.models import EvolutionConfig
from walkerevo.evolution.bands import PopulationBands, ReapCursor
from walkerevo.evolution.engine.metrics import EngineMetrics
from walkerevo.evolution.engine.report import GenerationReport
from walkerevo.evolution.operators import crossover, mutate, random_weights
from walkerevo.evolution.selectors import EliteParentSelector
from walkerevo.exceptions import ConfigurationError, EvolutionError, WalkerEvoError
from walkerevo.utils.trackers.base import LogWriter, NullWriter
from walkerevo.walkers.population import Population

__all__ = ["EvolutionEngine", "rank_population"]


def rank_population(population: Population) -> list[int]:
    """Slot indices by fitness, best first; equal fitness keeps slot order."""
    fitnesses = [walker.fitness() for walker in population]
    return sorted(range(len(population)), key=lambda i: (-fitnesses[i], i))


class EvolutionEngine:
    """
    Generation step run once per completed evaluation round:
    - rank every walker by fitness,
    - mark the worst share for replacement,
    - sow crossover children and random walkers into the marked slots and
      mutate the band below the elites.
    Every slot whose weights change is rebuilt in place through the population.
    """

    def __init__(
        self,
        population: Population,
        config: EvolutionConfig,
        rng: np.random.Generator,
        writer: LogWriter | None = None,
    ):
        if len(population) != config.population_size:
            raise ConfigurationError(
                f"Population has {len(population)} slots but population_size is {config.population_size}"
            )
        self.population = population
        self.config = config
        self.rng = rng
        self.writer = writer or NullWriter()

        self.bands = PopulationBands(config)
        self.cursor = ReapCursor(self.bands)
        self.parent_selector = EliteParentSelector(self.bands, config.elite_parent_bias)
        self.metrics = EngineMetrics()

        logger.info(
            "[EvolutionEngine] Init | population={}, reap={}, crossover={}, elite={}, mutation={}",
            config.population_size,
            config.reap_fraction,
            config.crossover_fraction,
            config.elite_fraction,
            config.mutation_fraction,
        )

    def run_generation(self) -> GenerationReport:
        try:
            return self._generation()
        except WalkerEvoError:
            raise
        except Exception as exc:
            raise EvolutionError(
                f"Generation {self.metrics.total_generations} failed: {exc}"
            ) from exc

    def _generation(self) -> GenerationReport:
        busy = [walker.index for walker in self.population if walker.is_evaluating]
        if busy:
            raise EvolutionError(f"Cannot evolve while walkers {busy} are still evaluating")

        report = self.rate()
        report.reaped = self.reap(report.ranking)
        self.sow(report)

        self.metrics.total_generations += 1
        self.metrics.walkers_reaped += len(report.reaped)
        self.metrics.crossover_children += len(report.crossover_children)
        self.metrics.random_walkers += len(report.randomized)
        self.metrics.mutants += sum(1 for rate in report.mutation_rates.values() if rate > 0)
        self.metrics.unfilled_requests += report.unfilled_requests

        self._write(report)
        logger.info(
            "[EvolutionEngine] Generation {} | best={:.3f} m, reaped={}, sown={}, mutated_weights={}",
            report.generation,
            report.best_distance,
            len(report.reaped),
            report.sown,
            report.mutated_weights,
        )
        return report

    # stage 1: rank

    def rate(self) -> GenerationReport:
        ranking = rank_population(self.population)
        distances = [self.population[slot].distance() for slot in ranking]
        best = distances[0]
        report = GenerationReport(
            generation=self.metrics.total_generations,
            ranking=ranking,
            distances=distances,
            best_distance=best,
        )

        if self.bands.protects_best() and best < self.metrics.best_distance:
            report.non_deterministic = True
            self.metrics.non_determinism_warnings += 1
            logger.warning(
                "[EvolutionEngine] Simulation not deterministic: best walker regressed from {:.4f} m to {:.4f} m",
                self.metrics.best_distance,
                best,
            )
        else:
            self.metrics.best_distance = best
        self.metrics.recent_best_distances.append(best)

        self.cursor.reset()
        return report

    # stage 2: reap

    def reap(self, ranking: list[int]) -> list[int]:
        for walker in self.population:
            walker.reaped = False

        reaped = []
        for rank in self.bands.reaped_ranks():
            walker = self.population[ranking[rank]]
            walker.reaped = True
            reaped.append(walker.index)
        logger.debug("[EvolutionEngine] {} walker(s) reaped", len(reaped))
        return reaped

    # stage 3: sow

    def sow(self, report: GenerationReport) -> None:
        ranking = report.ranking
        reaped_slots = set(report.reaped)

        for _ in range(self.bands.crossover_count()):
            mother_rank, father_rank = self.parent_selector.select_parents(self.rng)
            mother = self.population[ranking[mother_rank]].weights
            father = self.population[ranking[father_rank]].weights
            slot = self._next_reaped(ranking)
            if slot is None:
                report.unfilled_requests += 1
                continue
            self.population.respawn(slot, crossover(mother, father, self.rng))
            report.crossover_children.append(slot)

        for rank in self.bands.mutation_band():
            slot = ranking[rank]
            if slot in reaped_slots:
                continue
            rate = self.bands.mutation_rate(rank)
            weights, replaced = mutate(self.population[slot].weights, rate, self.rng)
            report.mutation_rates[slot] = rate
            report.mutated_weights += replaced
            if replaced:
                self.population.respawn(slot, weights)

        for _ in range(self.bands.random_count()):
            slot = self._next_reaped(ranking)
            if slot is None:
                report.unfilled_requests += 1
                continue
            shape = self.population[slot].weights.shape
            self.population.respawn(slot, random_weights(shape, self.rng))
            report.randomized.append(slot)

        if report.unfilled_requests:
            logger.debug(
                "[EvolutionEngine] {} sow request(s) found no reaped slot", report.unfilled_requests
            )

    def _next_reaped(self, ranking: list[int]) -> int | None:
        rank = self.cursor.next_rank()
        if rank is None:
            return None
        walker = self.population[ranking[rank]]
        return walker.index if walker.reaped else None

    def _write(self, report: GenerationReport) -> None:
        step = report.generation
        self.writer.scalar("best_distance", report.best_distance, step=step)
        self.writer.scalar("mean_distance", float(np.mean(report.distances)), step=step)
        self.writer.scalar("reaped", len(report.reaped), step=step)
        self.writer.hist("distances", report.distances, step=step)
        if report.non_deterministic:
            self.writer.text(
                "non_determinism",
                f"best regressed to {report.best_distance:.4f} m",
                step=step,
            )