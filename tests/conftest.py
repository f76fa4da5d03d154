from __future__ import annotations

import numpy as np
import pytest

from walkerevo.config.models import EvolutionConfig, MorphologyConfig, SchedulerConfig, WalkerConfig
from walkerevo.physics.kinematic import KinematicWorld
from walkerevo.walkers.population import Population


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def walker_config() -> WalkerConfig:
    return WalkerConfig()


@pytest.fixture
def small_walker_config() -> WalkerConfig:
    """Two-legged walkers: 5 segments, 4 joints."""
    return WalkerConfig(morphology=MorphologyConfig(num_legs=2))


@pytest.fixture
def world() -> KinematicWorld:
    return KinematicWorld()


@pytest.fixture
def dyadic_evolution_config() -> EvolutionConfig:
    """Fractions that are exact in binary floating point, on a population of 10."""
    return EvolutionConfig(
        population_size=10,
        reap_fraction=0.25,
        crossover_fraction=0.125,
        elite_fraction=0.25,
        mutation_fraction=0.5,
        elite_parent_bias=0.8,
        mutation_rate=0.5,
        seed=7,
    )


@pytest.fixture
def make_population(small_walker_config, rng):
    def _make(size: int) -> Population:
        return Population(size, small_walker_config, rng)

    return _make


@pytest.fixture
def assign_distances():
    """Run each slot through a short evaluation and pin the distance it walked."""

    def _assign(population: Population, distances: list[float]) -> None:
        world = KinematicWorld()
        for walker, distance in zip(population, distances):
            walker.activate(world, (0.0, 0.0, 0.0))
            walker.deactivate()
            walker.start_position = walker.position() - np.array([float(distance), 0.0, 0.0])

    return _assign


@pytest.fixture
def fast_scheduler_config() -> SchedulerConfig:
    return SchedulerConfig(
        parallel_evaluations=2,
        evaluation_duration=1.0,
        max_step_delta=0.5,
    )
