from __future__ import annotations

import numpy as np
import pytest

from walkerevo.config.models import MorphologyConfig, WalkerConfig
from walkerevo.exceptions import WalkerStateError
from walkerevo.walkers.population import Population
from walkerevo.walkers.walker import Walker
from walkerevo.walkers.walker_state import WalkerState


@pytest.fixture
def walker(small_walker_config, rng):
    return Walker(0, small_walker_config, rng=rng)


def test_weights_have_sensor_by_joint_shape(walker):
    assert walker.weights.shape == (5, 4)
    assert np.all((walker.weights >= -1.0) & (walker.weights <= 1.0))


def test_rejects_wrongly_shaped_weights(small_walker_config):
    with pytest.raises(ValueError):
        Walker(0, small_walker_config, weights=np.zeros((4, 4)))


def test_idle_walker_ignores_tick_and_touch(walker):
    assert walker.tick(1.0) is False
    walker.record_touch(2)
    assert walker.evaluation_time == 0.0
    assert not walker.touch_sensors.any()


def test_activate_resets_evaluation_state(walker, world):
    walker.evaluation_time = 4.0
    walker.touch_sensors[1] = True

    walker.activate(world, (0.0, 0.0, 0.0))

    assert walker.state is WalkerState.EVALUATING
    assert walker.evaluation_time == 0.0
    assert walker.control_accumulator == 0.0
    assert not walker.touch_sensors.any()
    assert world.walker_count == 1
    assert walker.fitness() == pytest.approx(0.0)


def test_activate_twice_is_rejected(walker, world):
    walker.activate(world, (0.0, 0.0, 0.0))
    with pytest.raises(WalkerStateError):
        walker.activate(world, (0.0, 0.0, 0.0))


def test_deactivate_idle_walker_is_rejected(walker):
    with pytest.raises(WalkerStateError):
        walker.deactivate()


def test_controller_fires_once_per_control_period(walker, world):
    walker.activate(world, (0.0, 0.0, 0.0))
    fired = [walker.tick(0.1) for _ in range(7)]
    # period is 1/3 s
    assert fired == [False, False, False, True, False, False, False]
    assert walker.evaluation_time == pytest.approx(0.7)
    assert walker.control_accumulator == pytest.approx(0.3)


def test_sensors_accumulate_until_control_tick(walker, world):
    walker.activate(world, (0.0, 0.0, 0.0))
    walker.record_touch(2)
    walker.tick(0.1)
    walker.record_touch(4)
    assert walker.touch_sensors[[2, 4]].all()

    assert walker.tick(0.3) is True
    assert not walker.touch_sensors.any()


def test_control_tick_reads_sensors_before_clearing(small_walker_config, world):
    weights = np.zeros((5, 4))
    weights[2, :] = 10.0
    walker = Walker(0, small_walker_config, weights=weights)
    walker.activate(world, (0.0, 0.0, 0.0))

    walker.record_touch(2)
    walker.tick(1.0)

    upper = np.array([hi for _, hi in small_walker_config.morphology.joint_limits()])
    assert np.allclose(walker.last_commands.target_angles, upper)


def test_fitness_is_squared_displacement_and_survives_deactivation(walker, world):
    walker.activate(world, (0.0, 0.0, 0.0))
    walker.start_position = walker.start_position - np.array([3.0, 0.0, 4.0])

    assert walker.fitness() == pytest.approx(25.0)
    assert walker.distance() == pytest.approx(5.0)

    walker.deactivate()
    assert world.walker_count == 0
    assert walker.fitness() == pytest.approx(25.0)
    assert walker.fitness() == pytest.approx(25.0)


def test_replace_weights_from_copies_values(walker):
    source = np.full(walker.weights.shape, 0.25)
    walker.replace_weights_from(source)
    source[:] = 0.0
    assert np.all(walker.weights == 0.25)

    with pytest.raises(ValueError):
        walker.replace_weights_from(np.zeros((2, 2)))


def test_respawn_keeps_slot_and_carries_weights(small_walker_config, rng, world):
    population = Population(3, small_walker_config, rng)
    old = population[1]
    old.activate(world, (0.0, 0.0, 0.0))
    old.reaped = True

    new = population.respawn(1)

    assert new is not old
    assert new.index == 1
    assert population[1] is new
    assert np.array_equal(new.weights, old.weights)
    assert not new.reaped
    assert not old.is_evaluating
    assert world.walker_count == 0


def test_respawn_with_new_weights(small_walker_config, rng):
    population = Population(2, small_walker_config, rng)
    weights = np.zeros((5, 4))
    population.respawn(0, weights)
    assert np.array_equal(population[0].weights, weights)
    assert [w.index for w in population] == [0, 1]


def test_population_snapshot_shape(rng):
    config = WalkerConfig(morphology=MorphologyConfig(num_legs=3))
    population = Population(4, config, rng)
    assert population.weights_snapshot().shape == (4, 7, 6)
    assert population.evaluating() == []


def test_respawned_weights_do_not_alias_source(small_walker_config, rng):
    population = Population(2, small_walker_config, rng)
    source = np.full((5, 4), 0.5)

    walker = population.respawn(1, source)
    source[:] = -0.5

    assert np.all(walker.weights == 0.5)
