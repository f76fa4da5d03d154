from __future__ import annotations

from collections.abc import Sequence
import math

from loguru import logger
import numpy as np

from walkerevo.config.models import WalkerConfig
from walkerevo.physics.world import PhysicsWorld, WalkerBodyHandle
from walkerevo.walkers.controller import MotorCommands, SensorMotorController
from walkerevo.walkers.walker_state import WalkerState, validate_transition
from walkerevo.walkers.weights import random_weights, weight_shape

__all__ = ["Walker"]


class Walker:
    """One legged creature: controller weights plus its evaluation state.

    While evaluating, the walker owns a body in the physics world. Fitness
    is measured against the position recorded right after spawning and stays
    readable after the body is released.
    """

    def __init__(
        self,
        index: int,
        config: WalkerConfig,
        weights: np.ndarray | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.index = index
        self.config = config
        self.controller = SensorMotorController(config)

        shape = weight_shape(config.morphology)
        if weights is None:
            self.weights = random_weights(shape, rng if rng is not None else np.random.default_rng())
        else:
            self.weights = np.zeros(shape)
            self.replace_weights_from(weights)

        self.touch_sensors = np.zeros(config.morphology.segment_count, dtype=bool)
        self.evaluation_time = 0.0
        self.control_accumulator = 0.0
        self.state = WalkerState.IDLE
        self.reaped = False
        self.start_position = np.zeros(3)
        self.last_commands: MotorCommands | None = None

        self._world: PhysicsWorld | None = None
        self._body: WalkerBodyHandle | None = None
        self._last_position = np.zeros(3)

    def __repr__(self) -> str:
        return f"Walker(index={self.index}, state={self.state.value}, reaped={self.reaped})"

    @property
    def is_evaluating(self) -> bool:
        return self.state is WalkerState.EVALUATING

    @property
    def body(self) -> WalkerBodyHandle | None:
        return self._body

    # lifecycle

    def activate(self, world: PhysicsWorld, start_position: Sequence[float]) -> None:
        validate_transition(self.state, WalkerState.EVALUATING)
        spawn = np.asarray(start_position, dtype=float)
        self._body = world.register_walker_body(self.index, self.config.morphology, spawn)
        self._world = world

        self.state = WalkerState.EVALUATING
        self.evaluation_time = 0.0
        self.control_accumulator = 0.0
        self.last_commands = None
        self.clear_touch_sensors()
        self.start_position = world.walker_position(self._body)
        self._last_position = self.start_position.copy()

    def deactivate(self) -> None:
        validate_transition(self.state, WalkerState.IDLE)
        self._last_position = self.position()
        self._world.unregister_walker_body(self._body)
        self._body = None
        self._world = None
        self.state = WalkerState.IDLE

    def release(self) -> None:
        """Tear down the physical representation, if any."""
        if self.is_evaluating:
            logger.debug("[Walker {}] Released while evaluating", self.index)
            self.deactivate()

    # evaluation

    def tick(self, dt: float) -> bool:
        """Advance the evaluation clock; returns True when the controller ran."""
        if not self.is_evaluating:
            return False
        self.evaluation_time += dt
        self.control_accumulator += dt
        if self.control_accumulator < self.config.control_period:
            return False

        self.last_commands = self.controller.update(
            self._world, self._body, self.weights, self.touch_sensors, dt
        )
        self.control_accumulator = 0.0
        self.clear_touch_sensors()
        return True

    def record_touch(self, segment: int) -> None:
        if not self.is_evaluating:
            return
        self.touch_sensors[segment] = True

    def clear_touch_sensors(self) -> None:
        self.touch_sensors[:] = False

    # fitness

    def position(self) -> np.ndarray:
        if self._body is not None:
            return self._world.walker_position(self._body)
        return self._last_position.copy()

    def fitness(self) -> float:
        """Squared displacement since the evaluation started."""
        offset = self.position() - self.start_position
        return float(offset @ offset)

    def distance(self) -> float:
        return math.sqrt(self.fitness())

    # weights

    def replace_weights_from(self, source: np.ndarray) -> None:
        source = np.asarray(source, dtype=float)
        if source.shape != self.weights.shape:
            raise ValueError(
                f"Walker {self.index}: cannot copy weights of shape {source.shape} into {self.weights.shape}"
            )
        np.copyto(self.weights, source)
