from walkerevo.walkers.controller import (
    MotorCommands,
    SensorMotorController,
    compute_motor_commands,
    compute_targets,
)
from walkerevo.walkers.population import Population
from walkerevo.walkers.walker import Walker
from walkerevo.walkers.walker_state import WalkerState
from walkerevo.walkers.weights import random_weights, weight_shape

__all__ = [
    "MotorCommands",
    "Population",
    "SensorMotorController",
    "Walker",
    "WalkerState",
    "compute_motor_commands",
    "compute_targets",
    "random_weights",
    "weight_shape",
]
