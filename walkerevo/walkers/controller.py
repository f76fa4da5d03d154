"""Single-layer sensor-to-motor controller.

Each joint's target is a weighted sum of the touch sensors squashed into
[0, 1] and mapped onto the joint's limits; the motor is then driven at the
velocity that would close the angle error within one step.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from walkerevo.config.models import WalkerConfig
from walkerevo.physics.world import PhysicsWorld, WalkerBodyHandle


class MotorCommands(NamedTuple):
    target_angles: np.ndarray
    target_velocities: np.ndarray


def compute_targets(weights: np.ndarray, sensors: np.ndarray) -> np.ndarray:
    """Normalised joint targets in [0, 1] for a ``(sensors x joints)`` matrix."""
    raw = np.asarray(sensors, dtype=float) @ weights
    return np.clip((np.tanh(raw) + 1.0) * 0.5, 0.0, 1.0)


def compute_motor_commands(
    weights: np.ndarray,
    sensors: np.ndarray,
    limits: np.ndarray,
    current_angles: np.ndarray,
    dt: float,
    epsilon: float = 1e-4,
) -> MotorCommands:
    targets = compute_targets(weights, sensors)
    lower, upper = limits[:, 0], limits[:, 1]
    angles = lower + targets * (upper - lower)
    velocities = (angles - np.asarray(current_angles, dtype=float)) / max(dt, epsilon)
    return MotorCommands(target_angles=angles, target_velocities=velocities)


class SensorMotorController:
    def __init__(self, config: WalkerConfig):
        self.config = config
        self.limits = np.asarray(config.morphology.joint_limits(), dtype=float)

    def update(
        self,
        world: PhysicsWorld,
        body: WalkerBodyHandle,
        weights: np.ndarray,
        sensors: np.ndarray,
        dt: float,
    ) -> MotorCommands:
        current = np.array([world.query_joint_angle(joint) for joint in body.joints])
        commands = compute_motor_commands(
            weights, sensors, self.limits, current, dt, self.config.velocity_epsilon
        )
        for joint, velocity in zip(body.joints, commands.target_velocities):
            world.set_joint_motor(joint, float(velocity), self.config.motor_strength)
        return commands
