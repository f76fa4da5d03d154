"""Deterministic in-memory physics world.

No dynamics are simulated: every hinge integrates its motor velocity
(capped by the motor force) inside its limits, the pose of each segment
follows from the joint angles, and feet planted on the ground drag the root
along by the opposite of their horizontal slip. That is enough for walkers
with asymmetric gaits to travel, and it keeps evaluation reproducible for a
given seed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import itertools
import math

from loguru import logger
import numpy as np

from walkerevo.config.models import MorphologyConfig
from walkerevo.exceptions import PhysicsError
from walkerevo.physics.owners import GROUND, WalkerOwner
from walkerevo.physics.world import BodyHandle, JointHandle, PhysicsWorld, WalkerBodyHandle

UP = np.array([0.0, 1.0, 0.0])

# rad/s of hinge speed per unit of motor force
SPEED_PER_FORCE = 20.0
CONTACT_TOLERANCE = 1e-3


@dataclass
class _WalkerRig:
    handle: WalkerBodyHandle
    morphology: MorphologyConfig
    root: np.ndarray
    ground_height: float
    directions: np.ndarray
    limits: np.ndarray
    angles: np.ndarray
    velocities: np.ndarray
    max_forces: np.ndarray

    def feet(self) -> np.ndarray:
        m = self.morphology
        hips, knees = self.angles[0::2], self.angles[1::2]
        knee_pos = (
            self.root
            + self.directions * (m.root_body_radius + m.leg_length * np.cos(hips))[:, None]
            + UP * (m.leg_length * np.sin(hips))[:, None]
        )
        return (
            knee_pos
            + self.directions * (m.fore_leg_length * np.sin(knees))[:, None]
            - UP * (m.fore_leg_length * np.cos(knees))[:, None]
        )

    def segment_positions(self) -> np.ndarray:
        m = self.morphology
        hips = self.angles[0::2]
        hip_anchor = self.root + self.directions * m.root_body_radius
        knee_pos = (
            hip_anchor
            + self.directions * (m.leg_length * np.cos(hips))[:, None]
            + UP * (m.leg_length * np.sin(hips))[:, None]
        )
        feet = self.feet()
        positions = np.empty((m.segment_count, 3))
        positions[0] = self.root
        positions[1::2] = 0.5 * (hip_anchor + knee_pos)
        positions[2::2] = 0.5 * (knee_pos + feet)
        return positions

    def stance(self) -> np.ndarray:
        return self.feet()[:, 1] - self.ground_height <= CONTACT_TOLERANCE


class KinematicWorld(PhysicsWorld):
    def __init__(self, traction: float = 1.0) -> None:
        super().__init__()
        self.traction = traction
        self.time = 0.0
        self._ids = itertools.count(1)
        self.ground: BodyHandle = 0
        self._register_owner(self.ground, GROUND)
        self._rigs: dict[int, _WalkerRig] = {}
        self._body_index: dict[BodyHandle, tuple[int, int]] = {}
        self._joint_index: dict[JointHandle, tuple[int, int]] = {}

    @property
    def walker_count(self) -> int:
        return len(self._rigs)

    def register_walker_body(
        self,
        walker_index: int,
        morphology: MorphologyConfig,
        start_position: Sequence[float],
    ) -> WalkerBodyHandle:
        if walker_index in self._rigs:
            raise PhysicsError(f"Walker {walker_index} already has a body in the world")

        bodies = tuple(next(self._ids) for _ in range(morphology.segment_count))
        joints = tuple(next(self._ids) for _ in range(morphology.joint_count))
        handle = WalkerBodyHandle(walker_index=walker_index, bodies=bodies, joints=joints)

        start = np.asarray(start_position, dtype=float)
        leg_angles = 2.0 * math.pi * np.arange(morphology.num_legs) / morphology.num_legs
        directions = np.stack([np.cos(leg_angles), np.zeros_like(leg_angles), np.sin(leg_angles)], axis=1)

        self._rigs[walker_index] = _WalkerRig(
            handle=handle,
            morphology=morphology,
            root=start + UP * morphology.fore_leg_length,
            ground_height=float(start[1]),
            directions=directions,
            limits=np.asarray(morphology.joint_limits(), dtype=float),
            angles=np.zeros(morphology.joint_count),
            velocities=np.zeros(morphology.joint_count),
            max_forces=np.zeros(morphology.joint_count),
        )
        for segment, body in enumerate(bodies):
            self._register_owner(body, WalkerOwner(index=walker_index, segment=segment))
            self._body_index[body] = (walker_index, segment)
        for j, joint in enumerate(joints):
            self._joint_index[joint] = (walker_index, j)

        logger.debug("[KinematicWorld] Registered walker {} at {}", walker_index, start.tolist())
        return handle

    def unregister_walker_body(self, handle: WalkerBodyHandle) -> None:
        rig = self._rigs.get(handle.walker_index)
        if rig is None or rig.handle != handle:
            raise PhysicsError(f"Walker body {handle.walker_index} is not registered")
        for body in handle.bodies:
            self._forget_owner(body)
            del self._body_index[body]
        for joint in handle.joints:
            del self._joint_index[joint]
        del self._rigs[handle.walker_index]
        logger.debug("[KinematicWorld] Unregistered walker {}", handle.walker_index)

    def query_position(self, body: BodyHandle) -> np.ndarray:
        if body == self.ground:
            return np.zeros(3)
        walker_index, segment = self._locate(self._body_index, body, "body")
        return self._rigs[walker_index].segment_positions()[segment].copy()

    def walker_position(self, handle: WalkerBodyHandle) -> np.ndarray:
        rig = self._rigs.get(handle.walker_index)
        if rig is None:
            raise PhysicsError(f"Walker body {handle.walker_index} is not registered")
        return rig.segment_positions().mean(axis=0)

    def query_joint_angle(self, joint: JointHandle) -> float:
        walker_index, j = self._locate(self._joint_index, joint, "joint")
        return float(self._rigs[walker_index].angles[j])

    def set_joint_motor(self, joint: JointHandle, target_velocity: float, max_force: float) -> None:
        walker_index, j = self._locate(self._joint_index, joint, "joint")
        rig = self._rigs[walker_index]
        rig.velocities[j] = target_velocity
        rig.max_forces[j] = max_force

    def step(self, dt: float) -> None:
        if dt < 0:
            raise PhysicsError(f"Cannot step by a negative time delta ({dt})")
        self._detect_contacts()
        self._run_pre_step(dt)
        self._integrate(dt)
        self.time += dt

    def reset(self) -> None:
        for rig in list(self._rigs.values()):
            self.unregister_walker_body(rig.handle)

    def _detect_contacts(self) -> None:
        for walker_index in sorted(self._rigs):
            rig = self._rigs.get(walker_index)
            if rig is None:
                continue
            for leg in np.flatnonzero(rig.stance()):
                self._dispatch_contact(self.ground, rig.handle.bodies[2 + 2 * int(leg)])

    def _integrate(self, dt: float) -> None:
        for rig in self._rigs.values():
            planted = rig.stance()
            feet_before = rig.feet()

            max_speed = rig.max_forces * SPEED_PER_FORCE
            speed = np.clip(rig.velocities, -max_speed, max_speed)
            rig.angles = np.clip(rig.angles + speed * dt, rig.limits[:, 0], rig.limits[:, 1])

            if planted.any():
                slip = rig.feet() - feet_before
                slip[:, 1] = 0.0
                rig.root = rig.root - self.traction * slip[planted].mean(axis=0)

    @staticmethod
    def _locate(index: dict[int, tuple[int, int]], handle: int, kind: str) -> tuple[int, int]:
        try:
            return index[handle]
        except KeyError:
            raise PhysicsError(f"Unknown {kind} handle {handle}") from None
