from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from walkerevo.config.models import MorphologyConfig
from walkerevo.exceptions import PhysicsError
from walkerevo.physics.owners import BodyOwner, is_ground_pair, needs_collision

BodyHandle = int
JointHandle = int

ContactCallback = Callable[[BodyHandle, BodyHandle], None]
StepCallback = Callable[[float], None]


@dataclass(frozen=True)
class WalkerBodyHandle:
    """Handles of one walker's physical representation.

    ``bodies[s]`` is the body of segment ``s`` (0 is the root) and
    ``joints[j]`` the hinge driven by output ``j`` of the controller.
    """

    walker_index: int
    bodies: tuple[BodyHandle, ...]
    joints: tuple[JointHandle, ...]


class PhysicsWorld(ABC):
    """The physics backend as seen by the evaluation core.

    Subclasses own bodies, constraints and contact resolution. The base class
    keeps the body owner registry and the two callback hooks. ``step`` must
    deliver the contacts of a step through the contact callback *before*
    calling the pre-step callback of that same step.
    """

    def __init__(self) -> None:
        self._owners: dict[BodyHandle, BodyOwner] = {}
        self._contact_callback: ContactCallback | None = None
        self._pre_step_callback: StepCallback | None = None

    def set_contact_callback(self, callback: ContactCallback | None) -> None:
        self._contact_callback = callback

    def set_pre_step_callback(self, callback: StepCallback | None) -> None:
        self._pre_step_callback = callback

    def owner_of(self, body: BodyHandle) -> BodyOwner | None:
        return self._owners.get(body)

    @abstractmethod
    def register_walker_body(
        self,
        walker_index: int,
        morphology: MorphologyConfig,
        start_position: Sequence[float],
    ) -> WalkerBodyHandle:
        """Build and add a walker's bodies and hinges at ``start_position``."""

    @abstractmethod
    def unregister_walker_body(self, handle: WalkerBodyHandle) -> None:
        """Remove every body and constraint of ``handle`` from the world."""

    @abstractmethod
    def query_position(self, body: BodyHandle) -> np.ndarray:
        """World position of a body's center of mass."""

    @abstractmethod
    def query_joint_angle(self, joint: JointHandle) -> float:
        ...

    @abstractmethod
    def set_joint_motor(self, joint: JointHandle, target_velocity: float, max_force: float) -> None:
        """Drive a hinge at ``target_velocity``; the command persists until replaced."""

    @abstractmethod
    def step(self, dt: float) -> None:
        ...

    @abstractmethod
    def reset(self) -> None:
        """Drop every walker body, keeping the ground."""

    def walker_position(self, handle: WalkerBodyHandle) -> np.ndarray:
        """Mean of the segment positions of a walker."""
        positions = [self.query_position(body) for body in handle.bodies]
        return np.mean(positions, axis=0)

    def _register_owner(self, body: BodyHandle, owner: BodyOwner) -> None:
        if body in self._owners:
            raise PhysicsError(f"Body {body} is already registered")
        self._owners[body] = owner

    def _forget_owner(self, body: BodyHandle) -> None:
        if self._owners.pop(body, None) is None:
            raise PhysicsError(f"Body {body} is not registered")

    def _dispatch_contact(self, a: BodyHandle, b: BodyHandle) -> None:
        owner_a, owner_b = self.owner_of(a), self.owner_of(b)
        if is_ground_pair(owner_a, owner_b) or not needs_collision(owner_a, owner_b):
            return
        if self._contact_callback is not None:
            self._contact_callback(a, b)

    def _run_pre_step(self, dt: float) -> None:
        if self._pre_step_callback is not None:
            self._pre_step_callback(dt)
