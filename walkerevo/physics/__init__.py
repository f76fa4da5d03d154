from walkerevo.physics.kinematic import KinematicWorld
from walkerevo.physics.owners import GROUND, BodyOwner, GroundOwner, WalkerOwner, needs_collision
from walkerevo.physics.world import (
    BodyHandle,
    JointHandle,
    PhysicsWorld,
    WalkerBodyHandle,
)

__all__ = [
    "GROUND",
    "BodyHandle",
    "BodyOwner",
    "GroundOwner",
    "JointHandle",
    "KinematicWorld",
    "PhysicsWorld",
    "WalkerBodyHandle",
    "WalkerOwner",
    "needs_collision",
]
