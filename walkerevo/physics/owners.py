"""Ownership tags attached to every body registered with a physics world.

The world resolves a body handle to its owner and the collision and contact
rules are decided from the tags alone.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GroundOwner:
    pass


@dataclass(frozen=True)
class WalkerOwner:
    index: int
    segment: int


BodyOwner = GroundOwner | WalkerOwner

GROUND = GroundOwner()


def needs_collision(a: BodyOwner | None, b: BodyOwner | None) -> bool:
    """Ground collides with everything, walkers only with themselves."""
    if isinstance(a, GroundOwner) or isinstance(b, GroundOwner):
        return True
    if isinstance(a, WalkerOwner) and isinstance(b, WalkerOwner):
        return a.index == b.index
    return True


def is_ground_pair(a: BodyOwner | None, b: BodyOwner | None) -> bool:
    return isinstance(a, GroundOwner) and isinstance(b, GroundOwner)
