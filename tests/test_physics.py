from __future__ import annotations

import numpy as np
import pytest

from walkerevo.config.models import MorphologyConfig
from walkerevo.exceptions import PhysicsError
from walkerevo.physics.owners import GROUND, GroundOwner, WalkerOwner, needs_collision

MORPHOLOGY = MorphologyConfig(num_legs=2)


def test_walkers_collide_only_with_themselves_and_ground():
    a0 = WalkerOwner(index=0, segment=0)
    a1 = WalkerOwner(index=0, segment=3)
    b0 = WalkerOwner(index=1, segment=0)

    assert needs_collision(a0, a1)
    assert not needs_collision(a0, b0)
    assert needs_collision(GROUND, a0)
    assert needs_collision(b0, GROUND)
    assert GroundOwner() == GROUND


def test_register_assigns_owners_per_segment(world):
    handle = world.register_walker_body(3, MORPHOLOGY, (0.0, 0.0, 0.0))

    assert len(handle.bodies) == MORPHOLOGY.segment_count
    assert len(handle.joints) == MORPHOLOGY.joint_count
    for segment, body in enumerate(handle.bodies):
        assert world.owner_of(body) == WalkerOwner(index=3, segment=segment)
    assert world.owner_of(world.ground) == GROUND


def test_double_registration_is_rejected(world):
    world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))
    with pytest.raises(PhysicsError):
        world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))


def test_unknown_handles_are_rejected(world):
    handle = world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))
    world.unregister_walker_body(handle)

    with pytest.raises(PhysicsError):
        world.unregister_walker_body(handle)
    with pytest.raises(PhysicsError):
        world.query_joint_angle(handle.joints[0])
    with pytest.raises(PhysicsError):
        world.query_position(handle.bodies[0])
    assert world.owner_of(handle.bodies[0]) is None


def test_negative_step_is_rejected(world):
    with pytest.raises(PhysicsError):
        world.step(-0.1)


def test_walker_position_is_mean_of_segments(world):
    handle = world.register_walker_body(0, MORPHOLOGY, (1.0, 0.0, 2.0))
    positions = np.array([world.query_position(body) for body in handle.bodies])
    assert np.allclose(world.walker_position(handle), positions.mean(axis=0))


def test_contacts_are_delivered_before_pre_step_hook(world):
    events = []
    world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))
    world.set_contact_callback(lambda a, b: events.append(("contact", a, b)))
    world.set_pre_step_callback(lambda dt: events.append(("step", dt)))

    world.step(0.1)

    kinds = [event[0] for event in events]
    assert kinds[-1] == "step"
    assert kinds.count("contact") == MORPHOLOGY.num_legs
    assert kinds.count("step") == 1


def test_resting_feet_touch_ground_with_shins(world):
    contacts = []
    handle = world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))
    world.set_contact_callback(lambda a, b: contacts.append((a, b)))

    world.step(0.0)

    shins = {world.owner_of(b).segment for a, b in contacts}
    assert {world.owner_of(a) for a, _ in contacts} == {GROUND}
    assert shins == {2, 4}
    assert all(world.owner_of(b).index == handle.walker_index for _, b in contacts)


def test_motors_move_joints_within_limits(world):
    handle = world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))
    hip = handle.joints[0]
    world.set_joint_motor(hip, target_velocity=100.0, max_force=0.5)

    for _ in range(100):
        world.step(1.0 / 60.0)

    _, upper = MORPHOLOGY.hip_limits
    assert world.query_joint_angle(hip) == pytest.approx(upper)


def test_planted_feet_drag_walker(world):
    handle = world.register_walker_body(0, MORPHOLOGY, (0.0, 0.0, 0.0))
    start = world.walker_position(handle)

    # swing one knee backwards while the feet are planted
    world.set_joint_motor(handle.joints[1], target_velocity=-1.0, max_force=0.5)
    world.step(0.1)

    moved = world.walker_position(handle) - start
    assert np.linalg.norm(moved[[0, 2]]) > 0.0


def test_reset_removes_every_walker(world):
    for index in range(3):
        world.register_walker_body(index, MORPHOLOGY, (0.0, 0.0, 0.0))
    world.reset()
    assert world.walker_count == 0
    assert world.owner_of(world.ground) == GROUND
