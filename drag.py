"""Drag handling: hit-testing bobs and inverse kinematics for dragged poses.

Works in simulation coordinates (pivot at the origin, y down; see
simulation.py). A drag always leaves the pendulum at rest, so releasing
a bob resumes the simulation from the dragged pose with zero velocity.
"""

from __future__ import annotations

import enum
import math

from simulation import AngularState, CartesianPoint, PendulumParams, positions

# Extra pick distance around each bob's drawn radius
PICK_MARGIN = 5.0


class DragTarget(enum.Enum):
    """Which bob, if any, the pointer is holding."""

    NONE = "none"
    BOB1 = "bob1"
    BOB2 = "bob2"


def pick_radius(mass: float) -> float:
    """Drawn bob radius for a mass, also used as the pick radius."""
    return math.sqrt(mass) * 0.5


def pick_bob(pointer, bob1, bob2, r1: float, r2: float) -> DragTarget:
    """Choose the bob under ``pointer``.

    Bob 2 is preferred when both are in range, so a coincident pair
    always grabs the outer bob.
    """
    px, py = pointer
    dist1 = math.hypot(px - bob1[0], py - bob1[1])
    dist2 = math.hypot(px - bob2[0], py - bob2[1])
    if dist2 < r2 + PICK_MARGIN:
        return DragTarget.BOB2
    if dist1 < r1 + PICK_MARGIN:
        return DragTarget.BOB1
    return DragTarget.NONE


def hit_test(pointer, state, params: PendulumParams) -> DragTarget:
    """Find which bob of the pendulum in ``state`` lies under ``pointer``."""
    x1, y1, x2, y2 = positions(state, params)
    return pick_bob(
        pointer,
        (float(x1), float(y1)),
        (float(x2), float(y2)),
        pick_radius(params.m1),
        pick_radius(params.m2),
    )


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def solve_two_link(x: float, y: float, l1: float, l2: float) -> tuple[float, float]:
    """Absolute link angles that put the end of link 2 at (x, y).

    Targets out of reach are pulled to the nearest reachable distance
    from the pivot. Of the two elbow solutions, the one with
    theta2 >= theta1 is returned.
    """
    d = _clamp(math.hypot(x, y), abs(l1 - l2), l1 + l2)
    angle_to_target = math.atan2(x, y)

    if d == 0.0:
        # Equal links folded onto the pivot: any link 1 angle works
        cos_a = 0.0
    else:
        cos_a = (l1**2 + d**2 - l2**2) / (2 * l1 * d)
    a = math.acos(_clamp(cos_a, -1.0, 1.0))
    theta1 = angle_to_target - a

    cos_b = (l1**2 + l2**2 - d**2) / (2 * l1 * l2)
    b = math.acos(_clamp(cos_b, -1.0, 1.0))
    theta2 = theta1 + (math.pi - b)

    return theta1, theta2


def resolve_drag(target: DragTarget, pointer, params: PendulumParams,
                 state: AngularState) -> AngularState:
    """Pose the pendulum so the dragged bob follows ``pointer``.

    Bob 1 is placed exactly on the line to the pointer (its distance is
    fixed by l1); theta2 is kept. Bob 2 is placed by two-link inverse
    kinematics. Both angular velocities are zeroed. With no target the
    state is returned unchanged.
    """
    if target is DragTarget.NONE:
        return state

    pointer = CartesianPoint(*pointer)
    if target is DragTarget.BOB1:
        theta1 = math.atan2(pointer.x, pointer.y)
        return AngularState(theta1, state.theta2, 0.0, 0.0)

    theta1, theta2 = solve_two_link(pointer.x, pointer.y, params.l1, params.l2)
    return AngularState(theta1, theta2, 0.0, 0.0)
