"""Double pendulum physics engine.

Implements the equations of motion for a double pendulum with optional
linear damping and "conceptual stiffness" torques, and advances them one
frame at a time with a semi-implicit Euler step.

Coordinates: origin at the pivot, +x to the right, +y DOWN. An angle of
zero hangs straight down, so ``atan2(x, y)`` recovers the angle of a
point relative to the pivot.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from scipy.integrate import solve_ivp

logger = logging.getLogger(__name__)

# Bob x-coordinates beyond this magnitude count as a blow-up
DIVERGENCE_THRESHOLD = 10000.0

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class PendulumParams:
    """Physical and conceptual parameters of the double pendulum.

    ``damping`` may be negative (energy injection). ``k1`` and ``k2`` are
    ad-hoc linear restoring torques on theta1 and theta2; they are not
    part of the pendulum's Lagrangian.
    """

    m1: float = 100.0
    m2: float = 50.0
    l1: float = 100.0
    l2: float = 50.0
    g: float = 9.81
    damping: float = 0.01
    k1: float = 0.0
    k2: float = 0.0

    def validate(self) -> None:
        """Raise ValueError for non-positive masses or lengths."""
        for name in ("m1", "m2", "l1", "l2"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value!r}")


class AngularState(NamedTuple):
    """Absolute link angles from the downward vertical and their rates."""

    theta1: float
    theta2: float
    dtheta1: float = 0.0
    dtheta2: float = 0.0


class CartesianPoint(NamedTuple):
    """A point in simulation coordinates (pivot at the origin, y down)."""

    x: float
    y: float


class DivergenceError(Exception):
    """The simulation blew up and must be frozen until reset.

    ``last_good_state`` is the state the failed step started from, or
    None when the check was made on a state set directly.
    """

    def __init__(self, message: str, last_good_state: AngularState | None = None):
        super().__init__(message)
        self.last_good_state = last_good_state


def wrap_angle(angle: float) -> float:
    """Wrap a finite angle into (-pi, pi]."""
    wrapped = math.fmod(angle + math.pi, TWO_PI)
    if wrapped <= 0.0:
        wrapped += TWO_PI
    wrapped -= math.pi
    if wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def _angular_accelerations(theta1, theta2, omega1, omega2, params):
    """Accelerations for numpy scalar or array inputs (no damping)."""
    m1, m2, l1, l2, g = params.m1, params.m2, params.l1, params.l2, params.g

    delta = theta1 - theta2
    sin_delta = np.sin(delta)
    cos_delta = np.cos(delta)
    denom = 2 * m1 + m2 - m2 * np.cos(2 * delta)

    alpha1 = (
        -g * (2 * m1 + m2) * np.sin(theta1)
        - m2 * g * np.sin(theta1 - 2 * theta2)
        - 2 * sin_delta * m2 * (omega2**2 * l2 + omega1**2 * l1 * cos_delta)
        - params.k1 * theta1
    ) / (l1 * denom)

    alpha2 = (
        2 * sin_delta * (
            omega1**2 * l1 * (m1 + m2)
            + g * (m1 + m2) * np.cos(theta1)
            + omega2**2 * l2 * m2 * cos_delta
        )
        - params.k2 * theta2
    ) / (l2 * denom)

    return alpha1, alpha2


def accelerations(state, params: PendulumParams) -> tuple[float, float]:
    """Angular accelerations (ddtheta1, ddtheta2) before damping.

    Non-finite results are returned as-is; ``step`` turns them into a
    DivergenceError.
    """
    theta1, theta2, omega1, omega2 = np.asarray(state, dtype=np.float64)
    with np.errstate(all="ignore"):
        alpha1, alpha2 = _angular_accelerations(
            theta1, theta2, omega1, omega2, params,
        )
    return float(alpha1), float(alpha2)


def step(state: AngularState, params: PendulumParams, dt: float) -> AngularState:
    """Advance the state by one semi-implicit Euler step.

    Velocities are updated from the damped accelerations first, then the
    angles from the updated velocities. Angles of the result are wrapped
    into (-pi, pi]. Pure: the input state is never modified.

    Raises:
        DivergenceError: if any intermediate value is non-finite or the
            new bob positions exceed DIVERGENCE_THRESHOLD.
    """
    theta1, theta2, omega1, omega2 = np.asarray(state, dtype=np.float64)
    damping = params.damping

    with np.errstate(all="ignore"):
        alpha1, alpha2 = _angular_accelerations(
            theta1, theta2, omega1, omega2, params,
        )
        omega1 = omega1 + (alpha1 - damping * omega1) * dt
        omega2 = omega2 + (alpha2 - damping * omega2) * dt
        theta1 = theta1 + omega1 * dt
        theta2 = theta2 + omega2 * dt

    values = np.array([alpha1, alpha2, omega1, omega2, theta1, theta2])
    if not np.all(np.isfinite(values)):
        raise DivergenceError("non-finite value in integration step", state)

    new_state = AngularState(
        wrap_angle(float(theta1)),
        wrap_angle(float(theta2)),
        float(omega1),
        float(omega2),
    )
    try:
        check_divergence(new_state, params)
    except DivergenceError as exc:
        raise DivergenceError(str(exc), state) from None
    return new_state


def check_divergence(state, params: PendulumParams) -> None:
    """Raise DivergenceError if the bob positions of ``state`` have blown up."""
    with np.errstate(all="ignore"):
        x1, _, x2, _ = positions(state, params)
    if not (np.isfinite(x1) and np.isfinite(x2)):
        raise DivergenceError("non-finite bob position")
    if abs(x1) > DIVERGENCE_THRESHOLD or abs(x2) > DIVERGENCE_THRESHOLD:
        raise DivergenceError(
            f"bob position exceeds {DIVERGENCE_THRESHOLD:g} "
            f"(x1={float(x1):.1f}, x2={float(x2):.1f})"
        )


def positions(state, params: PendulumParams):
    """Convert a state (or an (N, 4) array of states) to Cartesian coordinates.

    Returns (x1, y1, x2, y2) with the pivot at the origin and y pointing
    downward.
    """
    states = np.asarray(state, dtype=np.float64)
    theta1, theta2 = states[..., 0], states[..., 1]
    l1, l2 = params.l1, params.l2

    x1 = l1 * np.sin(theta1)
    y1 = l1 * np.cos(theta1)

    x2 = x1 + l2 * np.sin(theta2)
    y2 = y1 + l2 * np.cos(theta2)

    return x1, y1, x2, y2


def total_energy(state, params: PendulumParams):
    """Compute total mechanical energy (T + V) for a state or (N, 4) array.

    Potential energy is measured from the pivot. Stiffness torques are
    not included.
    """
    states = np.asarray(state, dtype=np.float64)
    theta1, theta2 = states[..., 0], states[..., 1]
    omega1, omega2 = states[..., 2], states[..., 3]
    m1, m2, l1, l2, g = params.m1, params.m2, params.l1, params.l2, params.g

    # Kinetic energy
    T = (
        0.5 * (m1 + m2) * l1**2 * omega1**2
        + 0.5 * m2 * l2**2 * omega2**2
        + m2 * l1 * l2 * omega1 * omega2 * np.cos(theta1 - theta2)
    )

    # Potential energy (from pivot, height decreases as y grows)
    V = -(m1 + m2) * g * l1 * np.cos(theta1) - m2 * g * l2 * np.cos(theta2)

    return T + V


def simulate(params: PendulumParams, state: AngularState, dt: float, steps: int):
    """Run ``steps`` engine steps from ``state``.

    Returns:
        t_array: 1D array of times, starting at 0 with uniform dt spacing
        state_array: 2D array of shape (len(t_array), 4)

    A diverging run stops at the last good state, so the arrays can be
    shorter than ``steps + 1``.
    """
    state_array = np.empty((steps + 1, 4), dtype=np.float64)
    state_array[0] = state
    current = AngularState(*state)

    n_rows = steps + 1
    for i in range(steps):
        try:
            current = step(current, params, dt)
        except DivergenceError as exc:
            logger.warning("Simulation diverged after %d steps: %s", i, exc)
            n_rows = i + 1
            break
        state_array[i + 1] = current

    state_array = state_array[:n_rows]
    t_array = np.arange(n_rows) * dt
    return t_array, state_array


def derivatives(t, y, params: PendulumParams):
    """First-order ODE form of the damped, stiffened equations of motion.

    State vector: [theta1, theta2, omega1, omega2]
    Returns: [d_theta1/dt, d_theta2/dt, d_omega1/dt, d_omega2/dt]
    """
    theta1, theta2, omega1, omega2 = y
    alpha1, alpha2 = _angular_accelerations(theta1, theta2, omega1, omega2, params)
    return [
        omega1,
        omega2,
        alpha1 - params.damping * omega1,
        alpha2 - params.damping * omega2,
    ]


def reference_trajectory(params: PendulumParams, state: AngularState,
                         t_end: float, dt: float):
    """Integrate the same model to tight tolerance with SciPy (DOP853).

    Used to check the convergence of ``step``; never drives the live
    simulation. Angles are not wrapped.

    Returns (t_array, state_array) sampled every ``dt`` up to the last
    multiple of ``dt`` not beyond ``t_end``.
    """
    n_steps = int(round(t_end / dt))
    t_eval = np.arange(n_steps + 1) * dt

    sol = solve_ivp(
        fun=lambda t, y: derivatives(t, y, params),
        t_span=(0.0, t_eval[-1]),
        y0=list(state),
        method="DOP853",
        t_eval=t_eval,
        rtol=1e-11,
        atol=1e-11,
    )

    return sol.t, sol.y.T
