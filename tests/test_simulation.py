"""Tests for simulation.py: equations of motion, stepping, wrapping, divergence."""

import math

import numpy as np
import pytest

from simulation import (
    DIVERGENCE_THRESHOLD, AngularState, DivergenceError, PendulumParams,
    accelerations, check_divergence, positions, reference_trajectory,
    simulate, step, total_energy, wrap_angle,
)


def unit_params(**overrides):
    """Unit masses and lengths, no damping or stiffness."""
    values = dict(m1=1.0, m2=1.0, l1=1.0, l2=1.0, g=9.81, damping=0.0, k1=0.0, k2=0.0)
    values.update(overrides)
    return PendulumParams(**values)


def textbook_accelerations(state, params):
    """Same dynamics written with the (m1 + m2 - m2 cos^2) denominator."""
    theta1, theta2, omega1, omega2 = state
    m1, m2, l1, l2, g = params.m1, params.m2, params.l1, params.l2, params.g
    delta = theta1 - theta2
    s, c = math.sin(delta), math.cos(delta)
    denom = m1 + m2 - m2 * c**2
    alpha1 = (
        -m2 * l1 * omega1**2 * s * c
        - m2 * l2 * omega2**2 * s
        - (m1 + m2) * g * math.sin(theta1)
        + m2 * g * math.sin(theta2) * c
    ) / (l1 * denom)
    alpha2 = (
        (m1 + m2) * l1 * omega1**2 * s
        + (m1 + m2) * g * math.sin(theta1) * c
        + m2 * l2 * omega2**2 * s * c
        - (m1 + m2) * g * math.sin(theta2)
    ) / (l2 * denom)
    return alpha1, alpha2


class TestAccelerations:
    """Test the equations of motion for known states."""

    def test_zero_state_zero_accelerations(self):
        """At rest hanging straight down, angular accelerations should be zero."""
        alpha1, alpha2 = accelerations(AngularState(0.0, 0.0), unit_params())
        assert abs(alpha1) < 1e-12
        assert abs(alpha2) < 1e-12

    def test_horizontal_initial_has_acceleration(self):
        alpha1, alpha2 = accelerations(
            AngularState(math.pi / 2, math.pi / 2), unit_params(),
        )
        assert alpha1 < 0
        assert alpha2 == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("state, params", [
        (AngularState(0.5, 1.0, 0.3, -0.2), unit_params()),
        (AngularState(2.0, -1.0, 1.5, 2.5), unit_params(m1=2.0, l2=0.5)),
        (AngularState(-2.5, 3.0, -4.0, 0.1), PendulumParams(damping=0.0)),
    ])
    def test_matches_textbook_form(self, state, params):
        """The cos(2*delta) form equals the cos^2(delta) form without stiffness."""
        expected = textbook_accelerations(state, params)
        alpha1, alpha2 = accelerations(state, params)
        assert alpha1 == pytest.approx(expected[0], rel=1e-9, abs=1e-12)
        assert alpha2 == pytest.approx(expected[1], rel=1e-9, abs=1e-12)

    def test_damping_not_included(self):
        state = AngularState(0.5, 1.0, 0.3, -0.2)
        assert accelerations(state, unit_params(damping=2.0)) == \
            accelerations(state, unit_params())


class TestStep:
    """Semi-implicit Euler update."""

    def test_velocity_then_position(self):
        params = unit_params(damping=0.2)
        state = AngularState(0.4, -0.3, 1.2, -0.7)
        dt = 0.01
        alpha1, alpha2 = accelerations(state, params)

        new = step(state, params, dt)

        omega1 = state.dtheta1 + (alpha1 - 0.2 * state.dtheta1) * dt
        omega2 = state.dtheta2 + (alpha2 - 0.2 * state.dtheta2) * dt
        assert new.dtheta1 == pytest.approx(omega1, rel=1e-12)
        assert new.dtheta2 == pytest.approx(omega2, rel=1e-12)
        assert new.theta1 == pytest.approx(state.theta1 + omega1 * dt, rel=1e-12)
        assert new.theta2 == pytest.approx(state.theta2 + omega2 * dt, rel=1e-12)

    def test_deterministic(self):
        params = PendulumParams(damping=0.05, k1=10.0, k2=-3.0)
        state = AngularState(math.pi / 2, math.pi / 4, 0.1, -0.2)
        assert step(state, params, 0.1) == step(state, params, 0.1)

    def test_input_not_modified(self):
        state = AngularState(1.0, 0.5, 0.0, 0.0)
        before = tuple(state)
        new = step(state, unit_params(), 0.01)
        assert tuple(state) == before
        assert new != state

    def test_returns_python_floats(self):
        new = step(AngularState(1.0, 0.5), unit_params(), 0.01)
        assert isinstance(new, AngularState)
        assert all(type(v) is float for v in new)

    def test_rest_stays_at_rest(self):
        state = AngularState(0.0, 0.0)
        assert step(state, unit_params(damping=0.5), 0.1) == AngularState(0.0, 0.0, 0.0, 0.0)


class TestWrapAngle:

    @pytest.mark.parametrize("angle, expected", [
        (0.0, 0.0),
        (math.pi, math.pi),
        (-math.pi, math.pi),
        (3 * math.pi, math.pi),
        (-3 * math.pi / 2, math.pi / 2),
        (3 * math.pi / 2, -math.pi / 2),
        (2 * math.pi + 0.25, 0.25),
        (-1.0, -1.0),
    ])
    def test_known_values(self, angle, expected):
        assert wrap_angle(angle) == pytest.approx(expected, abs=1e-12)

    def test_range(self):
        for angle in np.linspace(-50.0, 50.0, 2001):
            wrapped = wrap_angle(float(angle))
            assert -math.pi < wrapped <= math.pi

    def test_tiny_offsets_stay_in_range(self):
        for angle in (-math.pi - 1e-15, math.pi + 1e-15, -1e-300, 1e-300):
            wrapped = wrap_angle(angle)
            assert -math.pi < wrapped <= math.pi

    def test_angles_wrapped_after_every_step(self):
        """A fast-spinning pendulum keeps its angles in (-pi, pi]."""
        params = unit_params()
        state = AngularState(0.0, 0.0, 12.0, -15.0)
        for _ in range(2000):
            state = step(state, params, 0.005)
            assert -math.pi < state.theta1 <= math.pi
            assert -math.pi < state.theta2 <= math.pi


class TestEnergyBound:
    """Undamped, unforced motion must not gain energy beyond integrator drift."""

    def test_energy_drift_within_tolerance(self):
        params = unit_params()
        _, states = simulate(params, AngularState(0.5, 0.3), dt=0.001, steps=5000)
        assert len(states) == 5001

        energies = total_energy(states, params)
        e0 = energies[0]
        drift = np.max(np.abs(energies - e0))
        assert drift < 0.01 * abs(e0), f"Energy drift {drift} exceeds tolerance"

    def test_energy_vectorized_matches_scalar(self):
        params = PendulumParams()
        states = np.array([[0.1, 0.2, 0.3, 0.4], [1.0, -2.0, 0.5, 0.0]])
        batch = total_energy(states, params)
        for i in range(2):
            assert batch[i] == pytest.approx(total_energy(states[i], params))


class TestDivergence:

    def test_negative_damping_diverges(self):
        """Energy injection eventually blows up and is reported, not returned."""
        params = unit_params(damping=-5.0)
        state = AngularState(math.pi / 2, math.pi / 4)
        with pytest.raises(DivergenceError) as excinfo:
            for _ in range(10000):
                state = step(state, params, 0.1)
        last_good = excinfo.value.last_good_state
        assert last_good is not None
        assert all(math.isfinite(v) for v in last_good)

    def test_position_threshold(self):
        params = PendulumParams(l1=2 * DIVERGENCE_THRESHOLD, damping=0.0)
        state = AngularState(math.pi / 2, 0.0)
        with pytest.raises(DivergenceError):
            check_divergence(state, params)
        with pytest.raises(DivergenceError) as excinfo:
            step(state, params, 0.001)
        assert excinfo.value.last_good_state == state

    def test_within_threshold_passes(self):
        check_divergence(AngularState(math.pi / 2, math.pi / 2), PendulumParams())

    def test_non_finite_state(self):
        with pytest.raises(DivergenceError):
            check_divergence(AngularState(float("nan"), 0.0), PendulumParams())

    def test_zero_length_reported_as_divergence(self):
        """Degenerate parameters surface as divergence, not as a crash."""
        params = unit_params(l1=0.0)
        with pytest.raises(DivergenceError):
            step(AngularState(0.5, 0.2), params, 0.01)


class TestPositions:
    """Forward kinematics with y pointing down."""

    def test_straight_down(self):
        params = PendulumParams(l1=100.0, l2=50.0)
        x1, y1, x2, y2 = positions(AngularState(0.0, 0.0), params)
        assert abs(x1) < 1e-10
        assert y1 == pytest.approx(100.0)
        assert abs(x2) < 1e-10
        assert y2 == pytest.approx(150.0)

    def test_horizontal(self):
        params = PendulumParams(l1=1.0, l2=1.0)
        x1, y1, x2, y2 = positions(AngularState(math.pi / 2, math.pi / 2), params)
        assert x1 == pytest.approx(1.0)
        assert abs(y1) < 1e-10
        assert x2 == pytest.approx(2.0)
        assert abs(y2) < 1e-10

    def test_angle_recovered_by_atan2(self):
        params = PendulumParams()
        state = AngularState(2.2, -0.7)
        x1, y1, _, _ = positions(state, params)
        assert math.atan2(x1, y1) == pytest.approx(2.2)

    def test_array_input(self):
        params = PendulumParams(l1=1.0, l2=1.0)
        states = np.array([[0.0, 0.0, 0.0, 0.0], [math.pi / 2, 0.0, 0.0, 0.0]])
        x1, y1, x2, y2 = positions(states, params)
        assert x1.shape == (2,)
        assert x2[1] == pytest.approx(1.0)
        assert y2[1] == pytest.approx(1.0)


class TestSimulate:

    def test_returns_correct_shapes(self):
        t, states = simulate(unit_params(), AngularState(1.0, 1.0), dt=0.01, steps=100)
        assert t.shape == (101,)
        assert states.shape == (101, 4)
        assert t[-1] == pytest.approx(1.0)

    def test_initial_conditions_preserved(self):
        state = AngularState(1.0, 0.5, 0.1, -0.2)
        _, states = simulate(unit_params(), state, dt=0.01, steps=10)
        assert tuple(states[0]) == tuple(state)

    def test_rows_match_step(self):
        params = PendulumParams()
        state = AngularState(math.pi / 2, math.pi / 4)
        _, states = simulate(params, state, dt=0.1, steps=3)
        for i in range(3):
            state = step(state, params, 0.1)
            assert tuple(states[i + 1]) == tuple(state)

    def test_stops_at_divergence(self):
        params = unit_params(damping=-5.0)
        t, states = simulate(params, AngularState(math.pi / 2, math.pi / 4),
                             dt=0.1, steps=10000)
        assert len(states) < 10001
        assert len(t) == len(states)
        assert np.all(np.isfinite(states))


class TestReferenceConvergence:
    """The Euler stepper converges to the tightly-integrated model."""

    @staticmethod
    def _final_error(dt, params, state, t_end=1.0):
        n = int(round(t_end / dt))
        _, euler = simulate(params, state, dt=dt, steps=n)
        _, reference = reference_trajectory(params, state, t_end, dt)
        ex = positions(euler[-1], params)
        rx = positions(reference[-1], params)
        return max(abs(a - b) for a, b in zip(ex, rx))

    def test_converges_with_all_terms(self):
        params = unit_params(damping=0.3, k1=2.0, k2=1.0)
        state = AngularState(0.5, 0.3, 0.0, 0.0)

        coarse = self._final_error(0.01, params, state)
        fine = self._final_error(0.001, params, state)

        assert fine < 0.05
        assert fine < coarse / 3

    def test_reference_conserves_energy(self):
        params = unit_params()
        _, states = reference_trajectory(params, AngularState(math.pi / 2, math.pi / 2), 5.0, 0.01)
        energies = total_energy(states, params)
        assert np.max(np.abs(energies - energies[0])) < 1e-5
