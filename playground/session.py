"""Simulation session: the single owner of the live pendulum state.

The host's frame timer calls ``tick`` once per frame; pointer events call
``press``/``move``/``release``. A tick either advances the engine or,
while a bob is held, leaves the dragged pose in place. Either way the
resulting state is recorded to the trace. A divergence freezes the
session until ``reset``.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass

from drag import DragTarget, hit_test, resolve_drag
from playground.trace import TRACE_CAPACITY, TraceRecorder
from simulation import (
    AngularState, DivergenceError, PendulumParams, check_divergence, step,
)

logger = logging.getLogger(__name__)

DIVERGENCE_MESSAGE = "Simulation exploded: try reducing negative damping."


@dataclass(frozen=True)
class SessionConfig:
    """Run-level settings that do not change while the app is open."""

    fixed_dt: float = 0.1
    initial_state: AngularState = AngularState(math.pi / 2, math.pi / 4)
    trace_capacity: int = TRACE_CAPACITY


class ConceptualSettings:
    """Damping and stiffness values with an on/off switch.

    Switching off zeroes the effective values but remembers the chosen
    ones; switching back on restores them.
    """

    NAMES = ("damping", "k1", "k2")

    def __init__(self, damping=None, k1=None, k2=None, enabled=True):
        defaults = PendulumParams()
        given = {"damping": damping, "k1": k1, "k2": k2}
        self._values = {
            name: getattr(defaults, name) if value is None else value
            for name, value in given.items()
        }
        self.enabled = enabled

    def set(self, name: str, value: float) -> None:
        if name not in self._values:
            raise KeyError(name)
        self._values[name] = value

    def get(self, name: str) -> float:
        """The remembered value, regardless of the switch."""
        return self._values[name]

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def effective(self) -> dict[str, float]:
        """Values the engine should use right now."""
        if not self.enabled:
            return {name: 0.0 for name in self.NAMES}
        return dict(self._values)

    def apply(self, params: PendulumParams) -> PendulumParams:
        """Return ``params`` with the effective conceptual values."""
        return dataclasses.replace(params, **self.effective())


class SimulationSession:
    """Live state, drag selection, trace and divergence flag."""

    def __init__(self, params: PendulumParams | None = None,
                 config: SessionConfig | None = None):
        self.config = config or SessionConfig()
        self.params = params or PendulumParams()
        self.params.validate()
        self.state = self.config.initial_state
        self.drag_target = DragTarget.NONE
        self.diverged = False
        self.time = 0.0
        self.trace = TraceRecorder(capacity=self.config.trace_capacity)

    @property
    def dragging(self) -> bool:
        return self.drag_target is not DragTarget.NONE

    def set_params(self, params: PendulumParams) -> None:
        """Use new parameters from the next tick on."""
        params.validate()
        if params != self.params:
            logger.debug("Parameters changed: %s", params)
        self.params = params

    # -- Frame update --

    def tick(self, dt: float | None = None) -> bool:
        """Run one frame. Returns False when the session is frozen."""
        if self.diverged:
            return False
        if dt is None:
            dt = self.config.fixed_dt

        try:
            if self.dragging:
                check_divergence(self.state, self.params)
            else:
                self.state = step(self.state, self.params, dt)
        except DivergenceError as exc:
            self._freeze(exc)
            return False

        self.time += dt
        self.trace.record(self.state, self.params, dt)
        return True

    def _freeze(self, exc: DivergenceError) -> None:
        self.diverged = True
        self.drag_target = DragTarget.NONE
        logger.warning("%s (%s)", DIVERGENCE_MESSAGE, exc)

    # -- Pointer interaction --

    def press(self, x: float, y: float) -> DragTarget:
        """Select the bob under the pointer, if any."""
        if self.diverged:
            return DragTarget.NONE
        self.drag_target = hit_test((x, y), self.state, self.params)
        if self.dragging:
            logger.debug("Grabbed %s at (%.1f, %.1f)", self.drag_target.value, x, y)
        return self.drag_target

    def move(self, x: float, y: float) -> bool:
        """Move the held bob to the pointer. Returns False if nothing is held."""
        if not self.dragging:
            return False
        self.state = resolve_drag(self.drag_target, (x, y), self.params, self.state)
        return True

    def release(self) -> None:
        self.drag_target = DragTarget.NONE

    # -- Reset --

    def reset(self, state: AngularState | None = None) -> None:
        """Restore a state (the initial one by default) and unfreeze."""
        self.state = state if state is not None else self.config.initial_state
        self.drag_target = DragTarget.NONE
        self.diverged = False
        self.time = 0.0
        self.trace.clear()
        logger.info(
            "Reset to theta1=%.3f, theta2=%.3f", self.state.theta1, self.state.theta2,
        )
