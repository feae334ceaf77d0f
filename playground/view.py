"""Pendulum view: orchestrates the simulation session, canvas, plot and controls.

A QTimer drives one SimulationSession.tick per frame with a fixed
``dt * speed``. Parameters are read fresh from the controls every frame.
"""

import logging

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QVBoxLayout, QSplitter, QLabel

from playground.canvas import PendulumCanvas
from playground.controls import PendulumControls
from playground.plot import TracePlot
from playground.session import DIVERGENCE_MESSAGE, SessionConfig, SimulationSession
from simulation import total_energy

logger = logging.getLogger(__name__)


class PendulumView(QWidget):
    """Complete interactive pendulum: canvas + plot + controls + frame loop."""

    def __init__(self, config=None, fps=60, parent=None):
        super().__init__(parent)

        self.config = config or SessionConfig()
        self.fps = fps

        self.canvas = PendulumCanvas()
        self.plot = TracePlot()
        self.controls = PendulumControls()
        self.session = SimulationSession(self.controls.get_params(), self.config)

        displays = QWidget()
        displays_layout = QVBoxLayout(displays)
        displays_layout.setContentsMargins(0, 0, 0, 0)
        displays_layout.addWidget(self.canvas)
        displays_layout.addWidget(self.plot)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(displays)
        splitter.addWidget(self.controls)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(splitter)

        # Status bar labels (AppWindow places these in a real status bar)
        self.time_label = QLabel()
        self.energy_label = QLabel()
        self.warning_label = QLabel()
        self.warning_label.setStyleSheet("color: #e55;")

        # Timer
        self.timer = QTimer()
        self.timer.setInterval(int(1000 / self.fps))
        self.timer.timeout.connect(self._on_timer)

        # Wire signals
        self.canvas.pointer_pressed.connect(self.session.press)
        self.canvas.pointer_moved.connect(self._on_pointer_moved)
        self.canvas.pointer_released.connect(self.session.release)
        self.controls.reset_btn.clicked.connect(self._reset)
        self.controls.reset_zoom_btn.clicked.connect(self.plot.reset_zoom)
        self.controls.x_axis_combo.currentIndexChanged.connect(self._on_axes_changed)
        self.controls.y_axis_combo.currentIndexChanged.connect(self._on_axes_changed)

        self._update_display()

    # -- Public interface --

    def start(self):
        self.timer.start()

    def stop(self):
        self.timer.stop()

    # -- Frame loop --

    def _on_timer(self):
        self.session.set_params(self.controls.get_params())
        was_diverged = self.session.diverged
        self.session.tick(self.config.fixed_dt * self.controls.get_speed())
        if self.session.diverged and not was_diverged:
            self.warning_label.setText(f"  {DIVERGENCE_MESSAGE}  ")
        self._update_display()

    def _update_display(self):
        params = self.session.params
        state = self.session.state
        self.canvas.frozen = self.session.diverged
        self.canvas.set_state(state, params)
        self.plot.set_points(self.session.trace.points)

        energy = total_energy(state, params)
        self.time_label.setText(f"  t = {self.session.time:.2f} s  ")
        self.energy_label.setText(f"  E = {energy:.1f}  ")

    # -- Interaction --

    def _on_pointer_moved(self, x, y):
        if self.session.move(x, y):
            self._update_display()

    def _on_axes_changed(self, _index):
        x_axis, y_axis = self.controls.get_plot_axes()
        self.session.trace.set_axes(x_axis, y_axis)
        self.plot.reset_zoom()

    def _reset(self):
        self.session.reset()
        self.warning_label.setText("")
        self._update_display()
