"""App window: hosts the PendulumView and its status bar readouts."""

import logging

from PyQt6.QtWidgets import QMainWindow, QStatusBar

from playground.view import PendulumView

logger = logging.getLogger(__name__)


class AppWindow(QMainWindow):
    """Top-level window for the interactive double pendulum."""

    def __init__(self, config=None, fps=60):
        super().__init__()
        self.setWindowTitle("Interactive Double Pendulum")
        self.resize(1300, 900)

        self.pendulum_view = PendulumView(config=config, fps=fps)
        self.setCentralWidget(self.pendulum_view)

        # --- Status bar ---
        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._status_bar.addWidget(self.pendulum_view.time_label)
        self._status_bar.addWidget(self.pendulum_view.energy_label)
        self._status_bar.addWidget(self.pendulum_view.warning_label)

    def showEvent(self, event):
        super().showEvent(event)
        self.pendulum_view.start()
        logger.info("Simulation running at %d fps", self.pendulum_view.fps)

    def closeEvent(self, event):
        self.pendulum_view.stop()
        super().closeEvent(event)
