"""Pendulum canvas: QPainter rendering of the double pendulum and drag input.

Simulation units map 1:1 to pixels, with the pivot centred horizontally
PIVOT_Y pixels from the top. Since simulation y points down, the
mapping is a plain translation. Mouse events are translated into
simulation coordinates and re-emitted as signals.
"""

from PyQt6.QtCore import Qt, QPointF, pyqtSignal
from PyQt6.QtGui import QPainter, QPen, QBrush, QColor
from PyQt6.QtWidgets import QWidget

from drag import pick_radius
from simulation import AngularState, PendulumParams, positions


class PendulumCanvas(QWidget):
    """Draws links and bobs; reports presses, drags and releases."""

    PIVOT_Y = 100

    pointer_pressed = pyqtSignal(float, float)
    pointer_moved = pyqtSignal(float, float)
    pointer_released = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.params = PendulumParams()
        self.state = AngularState(0.0, 0.0)
        self.frozen = False
        self.setMinimumSize(600, 400)

    def set_state(self, state, params):
        self.state = state
        self.params = params
        self.update()

    def to_sim(self, px, py):
        """Convert pixel coords to simulation coords."""
        return px - self.width() / 2, py - self.PIVOT_Y

    def to_pixel(self, x, y):
        """Convert simulation coords to pixel coords."""
        return self.width() / 2 + x, self.PIVOT_Y + y

    # -- Mouse --

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        self.pointer_pressed.emit(*self.to_sim(pos.x(), pos.y()))

    def mouseMoveEvent(self, event):
        pos = event.position()
        self.pointer_moved.emit(*self.to_sim(pos.x(), pos.y()))

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.pointer_released.emit()

    # -- Painting --

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        painter.fillRect(self.rect(), QColor(20, 20, 30))

        x1, y1, x2, y2 = positions(self.state, self.params)
        pivot_px = self.to_pixel(0.0, 0.0)
        bob1_px = self.to_pixel(float(x1), float(y1))
        bob2_px = self.to_pixel(float(x2), float(y2))

        # Links
        arm_pen = QPen(QColor(120, 120, 120) if self.frozen else QColor(200, 200, 200))
        arm_pen.setWidthF(2.0)
        painter.setPen(arm_pen)
        painter.drawLine(QPointF(*pivot_px), QPointF(*bob1_px))
        painter.drawLine(QPointF(*bob1_px), QPointF(*bob2_px))

        # Pivot
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(180, 180, 180)))
        painter.drawEllipse(QPointF(*pivot_px), 3, 3)

        # Bobs
        r1 = pick_radius(self.params.m1)
        r2 = pick_radius(self.params.m2)
        painter.setBrush(QBrush(QColor(255, 120, 80)))
        painter.drawEllipse(QPointF(*bob1_px), r1, r1)
        painter.setBrush(QBrush(QColor(80, 200, 255)))
        painter.drawEllipse(QPointF(*bob2_px), r2, r2)

        painter.end()
