"""Trace plot: draws recorded samples with autoscale or a dragged zoom box."""

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QPainter, QPen, QColor, QPainterPath
from PyQt6.QtWidgets import QWidget

from playground.trace import ZoomWindow, autoscale, zoom_scale


class TracePlot(QWidget):
    """Line plot of trace samples centred on the origin.

    Dragging a rectangle larger than MIN_ZOOM_SELECTION fixes the scale
    to that box; reset_zoom() returns to autoscale.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.points = []
        self.zoom = None
        self._drag_start = None
        self._selection = None
        self.setMinimumSize(600, 400)

    def set_points(self, points):
        self.points = points
        self.update()

    def reset_zoom(self):
        self.zoom = None
        self.update()

    def current_scale(self):
        w, h = self.width(), self.height()
        if self.zoom is not None:
            return zoom_scale(self.zoom, w, h)
        return autoscale(self.points, w, h)

    # -- Zoom selection --

    def mousePressEvent(self, event):
        pos = event.position()
        self._drag_start = (pos.x(), pos.y())
        self.setCursor(Qt.CursorShape.CrossCursor)

    def mouseMoveEvent(self, event):
        if self._drag_start is None:
            return
        pos = event.position()
        self._selection = ZoomWindow(*self._drag_start, pos.x(), pos.y())
        self.update()

    def mouseReleaseEvent(self, event):
        if self._selection is not None and self._selection.is_large_enough:
            self.zoom = self._selection
        self._drag_start = None
        self._selection = None
        self.unsetCursor()
        self.update()

    def leaveEvent(self, event):
        if self._drag_start is not None:
            self.mouseReleaseEvent(event)

    # -- Painting --

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        w, h = self.width(), self.height()
        cx, cy = w / 2, h / 2

        painter.fillRect(self.rect(), QColor(255, 255, 255))

        axis_pen = QPen(QColor(238, 238, 238))
        axis_pen.setWidthF(1.0)
        painter.setPen(axis_pen)
        painter.drawLine(QPointF(0, cy), QPointF(w, cy))
        painter.drawLine(QPointF(cx, 0), QPointF(cx, h))

        if len(self.points) >= 2:
            scale = self.current_scale()
            path = QPainterPath()
            first = self.points[0]
            path.moveTo(cx + first.x * scale, cy - first.y * scale)
            for p in self.points[1:]:
                path.lineTo(cx + p.x * scale, cy - p.y * scale)
            trace_pen = QPen(QColor(255, 0, 0))
            trace_pen.setWidthF(2.0)
            painter.setPen(trace_pen)
            painter.drawPath(path)

        if self._selection is not None:
            sel = self._selection
            sel_pen = QPen(QColor(0, 102, 255))
            sel_pen.setWidthF(1.0)
            sel_pen.setStyle(Qt.PenStyle.DashLine)
            painter.setPen(sel_pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(QRectF(
                QPointF(sel.start_x, sel.start_y), QPointF(sel.end_x, sel.end_y),
            ).normalized())

        painter.end()
