"""Shared UI widgets: float slider helpers and the physics parameter group."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QWidget, QGridLayout, QSlider, QLabel

from simulation import PendulumParams


# ---------------------------------------------------------------------------
# Slider helpers
# ---------------------------------------------------------------------------

def make_slider(minimum, maximum, value, resolution=100):
    """Create an integer QSlider that maps to float values.

    The slider range is [minimum*resolution, maximum*resolution].
    """
    slider = QSlider(Qt.Orientation.Horizontal)
    slider.setMinimum(round(minimum * resolution))
    slider.setMaximum(round(maximum * resolution))
    slider.setValue(round(value * resolution))
    slider.resolution = resolution
    return slider


def slider_value(slider):
    """Read the float value from a slider created by make_slider."""
    return slider.value() / slider.resolution


def set_slider_value(slider, value):
    """Move a make_slider slider to the given float value."""
    slider.setValue(round(value * slider.resolution))


def add_slider_row(layout, row, label_text, slider, unit="", decimals=2):
    """Add label | slider | value readout to a grid layout row.

    Returns the value QLabel, which tracks the slider.
    """
    label = QLabel(label_text)
    value_label = QLabel()
    value_label.setMinimumWidth(70)
    value_label.setAlignment(
        Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
    )
    layout.addWidget(label, row, 0)
    layout.addWidget(slider, row, 1)
    layout.addWidget(value_label, row, 2)

    def _update(_val, vl=value_label, sl=slider, u=unit):
        vl.setText(f"{slider_value(sl):.{decimals}f}{u}")

    slider.valueChanged.connect(_update)
    _update(slider.value())
    return value_label


# ---------------------------------------------------------------------------
# PhysicsParamsWidget
# ---------------------------------------------------------------------------

class PhysicsParamsWidget(QWidget):
    """Grouped sliders for the physical parameters (m1, m2, l1, l2, g).

    Emits no signals itself; call get_params() to read current values.
    Slider minimums keep masses and lengths positive.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        defaults = PendulumParams()
        self.m1_slider = make_slider(10, 200, defaults.m1, resolution=1)
        self.m2_slider = make_slider(10, 200, defaults.m2, resolution=1)
        self.l1_slider = make_slider(10, 200, defaults.l1, resolution=1)
        self.l2_slider = make_slider(10, 200, defaults.l2, resolution=1)
        self.g_slider = make_slider(0.1, 20, defaults.g)

        add_slider_row(layout, 0, "Mass 1", self.m1_slider)
        add_slider_row(layout, 1, "Mass 2", self.m2_slider)
        add_slider_row(layout, 2, "Length 1", self.l1_slider)
        add_slider_row(layout, 3, "Length 2", self.l2_slider)
        add_slider_row(layout, 4, "Gravity", self.g_slider)

    def get_params(self):
        """Return a PendulumParams from the current slider values.

        Conceptual values (damping, k1, k2) are left at zero; the caller
        fills them in.
        """
        return PendulumParams(
            m1=slider_value(self.m1_slider),
            m2=slider_value(self.m2_slider),
            l1=slider_value(self.l1_slider),
            l2=slider_value(self.l2_slider),
            g=slider_value(self.g_slider),
            damping=0.0,
        )

