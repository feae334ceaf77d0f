"""Pendulum control panel: physical and conceptual sliders, quick actions,
speed and plot axis selection.

Uses PhysicsParamsWidget from ui_common for the physical parameters.
Conceptual values go through a ConceptualSettings so the enable switch
can zero them and later restore them.
"""

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QGridLayout, QHBoxLayout,
    QLabel, QPushButton, QComboBox, QGroupBox,
)

from playground.session import ConceptualSettings
from playground.trace import PLOT_VARIABLES
from ui_common import (
    PhysicsParamsWidget, add_slider_row, make_slider, set_slider_value, slider_value,
)


class PendulumControls(QWidget):
    """Sliders and buttons feeding parameters to the simulation each tick."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.conceptual = ConceptualSettings()
        self._init_ui()

    # -- UI construction --

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(8, 8, 8, 8)

        # --- Simulation ---
        sim_group = QGroupBox("Simulation")
        sim_layout = QGridLayout()
        sim_group.setLayout(sim_layout)
        self.speed_slider = make_slider(0.1, 10, 1.0, resolution=10)
        add_slider_row(sim_layout, 0, "Speed", self.speed_slider, "x")
        main_layout.addWidget(sim_group)

        # --- Physical Properties ---
        phys_group = QGroupBox("Physical Properties")
        phys_layout = QVBoxLayout()
        phys_group.setLayout(phys_layout)
        self.physics_params = PhysicsParamsWidget()
        phys_layout.addWidget(self.physics_params)
        main_layout.addWidget(phys_group)

        # --- Conceptual Properties ---
        self.conceptual_group = QGroupBox("Conceptual Properties")
        self.conceptual_group.setCheckable(True)
        self.conceptual_group.setChecked(self.conceptual.enabled)
        conc_layout = QGridLayout()
        self.conceptual_group.setLayout(conc_layout)

        self.damping_slider = make_slider(-1, 1, self.conceptual.get("damping"))
        self.k1_slider = make_slider(-10000, 10000, self.conceptual.get("k1"), resolution=1)
        self.k2_slider = make_slider(-10000, 10000, self.conceptual.get("k2"), resolution=1)
        add_slider_row(conc_layout, 0, "Damping", self.damping_slider)
        add_slider_row(conc_layout, 1, "Stiffness θ₁", self.k1_slider, decimals=0)
        add_slider_row(conc_layout, 2, "Stiffness θ₂", self.k2_slider, decimals=0)

        for name, slider in self._conceptual_sliders().items():
            slider.valueChanged.connect(
                lambda _val, n=name, s=slider: self.conceptual.set(n, slider_value(s))
            )
        self.conceptual_group.toggled.connect(self._on_conceptual_toggled)
        main_layout.addWidget(self.conceptual_group)

        # --- Actions ---
        actions = QHBoxLayout()
        self.reset_btn = QPushButton("Reset Angles")
        self.zero_damping_btn = QPushButton("Zero Damping")
        self.zero_k1_btn = QPushButton("Zero Stiffness θ₁")
        self.zero_k2_btn = QPushButton("Zero Stiffness θ₂")
        self.zero_damping_btn.clicked.connect(
            lambda: set_slider_value(self.damping_slider, 0.0)
        )
        self.zero_k1_btn.clicked.connect(lambda: set_slider_value(self.k1_slider, 0.0))
        self.zero_k2_btn.clicked.connect(lambda: set_slider_value(self.k2_slider, 0.0))
        for btn in (self.reset_btn, self.zero_damping_btn, self.zero_k1_btn, self.zero_k2_btn):
            actions.addWidget(btn)
        main_layout.addLayout(actions)

        # --- Plot ---
        plot_group = QGroupBox("Plot")
        plot_layout = QHBoxLayout()
        plot_group.setLayout(plot_layout)
        self.x_axis_combo = QComboBox()
        self.y_axis_combo = QComboBox()
        for combo in (self.x_axis_combo, self.y_axis_combo):
            for key, label in PLOT_VARIABLES.items():
                combo.addItem(label, key)
        self.x_axis_combo.setCurrentIndex(self.x_axis_combo.findData("time"))
        self.y_axis_combo.setCurrentIndex(self.y_axis_combo.findData("theta2"))
        self.reset_zoom_btn = QPushButton("Reset Zoom")
        plot_layout.addWidget(self.x_axis_combo)
        plot_layout.addWidget(QLabel("vs"))
        plot_layout.addWidget(self.y_axis_combo)
        plot_layout.addWidget(self.reset_zoom_btn)
        main_layout.addWidget(plot_group)

        main_layout.addStretch()

    def _conceptual_sliders(self):
        return {
            "damping": self.damping_slider,
            "k1": self.k1_slider,
            "k2": self.k2_slider,
        }

    def _on_conceptual_toggled(self, checked):
        self.conceptual.set_enabled(checked)

    # -- Public accessors --

    def get_params(self):
        """Physical sliders combined with the effective conceptual values."""
        return self.conceptual.apply(self.physics_params.get_params())

    def get_speed(self):
        return slider_value(self.speed_slider)

    def get_plot_axes(self):
        return self.x_axis_combo.currentData(), self.y_axis_combo.currentData()
