from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QGroupBox,
    QGridLayout,
    QPushButton,
    QSlider,
)
from PySide6.QtCore import Qt

from anamon.core.state import CONTROL_RANGES
from anamon.monitors.display import format_control
from .styles import (
    COLORS,
    STYLE_GROUPBOX,
    STYLE_SLIDER,
    get_base_widget_style,
    get_button_style,
)

VENTILATOR_CONTROLS = ("tidal_volume", "respiratory_rate", "peep", "fio2")
GAS_CONTROLS = ("fresh_gas_flow", "anesthetic_agent")


class ControlSlider(QWidget):
    """
    Labelled slider for one control.
    Works in integer step units so float ranges land exactly on the grid.
    """
    def __init__(self, name, on_change):
        super().__init__()
        self.name = name
        self.range = CONTROL_RANGES[name]
        self._on_change = on_change

        layout = QGridLayout(self)
        layout.setContentsMargins(0, 2, 0, 2)

        lbl = QLabel(self.range.label)
        lbl.setStyleSheet(f"color: {COLORS['text_secondary']};")
        layout.addWidget(lbl, 0, 0)

        self.lbl_value = QLabel("")
        self.lbl_value.setAlignment(Qt.AlignRight)
        layout.addWidget(self.lbl_value, 0, 1)

        self.slider = QSlider(Qt.Horizontal)
        self.slider.setStyleSheet(STYLE_SLIDER)
        self.slider.setRange(0, self._to_steps(self.range.maximum))
        self.slider.valueChanged.connect(self._handle_slider)
        layout.addWidget(self.slider, 1, 0, 1, 2)

    def _to_steps(self, value):
        return int(round((value - self.range.minimum) / self.range.step))

    def _from_steps(self, steps):
        return round(self.range.minimum + steps * self.range.step, 6)

    def value(self) -> float:
        return self._from_steps(self.slider.value())

    def set_value(self, value: float):
        self.slider.blockSignals(True)
        self.slider.setValue(self._to_steps(value))
        self.slider.blockSignals(False)
        self.lbl_value.setText(format_control(self.name, value))

    def _handle_slider(self, steps):
        value = self._on_change(self.name, self._from_steps(steps))
        self.lbl_value.setText(format_control(self.name, value))


class ControlPanelWidget(QWidget):
    """
    Operator controls: ventilator, fresh gas/vaporizer and alarm actions.
    """
    def __init__(self, engine):
        super().__init__()
        self.engine = engine
        self.sliders = {}
        self.setStyleSheet(f"{get_base_widget_style()}{STYLE_GROUPBOX}")
        self.init_ui()
        self.sync_with_engine()

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)

        layout.addWidget(self._make_group("Ventilator", VENTILATOR_CONTROLS))
        layout.addWidget(self._make_group("Gas delivery", GAS_CONTROLS))

        actions = QHBoxLayout()
        self.btn_silence = QPushButton("Silence 2 min")
        self.btn_silence.setStyleSheet(get_button_style(variant="warning"))
        self.btn_silence.clicked.connect(self.engine.silence_alarms)
        actions.addWidget(self.btn_silence)

        self.btn_reset = QPushButton("Reset alarms")
        self.btn_reset.setStyleSheet(get_button_style(variant="neutral"))
        self.btn_reset.clicked.connect(self.engine.reset_alarms)
        actions.addWidget(self.btn_reset)
        layout.addLayout(actions)

        layout.addStretch()

    def _make_group(self, title, names):
        group = QGroupBox(title)
        vbox = QVBoxLayout(group)
        for name in names:
            slider = ControlSlider(name, self.engine.set_control)
            self.sliders[name] = slider
            vbox.addWidget(slider)
        return group

    def sync_with_engine(self):
        """Update sliders to match engine controls."""
        for name, slider in self.sliders.items():
            slider.set_value(getattr(self.engine.controls, name))
