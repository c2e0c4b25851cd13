import sys
from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QPushButton,
    QLabel,
    QFrame,
)
from PySide6.QtCore import QTimer

from anamon.core.engine import SimulationEngine
from anamon.core.state import SimulationConfig
from anamon.monitors.display import format_clock
from anamon.monitors.notifier import AlarmNotifier
from anamon.monitors.waveform import WaveformContext
from anamon.ui.audio import QtToneSink
from anamon.ui.controls_widget import ControlPanelWidget
from anamon.ui.monitor_widget import PatientMonitorWidget
from anamon.ui.qt_scheduler import QtScheduler
from anamon.ui.styles import (
    COLORS,
    FONTS,
    get_bar_style,
    get_base_widget_style,
    get_button_style,
)


class MainWindow(QMainWindow):
    """Main window integrating the monitor, controls and alarm audio."""
    def __init__(self, config: SimulationConfig = None, tone_sink=None, auto_start=True):
        super().__init__()
        self.setWindowTitle("AnaMon - Anesthesia Machine Monitor")
        self.resize(1500, 900)
        self.setStyleSheet(get_base_widget_style())

        self.config = config if config is not None else SimulationConfig()
        self.scheduler = QtScheduler(self)
        self.engine = SimulationEngine(self.config, scheduler=self.scheduler)
        self.notifier = AlarmNotifier(
            self.engine.alarms,
            self.scheduler,
            tone_sink if tone_sink is not None else QtToneSink(),
        )

        self.setup_ui()

        self.engine.add_step_listener(self.on_step)
        self.engine.alarms.add_listener(self.monitor.update_alarms)

        # Waveform loop, independent of the vitals tick
        self.frame_timer = QTimer(self)
        self.frame_timer.setInterval(self.config.frame_interval_ms)
        self.frame_timer.timeout.connect(self.frame_loop)

        self.refresh()
        if auto_start:
            self.start()

    def setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        monitor_container = QWidget()
        mon_layout = QVBoxLayout(monitor_container)
        mon_layout.setContentsMargins(0, 0, 0, 0)
        mon_layout.setSpacing(0)

        self.monitor = PatientMonitorWidget(rng=self.engine.rng)
        mon_layout.addWidget(self.monitor, stretch=1)

        # Bottom control bar
        ctrl_bar = QFrame()
        ctrl_bar.setStyleSheet(get_bar_style("top"))
        ctrl_bar.setFixedHeight(56)
        ctrl_layout = QHBoxLayout(ctrl_bar)
        ctrl_layout.setContentsMargins(16, 8, 16, 8)
        ctrl_layout.setSpacing(16)

        self.btn_start = QPushButton("Start")
        self.btn_start.clicked.connect(self.toggle_simulation)
        ctrl_layout.addWidget(self.btn_start)

        self.lbl_status = QLabel("")
        ctrl_layout.addWidget(self.lbl_status)
        ctrl_layout.addStretch()

        self.lbl_time = QLabel("00:00:00")
        self.lbl_time.setStyleSheet(f"color: {COLORS['text']}; font-size: {FONTS['size_title']}; font-weight: 600;")
        ctrl_layout.addWidget(self.lbl_time)

        mon_layout.addWidget(ctrl_bar)
        main_layout.addWidget(monitor_container, stretch=7)

        self.controls = ControlPanelWidget(self.engine)
        main_layout.addWidget(self.controls, stretch=3)
        self._set_run_state("ready")

    def _set_run_state(self, state):
        labels = {
            "running": ("Pause", "warning", "RUNNING", COLORS['success']),
            "paused": ("Resume", "primary", "PAUSED", COLORS['warning']),
            "ready": ("Start", "primary", "READY", COLORS['text_dim']),
        }
        text, variant, status, color = labels[state]
        self.btn_start.setText(text)
        self.btn_start.setStyleSheet(get_button_style(variant=variant, padding="8px 20px", min_width=110))
        self.lbl_status.setText(status)
        self.lbl_status.setStyleSheet(f"color: {color}; font-size: {FONTS['size_small']}; font-weight: 600;")

    def start(self):
        self.engine.start()
        self.frame_timer.start()
        self._set_run_state("running")

    def pause(self):
        self.engine.stop()
        self.frame_timer.stop()
        self._set_run_state("paused")

    def toggle_simulation(self):
        if self.engine.running:
            self.pause()
        else:
            self.controls.sync_with_engine()
            self.start()

    def on_step(self, _result):
        self.refresh()

    def refresh(self):
        self.monitor.update_numerics(self.engine)
        self.monitor.update_alarms(self.engine.alarms)
        self.lbl_time.setText(format_clock(self.engine.time_elapsed))

    def frame_loop(self):
        self.monitor.advance_waveforms(WaveformContext.from_engine(self.engine))

    def closeEvent(self, event):
        self.notifier.detach()
        self.engine.stop()
        self.engine.stop_recording()
        super().closeEvent(event)


def main(config: SimulationConfig = None):
    app = QApplication.instance()
    if not app:
        app = QApplication(sys.argv)
    window = MainWindow(config)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
