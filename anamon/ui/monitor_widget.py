import pyqtgraph as pg
from PySide6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel,
                               QGridLayout, QFrame)
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
import numpy as np

from anamon.core.enums import CardStatus
from anamon.monitors.display import (
    NO_ALARMS_TEXT,
    alarm_rows,
    card_statuses,
    format_vitals,
)
from anamon.monitors.ecg import ECGWaveform
from anamon.monitors.capno import CapnoWaveform
from anamon.monitors.spo2 import PlethWaveform
from anamon.monitors.waveform import WaveformTrace, WaveformContext
from .styles import (
    COLORS,
    get_alarm_item_style,
    get_bar_style,
    get_base_widget_style,
    get_card_style,
    get_rgba,
)


class VitalCard(QFrame):
    """
    Numeric display for one vital sign.
    Border and title colour follow the card's alarm status.
    """
    def __init__(self, label, unit="", color=COLORS['text'], initial_value="--", detail=False):
        super().__init__()
        self.base_color = color
        self.label_text = label
        self.status = CardStatus.NORMAL

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 6, 10, 8)
        layout.setSpacing(0)

        self.lbl_title = QLabel(label)
        layout.addWidget(self.lbl_title, alignment=Qt.AlignRight)

        self.lbl_val = QLabel(initial_value)
        self.lbl_val.setStyleSheet(f"color: {color}; font-size: 34px; font-weight: 700; font-family: Arial;")
        self.lbl_val.setAlignment(Qt.AlignRight)
        layout.addWidget(self.lbl_val)

        # Secondary line, e.g. MAP under BP or peak under mean pressure
        self.lbl_detail = None
        if detail:
            self.lbl_detail = QLabel("")
            self.lbl_detail.setStyleSheet(f"color: {COLORS['text_secondary']}; font-size: 11px; font-family: Arial;")
            layout.addWidget(self.lbl_detail, alignment=Qt.AlignRight)

        if unit:
            lbl_unit = QLabel(unit)
            lbl_unit.setStyleSheet(f"color: {COLORS['text_dim']}; font-size: 11px; font-family: Arial;")
            layout.addWidget(lbl_unit, alignment=Qt.AlignRight)

        self._apply_style()

    def _apply_style(self):
        self.setStyleSheet(get_card_style(self.base_color, self.status.value))
        if self.status is CardStatus.NORMAL:
            color, title = self.base_color, self.label_text
        else:
            color = COLORS['danger'] if self.status is CardStatus.CRITICAL else COLORS['warning']
            title = f"{self.label_text} {self.status.value.upper()}"
        self.lbl_title.setText(title)
        self.lbl_title.setStyleSheet(f"color: {color}; font-size: 12px; font-weight: 600; font-family: Arial;")

    def set_value(self, text, detail=None):
        self.lbl_val.setText(text)
        if detail is not None and self.lbl_detail is not None:
            self.lbl_detail.setText(detail)

    def set_status(self, status: CardStatus):
        if status is not self.status:
            self.status = status
            self._apply_style()


class AlarmListWidget(QFrame):
    """Alarm list, newest first, or the all-clear message."""
    def __init__(self):
        super().__init__()
        self.setStyleSheet(f"background-color: {COLORS['panel']}; border: 1px solid {COLORS['border']}; border-radius: 6px;")
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(6, 6, 6, 6)
        self.layout.setSpacing(4)

        header = QHBoxLayout()
        title = QLabel("ALARMS")
        title.setStyleSheet(f"color: {COLORS['text_dim']}; font-weight: 700; font-size: 11px;")
        header.addWidget(title)
        header.addStretch()
        self.lbl_silenced = QLabel("")
        self.lbl_silenced.setStyleSheet(f"color: {COLORS['warning']}; font-weight: 700; font-size: 11px;")
        header.addWidget(self.lbl_silenced)
        self.layout.addLayout(header)

        self.rows_layout = QVBoxLayout()
        self.rows_layout.setSpacing(4)
        self.layout.addLayout(self.rows_layout)
        self.layout.addStretch()
        self.row_texts = []

    def set_alarms(self, registry):
        while self.rows_layout.count():
            item = self.rows_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

        rows = alarm_rows(registry)
        self.row_texts = [row.text for row in rows]
        if not rows:
            lbl = QLabel(NO_ALARMS_TEXT)
            lbl.setStyleSheet(f"color: {COLORS['success']}; font-size: 12px; padding: 6px;")
            self.rows_layout.addWidget(lbl)
        for row in rows:
            self.rows_layout.addWidget(self._make_row(row))

        self.lbl_silenced.setText("SILENCED" if registry.silenced else "")

    def _make_row(self, row):
        frame = QFrame()
        frame.setStyleSheet(get_alarm_item_style(row.priority))
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(2)

        head = QHBoxLayout()
        lbl_priority = QLabel(row.priority.upper())
        lbl_priority.setStyleSheet("font-weight: 700; font-size: 10px;")
        lbl_time = QLabel(row.time)
        lbl_time.setStyleSheet(f"color: {COLORS['text_dim']}; font-size: 10px;")
        head.addWidget(lbl_priority)
        head.addStretch()
        head.addWidget(lbl_time)
        layout.addLayout(head)

        lbl_msg = QLabel(row.text)
        lbl_msg.setStyleSheet("font-size: 12px;")
        layout.addWidget(lbl_msg)
        return frame


class PatientMonitorWidget(QWidget):
    """Monitor screen: ECG, pleth and capnography sweeps plus numerics and alarms."""
    def __init__(self, rng=None):
        super().__init__()
        self.setStyleSheet(get_base_widget_style())

        self.traces = {
            'ecg': WaveformTrace(ECGWaveform(rng)),
            'pleth': WaveformTrace(PlethWaveform(rng)),
            'capno': WaveformTrace(CapnoWaveform(rng)),
        }

        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)
        self.setup_ui()

    def setup_ui(self):
        # --- Header ---
        header = QFrame()
        header.setStyleSheet(get_bar_style("bottom"))
        header.setFixedHeight(32)
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(12, 0, 12, 0)
        lbl_brand = QLabel("Anesthesia Machine Monitor")
        lbl_brand.setStyleSheet(f"color: {COLORS['text_secondary']}; font-size: 12px; font-weight: 500;")
        header_layout.addWidget(lbl_brand)
        header_layout.addStretch()
        self.lbl_ecg_rate = QLabel("-- bpm")
        self.lbl_pleth = QLabel("--%")
        self.lbl_capno = QLabel("-- mmHg")
        for lbl, key in ((self.lbl_ecg_rate, 'ecg'), (self.lbl_pleth, 'pleth'), (self.lbl_capno, 'co2')):
            lbl.setStyleSheet(f"color: {COLORS[key]}; font-size: 11px; font-weight: 600;")
            header_layout.addWidget(lbl)
        self.layout.addWidget(header)

        content = QFrame()
        content.setStyleSheet(f"background-color: {COLORS['background_alt']};")
        content_layout = QHBoxLayout(content)
        content_layout.setContentsMargins(4, 4, 4, 4)
        content_layout.setSpacing(4)
        self.layout.addWidget(content, stretch=1)

        # Left column: waveforms + alarms
        left = QVBoxLayout()
        left.setSpacing(2)
        content_layout.addLayout(left, stretch=70)

        self.plots = {}
        for key, color, title, y_range in (
            ('ecg', COLORS['ecg'], "ECG  Lead II", (-0.5, 1.2)),
            ('pleth', COLORS['pleth'], "SpO₂  Pleth", (-0.2, 1.0)),
            ('capno', COLORS['co2'], "CO₂  Capnogram", (-0.2, 1.2)),
        ):
            self.plots[key] = self.create_plot(color, title, y_range, self.traces[key].max_points)
            left.addWidget(self.plots[key][0])

        self.alarm_list = AlarmListWidget()
        left.addWidget(self.alarm_list)

        # Right column: numerics
        num_frame = QFrame()
        num_frame.setStyleSheet(f"background-color: {COLORS['panel']}; border-left: 1px solid {COLORS['border']};")
        grid = QGridLayout(num_frame)
        grid.setContentsMargins(6, 6, 6, 6)
        grid.setSpacing(6)
        content_layout.addWidget(num_frame, stretch=30)

        self.cards = {
            'hr': VitalCard("Heart rate", "bpm", COLORS['ecg'], "--"),
            'bp': VitalCard("NIBP", "mmHg", COLORS['abp'], "--/--", detail=True),
            'spo2': VitalCard("SpO₂", "%", COLORS['pleth'], "--"),
            'co2': VitalCard("EtCO₂", "mmHg", COLORS['co2'], "--"),
            'temp': VitalCard("Temp", "°C", COLORS['temp'], "--"),
            'pressure': VitalCard("Paw mean", "cmH₂O", COLORS['pressure'], "--", detail=True),
        }
        for i, card in enumerate(self.cards.values()):
            grid.addWidget(card, i // 2, i % 2)

        self.gas_panel = self._create_gas_panel()
        grid.addWidget(self.gas_panel, 3, 0, 1, 2)

    def _create_gas_panel(self):
        frame = QFrame()
        frame.setStyleSheet(f"""
            QFrame {{
                background-color: {get_rgba(COLORS['gas'], 0.05)};
                border: 1px solid {get_rgba(COLORS['border'], 0.3)};
                border-radius: 6px;
            }}
        """)
        layout = QHBoxLayout(frame)
        layout.setContentsMargins(8, 6, 8, 8)

        def make_col(label, attr):
            vbox = QVBoxLayout()
            vbox.setSpacing(0)
            title = QLabel(label)
            title.setStyleSheet(f"color: {COLORS['text_dim']}; font-size: 10px;")
            value = QLabel("--")
            value.setStyleSheet(f"color: {COLORS['gas']}; font-size: 20px; font-weight: 700;")
            setattr(self, attr, value)
            vbox.addWidget(title, alignment=Qt.AlignCenter)
            vbox.addWidget(value, alignment=Qt.AlignCenter)
            layout.addLayout(vbox)

        make_col("SEVO Fi", "lbl_fi_val")
        make_col("SEVO Et", "lbl_et_val")
        make_col("MAC", "lbl_mac")
        make_col("I:E", "lbl_ie")
        return frame

    def create_plot(self, color, title, y_range, max_points):
        plot = pg.PlotWidget()
        plot.setBackground(COLORS['background_alt'])
        plot.setMouseEnabled(x=False, y=False)
        plot.hideAxis('bottom')
        plot.hideAxis('left')
        plot.setXRange(0, max_points, padding=0)
        plot.setYRange(y_range[0], y_range[1], padding=0.05)
        plot.setMinimumHeight(80)

        text = pg.TextItem(text=title, color=color, anchor=(0, 0))
        text.setFont(QFont('Arial', 9, QFont.Weight.Medium))
        text.setPos(2, y_range[1])
        plot.addItem(text)

        curve = plot.plot(pen=pg.mkPen(color=color, width=2.0))
        sweep = pg.InfiniteLine(pos=0, angle=90, pen=pg.mkPen(color=color, width=1))
        sweep.setOpacity(0.3)
        plot.addItem(sweep)
        return plot, curve, sweep

    def advance_waveforms(self, ctx: WaveformContext):
        """Produce one sample per trace and redraw."""
        for key, trace in self.traces.items():
            trace.advance(ctx)
            _, curve, sweep = self.plots[key]
            if len(trace.data) < 2:
                curve.setData([], [])
            else:
                curve.setData(np.arange(len(trace.data)), np.asarray(trace.data))
            sweep.setValue(trace.draw_position)

    def update_numerics(self, engine):
        text = format_vitals(engine.vitals, engine.derived, engine.controls)
        self.cards['hr'].set_value(text['hr'])
        self.cards['bp'].set_value(text['bp'], detail=f"MAP {text['map']}")
        self.cards['spo2'].set_value(text['spo2'])
        self.cards['co2'].set_value(text['co2'])
        self.cards['temp'].set_value(text['temp'])
        self.cards['pressure'].set_value(text['pressure'], detail=f"Peak {text['peak_pressure']}")

        self.lbl_ecg_rate.setText(text['ecg_rate'])
        self.lbl_pleth.setText(text['pleth'])
        self.lbl_capno.setText(text['capno'])

        self.lbl_fi_val.setText(text['inspired_agent'])
        self.lbl_et_val.setText(text['expired_agent'])
        self.lbl_mac.setText(text['mac'])
        self.lbl_ie.setText(text['ie_ratio'])

        for card, status in card_statuses(engine.vitals).items():
            self.cards[card].set_status(status)

    def update_alarms(self, registry):
        self.alarm_list.set_alarms(registry)
