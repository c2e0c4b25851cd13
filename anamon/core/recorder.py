import csv
import os
import time
from dataclasses import fields

from .state import SimulationSnapshot, VitalsState, DerivedValues, ControlSettings

_COLUMNS = (
    ["time"]
    + [f.name for f in fields(VitalsState)]
    + [f.name for f in fields(DerivedValues)]
    + [f.name for f in fields(ControlSettings)]
    + ["alarm_count"]
)


class DataRecorder:
    """
    Records simulation ticks to CSV.
    """
    def __init__(self, output_dir: str = ".", sample_interval_sec: float = 0.0):
        self.output_dir = output_dir
        self.filename = f"anamon_log_{int(time.time())}.csv"
        self.file_path = os.path.join(output_dir, self.filename)
        self.file = None
        self.writer = None
        self.is_recording = False
        self.sample_interval_sec = max(0.0, sample_interval_sec)
        self._last_sample_time = None

    def start(self):
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            self.file = open(self.file_path, 'w', newline='')
            self.writer = csv.writer(self.file)
            self.is_recording = True
            self.writer.writerow(_COLUMNS)
        except OSError as e:
            print(f"Failed to start recording: {e}")
            self.is_recording = False

    def log(self, snapshot: SimulationSnapshot):
        if not self.is_recording or not self.writer:
            return

        if self.sample_interval_sec > 0.0:
            now = snapshot.time
            if self._last_sample_time is not None and (now - self._last_sample_time) < self.sample_interval_sec:
                return
            self._last_sample_time = now

        row = [snapshot.time]
        for part in (snapshot.vitals, snapshot.derived, snapshot.controls):
            row.extend(getattr(part, f.name) for f in fields(part))
        row.append(snapshot.alarm_count)
        self.writer.writerow(row)

    def stop(self):
        if self.file:
            self.file.close()
            self.file = None
        self.is_recording = False
