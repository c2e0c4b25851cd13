import argparse
import json
import sys
import time

from anamon.core.engine import SimulationEngine
from anamon.core.scheduler import ManualScheduler
from anamon.core.state import SimulationConfig
from anamon.monitors.display import format_vitals, format_clock
from anamon.monitors.notifier import AlarmNotifier

BANNER = """=========================================
Anesthesia Machine - Simulated Monitor
=========================================
Clinical Relationships:
• Sevoflurane (MAC ~2%) → ↓ HR & BP
• FiO2 → SpO2
• Minute Ventilation → CO2
========================================="""


class CountingToneSink:
    """Headless stand-in for the speaker: counts bursts per frequency."""
    def __init__(self):
        self.counts = {}

    def play(self, tone):
        self.counts[tone.frequency_hz] = self.counts.get(tone.frequency_hz, 0) + 1


def load_config(args) -> SimulationConfig:
    config_data = {}
    try:
        if args.config:
            with open(args.config, 'r') as f:
                config_data = json.load(f)
        config = SimulationConfig.from_dict(config_data).validate()
    except (OSError, json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    if args.seed is not None:
        config.rng_seed = args.seed
    if args.auto_resolve:
        config.auto_resolve_alarms = True
    return config


def non_negative_seconds(text: str) -> float:
    value = float(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {text}")
    return value


def run_headless(args, config: SimulationConfig):
    """Run the simulation on simulated time and print each tick."""
    print(f"Starting Headless Simulation (Duration: {args.duration}s)...")

    scheduler = ManualScheduler()
    engine = SimulationEngine(config, scheduler=scheduler)
    sink = CountingToneSink()
    AlarmNotifier(engine.alarms, scheduler, sink)

    def report(result):
        text = format_vitals(result.snapshot.vitals, result.snapshot.derived, result.snapshot.controls)
        print(f"Time: {format_clock(result.snapshot.time)} | HR: {text['hr']} | BP: {text['bp']} "
              f"| SpO2: {text['spo2']} | CO2: {text['co2']} | Temp: {text['temp']} "
              f"| Alarms: {result.snapshot.alarm_count}")
        for alarm in result.new_alarms:
            print(f"  [{alarm.priority.value.upper()}] {alarm.text}")

    engine.add_step_listener(report)
    if args.record:
        engine.start_recording(output_dir=args.record_dir, sample_interval_sec=args.record_interval)
    engine.start()

    start_real = time.time()
    scheduler.advance(args.duration)
    engine.stop()
    engine.stop_recording()
    end_real = time.time()

    if sink.counts:
        bursts = ", ".join(f"{int(freq)} Hz x{n}" for freq, n in sorted(sink.counts.items()))
        print(f"Alarm tones: {bursts}")
    print(f"Simulation completed in {end_real - start_real:.2f}s real time.")
    return engine


def run_ui(config: SimulationConfig):
    """Run simulation with UI."""
    from anamon.ui.main_window import main as ui_main
    ui_main(config)


def main(argv=None):
    parser = argparse.ArgumentParser(description="AnaMon - Simulated Anesthesia Machine Monitor")
    parser.add_argument("--mode", choices=["ui", "headless"], default="ui", help="Run mode (default: ui)")
    parser.add_argument("--duration", type=non_negative_seconds, default=60.0, help="Simulated seconds for headless mode")
    parser.add_argument("--config", type=str, help="Path to JSON configuration file")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--auto-resolve", action="store_true", help="Clear alarms once their condition resolves")
    parser.add_argument("--record", action="store_true", help="Enable CSV recording (headless only)")
    parser.add_argument("--record-dir", type=str, default="recordings", help="Output directory for recordings")
    parser.add_argument("--record-interval", type=non_negative_seconds, default=1.0,
                        help="Sample interval in simulated seconds for CSV")

    args = parser.parse_args(argv)
    config = load_config(args)
    print(BANNER)

    if args.mode == "headless":
        run_headless(args, config)
    else:
        run_ui(config)


if __name__ == "__main__":
    main()
