#!/usr/bin/env python3
"""
Replay a recorded session through the step engine.

Lets detection parameters be tuned offline: the recorded raw batches are fed
tick by tick into a fresh engine configured from the command line, falling back
to the configuration stored with the recording.
"""

import json
import argparse
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from detection.detection_config import DetectionConfig
from detection.settings import SettingField, update_config
from detection.step_engine import StepEngine
from detection.accelerometer.sensor_driver import ReplaySensorDriver
from evaluation import recording_config as config

REPLAY_TIME_OF_DAY = (12, 0, 0)  # Fixed clock so a replay never crosses midnight


@dataclass
class ReplaySummary:
    """Outcome of replaying one session."""
    steps: int
    samples: int
    ticks: int
    step_indices: List[int] = field(default_factory=list)
    rejected: Dict[str, int] = field(default_factory=dict)
    config: Optional[DetectionConfig] = None


def load_session(session_dir: Path):
    """
    Load recorded batches and the recorded detection config.

    Returns:
        tuple: (batches, config_dict)
    """
    metadata_path = session_dir / config.METADATA_FILENAME
    recorded_config = {}
    if metadata_path.exists():
        with open(metadata_path, 'r') as f:
            recorded_config = json.load(f).get('detection_config', {})

    batches = []
    sensor_path = session_dir / config.SENSOR_DATA_FILENAME
    if sensor_path.exists():
        with open(sensor_path, 'r') as f:
            batches = [json.loads(line)['readings'] for line in f if line.strip()]

    return batches, recorded_config


def build_config(recorded: Dict, overrides: Dict) -> DetectionConfig:
    """Start from defaults, apply the recorded values, then the overrides."""
    detection_config = DetectionConfig()
    for values in (recorded, overrides):
        for setting in SettingField:
            if values.get(setting.value) is not None:
                detection_config = update_config(detection_config, setting, values[setting.value])
    return detection_config


def replay(batches, detection_config: DetectionConfig, pass_interval: int = 1) -> ReplaySummary:
    """
    Feed recorded batches through a fresh engine, one batch per tick.

    Args:
        batches: Recorded batches of raw [x, y, z] readings
        detection_config: Parameters to detect with
        pass_interval: Ticks between scheduled detection passes

    Returns:
        ReplaySummary with the resulting step count
    """
    engine = StepEngine(config=detection_config, pass_interval=pass_interval)
    driver = ReplaySensorDriver(batches)
    summary = ReplaySummary(steps=0, samples=0, ticks=0, config=detection_config)
    rejected = Counter()

    while not driver.is_exhausted():
        batch = driver.drain_batch()
        driver.clear()
        result = engine.tick(batch, REPLAY_TIME_OF_DAY)
        summary.ticks += 1
        summary.samples += result.samples_ingested
        for tick_pass in result.passes:
            summary.step_indices.extend(tick_pass.steps)
            rejected.update(verdict.value for _, verdict in tick_pass.rejected)

    # Flush samples left over by a sparse pass schedule
    final = engine.run_pass()
    if final is not None:
        summary.step_indices.extend(final.steps)
        rejected.update(verdict.value for _, verdict in final.rejected)

    summary.steps = engine.current_step_count()
    summary.rejected = dict(rejected)
    return summary


def main():
    """Main entry point for the replay script."""
    parser = argparse.ArgumentParser(description="Replay a recorded session through the step engine")
    parser.add_argument("--session", type=Path, required=True, help="Session directory with sensor_data.jsonl")
    parser.add_argument("--threshold", type=int, help="High-pass threshold")
    parser.add_argument("--window-bits", type=int, help="log2 of the filter window")
    parser.add_argument("--max-duration", type=int, help="Longest accepted pulse in samples")
    parser.add_argument("--min-interval", type=int, help="Shortest step spacing in samples")
    parser.add_argument("--pass-interval", type=int, default=1, help="Ticks between detection passes (default: 1)")
    parser.add_argument("--output", type=Path, help="Write the summary as JSON to this file")

    args = parser.parse_args()

    if not args.session.exists():
        print(f"Error: Session directory not found: {args.session}")
        return 1

    batches, recorded_config = load_session(args.session)
    if not batches:
        print("Error: No sensor data found in session.")
        return 1

    overrides = {
        'threshold': args.threshold,
        'window_bits': args.window_bits,
        'max_duration': args.max_duration,
        'min_interval': args.min_interval
    }
    detection_config = build_config(recorded_config, overrides)

    print(f"Replaying {len(batches)} batches with {detection_config.to_dict()}...")
    summary = replay(batches, detection_config, pass_interval=args.pass_interval)

    print(f"Samples: {summary.samples}")
    print(f"Steps: {summary.steps}")
    for verdict, count in sorted(summary.rejected.items()):
        print(f"Rejected ({verdict}): {count}")

    if args.output:
        args.output.write_text(json.dumps({
            'session': args.session.name,
            'config': detection_config.to_dict(),
            'samples': summary.samples,
            'steps': summary.steps,
            'step_indices': summary.step_indices,
            'rejected': summary.rejected
        }, indent=2))
        print(f"Summary saved to: {args.output}")

    return 0


if __name__ == "__main__":
    exit(main())
