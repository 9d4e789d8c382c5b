"""Manages recording of step counting sessions for evaluation."""

import json
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, List

from evaluation import recording_config as config
from detection.detection_config import SENSOR_DATA_RATE_HZ


class RecordingManager:
    """Records raw sensor batches, detected steps and ground truth taps."""

    def __init__(self, event_manager, recordings_dir: Optional[Path] = None):
        """Initialize the recording manager.

        Args:
            event_manager: Event manager for subscribing to detection events
            recordings_dir: Where session directories are created
        """
        self.event_manager = event_manager
        self.recordings_dir = Path(recordings_dir) if recordings_dir else config.RECORDINGS_DIR
        self.is_recording_flag = False
        self.session_dir: Optional[Path] = None
        self.start_time: Optional[float] = None

        # Buffers for JSONL files
        self.detection_buffer: List[Dict] = []
        self.sensor_buffer: List[Dict] = []
        self.ground_truth_buffer: List[Dict] = []

        self.session_metadata: Dict[str, Any] = {}
        self.step_count = 0
        self.sample_count = 0

        self._setup_event_listeners()

    def _setup_event_listeners(self):
        """Subscribe to detection events."""
        self.event_manager.register_hook('steps_detected', self._on_steps_detected)
        self.event_manager.register_hook('sensor_batch_received', self._on_sensor_batch)
        self.event_manager.register_hook('day_reset', self._on_day_reset)

    def start_recording(self, detection_config: Optional[Dict] = None,
                        sample_rate_hz: int = SENSOR_DATA_RATE_HZ) -> bool:
        """Start a new recording session.

        Args:
            detection_config: Current detection configuration snapshot
            sample_rate_hz: Sensor output data rate

        Returns:
            True if recording started, False if already recording
        """
        if self.is_recording_flag:
            print("Already recording!")
            return False

        timestamp = datetime.now().strftime(config.TIMESTAMP_FORMAT)
        session_id = f"session_{timestamp}"
        self.session_dir = self.recordings_dir / session_id
        self.session_dir.mkdir(parents=True, exist_ok=True)

        self.start_time = time.time()
        self.step_count = 0
        self.sample_count = 0
        self.session_metadata = {
            "session_id": session_id,
            "start_time": datetime.now().isoformat(),
            "sample_rate_hz": sample_rate_hz,
            "detection_config": detection_config or {}
        }

        self.detection_buffer.clear()
        self.sensor_buffer.clear()
        self.ground_truth_buffer.clear()

        self.is_recording_flag = True
        print(f"Recording started: {session_id}")
        return True

    def stop_recording(self) -> Optional[Path]:
        """Stop the current recording session.

        Returns:
            Path to the session directory, or None if not recording
        """
        if not self.is_recording_flag:
            return None

        self._flush(self.detection_buffer, config.DETECTIONS_FILENAME)
        self._flush(self.sensor_buffer, config.SENSOR_DATA_FILENAME)
        self._flush(self.ground_truth_buffer, config.GROUND_TRUTH_FILENAME)

        if self.start_time:
            duration = time.time() - self.start_time
            self.session_metadata["duration_seconds"] = round(duration, 2)
        self.session_metadata["total_samples"] = self.sample_count
        self.session_metadata["total_steps"] = self.step_count

        metadata_path = self.session_dir / config.METADATA_FILENAME
        with open(metadata_path, 'w') as f:
            json.dump(self.session_metadata, f, indent=2)

        session_dir = self.session_dir
        print(f"Recording stopped: {session_dir.name}")
        print(f"Duration: {self.session_metadata.get('duration_seconds', 0):.1f}s")
        print(f"Samples: {self.sample_count}, steps: {self.step_count}")

        self.is_recording_flag = False
        self.session_dir = None
        self.start_time = None

        return session_dir

    def _elapsed(self) -> float:
        return time.time() - self.start_time if self.start_time else 0.0

    def _on_sensor_batch(self, readings, event_timestamp=None):
        """Handle a batch of raw readings drained from the sensor."""
        if not self.is_recording_flag:
            return

        self.sensor_buffer.append({
            "timestamp": round(self._elapsed(), 3),
            "readings": [list(reading) for reading in readings]
        })
        self.sample_count += len(readings)

        if len(self.sensor_buffer) >= config.BUFFER_SIZE:
            self._flush(self.sensor_buffer, config.SENSOR_DATA_FILENAME)

    def _on_steps_detected(self, step_indices, total_steps, last_sequence):
        """Handle newly accepted steps.

        Args:
            step_indices: Sample sequence numbers where the accepted pulses started
            total_steps: Step count after the pass
            last_sequence: Sequence number one past the last processed sample
        """
        if not self.is_recording_flag:
            return

        elapsed = self._elapsed()
        rate = self.session_metadata.get("sample_rate_hz", SENSOR_DATA_RATE_HZ)
        for index in step_indices:
            # Back-date each step from the end of the pass by its sample offset
            step_time = max(0.0, elapsed - (last_sequence - index) / rate)
            self.detection_buffer.append({
                "timestamp": round(step_time, 3),
                "type": "step",
                "sample_index": index,
                "total_steps": total_steps
            })
            self.step_count += 1

        if len(self.detection_buffer) >= config.BUFFER_SIZE:
            self._flush(self.detection_buffer, config.DETECTIONS_FILENAME)

    def _on_day_reset(self, previous_day_steps):
        if not self.is_recording_flag:
            return

        self.detection_buffer.append({
            "timestamp": round(self._elapsed(), 3),
            "type": "day_reset",
            "previous_day_steps": previous_day_steps
        })

    def record_ground_truth(self, server_timestamp: Optional[float] = None) -> bool:
        """Record one step tapped by an observer.

        Args:
            server_timestamp: Server time of the tap (now when omitted)

        Returns:
            True if recorded, False when no session is active
        """
        if not self.is_recording_flag:
            return False

        tap_time = server_timestamp if server_timestamp is not None else time.time()
        self.ground_truth_buffer.append({
            "timestamp": round(tap_time - self.start_time, 3),
            "source": "peer"
        })
        return True

    def _flush(self, buffer: List[Dict], filename: str):
        """Append buffered records to a JSONL file in the session directory."""
        if not buffer or not self.session_dir:
            return

        with open(self.session_dir / filename, 'a') as f:
            for record in buffer:
                f.write(json.dumps(record) + '\n')

        buffer.clear()

    def is_recording(self) -> bool:
        return self.is_recording_flag

    def get_recording_time(self) -> float:
        """Get current recording duration in seconds (0 if not recording)."""
        if not self.is_recording_flag or not self.start_time:
            return 0.0
        return time.time() - self.start_time

    def cleanup(self):
        """Stop any active recording."""
        if self.is_recording_flag:
            self.stop_recording()
