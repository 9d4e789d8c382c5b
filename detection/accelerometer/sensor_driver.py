"""
Sensor drivers delivering batches of raw triaxial readings.

Every driver exposes ``drain_batch()`` (at most one FIFO's worth of readings,
oldest first) and ``clear()`` (acknowledge the batch that was just drained).
"""

import queue
import threading
from typing import Any, Iterable, List, Sequence

from detection.accelerometer.magnitude import TriaxialSample
from detection.detection_config import (
    SENSOR_FIFO_DEPTH,
    SENSOR_QUEUE_LIMIT,
    SENSOR_DATA_RATE_HZ,
    SENSOR_IDLE_RATE_HZ,
    RAW_UNITS_PER_G,
    STANDARD_GRAVITY
)

RAW_MIN = -32768
RAW_MAX = 32767


def to_raw_units(acceleration: float) -> int:
    """Convert m/s² to raw sensor units, saturating at the 16-bit range."""
    raw = int(round(acceleration / STANDARD_GRAVITY * RAW_UNITS_PER_G))
    return max(RAW_MIN, min(RAW_MAX, raw))


def to_triaxial_sample(reading: Any) -> TriaxialSample:
    """
    Convert a smartphone reading in m/s² into a raw TriaxialSample.

    Args:
        reading: Dict with x, y, z keys or an (x, y, z) sequence

    Returns:
        TriaxialSample in raw units

    Raises:
        ValueError: If the reading has no usable x, y, z values
    """
    try:
        if isinstance(reading, dict):
            x, y, z = reading.get('x', 0), reading.get('y', 0), reading.get('z', 0)
        else:
            x, y, z = reading
        return TriaxialSample(to_raw_units(float(x)), to_raw_units(float(y)), to_raw_units(float(z)))
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"Invalid accelerometer reading: {reading!r}") from e


class QueueSensorDriver:
    """
    Thread-safe bounded FIFO fed by the sensor server and drained by the tick loop.

    When the tick loop stalls and the queue is full, the oldest reading is
    dropped to make room, like a sensor FIFO in stream mode.
    """

    def __init__(self, fifo_depth: int = SENSOR_FIFO_DEPTH, max_queued: int = SENSOR_QUEUE_LIMIT):
        self.fifo_depth = fifo_depth
        self.readings: "queue.Queue[TriaxialSample]" = queue.Queue(maxsize=max_queued)
        self.data_rate_hz = SENSOR_IDLE_RATE_HZ
        self.last_batch_size = 0
        self.dropped = 0
        self._push_lock = threading.Lock()

    def push(self, reading: TriaxialSample) -> int:
        """
        Queue one raw reading, dropping the oldest one if the queue is full.

        Returns:
            Queue size for monitoring
        """
        with self._push_lock:
            while True:
                try:
                    self.readings.put_nowait(reading)
                    break
                except queue.Full:
                    try:
                        self.readings.get_nowait()
                        self.dropped += 1
                    except queue.Empty:
                        # Drained concurrently, the put can be retried
                        continue
        return self.readings.qsize()

    def push_many(self, readings: Iterable[TriaxialSample]) -> int:
        for reading in readings:
            self.push(reading)
        return self.readings.qsize()

    def drain_batch(self) -> List[TriaxialSample]:
        """Take up to one FIFO's worth of readings, oldest first."""
        batch = []
        while len(batch) < self.fifo_depth:
            try:
                batch.append(self.readings.get_nowait())
            except queue.Empty:
                break
        self.last_batch_size = len(batch)
        return batch

    def clear(self) -> None:
        """Acknowledge the drained batch."""
        self.last_batch_size = 0

    def flush(self) -> None:
        """Discard every queued reading."""
        while True:
            try:
                self.readings.get_nowait()
            except queue.Empty:
                break

    def pending(self) -> int:
        return self.readings.qsize()

    def set_data_rate(self, rate_hz: int) -> int:
        """
        Switch the output data rate.

        Returns:
            The previous rate, for restoring later
        """
        previous, self.data_rate_hz = self.data_rate_hz, rate_hz
        return previous

    def enable_counting(self) -> int:
        """Switch to the step counting rate and start from an empty FIFO."""
        previous = self.set_data_rate(SENSOR_DATA_RATE_HZ)
        self.flush()
        return previous


class ReplaySensorDriver:
    """Replays recorded batches, one recorded batch per drain."""

    def __init__(self, batches: Sequence[Sequence[Sequence[int]]]):
        self.batches = [[TriaxialSample(*reading) for reading in batch] for batch in batches]
        self.position = 0

    def drain_batch(self) -> List[TriaxialSample]:
        if self.position >= len(self.batches):
            return []
        return self.batches[self.position]

    def clear(self) -> None:
        if self.position < len(self.batches):
            self.position += 1

    def is_exhausted(self) -> bool:
        return self.position >= len(self.batches)
