"""Common test fixtures for step counter tests."""

import pytest

from counter.event_manager import EventManager
from detection.detection_config import DetectionConfig
from detection.accelerometer.magnitude import TriaxialSample


def sample_for(magnitude):
    """Raw reading whose quantized magnitude is exactly `magnitude` (0-255)."""
    return TriaxialSample(magnitude << 8, 0, 0)


def readings_for(magnitudes):
    return [sample_for(m) for m in magnitudes]


def spike_stream(baseline=50, peak=90, warmup=20, spacing=12, spikes=5, tail=11):
    """Flat baseline with single-sample peaks `spacing` samples apart."""
    stream = [baseline] * warmup
    for _ in range(spikes):
        stream += [peak] + [baseline] * (spacing - 1)
    return stream + [baseline] * (tail - spacing + 1)


class FakeDriver:
    """Sensor driver handing out queued batches of at most fifo_depth readings."""

    def __init__(self, fifo_depth=32):
        self.fifo_depth = fifo_depth
        self.pending = []
        self.cleared = 0
        self.data_rate_hz = 1

    def push_many(self, readings):
        self.pending.extend(readings)
        return len(self.pending)

    def drain_batch(self):
        return list(self.pending[:self.fifo_depth])

    def clear(self):
        self.pending = self.pending[self.fifo_depth:]
        self.cleared += 1

    def set_data_rate(self, rate_hz):
        previous, self.data_rate_hz = self.data_rate_hz, rate_hz
        return previous

    def enable_counting(self):
        return self.set_data_rate(25)


class FakeClock:
    """Time service returning a settable time of day."""

    def __init__(self, now=(12, 0, 0)):
        self.time_of_day = now

    def now(self):
        return self.time_of_day


@pytest.fixture
def event_manager():
    return EventManager()


@pytest.fixture
def scenario_config():
    """Window of 16, threshold 10, no debounce."""
    return DetectionConfig(threshold=10, window_bits=4, max_duration=12, min_interval=0)


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def fake_clock():
    return FakeClock()
