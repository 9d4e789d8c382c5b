# Detection Configuration Constants
# These values control the sensitivity and timing of step detection

import os
from dataclasses import dataclass

# Sensor Settings
SENSOR_DATA_RATE_HZ = 25  # Accelerometer output data rate while counting steps
SENSOR_IDLE_RATE_HZ = 1  # Background rate restored when the counter is closed
SENSOR_FIFO_DEPTH = 32  # Maximum readings delivered per batch
SENSOR_QUEUE_LIMIT = 1024  # Readings held for the tick loop (~40 s at 25 Hz), oldest dropped beyond
RAW_UNITS_PER_G = 16384  # Raw sensor units per g (±2 g, 16-bit left-justified)
STANDARD_GRAVITY = 9.80665  # m/s² per g, for converting smartphone readings

# Ring Buffer Settings
BUFFER_CAPACITY = 256  # Magnitude samples kept (power of two, ~10 s at 25 Hz)

# Default Detection Parameters
DEFAULT_THRESHOLD = 10  # High-pass magnitude a sample must exceed to open a pulse
DEFAULT_WINDOW_BITS = 4  # log2 of the sliding mean window (16 samples)
DEFAULT_MAX_DURATION = 12  # Samples - longest pulse still counted as a step
DEFAULT_MIN_INTERVAL = 8  # Samples - shortest spacing between two accepted steps

# Tunable Parameter Bounds (minimum, maximum, step)
THRESHOLD_BOUNDS = (2, 40, 1)
WINDOW_BITS_BOUNDS = (1, 6, 1)
MAX_DURATION_BOUNDS = (1, 32, 1)
MIN_INTERVAL_BOUNDS = (0, 25, 1)

# Scheduling Settings
DETECTION_INTERVAL_TICKS = int(os.getenv('DETECTION_INTERVAL_TICKS', '1'))  # Ticks between passes (10 = every 10 s)


@dataclass(frozen=True)
class DetectionConfig:
    """Step detection parameters, read-only for the duration of a pass."""
    threshold: int = DEFAULT_THRESHOLD
    window_bits: int = DEFAULT_WINDOW_BITS
    max_duration: int = DEFAULT_MAX_DURATION
    min_interval: int = DEFAULT_MIN_INTERVAL

    @property
    def window_size(self) -> int:
        return 1 << self.window_bits

    def to_dict(self):
        return {
            'threshold': self.threshold,
            'window_bits': self.window_bits,
            'max_duration': self.max_duration,
            'min_interval': self.min_interval
        }
