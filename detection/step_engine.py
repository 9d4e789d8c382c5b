"""
Step detection engine: the tick-by-tick controller.

Drains sensor batches into the ring buffer, runs detection passes, updates the
step counter and resets everything at the day boundary. It does no I/O of its
own; the accelerometer strategy feeds it batches and the current time.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from counter.clock import MidnightWatch, TimeOfDay
from counter.step_counter import StepCounter
from detection.detection_config import BUFFER_CAPACITY, DETECTION_INTERVAL_TICKS, DetectionConfig
from detection.settings import SettingField, update_config, advance_setting, retreat_setting
from detection.step_detector import StepDetector, PassResult, DetectionPassError
from detection.accelerometer.magnitude import TriaxialSample, magnitude_sample
from detection.accelerometer.ring_buffer import SampleRingBuffer


@dataclass
class TickResult:
    """What happened during one tick."""
    samples_ingested: int = 0
    passes: List[PassResult] = field(default_factory=list)
    new_steps: int = 0
    day_reset: bool = False
    abandoned: bool = False


class StepEngine:
    """
    Detection controller owning the ring buffer, the detection cursor and the
    step counter.
    """

    def __init__(self, config: Optional[DetectionConfig] = None, capacity: int = BUFFER_CAPACITY,
                 pass_interval: int = DETECTION_INTERVAL_TICKS):
        """
        Initialize the engine.

        Args:
            config: Detection parameters (defaults when omitted)
            capacity: Ring buffer capacity, a power of two
            pass_interval: Run a scheduled detection pass every this many ticks
        """
        self.config = config or DetectionConfig()
        self.buffer = SampleRingBuffer(capacity)
        self.detector = StepDetector()
        self.counter = StepCounter()
        self.midnight = MidnightWatch()
        self.pass_interval = max(1, pass_interval)
        self.ticks = 0
        self.forced_passes = 0

    def needs_pass(self) -> bool:
        """
        Check whether one more sample would overwrite data a pass still needs.

        The filter reads window_size samples of history in front of the new data,
        so those count against the capacity as well.
        """
        return self.buffer.available() + self.config.window_size >= self.buffer.capacity

    def ingest(self, batch: Iterable[TriaxialSample], timestamp=None) -> List[PassResult]:
        """
        Convert readings to magnitude samples and append them to the buffer.

        Passes are forced whenever the buffer is about to overrun.

        Args:
            batch: Raw readings, oldest first
            timestamp: Optional time credited to steps found by forced passes

        Returns:
            Results of forced passes (usually empty)
        """
        forced = []
        for reading in batch:
            if self.buffer.available() and self.needs_pass():
                # An abandoned pass leaves the buffer to overwrite its oldest samples
                result = self.run_pass(timestamp)
                if result is not None:
                    forced.append(result)
                    self.forced_passes += 1
                    print(f"StepEngine: Buffer nearly full, forced detection pass over {result.sample_count} samples")
            self.buffer.append(magnitude_sample(reading))
        return forced

    def run_pass(self, timestamp=None) -> Optional[PassResult]:
        """
        Run one detection pass over every unconsumed sample.

        Args:
            timestamp: Optional time credited to the accepted steps

        Returns:
            PassResult, or None if the pass was abandoned (retried next tick)
        """
        config = self.config
        try:
            result = self.detector.run_pass(self.buffer, config)
        except DetectionPassError as e:
            print(f"StepEngine: Detection pass abandoned: {e}")
            return None

        self.counter.add_steps(result.step_count, timestamp)
        self.buffer.consume()
        return result

    def tick(self, batch: Iterable[TriaxialSample], now: TimeOfDay, timestamp=None) -> TickResult:
        """
        Process one scheduler tick.

        Samples drained this tick belong to the ending day, so on the first tick
        of a new day they get a final pass before the reset.

        Args:
            batch: Readings drained from the sensor since the previous tick
            now: Local (hour, minute, second)
            timestamp: Optional wall-clock time for bookkeeping

        Returns:
            TickResult describing the tick
        """
        self.ticks += 1
        batch = list(batch)
        tick_result = TickResult(samples_ingested=len(batch))
        tick_result.passes.extend(self.ingest(batch, timestamp))

        day_over = self.midnight.crossed(now)
        if day_over or self.ticks % self.pass_interval == 0:
            result = self.run_pass(timestamp)
            if result is None:
                tick_result.abandoned = True
            else:
                tick_result.passes.append(result)

        tick_result.new_steps = sum(result.step_count for result in tick_result.passes)

        if day_over:
            self.reset_day()
            tick_result.day_reset = True

        return tick_result

    def reset_day(self) -> None:
        """Zero the counter and drop all buffered history and cursor state."""
        print(f"StepEngine: New day, resetting counter ({self.counter.get_steps()} steps yesterday)")
        self.counter.reset()
        self.restart_detection()

    def restart_detection(self) -> None:
        """Clear buffered samples and cursor without touching the count."""
        self.buffer.clear()
        self.detector.reset()

    def current_step_count(self) -> int:
        return self.counter.get_steps()

    def current_config(self) -> DetectionConfig:
        return self.config

    def update_config(self, field_name: Union[SettingField, str], new_value: int) -> DetectionConfig:
        """Set a tunable field (wrapping out-of-range values) between passes."""
        self.config = update_config(self.config, field_name, new_value)
        return self.config

    def advance_setting(self, field_name: Union[SettingField, str]) -> DetectionConfig:
        self.config = advance_setting(self.config, field_name)
        return self.config

    def retreat_setting(self, field_name: Union[SettingField, str]) -> DetectionConfig:
        self.config = retreat_setting(self.config, field_name)
        return self.config
