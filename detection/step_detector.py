"""
Detection pass over the ring buffer.

Runs the high-pass filter, threshold-crossing detector and step validator over
all samples that arrived since the previous pass.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any

from detection.detection_config import DetectionConfig
from detection.accelerometer.ring_buffer import SampleRingBuffer
from detection.accelerometer.highpass_filter import FilterWindow
from detection.accelerometer.threshold_detector import ThresholdCrossingDetector, Pulse
from detection.accelerometer.step_validator import StepValidator, StepVerdict


class DetectionPassError(RuntimeError):
    """A detection pass had to be abandoned before touching any state."""


@dataclass
class PassResult:
    """Outcome of one detection pass."""
    first_index: int
    sample_count: int
    steps: List[int] = field(default_factory=list)
    rejected: List[Tuple[Pulse, StepVerdict]] = field(default_factory=list)
    open_pulse: bool = False

    @property
    def step_count(self) -> int:
        return len(self.steps)


class DetectionCursor:
    """
    Detector and validator state, carried from one pass to the next.

    Pulse and step positions are sample sequence numbers, so a pulse still open
    at the end of a pass is closed correctly by the next one.
    """

    def __init__(self):
        self.detector = ThresholdCrossingDetector()
        self.validator = StepValidator()

    @property
    def pulse_start(self):
        return self.detector.pulse_start

    @property
    def last_step(self):
        return self.validator.last_step

    def reset(self) -> None:
        self.detector.reset()
        self.validator.reset()


class StepDetector:
    """Runs detection passes and keeps the cursor between them."""

    def __init__(self):
        self.cursor = DetectionCursor()
        self.passes_run = 0
        self.passes_abandoned = 0

    def run_pass(self, buffer: SampleRingBuffer, config: DetectionConfig) -> PassResult:
        """
        Detect steps in the unconsumed part of the buffer.

        The buffer is not consumed here; the caller does that once the result
        has been applied.

        Args:
            buffer: Ring buffer holding the new samples and their history
            config: Configuration snapshot for this pass

        Returns:
            PassResult with accepted step positions and rejected pulses

        Raises:
            DetectionPassError: If the filter window could not be built
        """
        result = PassResult(first_index=buffer.sequence, sample_count=buffer.available())
        if result.sample_count == 0:
            result.open_pulse = self.cursor.detector.is_in_pulse()
            return result

        samples = buffer.pending()
        try:
            window = FilterWindow(config.window_bits, buffer.window_before(config.window_size), samples[0])
        except MemoryError as e:
            self.passes_abandoned += 1
            raise DetectionPassError(f"could not build {config.window_size}-sample filter window") from e

        detector = self.cursor.detector
        validator = self.cursor.validator

        for offset, sample in enumerate(samples):
            high_pass_value = window.push(sample)
            pulse = detector.update(result.first_index + offset, high_pass_value, config.threshold)
            if pulse is None:
                continue

            verdict = validator.validate(pulse, config.max_duration, config.min_interval)
            if verdict is StepVerdict.ACCEPTED:
                result.steps.append(pulse.start)
            else:
                result.rejected.append((pulse, verdict))

        result.open_pulse = detector.is_in_pulse()
        self.passes_run += 1
        return result

    def reset(self) -> None:
        """Forget any open pulse and the last accepted step."""
        self.cursor.reset()

    def get_detector_status(self) -> Dict[str, Any]:
        return {
            'passes_run': self.passes_run,
            'passes_abandoned': self.passes_abandoned,
            'in_pulse': self.cursor.detector.is_in_pulse(),
            'pulse_start': self.cursor.pulse_start,
            'last_step': self.cursor.last_step
        }
