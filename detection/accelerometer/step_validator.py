"""Accepts or rejects candidate pulses as steps."""

from enum import Enum
from typing import Optional

from detection.accelerometer.threshold_detector import Pulse


class StepVerdict(Enum):
    """Outcome of validating a pulse"""
    ACCEPTED = "accepted"
    TOO_LONG = "too_long"
    TOO_SOON = "too_soon"


class StepValidator:
    """
    Checks pulse duration and spacing from the previously accepted step.

    Too long means arm motion or noise rather than a footfall; too soon means
    the same footfall dipped below threshold and crossed it again.
    """

    def __init__(self):
        self.last_step: Optional[int] = None

    def validate(self, pulse: Pulse, max_duration: int, min_interval: int) -> StepVerdict:
        """
        Validate a candidate pulse and remember it if accepted.

        Args:
            pulse: Candidate pulse
            max_duration: Longest accepted pulse, in samples
            min_interval: Shortest accepted spacing from the last step, in samples

        Returns:
            StepVerdict for the pulse
        """
        if pulse.duration > max_duration:
            return StepVerdict.TOO_LONG

        if self.last_step is not None and pulse.start - self.last_step < min_interval:
            return StepVerdict.TOO_SOON

        self.last_step = pulse.start
        return StepVerdict.ACCEPTED

    def reset(self) -> None:
        self.last_step = None
