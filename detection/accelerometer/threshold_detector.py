"""Hysteresis threshold-crossing detector for the high-pass signal."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CrossingState(Enum):
    """Detector states"""
    BELOW = "below"
    ABOVE = "above"


@dataclass(frozen=True)
class Pulse:
    """A run of samples above threshold, spanning [start, end)."""
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


class ThresholdCrossingDetector:
    """
    Two-state detector marking where the signal rises above and falls below
    a threshold. Values equal to the threshold cause no transition.
    """

    def __init__(self):
        self.state = CrossingState.BELOW
        self.pulse_start: Optional[int] = None

    def update(self, index: int, high_pass_value: int, threshold: int) -> Optional[Pulse]:
        """
        Feed one high-pass value.

        Args:
            index: Sample sequence number of the value
            high_pass_value: Filtered sample
            threshold: Detection threshold

        Returns:
            The finished pulse when the signal falls below threshold, otherwise None
        """
        if self.state is CrossingState.BELOW:
            if high_pass_value > threshold:
                self.state = CrossingState.ABOVE
                self.pulse_start = index
            return None

        if high_pass_value < threshold:
            pulse = Pulse(self.pulse_start, index)
            self.reset()
            return pulse

        return None

    def is_in_pulse(self) -> bool:
        return self.state is CrossingState.ABOVE

    def reset(self) -> None:
        self.state = CrossingState.BELOW
        self.pulse_start = None
