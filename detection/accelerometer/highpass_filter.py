"""Sliding-window mean and high-pass filter over magnitude samples."""

from typing import Sequence


class FilterWindow:
    """
    Running sum over the most recent 2**window_bits samples.

    The window is rebuilt at the start of every detection pass from the samples
    just before the new data, so no filter state has to outlive a pass.
    """

    def __init__(self, window_bits: int, history: Sequence[int], seed: int):
        """
        Build the window from buffer history.

        Args:
            window_bits: log2 of the window length
            history: Samples preceding the new data, oldest first (at most the window length)
            seed: First new sample, used to fill the window when there is no history
        """
        self.window_bits = window_bits
        self.size = 1 << window_bits

        # Short history (start-up, after a reset) is padded with its oldest value
        fill = history[0] if len(history) else seed
        self.slots = [fill] * (self.size - len(history)) + list(history[-self.size:])
        self.running_sum = sum(self.slots)
        self._oldest = 0

    @property
    def mean(self) -> int:
        return self.running_sum >> self.window_bits

    def push(self, sample: int) -> int:
        """
        Slide the window over one new sample.

        Args:
            sample: New magnitude sample

        Returns:
            High-pass value: sample minus the local trailing mean (signed)
        """
        self.running_sum -= self.slots[self._oldest]
        self.running_sum += sample
        self.slots[self._oldest] = sample
        self._oldest = (self._oldest + 1) & (self.size - 1)

        return sample - self.mean
