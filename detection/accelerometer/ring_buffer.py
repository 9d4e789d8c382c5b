"""Fixed-capacity circular store of magnitude samples."""

from typing import List

from detection.detection_config import BUFFER_CAPACITY


class SampleRingBuffer:
    """
    Circular buffer of 8-bit magnitude samples.

    Samples between ``start`` and ``end`` are unconsumed. Consumed samples stay
    in place in front of ``start`` until overwritten; they are the history the
    high-pass filter reads to rebuild its window at the start of every pass.
    """

    def __init__(self, capacity: int = BUFFER_CAPACITY):
        """
        Initialize an empty buffer.

        Args:
            capacity: Number of slots, must be a power of two
        """
        if capacity <= 0 or capacity & (capacity - 1):
            raise ValueError(f"Ring buffer capacity must be a power of two, got {capacity}")

        self.capacity = capacity
        self.samples = bytearray(capacity)
        self.start = 0
        self.end = 0

        # start == end is both "empty" and "full", the count tells them apart
        self._count = 0
        self._history = 0

        # Sequence number of the sample at `start` since the last clear()
        self.sequence = 0
        self.overwritten = 0

    def distance(self, i: int, j: int) -> int:
        """
        Number of steps from position i forward to position j.

        Also used as "j minus i, circularly" to locate positions behind j.
        """
        return (j - i + self.capacity) % self.capacity

    def append(self, sample: int) -> None:
        """
        Store a sample at ``end`` and advance it.

        When the buffer is full the oldest unconsumed sample is overwritten.
        """
        if self._count == self.capacity:
            self.start = (self.start + 1) % self.capacity
            self.sequence += 1
            self._count -= 1
            self.overwritten += 1
        elif self._count + self._history == self.capacity:
            self._history -= 1

        self.samples[self.end] = sample
        self.end = (self.end + 1) % self.capacity
        self._count += 1

    def available(self) -> int:
        """Number of unconsumed samples."""
        return self._count

    def history_length(self) -> int:
        """Number of consumed samples still held in front of ``start``."""
        return self._history

    def is_empty(self) -> bool:
        return self._count == 0

    def pending(self) -> List[int]:
        """Unconsumed samples, oldest first."""
        return [self.samples[(self.start + k) % self.capacity] for k in range(self._count)]

    def window_before(self, width: int) -> List[int]:
        """
        Up to ``width`` consumed samples immediately preceding ``start``.

        Args:
            width: Number of samples wanted

        Returns:
            Samples oldest first; shorter than width when history is short
        """
        count = min(width, self._history)
        first = self.distance(count, self.start)
        return [self.samples[(first + k) % self.capacity] for k in range(count)]

    def consume(self) -> int:
        """
        Mark every unconsumed sample as processed (``start := end``).

        Returns:
            Number of samples consumed
        """
        consumed = self._count
        self.start = self.end
        self.sequence += consumed
        self._history = min(self._history + consumed, self.capacity)
        self._count = 0
        return consumed

    def clear(self) -> None:
        """Drop all samples and history and restart sequence numbering."""
        self.samples[:] = bytes(self.capacity)
        self.start = 0
        self.end = 0
        self._count = 0
        self._history = 0
        self.sequence = 0
        self.overwritten = 0
