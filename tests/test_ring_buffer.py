"""Tests for the sample ring buffer."""

import pytest

from detection.accelerometer.ring_buffer import SampleRingBuffer


class TestSampleRingBuffer:

    def test_capacity_must_be_power_of_two(self):
        with pytest.raises(ValueError):
            SampleRingBuffer(12)
        with pytest.raises(ValueError):
            SampleRingBuffer(0)

    def test_starts_empty(self):
        buffer = SampleRingBuffer(8)
        assert buffer.is_empty()
        assert buffer.available() == 0
        assert buffer.pending() == []

    def test_distance_wraps(self):
        buffer = SampleRingBuffer(8)
        assert buffer.distance(2, 5) == 3
        assert buffer.distance(6, 1) == 3
        assert buffer.distance(4, 4) == 0

    def test_overwrite_keeps_newest_samples(self):
        buffer = SampleRingBuffer(8)
        for value in range(10):
            buffer.append(value)

        assert buffer.available() == 8
        assert buffer.overwritten == 2
        assert buffer.pending() == [2, 3, 4, 5, 6, 7, 8, 9]
        # Full buffer: start and end coincide but nothing was lost track of
        assert buffer.start == buffer.end
        assert buffer.sequence == 2

    def test_consume_moves_samples_to_history(self):
        buffer = SampleRingBuffer(8)
        for value in (10, 20, 30):
            buffer.append(value)

        assert buffer.consume() == 3
        assert buffer.available() == 0
        assert buffer.history_length() == 3
        assert buffer.sequence == 3
        assert buffer.window_before(2) == [20, 30]
        assert buffer.window_before(16) == [10, 20, 30]

    def test_history_is_overwritten_before_pending_samples(self):
        buffer = SampleRingBuffer(8)
        for value in range(6):
            buffer.append(value)
        buffer.consume()

        for value in range(6, 10):
            buffer.append(value)

        assert buffer.available() == 4
        assert buffer.history_length() == 4
        assert buffer.overwritten == 0
        assert buffer.window_before(8) == [2, 3, 4, 5]
        assert buffer.pending() == [6, 7, 8, 9]

    def test_window_before_wraps_around(self):
        buffer = SampleRingBuffer(4)
        for value in (1, 2, 3):
            buffer.append(value)
        buffer.consume()
        buffer.append(4)
        buffer.append(5)
        buffer.consume()

        assert buffer.start == 1
        assert buffer.window_before(3) == [3, 4, 5]

    def test_clear_restarts_numbering(self):
        buffer = SampleRingBuffer(8)
        for value in range(5):
            buffer.append(value)
        buffer.consume()
        buffer.clear()

        assert buffer.is_empty()
        assert buffer.history_length() == 0
        assert buffer.sequence == 0
        assert buffer.window_before(4) == []

    def test_rejects_values_outside_a_byte(self):
        buffer = SampleRingBuffer(8)
        with pytest.raises(ValueError):
            buffer.append(256)
