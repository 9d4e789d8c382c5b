"""Tests for the high-pass filter window, the crossing detector and the validator."""

from detection.accelerometer.highpass_filter import FilterWindow
from detection.accelerometer.threshold_detector import ThresholdCrossingDetector, CrossingState, Pulse
from detection.accelerometer.step_validator import StepValidator, StepVerdict


class TestFilterWindow:

    def test_flat_input_gives_zero(self):
        window = FilterWindow(4, [77] * 16, 77)
        assert [window.push(77) for _ in range(50)] == [0] * 50

    def test_running_sum_matches_slots(self):
        window = FilterWindow(3, [10, 20, 30], 10)
        for sample in (5, 200, 17, 90, 0, 33, 64, 128, 1):
            window.push(sample)
            assert window.running_sum == sum(window.slots)

    def test_cold_start_pads_with_first_sample(self):
        window = FilterWindow(2, [], 40)
        assert window.slots == [40, 40, 40, 40]
        assert window.mean == 40

    def test_short_history_pads_with_oldest(self):
        window = FilterWindow(2, [8, 12], 99)
        assert window.slots == [8, 8, 8, 12]

    def test_high_pass_is_sample_minus_trailing_mean(self):
        window = FilterWindow(4, [50] * 16, 50)
        # Mean includes the new sample: (15 * 50 + 90) >> 4 == 52
        assert window.push(90) == 38
        assert window.push(50) == -2


class TestThresholdCrossingDetector:

    def test_equal_to_threshold_is_dead_zone(self):
        detector = ThresholdCrossingDetector()
        assert detector.update(0, 10, 10) is None
        assert detector.state is CrossingState.BELOW

        assert detector.update(1, 11, 10) is None
        assert detector.state is CrossingState.ABOVE
        assert detector.pulse_start == 1

        assert detector.update(2, 10, 10) is None
        assert detector.is_in_pulse()

        assert detector.update(3, 9, 10) == Pulse(1, 3)
        assert detector.state is CrossingState.BELOW
        assert detector.pulse_start is None

    def test_negative_values_stay_below(self):
        detector = ThresholdCrossingDetector()
        assert detector.update(0, -50, 10) is None
        assert not detector.is_in_pulse()

    def test_reset_drops_open_pulse(self):
        detector = ThresholdCrossingDetector()
        detector.update(5, 30, 10)
        detector.reset()
        assert not detector.is_in_pulse()
        assert detector.update(6, 0, 10) is None


class TestStepValidator:

    def test_first_pulse_is_accepted(self):
        validator = StepValidator()
        assert validator.validate(Pulse(16, 17), 12, 8) is StepVerdict.ACCEPTED
        assert validator.last_step == 16

    def test_too_long(self):
        validator = StepValidator()
        assert validator.validate(Pulse(0, 5), 4, 0) is StepVerdict.TOO_LONG
        assert validator.last_step is None

    def test_duration_equal_to_maximum_is_accepted(self):
        validator = StepValidator()
        assert validator.validate(Pulse(0, 4), 4, 0) is StepVerdict.ACCEPTED

    def test_too_soon_keeps_first_step(self):
        validator = StepValidator()
        validator.validate(Pulse(16, 17), 12, 8)
        assert validator.validate(Pulse(19, 20), 12, 8) is StepVerdict.TOO_SOON
        assert validator.last_step == 16

    def test_spacing_equal_to_minimum_is_accepted(self):
        validator = StepValidator()
        validator.validate(Pulse(16, 17), 12, 8)
        assert validator.validate(Pulse(24, 25), 12, 8) is StepVerdict.ACCEPTED
        assert validator.last_step == 24

    def test_zero_interval_never_debounces(self):
        validator = StepValidator()
        validator.validate(Pulse(3, 4), 12, 0)
        assert validator.validate(Pulse(3, 4), 12, 0) is StepVerdict.ACCEPTED
