"""Tests for the shift-only magnitude estimator."""

import math
import random

import pytest

from detection.accelerometer.magnitude import (
    TriaxialSample,
    approx_l2_norm,
    quantize_magnitude,
    magnitude_sample
)


class TestApproxNorm:

    def test_single_axis_is_exact(self):
        assert approx_l2_norm(1000, 0, 0) == 1000
        assert approx_l2_norm(0, -1000, 0) == 1000
        assert approx_l2_norm(0, 0, 1000) == 1000

    def test_axis_order_and_sign_do_not_matter(self):
        expected = approx_l2_norm(300, 200, 100)
        assert approx_l2_norm(100, 300, 200) == expected
        assert approx_l2_norm(-200, 100, -300) == expected

    def test_weights(self):
        # 1600 + 15/16 * 1600 + 3/8 * 1600
        assert approx_l2_norm(1600, 1600, 1600) == 1600 + 1500 + 600

    def test_zero(self):
        assert approx_l2_norm(0, 0, 0) == 0


class TestQuantize:

    def test_scales_to_eight_bits(self):
        assert quantize_magnitude(16384) == 64
        assert quantize_magnitude(255) == 0

    def test_clamps_before_scaling(self):
        assert quantize_magnitude(0xFFFF) == 255
        assert quantize_magnitude(200000) == 255


class TestMagnitudeSample:

    def test_one_g_at_rest(self):
        assert magnitude_sample(TriaxialSample(0, 0, 16384)) == 64

    def test_accepts_plain_tuples(self):
        assert magnitude_sample((0, -16384, 0)) == 64

    def test_saturated_axes_stay_in_range(self):
        assert magnitude_sample(TriaxialSample(-32768, -32768, -32768)) == 255

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_bounded_by_true_norm(self, seed):
        rng = random.Random(seed)
        for _ in range(500):
            x, y, z = (rng.randint(-32768, 32767) for _ in range(3))
            estimate = magnitude_sample(TriaxialSample(x, y, z))
            scaled_norm = math.sqrt(x * x + y * y + z * z) / 256

            assert 0 <= estimate <= 255
            assert estimate >= scaled_norm - 2
            assert estimate <= 1.43 * scaled_norm + 1
