"""Tests for tunable settings and the detection config."""

import pytest

from detection.detection_config import DetectionConfig
from detection.settings import (
    SettingField,
    SETTING_BOUNDS,
    as_field,
    get_setting,
    update_config,
    advance_setting,
    retreat_setting
)


class TestDetectionConfig:

    def test_defaults(self):
        config = DetectionConfig()
        assert config.to_dict() == {
            'threshold': 10,
            'window_bits': 4,
            'max_duration': 12,
            'min_interval': 8
        }
        assert config.window_size == 16

    def test_is_immutable(self):
        config = DetectionConfig()
        with pytest.raises(AttributeError):
            config.threshold = 3


class TestSettings:

    def test_field_lookup_by_name(self):
        assert as_field('min_interval') is SettingField.MIN_INTERVAL
        with pytest.raises(ValueError):
            as_field('sensitivity')

    def test_update_returns_new_config(self):
        original = DetectionConfig()
        updated = update_config(original, SettingField.MAX_DURATION, 20)
        assert updated.max_duration == 20
        assert original.max_duration == 12

    @pytest.mark.parametrize("field", list(SettingField))
    def test_advance_wraps_to_minimum(self, field):
        bounds = SETTING_BOUNDS[field]
        config = update_config(DetectionConfig(), field, bounds.maximum)
        assert get_setting(advance_setting(config, field), field) == bounds.minimum

    @pytest.mark.parametrize("field", list(SettingField))
    def test_retreat_wraps_to_maximum(self, field):
        bounds = SETTING_BOUNDS[field]
        config = update_config(DetectionConfig(), field, bounds.minimum)
        assert get_setting(retreat_setting(config, field), field) == bounds.maximum

    def test_min_interval_zero_allowed(self):
        config = update_config(DetectionConfig(), 'min_interval', 0)
        assert config.min_interval == 0

    def test_in_range_value_unchanged(self):
        assert update_config(DetectionConfig(), 'threshold', 25).threshold == 25
