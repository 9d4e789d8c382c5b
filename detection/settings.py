"""
Tunable detection fields and their bounded, wrapping updates.

All functions are pure: they take a DetectionConfig and return a new one, so the
settings UI never mutates the config a detection pass is reading.
"""

from dataclasses import replace
from enum import Enum
from typing import NamedTuple, Union

from detection.detection_config import (
    DetectionConfig,
    THRESHOLD_BOUNDS,
    WINDOW_BITS_BOUNDS,
    MAX_DURATION_BOUNDS,
    MIN_INTERVAL_BOUNDS
)


class SettingField(Enum):
    """Tunable detection parameters, in settings page order"""
    THRESHOLD = "threshold"
    WINDOW_BITS = "window_bits"
    MAX_DURATION = "max_duration"
    MIN_INTERVAL = "min_interval"


class SettingBounds(NamedTuple):
    minimum: int
    maximum: int
    step: int

    def wrap(self, value: int) -> int:
        """Wrap a value that left the range around to the opposite end."""
        if value > self.maximum:
            return self.minimum
        if value < self.minimum:
            return self.maximum
        return value


SETTING_BOUNDS = {
    SettingField.THRESHOLD: SettingBounds(*THRESHOLD_BOUNDS),
    SettingField.WINDOW_BITS: SettingBounds(*WINDOW_BITS_BOUNDS),
    SettingField.MAX_DURATION: SettingBounds(*MAX_DURATION_BOUNDS),
    SettingField.MIN_INTERVAL: SettingBounds(*MIN_INTERVAL_BOUNDS),
}


def as_field(field: Union[SettingField, str]) -> SettingField:
    """Accept either a SettingField or its name ('threshold', ...)."""
    if isinstance(field, SettingField):
        return field
    return SettingField(field)


def get_setting(config: DetectionConfig, field: Union[SettingField, str]) -> int:
    return getattr(config, as_field(field).value)


def update_config(config: DetectionConfig, field: Union[SettingField, str], new_value: int) -> DetectionConfig:
    """
    Set one field, wrapping out-of-range values.

    Args:
        config: Current configuration
        field: Field to change
        new_value: Requested value

    Returns:
        New configuration with the field set
    """
    field = as_field(field)
    value = SETTING_BOUNDS[field].wrap(int(new_value))
    return replace(config, **{field.value: value})


def advance_setting(config: DetectionConfig, field: Union[SettingField, str]) -> DetectionConfig:
    """Increase a field by one step, wrapping from maximum to minimum."""
    field = as_field(field)
    return update_config(config, field, get_setting(config, field) + SETTING_BOUNDS[field].step)


def retreat_setting(config: DetectionConfig, field: Union[SettingField, str]) -> DetectionConfig:
    """Decrease a field by one step, wrapping from minimum to maximum."""
    field = as_field(field)
    return update_config(config, field, get_setting(config, field) - SETTING_BOUNDS[field].step)
