"""Tests for the display pages, formatting and the keyboard-driven app."""

import pytest

from counter.settings_pager import SettingsPager, SETTINGS_PAGES
from counter.ui_manager import UIManager, format_step_count, format_setting_value
from detection.detection_config import DetectionConfig
from detection.settings import SettingField
from main import StepCounterApp
from tests.conftest import readings_for


class TestFormatting:

    def test_narrow_count(self):
        assert format_step_count(42) == "  42  "
        assert format_step_count(9999) == "9999  "

    def test_wide_count(self):
        assert format_step_count(10000) == " 10000"
        assert format_step_count(123456) == "123456"

    def test_window_shown_in_samples(self):
        assert format_setting_value(SettingField.WINDOW_BITS, 4) == "  16  "
        assert format_setting_value(SettingField.THRESHOLD, 4) == "   4  "


class TestSettingsPager:

    def test_counter_page_by_default(self):
        pager = SettingsPager()
        assert not pager.is_settings()
        assert pager.tick_hz() == 1

    def test_pages_cycle(self):
        pager = SettingsPager()
        pager.enter_settings()
        assert pager.tick_hz() == 4

        fields = []
        for _ in range(len(SETTINGS_PAGES) + 1):
            fields.append(pager.current_field())
            pager.next_settings_page()

        assert fields == [
            SettingField.THRESHOLD,
            SettingField.WINDOW_BITS,
            SettingField.MAX_DURATION,
            SettingField.MIN_INTERVAL,
            SettingField.THRESHOLD
        ]

    def test_entering_settings_starts_at_first_page(self):
        pager = SettingsPager()
        pager.enter_settings()
        pager.next_settings_page()
        pager.exit_settings()
        pager.enter_settings()
        assert pager.page_number() == 1
        assert pager.current_settings_page().title == "THRES"


class TestUIManager:

    def test_draws_counter_page(self):
        ui = UIManager()
        image = ui.create_canvas()
        ui.draw_display(image, SettingsPager(), 1234, DetectionConfig())
        assert image.any()

    def test_settings_value_blinks(self):
        ui = UIManager()
        pager = SettingsPager()
        pager.enter_settings()

        hidden = ui.create_canvas()
        ui.draw_display(hidden, pager, 0, DetectionConfig(), subsecond=0)
        shown = ui.create_canvas()
        ui.draw_display(shown, pager, 0, DetectionConfig(), subsecond=1)

        assert (shown != hidden).any()

    def test_step_effect(self):
        ui = UIManager()
        assert not ui.is_step_effect_active()
        ui.trigger_step_effect()
        assert ui.is_step_effect_active()


@pytest.fixture
def app(tmp_path):
    app = StepCounterApp()
    app.recording_manager.recordings_dir = tmp_path
    return app


class TestStepCounterApp:

    def test_quit_key(self, app):
        assert not app.handle_key(ord('q'))

    def test_setting_keys_ignored_on_counter_page(self, app):
        app.handle_key(ord('a'))
        assert app.accelerometer_strategy.current_config() == DetectionConfig()

    def test_edit_threshold(self, app):
        app.handle_key(ord('s'))
        app.handle_key(ord('a'))
        app.handle_key(ord('a'))
        app.handle_key(ord('z'))
        assert app.accelerometer_strategy.current_config().threshold == 11

    def test_edit_second_page(self, app):
        app.handle_key(ord('s'))
        app.handle_key(ord('n'))
        app.handle_key(ord('z'))
        assert app.accelerometer_strategy.current_config().window_bits == 3

    def test_exit_with_changes_restarts_detection(self, app):
        engine = app.accelerometer_strategy.engine
        engine.tick(readings_for([50] * 20), (12, 0, 0))
        assert engine.buffer.history_length() == 20

        app.handle_key(ord('s'))
        app.handle_key(ord('a'))
        app.handle_key(ord('m'))

        assert not app.pager.is_settings()
        assert engine.buffer.history_length() == 0

    def test_exit_without_changes_keeps_history(self, app):
        engine = app.accelerometer_strategy.engine
        engine.tick(readings_for([50] * 20), (12, 0, 0))

        app.handle_key(ord('s'))
        app.handle_key(ord('n'))
        app.handle_key(ord('m'))

        assert engine.buffer.history_length() == 20

    def test_evaluation_mode_records(self, app, tmp_path):
        app.handle_key(ord('e'))
        assert app.recording_manager.is_recording()

        app.handle_key(ord('e'))
        assert not app.recording_manager.is_recording()
        assert any(tmp_path.iterdir())

    def test_steps_trigger_effect(self, app):
        app.event_manager.trigger_event('steps_detected', [16], 1, 18)
        assert app.ui_manager.is_step_effect_active()
