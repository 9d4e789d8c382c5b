"""Tests for the accelerometer strategy wiring the engine into the tick loop."""

import numpy as np
import pytest

from detection.step_engine import StepEngine
from detection.accelerometer.accelerometer_strategy import AccelerometerStrategy
from tests.conftest import readings_for


@pytest.fixture
def strategy(event_manager, fake_driver, fake_clock, scenario_config):
    strategy = AccelerometerStrategy(
        event_manager=event_manager,
        engine=StepEngine(config=scenario_config),
        driver=fake_driver,
        clock=fake_clock,
        start_server=False
    )
    event_manager.trigger_event('setup')
    return strategy


class TestAccelerometerStrategy:

    def test_setup_switches_sensor_rate(self, strategy, fake_driver):
        assert strategy.is_strategy_active()
        assert fake_driver.data_rate_hz == 25
        assert strategy.previous_data_rate == 1

    def test_cleanup_restores_rate(self, strategy, event_manager, fake_driver):
        event_manager.trigger_event('cleanup')
        assert fake_driver.data_rate_hz == 1
        assert not strategy.is_strategy_active()

    def test_tick_drains_every_batch(self, strategy, event_manager, fake_driver):
        batches = []
        event_manager.register_hook('sensor_batch_received', lambda readings, ts: batches.append(len(readings)))
        fake_driver.push_many(readings_for([50] * 70))

        event_manager.trigger_event('tick')

        assert batches == [70]
        assert strategy.get_current_results().samples_ingested == 70
        assert strategy.get_strategy_info()['ticks_processed'] == 1
        assert fake_driver.cleared == 3
        assert fake_driver.pending == []

    def test_steps_detected_event(self, strategy, event_manager, fake_driver):
        detected = []
        event_manager.register_hook('steps_detected', lambda *args: detected.append(args))
        fake_driver.push_many(readings_for([50] * 16 + [90, 50]))

        event_manager.trigger_event('tick')

        assert detected == [([16], 1, 18)]
        assert strategy.current_step_count() == 1

    def test_no_event_without_steps(self, strategy, event_manager, fake_driver):
        detected = []
        event_manager.register_hook('steps_detected', lambda *args: detected.append(args))
        fake_driver.push_many(readings_for([50] * 30))

        event_manager.trigger_event('tick')

        assert detected == []

    def test_day_reset_event(self, strategy, event_manager, fake_driver, fake_clock):
        resets = []
        event_manager.register_hook('day_reset', resets.append)
        fake_driver.push_many(readings_for([50] * 16 + [90, 50]))
        fake_clock.time_of_day = (23, 59, 59)
        event_manager.trigger_event('tick')

        fake_clock.time_of_day = (0, 0, 0)
        event_manager.trigger_event('tick')

        assert resets == [1]
        assert strategy.get_counter_state()['steps'] == 0

    def test_sensor_callback_queues_readings(self, strategy, fake_driver):
        assert strategy._handle_sensor_data(readings_for([50, 60]), 0) == 2
        assert len(fake_driver.pending) == 2

    def test_inactive_strategy_ignores_ticks(self, strategy):
        strategy.deactivate()
        assert strategy.process_tick() is None

    def test_update_config_and_restart(self, strategy, fake_driver, event_manager):
        fake_driver.push_many(readings_for([50] * 16 + [90, 50]))
        event_manager.trigger_event('tick')

        config = strategy.update_config('min_interval', 30)
        strategy.restart_detection()

        assert config.min_interval == 0
        assert strategy.current_config() is config
        assert strategy.engine.buffer.is_empty()
        assert strategy.current_step_count() == 1

    def test_draw_ui_advances_context(self, strategy, event_manager):
        image = np.zeros((240, 480, 3), dtype=np.uint8)
        context = event_manager.trigger_event_chain('draw_ui', {'next_y': 190, 'x': 20}, image)
        assert context['next_y'] == 230
        assert image.any()

    def test_strategy_info(self, strategy):
        info = strategy.get_strategy_info()
        assert info['name'] == 'AccelerometerStrategy'
        assert info['server_running'] is False
        assert info['steps'] == 0
