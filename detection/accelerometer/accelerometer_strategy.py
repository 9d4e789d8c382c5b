"""
Accelerometer step counting strategy.
Wires the sensor driver, the time service and the step engine into the tick loop
through event hooks.
"""

import cv2
import time
from typing import Optional, Dict, Any, List
from detection.base_strategy import BaseDetectionStrategy
from detection.step_engine import StepEngine, TickResult
from detection.detection_config import DetectionConfig
from detection.accelerometer.magnitude import TriaxialSample
from detection.accelerometer.sensor_driver import QueueSensorDriver
from detection.accelerometer.sensor_server import SensorServer
from counter.clock import LocalClock
from counter.event_manager import EventManager
from counter.counter_config import (
    SENSOR_CONNECTED_COLOR,
    SENSOR_DISCONNECTED_COLOR,
    NORMAL_TEXT_COLOR,
    FLASK_SECRET_KEY,
    SERVER_HOST,
    SERVER_PORT,
    ENABLE_NGROK,
    NGROK_AUTH_TOKEN
)


class AccelerometerStrategy(BaseDetectionStrategy):
    """
    Step counting from accelerometer batches.

    On every 'tick' event the pending sensor batches are drained into the step
    engine, which runs detection and handles the midnight reset. New steps are
    announced with a 'steps_detected' event and broadcast to connected phones.
    """

    def __init__(self, event_manager: EventManager, engine: Optional[StepEngine] = None,
                 driver=None, clock=None, recording_manager=None, start_server: bool = True):
        """
        Initialize accelerometer strategy.

        Args:
            event_manager: Event manager for registering hooks
            engine: Step engine (a default one is created when omitted)
            driver: Sensor driver with drain_batch()/clear() (defaults to a queue fed by the sensor server)
            clock: Time service with now() -> (hour, minute, second)
            recording_manager: Optional RecordingManager instance for ground truth logging
            start_server: Start the smartphone sensor server during setup
        """
        self.engine = engine or StepEngine()
        self.driver = driver or QueueSensorDriver()
        self.clock = clock or LocalClock()
        self.recording_manager = recording_manager
        self.start_server = start_server
        self.sensor_server: Optional[SensorServer] = None
        self.previous_data_rate: Optional[int] = None

        super().__init__(event_manager)

    def register_hooks(self) -> None:
        """Register event hooks for accelerometer strategy."""
        self.event_manager.register_hook('setup', self.setup_sensor, priority=10)
        self.event_manager.register_hook('tick', self.process_tick, priority=10)
        self.event_manager.register_hook('draw_ui', self.draw_strategy_ui, priority=10)
        self.event_manager.register_hook('cleanup', self.cleanup_sensor, priority=10)

    def setup_sensor(self) -> None:
        """Switch the sensor to the counting rate and start the sensor server."""
        if hasattr(self.driver, 'enable_counting'):
            self.previous_data_rate = self.driver.enable_counting()

        if self.start_server:
            try:
                print("AccelerometerStrategy: Starting sensor server...")

                class ServerConfig:
                    FLASK_SECRET_KEY = FLASK_SECRET_KEY
                    SERVER_HOST = SERVER_HOST
                    SERVER_PORT = SERVER_PORT
                    ENABLE_NGROK = ENABLE_NGROK
                    NGROK_AUTH_TOKEN = NGROK_AUTH_TOKEN

                self.sensor_server = SensorServer(
                    sensor_data_callback=self._handle_sensor_data,
                    counter_state_provider=self.get_counter_state,
                    config=ServerConfig(),
                    recording_manager=self.recording_manager
                )
                self.sensor_server.start()
            except Exception as e:
                print(f"AccelerometerStrategy: Error starting sensor server: {e}")
                self.sensor_server = None

        self.activate()
        print("AccelerometerStrategy: Initialized successfully")

    def cleanup_sensor(self) -> None:
        """Stop the server and restore the sensor's previous data rate."""
        if self.sensor_server:
            self.sensor_server.stop()

        if self.previous_data_rate is not None and hasattr(self.driver, 'set_data_rate'):
            self.driver.set_data_rate(self.previous_data_rate)
            self.previous_data_rate = None

        self.deactivate()
        print("AccelerometerStrategy: Cleanup completed")

    def drain_sensor(self) -> List[TriaxialSample]:
        """Drain every pending FIFO batch from the driver, acknowledging each one."""
        readings = []
        while True:
            batch = self.driver.drain_batch()
            if not batch:
                break
            readings.extend(batch)
            self.driver.clear()
        return readings

    def process_tick(self) -> Optional[TickResult]:
        """
        Run one tick of the detection controller.

        Returns:
            TickResult, or None while the strategy is inactive
        """
        if not self.is_strategy_active():
            return None

        timestamp = time.time()
        readings = self.drain_sensor()
        if readings:
            self.event_manager.trigger_event('sensor_batch_received', readings, timestamp)

        result = self.engine.tick(readings, self.clock.now(), timestamp)
        self.update_results(result, timestamp)

        if result.new_steps:
            self._announce_steps(result)

        if result.day_reset:
            self.event_manager.trigger_event('day_reset', self.engine.counter.previous_day_steps)
            self._broadcast_counter_state()

        return result

    def _announce_steps(self, result: TickResult) -> None:
        """Trigger 'steps_detected' and broadcast the new total."""
        last_pass = result.passes[-1]
        last_sequence = last_pass.first_index + last_pass.sample_count
        step_indices = [index for tick_pass in result.passes for index in tick_pass.steps]
        self.event_manager.trigger_event(
            'steps_detected',
            step_indices,
            self.engine.current_step_count(),
            last_sequence
        )
        self._broadcast_counter_state(result.new_steps)

    def _broadcast_counter_state(self, new_steps: int = 0) -> None:
        if self.sensor_server:
            state = self.get_counter_state()
            state['new_steps'] = new_steps
            try:
                self.sensor_server.emit_step_update(state)
            except Exception as e:
                print(f"AccelerometerStrategy: Error broadcasting step count: {e}")

    def _handle_sensor_data(self, readings: List[TriaxialSample], timestamp) -> int:
        """
        Sensor server callback queueing received readings.

        Returns:
            Queue size for monitoring
        """
        return self.driver.push_many(readings)

    def get_counter_state(self) -> Dict[str, Any]:
        return self.engine.counter.get_state_dict()

    def current_step_count(self) -> int:
        return self.engine.current_step_count()

    def current_config(self) -> DetectionConfig:
        return self.engine.current_config()

    def update_config(self, field_name, new_value) -> DetectionConfig:
        config = self.engine.update_config(field_name, new_value)
        print(f"AccelerometerStrategy: {field_name} set to {new_value}, config now {config.to_dict()}")
        return config

    def restart_detection(self) -> None:
        """Restart detection from an empty buffer, e.g. after the settings changed."""
        self.engine.restart_detection()

    def has_connected_clients(self) -> bool:
        return self.sensor_server is not None and self.sensor_server.has_connected_clients()

    def draw_strategy_ui(self, draw_context: Dict[str, Any], image) -> Dict[str, Any]:
        """
        Draw sensor status lines below the step display.

        Args:
            draw_context: Dictionary containing drawing position
            image: OpenCV image to draw on

        Returns:
            Updated context dictionary with next available position
        """
        if not self.is_strategy_active():
            return draw_context

        x = draw_context.get('x', 20)
        current_y = draw_context.get('next_y', 190)

        is_connected = self.has_connected_clients()
        status_color = SENSOR_CONNECTED_COLOR if is_connected else SENSOR_DISCONNECTED_COLOR
        status_text = "Sensor: Connected" if is_connected else "Sensor: Disconnected"
        cv2.putText(image, status_text, (x, current_y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, status_color, 1)
        current_y += 20

        buffer = self.engine.buffer
        cv2.putText(image, f"Buffer: {buffer.available()}/{buffer.capacity}", (x, current_y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, NORMAL_TEXT_COLOR, 1)
        current_y += 20

        return {'next_y': current_y, 'x': x}

    def get_strategy_info(self) -> Dict[str, Any]:
        base_info = super().get_strategy_info()
        base_info.update({
            'server_running': self.sensor_server is not None and self.sensor_server.is_running(),
            'has_connected_clients': self.has_connected_clients(),
            'steps': self.engine.current_step_count(),
            'buffered_samples': self.engine.buffer.available(),
            'detector': self.engine.detector.get_detector_status()
        })
        return base_info
