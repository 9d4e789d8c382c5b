import cv2
import time
from dotenv import load_dotenv

# Load environment variables at the start
load_dotenv()

# Import configuration modules
from counter.counter_config import *
from detection.detection_config import SENSOR_DATA_RATE_HZ
from detection.accelerometer.accelerometer_strategy import AccelerometerStrategy
from counter.settings_pager import SettingsPager
from counter.ui_manager import UIManager
from counter.event_manager import EventManager
from evaluation.recording_manager import RecordingManager


class StepCounterApp:
    def __init__(self):
        # Event system
        self.event_manager = EventManager()

        # Display state
        self.pager = SettingsPager()
        self.ui_manager = UIManager()
        self.subsecond = 0
        self.last_tick_time = 0.0
        self.config_before_settings = None

        # Recording manager for evaluation
        self.recording_manager = RecordingManager(self.event_manager)
        self.evaluation_mode = False

        # Step counting from the phone accelerometer
        self.accelerometer_strategy = AccelerometerStrategy(
            event_manager=self.event_manager,
            recording_manager=self.recording_manager
        )

        self.event_manager.register_hook('steps_detected', self._on_steps_detected)

        print("Step counter initialized")
        print("Open the smartphone web interface to connect accelerometer")

    def _on_steps_detected(self, step_indices, total_steps, last_sequence):
        self.ui_manager.trigger_step_effect()
        print(f"STEP! +{len(step_indices)}, Total: {total_steps}")

    def toggle_evaluation_mode(self):
        """Toggle evaluation mode, recording for as long as it is enabled."""
        self.evaluation_mode = not self.evaluation_mode
        status = "ENABLED" if self.evaluation_mode else "DISABLED"
        print(f"🔬 Evaluation Mode {status}")

        if self.evaluation_mode:
            detection_config = self.accelerometer_strategy.current_config().to_dict()
            self.recording_manager.start_recording(detection_config, SENSOR_DATA_RATE_HZ)
            print("📹 Recording started (evaluation mode)")
        elif self.recording_manager.is_recording():
            session_dir = self.recording_manager.stop_recording()
            if session_dir:
                print(f"💾 Recording saved: {session_dir}")

    def enter_settings(self):
        if not self.pager.is_settings():
            self.config_before_settings = self.accelerometer_strategy.current_config()
        self.pager.enter_settings()
        self.subsecond = 0

    def exit_settings(self):
        """Leave the settings pages; changed settings restart detection."""
        if not self.pager.is_settings():
            return

        self.pager.exit_settings()
        self.subsecond = 0
        if self.accelerometer_strategy.current_config() != self.config_before_settings:
            self.accelerometer_strategy.restart_detection()
            print(f"Settings changed, detection restarted: "
                  f"{self.accelerometer_strategy.current_config().to_dict()}")
        self.config_before_settings = None

    def handle_key(self, key):
        """
        Handle one key press.

        Returns:
            False when the app should quit
        """
        if key == ord('q'):
            return False
        elif key == ord('s'):
            self.enter_settings()
        elif key == ord('e'):
            self.toggle_evaluation_mode()
        elif self.pager.is_settings():
            field = self.pager.current_field()
            if key == ord('n'):
                self.pager.next_settings_page()
            elif key == ord('a'):
                config = self.accelerometer_strategy.engine.advance_setting(field)
                print(f"Setting {field.value}: {getattr(config, field.value)}")
            elif key == ord('z'):
                config = self.accelerometer_strategy.engine.retreat_setting(field)
                print(f"Setting {field.value}: {getattr(config, field.value)}")
            elif key == ord('m'):
                self.exit_settings()
        return True

    def run(self):
        """Main loop: one detection tick per second, display refreshed at the page's tick rate."""
        print("Starting Step Counter...")

        # Trigger setup event for all components
        self.event_manager.trigger_event('setup')
        self.last_tick_time = time.time()

        try:
            while True:
                now = time.time()
                if now - self.last_tick_time >= 1.0:
                    self.last_tick_time = now
                    self.event_manager.trigger_event('tick')

                image = self.ui_manager.create_canvas()
                self.ui_manager.draw_display(
                    image,
                    self.pager,
                    self.accelerometer_strategy.current_step_count(),
                    self.accelerometer_strategy.current_config(),
                    subsecond=self.subsecond,
                    evaluation_mode=self.evaluation_mode,
                    is_recording=self.recording_manager.is_recording(),
                    recording_time=self.recording_manager.get_recording_time()
                )

                # Trigger strategy UI drawing with position context for chaining
                draw_context = {'next_y': STRATEGY_UI_START_Y, 'x': STRATEGY_UI_START_X}
                self.event_manager.trigger_event_chain('draw_ui', draw_context, image)

                cv2.imshow(WINDOW_TITLE, image)

                tick_hz = self.pager.tick_hz()
                self.subsecond = (self.subsecond + 1) % tick_hz

                key = cv2.waitKey(1000 // tick_hz) & 0xFF
                if key != 0xFF and not self.handle_key(key):
                    break

        except KeyboardInterrupt:
            print("\nStep counter interrupted by user")

        finally:
            # Cleanup recording if active
            self.recording_manager.cleanup()

            # Trigger cleanup event for all components
            self.event_manager.trigger_event('cleanup')
            cv2.destroyAllWindows()
            print(f"\nSteps today: {self.accelerometer_strategy.current_step_count()}")


if __name__ == "__main__":
    app = StepCounterApp()
    app.run()
