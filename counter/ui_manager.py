"""
UI Manager module for rendering the step counter display.
Draws the counter page and the settings pages on an OpenCV image.
"""

import cv2
import time
import numpy as np
from counter.counter_config import *
from detection.settings import SettingField, get_setting


def format_step_count(steps):
    """Right-align counts below 10000 in four columns plus two blanks, larger ones in six."""
    if steps < STEP_COUNT_WIDE_LIMIT:
        return f"{steps:4d}  "
    return f"{steps:6d}"


def format_setting_value(field, value):
    """Setting value as shown on its page; window size is shown in samples."""
    if field is SettingField.WINDOW_BITS:
        return f"{1 << value:4d}  "
    return f"{value:4d}  "


class UIManager:
    """
    Renders the current page of the step counter.
    """

    def __init__(self):
        """Initialize the UI manager."""
        self.step_effect_timer = 0
        self.step_effect_duration = 0.3

    def create_canvas(self):
        """Blank frame to draw the display on."""
        return np.zeros((WINDOW_HEIGHT, WINDOW_WIDTH, 3), dtype=np.uint8)

    def draw_display(self, image, pager, steps, config, subsecond=0,
                     evaluation_mode=False, is_recording=False, recording_time=0.0):
        """
        Draw the page selected by the pager.

        Args:
            image: OpenCV image to draw on
            pager: SettingsPager with the current page
            steps: Current step count
            config: Current DetectionConfig
            subsecond: Tick index within the second (settings values blink on even ticks)
            evaluation_mode: Whether evaluation mode is enabled
            is_recording: Whether a session is being recorded
            recording_time: Duration of the current recording in seconds
        """
        self._draw_panel(image)

        if pager.is_settings():
            self._draw_settings_page(image, pager, config, subsecond)
        else:
            self._draw_counter_page(image, steps)
            self._draw_step_effect(image)

        self._draw_instructions(image, pager)

        if evaluation_mode:
            self._draw_recording_status(image, is_recording, recording_time)

    def _draw_panel(self, image):
        x, y = UI_PANEL_POSITION
        w, h = UI_PANEL_SIZE
        cv2.rectangle(image, (x, y), (x + w, y + h), UI_BACKGROUND_COLOR, -1)
        cv2.rectangle(image, (x, y), (x + w, y + h), UI_BORDER_COLOR, 2)

    def _draw_counter_page(self, image, steps):
        x, y = UI_PANEL_POSITION
        cv2.putText(image, "STEPS", (x + 15, y + 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, TITLE_COLOR, 2)
        cv2.putText(image, format_step_count(steps), (x + 15, y + 110),
                    cv2.FONT_HERSHEY_SIMPLEX, 2.2, STEPS_COLOR, 4)

    def _draw_settings_page(self, image, pager, config, subsecond):
        x, y = UI_PANEL_POSITION
        page = pager.current_settings_page()

        cv2.putText(image, page.title, (x + 15, y + 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, TITLE_COLOR, 2)
        cv2.putText(image, page.short_title, (x + UI_PANEL_SIZE[0] - 100, y + 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, INSTRUCTION_COLOR, 1)
        cv2.putText(image, f"{pager.page_number():2d}", (x + UI_PANEL_SIZE[0] - 50, y + 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, NORMAL_TEXT_COLOR, 2)

        # Blink: value hidden on even subsecond ticks
        if subsecond % 2 == 0:
            return

        value = format_setting_value(page.field, get_setting(config, page.field))
        cv2.putText(image, value, (x + 15, y + 110),
                    cv2.FONT_HERSHEY_SIMPLEX, 2.2, SETTING_VALUE_COLOR, 4)

    def _draw_instructions(self, image, pager):
        if pager.is_settings():
            hint = "N: next  A/Z: up/down  M: done"
        else:
            hint = "S: settings  E: record  Q: quit"
        cv2.putText(image, hint, (UI_PANEL_POSITION[0], WINDOW_HEIGHT - 10),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45, INSTRUCTION_COLOR, 1)

    def _draw_recording_status(self, image, is_recording, recording_time):
        x = WINDOW_WIDTH - 150
        if is_recording:
            cv2.circle(image, (x, 180), 6, (0, 0, 255), -1)
            cv2.putText(image, f"REC {recording_time:5.1f}s", (x + 12, 185),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.45, (0, 0, 255), 1)
        else:
            cv2.putText(image, "EVAL MODE", (x, 185),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.45, (0, 165, 255), 1)

    def _draw_step_effect(self, image):
        """Flash the panel border after new steps."""
        if self.is_step_effect_active():
            x, y = UI_PANEL_POSITION
            w, h = UI_PANEL_SIZE
            cv2.rectangle(image, (x, y), (x + w, y + h), STEPS_COLOR, 4)

    def trigger_step_effect(self):
        self.step_effect_timer = time.time()

    def is_step_effect_active(self):
        return time.time() - self.step_effect_timer < self.step_effect_duration
