"""
Display page state: the step counter page and the settings pages.
"""

from enum import Enum
from typing import NamedTuple

from counter.counter_config import COUNTER_TICK_HZ, SETTINGS_TICK_HZ
from detection.settings import SettingField


class Page(Enum):
    """Main display pages"""
    COUNTER = "counter"
    SETTINGS = "settings"


class SettingsPage(NamedTuple):
    field: SettingField
    title: str  # Long title
    short_title: str  # Fallback for narrow displays


SETTINGS_PAGES = (
    SettingsPage(SettingField.THRESHOLD, "THRES", "TH"),
    SettingsPage(SettingField.WINDOW_BITS, "WINDW", "WI"),
    SettingsPage(SettingField.MAX_DURATION, "MAXDU", "MD"),
    SettingsPage(SettingField.MIN_INTERVAL, "MININ", "MI"),
)


class SettingsPager:
    """
    Tracks which page is shown and which setting is being edited.
    The settings page is an index into SETTINGS_PAGES.
    """

    def __init__(self):
        self.page = Page.COUNTER
        self.settings_page = 0

    def enter_settings(self):
        """Show the first settings page."""
        self.page = Page.SETTINGS
        self.settings_page = 0

    def next_settings_page(self):
        """Cycle to the next settings page."""
        if self.page is Page.SETTINGS:
            self.settings_page = (self.settings_page + 1) % len(SETTINGS_PAGES)

    def exit_settings(self):
        self.page = Page.COUNTER

    def is_settings(self):
        return self.page is Page.SETTINGS

    def current_settings_page(self):
        return SETTINGS_PAGES[self.settings_page]

    def current_field(self):
        return self.current_settings_page().field

    def page_number(self):
        """1-based number shown next to the settings title."""
        return self.settings_page + 1

    def tick_hz(self):
        """Tick rate for the page being shown."""
        return SETTINGS_TICK_HZ if self.page is Page.SETTINGS else COUNTER_TICK_HZ
