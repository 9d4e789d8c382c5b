# Counter Configuration Constants
# These values control the display, the tick loop and the sensor server

import os

# Tick Settings
COUNTER_TICK_HZ = 1  # Ticks per second while the step count is shown
SETTINGS_TICK_HZ = 4  # Ticks per second on the settings pages (drives blinking)

# Display Format
STEP_COUNT_WIDE_LIMIT = 10000  # Counts from here on use the 6-column format

# Window Settings
WINDOW_TITLE = 'Step Counter'
WINDOW_WIDTH = 480
WINDOW_HEIGHT = 240

# UI Display Settings
UI_BACKGROUND_COLOR = (0, 0, 0)  # Black background
UI_BORDER_COLOR = (255, 255, 255)  # White border around the display
UI_PANEL_POSITION = (20, 20)  # Top-left position of the display panel
UI_PANEL_SIZE = (440, 140)  # Width and height of the display panel

# Text Colors
STEPS_COLOR = (0, 255, 0)  # Green for the step count
NORMAL_TEXT_COLOR = (255, 255, 255)  # White for normal text
TITLE_COLOR = (0, 255, 255)  # Yellow for page titles
SETTING_VALUE_COLOR = (255, 255, 0)  # Cyan for the setting being edited
INSTRUCTION_COLOR = (200, 200, 200)  # Grey for key hints
SENSOR_CONNECTED_COLOR = (0, 255, 0)  # Green for connected sensor
SENSOR_DISCONNECTED_COLOR = (0, 0, 255)  # Red for disconnected sensor

# Strategy status lines are drawn below the panel
STRATEGY_UI_START_X = 20
STRATEGY_UI_START_Y = 190

# Flask Server Settings
SERVER_HOST = os.getenv('SERVER_HOST', '0.0.0.0')
SERVER_PORT = int(os.getenv('SERVER_PORT', '5000'))
FLASK_SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'step-counter-secret')

# Ngrok Settings
ENABLE_NGROK = os.getenv('ENABLE_NGROK', 'true').lower() in ('1', 'true', 'yes')
NGROK_AUTH_TOKEN = os.getenv('NGROK_AUTH_TOKEN')
