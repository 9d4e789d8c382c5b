"""Configuration for the recording system."""

from pathlib import Path

# Recording directories
RECORDINGS_DIR = Path("recordings")

# File names
METADATA_FILENAME = "metadata.json"
DETECTIONS_FILENAME = "detections.jsonl"
SENSOR_DATA_FILENAME = "sensor_data.jsonl"
GROUND_TRUTH_FILENAME = "ground_truth.jsonl"

# Recording settings
BUFFER_SIZE = 100  # Number of lines to buffer before writing to JSONL files
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Comparison settings
DEFAULT_MATCH_WINDOW = 0.4  # Seconds - a tap and a detected step this close are the same step
