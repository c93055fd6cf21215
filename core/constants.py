"""
Configuration constants for the extractor.

Entry names, wire column names and default thresholds for the six
extraction jobs. Connection defaults live here too so that ``core.config``
and the CLI agree on them.
"""

from typing import Dict, List

# ---------------------------------------------------------------------------
# Store connection defaults
# ---------------------------------------------------------------------------

DEFAULT_URL = "http://localhost:8383"
DEFAULT_BUCKET = "sensor-data"
TOKEN_ENV_VAR = "REDUCT_API_TOKEN"

# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

CSV_ENTRY = "csv__vectornav_IMU"
JSON_ENTRY = "json__vectornav_IMU"
MCAP_ENTRY = "mcap"
IMU_TOPIC = "/vectornav/IMU_restamped"
IMAGE_ENTRY = "raw__rsense_color_image_raw_compressed"
POINT_CLOUD_ENTRY = "raw__os_node_segmented_point_cloud_no_destagger"

# ---------------------------------------------------------------------------
# Acceleration wire format
# ---------------------------------------------------------------------------

TIMESTAMP_COLUMN = "ts_ns"

# Sample field -> wire column, in CSV column order after the timestamp
ACCEL_COLUMNS: Dict[str, str] = {
    "accel_x": "linear_acceleration_x",
    "accel_y": "linear_acceleration_y",
    "accel_z": "linear_acceleration_z",
}

ACCEL_FIELDS: List[str] = list(ACCEL_COLUMNS)

# Sample field -> store label alias used in server-side conditions
LABEL_ALIASES: Dict[str, str] = {
    "accel_x": "acc_x",
    "accel_y": "acc_y",
    "accel_z": "acc_z",
}

CSV_FIELD_COUNT = 1 + len(ACCEL_COLUMNS)

NANOS_PER_SECOND = 1_000_000_000

# ---------------------------------------------------------------------------
# Job defaults
# ---------------------------------------------------------------------------

CSV_FILTER = "|accel_x| > 10"
JSON_FILTER = "accel_z < -5"

MAX_FRAMES = 5
MAX_SCANS = 4
SAMPLING_INTERVAL = "5s"
IMAGE_DIR = "img"

SCAN_SAMPLE_STEP = 100
SCAN_SAMPLE_POINTS = 5

PROGRESS_EVERY = 100
HEAD_ROWS = 5
