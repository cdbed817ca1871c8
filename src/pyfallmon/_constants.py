"""Internal constants shared across the library."""

BASE_URL = "http://seaon.iptime.org:8090"
USER_AGENT = "pyfallmon"

DEVICE_STATS_ENDPOINT = "/get_device_stats"
SENSOR_FEED_ENDPOINT = "/show_data"
FALL_DETECTION_ENDPOINT = "/fall-detection"

DEFAULT_POLL_INTERVAL: float = 1.0
DEFAULT_REQUEST_TIMEOUT: float = 1.0
DEFAULT_TEST_DEVICE_ID = "test7"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
UNKNOWN_DEVICE_ID = "unknown"
FALL_DETECTED_SUFFIX = "Fall detected"

# Loop names used in logs and failure counters.
LOOP_CLOCK = "clock"
LOOP_DEVICE_STATS = "device_stats"
LOOP_SENSOR_FEED = "sensor_feed"
