"""Internal constants shared across the library."""

# Spherical Earth model used by the haversine distance.
EARTH_RADIUS_M = 6_371_000.0
FEET_PER_METER = 3.28084

DEFAULT_THRESHOLD_FEET = 45.0
DEFAULT_FRAME_WIDTH = 5
DEFAULT_UPDATE_INTERVAL = 3.0
DEFAULT_FILE_PATTERN = r"soldier_(\d+)\.csv"
DEFAULT_PORT = 2022

LATITUDE_COLUMN = "latitude"
LONGITUDE_COLUMN = "longitude"
UNKNOWN_GROUP = "unknown"

NO_MORE_DATA_REASON = "No more data available"
FAILURE_PREFIX = "Failed to update map"

PROCESS_KIND = "recurring"
PROCESS_NAME = "Live Squad Tracker"

# ------------------------------------------------------------------
# Map presentation defaults
# ------------------------------------------------------------------

MAP_STYLE = "mapbox://styles/mapbox/streets-v12"
MAP_ZOOM = 18
STRAGGLER_MARKER = "⚠️"
SOLDIER_MARKER = "🪖"


def process_description(interval: float) -> str:
    """Human readable description registered with each tracking process."""
    seconds = f"{interval:g}"
    unit = "second" if seconds == "1" else "seconds"
    return f"Updating squad positions every {seconds} {unit}"
