"""Default paths and limits shared by the CLI and the web app."""

from pathlib import Path

# Default data paths (optional CSV network, falls back to the reference network)
DATA_DIR = Path(__file__).parent.parent / "data"
POINTS_FILE = DATA_DIR / "points.csv"
CONNECTIONS_FILE = DATA_DIR / "connections.csv"

# Size guard for interactive queries. Each greedy step runs one search per
# remaining destination, so cost grows with destinations * points^2.
MAX_POINTS = 5000
MAX_DESTINATIONS = 50

# Used to estimate travel time when connections are built from coordinates
DEFAULT_SPEED_KMH = 12.0
DEFAULT_PROXIMITY_KM = 1.0

# Nearest-point lookups
DEFAULT_NEAREST_K = 1
