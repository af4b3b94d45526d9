"""Configuration for the UQ Lakes bus tracker."""

import os
from dataclasses import dataclass, field
from typing import List

# Bus routes departing UQ Lakes station, in menu order
STATION_ROUTES = ["66", "192", "169", "209", "29", "P332", "139", "28"]

# Stop IDs of the UQ Lakes station platforms
STATION_STOP_IDS = ["1853", "1878", "1882", "1947"]

# GTFS-Realtime JSON feeds (SEQ proxy)
VEHICLE_POSITIONS_URL = "http://127.0.0.1:5343/gtfs/seq/vehicle_positions.json"
TRIP_UPDATES_URL = "http://127.0.0.1:5343/gtfs/seq/trip_updates.json"

STATIC_DIR = "static-data"
CACHE_DIR = "cached-data"

# Cached live data older than this is refetched
CACHE_MAX_AGE_SECONDS = 5 * 60

# Scheduled departures are searched from the requested time to this many minutes later
DEPARTURE_WINDOW_MINUTES = 10


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime settings; defaults come from the module constants."""
    static_dir: str = STATIC_DIR
    cache_dir: str = CACHE_DIR
    trip_updates_url: str = TRIP_UPDATES_URL
    vehicle_positions_url: str = VEHICLE_POSITIONS_URL
    station_stop_ids: List[str] = field(default_factory=lambda: list(STATION_STOP_IDS))
    routes: List[str] = field(default_factory=lambda: list(STATION_ROUTES))
    cache_max_age: int = CACHE_MAX_AGE_SECONDS

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """
        Build settings from BUSTRACK_* environment variables.

        Args:
            **overrides: Values that take precedence over the environment (e.g. CLI flags).
                None values are ignored.
        """
        values = {
            "static_dir": os.environ.get("BUSTRACK_STATIC_DIR", STATIC_DIR),
            "cache_dir": os.environ.get("BUSTRACK_CACHE_DIR", CACHE_DIR),
            "trip_updates_url": os.environ.get("BUSTRACK_TRIP_UPDATES_URL", TRIP_UPDATES_URL),
            "vehicle_positions_url": os.environ.get(
                "BUSTRACK_VEHICLE_POSITIONS_URL", VEHICLE_POSITIONS_URL
            ),
            "station_stop_ids": _env_list("BUSTRACK_STOP_IDS", STATION_STOP_IDS),
            "routes": _env_list("BUSTRACK_ROUTES", STATION_ROUTES),
            "cache_max_age": int(os.environ.get("BUSTRACK_CACHE_MAX_AGE", CACHE_MAX_AGE_SECONDS)),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
