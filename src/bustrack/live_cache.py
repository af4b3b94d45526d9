"""On-disk cache of the live GTFS-Realtime feeds."""

import json
import logging
import os
import time
from typing import Callable, Iterable, Optional

from .config import CACHE_MAX_AGE_SECONDS
from .feed_client import FeedClient, filter_station_trip_updates
from .models import LiveData, LiveFeedSnapshot

logger = logging.getLogger(__name__)

TRIP_UPDATES_FILE = "trip_updates.json"
VEHICLE_POSITIONS_FILE = "vehicle_positions.json"


class LiveFeedCache:
    """
    Supplies live feed snapshots, refetching only when the cache is missing or stale.

    Both feeds are cached and refreshed together. Their age is taken from the
    vehicle positions header timestamp.
    """

    def __init__(
        self,
        client: FeedClient,
        cache_dir: str,
        station_stop_ids: Iterable[str],
        max_age: int = CACHE_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.cache_dir = cache_dir
        self.station_stop_ids = list(station_stop_ids)
        self.max_age = max_age
        self._clock = clock
        self.trip_updates_path = os.path.join(cache_dir, TRIP_UPDATES_FILE)
        self.vehicle_positions_path = os.path.join(cache_dir, VEHICLE_POSITIONS_FILE)

    def ensure_fresh(self, now: Optional[float] = None) -> LiveData:
        """
        Get live data for a query.

        Args:
            now: Current Unix time; defaults to the cache clock.

        Returns:
            LiveData with ``refreshed`` set when the feeds were fetched from the network.

        Raises:
            requests.RequestException, ValueError: If a refetch was needed and failed.
        """
        if not (os.path.exists(self.trip_updates_path) and os.path.exists(self.vehicle_positions_path)):
            logger.debug("No cached live data")
            return self.refresh()

        try:
            trip_updates = self._read_snapshot(self.trip_updates_path)
            vehicle_positions = self._read_snapshot(self.vehicle_positions_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable live data cache, refetching: {e}")
            return self.refresh()

        if now is None:
            now = self._clock()
        if self.is_stale(vehicle_positions, now):
            logger.debug(f"Cached live data from {vehicle_positions.fetched_at} is stale")
            return self.refresh()

        logger.debug("Using cached live data")
        return LiveData(trip_updates=trip_updates, vehicle_positions=vehicle_positions, refreshed=False)

    def is_stale(self, snapshot: LiveFeedSnapshot, now: float) -> bool:
        return int(now) - snapshot.fetched_at >= self.max_age

    def refresh(self) -> LiveData:
        """Fetch both feeds, keep station trip updates only, and cache them."""
        logger.info("Fetching live data")
        trip_updates = LiveFeedSnapshot.from_payload(self.client.fetch_trip_updates())
        trip_updates.entities = filter_station_trip_updates(trip_updates.entities, self.station_stop_ids)
        vehicle_positions = LiveFeedSnapshot.from_payload(self.client.fetch_vehicle_positions())

        self._write_snapshot(self.trip_updates_path, trip_updates)
        self._write_snapshot(self.vehicle_positions_path, vehicle_positions)
        logger.info(
            f"Fetched {len(trip_updates.entities)} station trip updates and "
            f"{len(vehicle_positions.entities)} vehicle positions"
        )
        return LiveData(trip_updates=trip_updates, vehicle_positions=vehicle_positions, refreshed=True)

    def clear(self) -> None:
        """Delete the cache files."""
        for path in (self.trip_updates_path, self.vehicle_positions_path):
            if os.path.exists(path):
                os.remove(path)

    @staticmethod
    def _read_snapshot(path: str) -> LiveFeedSnapshot:
        with open(path, "r", encoding="utf-8") as f:
            return LiveFeedSnapshot.from_payload(json.load(f))

    def _write_snapshot(self, path: str, snapshot: LiveFeedSnapshot) -> None:
        # Best effort: callers keep using the in-memory snapshot
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_payload(), f)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write live data cache {path}: {e}")
