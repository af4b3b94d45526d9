"""GTFS-Realtime JSON feed fetcher."""

import logging
from typing import Iterable, List, Optional

import requests

from .config import TRIP_UPDATES_URL, VEHICLE_POSITIONS_URL

logger = logging.getLogger(__name__)


class FeedClient:
    """Fetches the trip update and vehicle position feeds."""

    def __init__(
        self,
        trip_updates_url: str = TRIP_UPDATES_URL,
        vehicle_positions_url: str = VEHICLE_POSITIONS_URL,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            trip_updates_url: URL of the trip updates JSON feed
            vehicle_positions_url: URL of the vehicle positions JSON feed
            timeout: Request timeout in seconds. None waits indefinitely.
            session: Optional requests session to reuse
        """
        self.trip_updates_url = trip_updates_url
        self.vehicle_positions_url = vehicle_positions_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_trip_updates(self) -> dict:
        return self.fetch(self.trip_updates_url)

    def fetch_vehicle_positions(self) -> dict:
        return self.fetch(self.vehicle_positions_url)

    def fetch(self, url: str) -> dict:
        """
        Fetch a feed and decode its JSON body.

        Args:
            url: Full URL to the feed.

        Returns:
            Decoded feed payload, shaped {"header": {...}, "entity": [...]}.

        Raises:
            requests.RequestException: On network errors or a non-2xx response.
            ValueError: If the body is not valid JSON.
        """
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise

    def close(self) -> None:
        self.session.close()


def filter_station_trip_updates(entities: Iterable[dict], stop_ids: Iterable[str]) -> List[dict]:
    """Keep trip update entities with at least one stop time update at the station."""
    stop_ids = set(stop_ids)
    return [
        entity
        for entity in entities
        if any(
            update.get("stopId") in stop_ids
            for update in (entity.get("tripUpdate") or {}).get("stopTimeUpdate") or []
        )
    ]
