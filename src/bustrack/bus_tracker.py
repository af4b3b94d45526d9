"""Main UQ Lakes bus tracker class."""

import logging
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional

from .config import Settings
from .feed_client import FeedClient
from .gtfs_loader import ScheduleStore
from .joins import calendar_date, filter_by_calendar, join_route_trip, join_stop_time, time_window, weekday_name
from .live_cache import LiveFeedCache
from .live_merge import merge_live_position, merge_live_time
from .models import EnrichedDeparture, ScheduledDeparture

logger = logging.getLogger(__name__)


class BusTracker:
    """
    Finds buses departing the station, with live arrival times and positions.

    A query joins the static schedule for the requested routes, date and
    ten-minute window, then overlays the cached (or freshly fetched) live feeds.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[ScheduleStore] = None,
        live_cache: Optional[LiveFeedCache] = None,
        tz: Optional[tzinfo] = None,
    ):
        """
        Initialize the tracker.

        Args:
            settings: Paths, feed URLs and station configuration. Defaults to Settings().
            store: Static schedule store; built from settings if None
            live_cache: Live feed cache; built from settings if None
            tz: Timezone for live times; local time if None
        """
        self.settings = settings or Settings()
        self.store = store or ScheduleStore(self.settings.static_dir, self.settings.station_stop_ids)
        self.live_cache = live_cache or LiveFeedCache(
            FeedClient(self.settings.trip_updates_url, self.settings.vehicle_positions_url),
            self.settings.cache_dir,
            self.settings.station_stop_ids,
            max_age=self.settings.cache_max_age,
        )
        self.tz = tz
        self.last_refreshed: Optional[bool] = None

    def get_scheduled_departures(self, when: datetime, route_names: Iterable[str]) -> List[ScheduledDeparture]:
        """
        Get scheduled departures for the routes within ten minutes of ``when``.

        Args:
            when: Requested departure date and time
            route_names: Route short names to include

        Returns:
            ScheduledDeparture list in stop_times.txt order.
        """
        routes = self.store.load_routes(route_names)
        departures = join_route_trip(routes, self.store.trips)
        departures = filter_by_calendar(departures, self.store.calendar, calendar_date(when), weekday_name(when))
        window_start, window_end = time_window(when)
        departures = join_stop_time(departures, self.store.stop_times, window_start, window_end)
        logger.info(f"Found {len(departures)} scheduled departures between {window_start} and {window_end}")
        return departures

    def get_departures(self, when: datetime, route_names: Iterable[str]) -> List[EnrichedDeparture]:
        """
        Get departures with live data, sorted by scheduled arrival time.

        Args:
            when: Requested departure date and time
            route_names: Route short names to include

        Returns:
            EnrichedDeparture list. Rows with the same scheduled time keep their join order.

        Raises:
            requests.RequestException, ValueError: If live data had to be fetched and the fetch failed.
        """
        departures = self.get_scheduled_departures(when, route_names)

        live = self.live_cache.ensure_fresh()
        self.last_refreshed = live.refreshed

        enriched = merge_live_time(departures, live.trip_updates.entities, self.settings.station_stop_ids, self.tz)
        enriched = merge_live_position(enriched, live.vehicle_positions.entities)
        return sorted(enriched, key=lambda departure: departure.scheduled_arrival_time)

    def close(self) -> None:
        """Release the live feed HTTP session."""
        self.live_cache.client.close()
        logger.debug("Closed tracker resources")
