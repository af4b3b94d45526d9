"""BusTrack - UQ Lakes station bus departures with live GTFS-Realtime data."""

__version__ = "0.1.0"

from .models import (
    NO_LIVE_DATA,
    CalendarRecord,
    EnrichedDeparture,
    LiveData,
    LiveFeedSnapshot,
    RouteRecord,
    ScheduledDeparture,
    StopTimeRecord,
    TripRecord,
)
from .config import Settings
from .gtfs_loader import ScheduleStore
from .feed_client import FeedClient
from .live_cache import LiveFeedCache
from .bus_tracker import BusTracker

__all__ = [
    "BusTracker",
    "ScheduleStore",
    "FeedClient",
    "LiveFeedCache",
    "Settings",
    "RouteRecord",
    "TripRecord",
    "CalendarRecord",
    "StopTimeRecord",
    "ScheduledDeparture",
    "EnrichedDeparture",
    "LiveFeedSnapshot",
    "LiveData",
    "NO_LIVE_DATA",
]
