"""Data models for the UQ Lakes bus tracker."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

NO_LIVE_DATA = "No Live Data"


@dataclass(frozen=True)
class RouteRecord:
    """A row of routes.txt."""
    route_id: str
    route_short_name: str
    route_long_name: str


@dataclass(frozen=True)
class TripRecord:
    """A row of trips.txt."""
    trip_id: str
    route_id: str
    service_id: str
    trip_headsign: str


@dataclass(frozen=True)
class CalendarRecord:
    """A row of calendar.txt."""
    service_id: str
    days: Dict[str, bool]  # weekday name -> service runs that day
    start_date: str  # YYYYMMDD, inclusive
    end_date: str  # YYYYMMDD, inclusive

    def runs_on(self, weekday: str) -> bool:
        return self.days.get(weekday, False)

    def covers(self, date: str) -> bool:
        """Check a YYYYMMDD date against the service period."""
        return self.start_date <= date <= self.end_date


@dataclass(frozen=True)
class StopTimeRecord:
    """A row of stop_times.txt at one of the station's platforms."""
    trip_id: str
    stop_id: str
    arrival_time: str  # HH:MM:SS, may exceed 24:00:00


@dataclass
class ScheduledDeparture:
    """A scheduled trip through the station, built from the static tables."""
    route_short_name: str
    route_long_name: str
    service_id: str
    trip_id: str
    heading_sign: str
    scheduled_arrival_time: Optional[str] = None


@dataclass
class EnrichedDeparture(ScheduledDeparture):
    """A scheduled departure with live arrival time and vehicle position."""
    live_arrival_time: str = NO_LIVE_DATA
    live_position: Union[Dict[str, Any], str] = NO_LIVE_DATA

    @classmethod
    def from_scheduled(cls, departure: ScheduledDeparture) -> "EnrichedDeparture":
        """Copy a departure; live fields already set on an EnrichedDeparture are kept."""
        return cls(**asdict(departure))

    def as_row(self) -> Dict[str, Any]:
        """Column name -> value, in display order."""
        return {
            "Route Short Name": self.route_short_name,
            "Route Long Name": self.route_long_name,
            "Service ID": self.service_id,
            "Heading Sign": self.heading_sign,
            "Scheduled Arrival Time": self.scheduled_arrival_time,
            "Live Arrival Time": self.live_arrival_time,
            "Live Position": self.live_position,
        }


@dataclass
class LiveFeedSnapshot:
    """One GTFS-Realtime JSON feed: header timestamp and its entities."""
    fetched_at: int  # Unix timestamp from the feed header
    entities: List[dict] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict) -> "LiveFeedSnapshot":
        """
        Build a snapshot from a feed payload.

        Raises:
            ValueError: If the payload has no usable header timestamp.
        """
        try:
            fetched_at = int(payload["header"]["timestamp"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Feed payload has no header timestamp: {e}") from e
        return cls(fetched_at=fetched_at, entities=list(payload.get("entity") or []))

    def to_payload(self) -> dict:
        return {"header": {"timestamp": self.fetched_at}, "entity": self.entities}


@dataclass
class LiveData:
    """Live feeds for one query, and whether they were just fetched."""
    trip_updates: LiveFeedSnapshot
    vehicle_positions: LiveFeedSnapshot
    refreshed: bool
