"""Overlay live trip updates and vehicle positions onto scheduled departures."""

from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from .models import NO_LIVE_DATA, EnrichedDeparture, ScheduledDeparture


def format_live_time(timestamp, tz: Optional[tzinfo] = None) -> str:
    """Convert a Unix timestamp to a 24-hour HH:MM:SS clock time (local time unless ``tz`` is given)."""
    return datetime.fromtimestamp(int(timestamp), tz).strftime("%H:%M:%S")


def _first_by_trip(entities: Iterable[dict], key: str) -> Dict[str, dict]:
    # Feed order decides which entity wins when trip IDs repeat
    by_trip: Dict[str, dict] = {}
    for entity in entities:
        trip_id = ((entity.get(key) or {}).get("trip") or {}).get("tripId")
        if trip_id is not None:
            by_trip.setdefault(trip_id, entity)
    return by_trip


def _station_update_time(entity: dict, stop_ids: set) -> Optional[int]:
    for update in (entity.get("tripUpdate") or {}).get("stopTimeUpdate") or []:
        if update.get("stopId") in stop_ids:
            event = update.get("departure") or update.get("arrival") or {}
            return event.get("time")
    return None


def merge_live_time(
    departures: Sequence[ScheduledDeparture],
    trip_update_entities: Iterable[dict],
    station_stop_ids: Iterable[str],
    tz: Optional[tzinfo] = None,
) -> List[EnrichedDeparture]:
    """
    Attach the live departure time at the station to each departure.

    Every departure is kept; those without a matching trip update, or whose
    update has no time for a station stop, get ``NO_LIVE_DATA``.

    Args:
        departures: Scheduled departures
        trip_update_entities: Trip update feed entities
        station_stop_ids: Stop IDs of the station platforms
        tz: Timezone for the displayed time; local time if None

    Returns:
        EnrichedDeparture list in the same order as ``departures``.
    """
    updates_by_trip = _first_by_trip(trip_update_entities, "tripUpdate")
    stop_ids = set(station_stop_ids)

    merged = []
    for departure in departures:
        enriched = EnrichedDeparture.from_scheduled(departure)
        entity = updates_by_trip.get(departure.trip_id)
        timestamp = _station_update_time(entity, stop_ids) if entity else None
        enriched.live_arrival_time = format_live_time(timestamp, tz) if timestamp else NO_LIVE_DATA
        merged.append(enriched)
    return merged


def merge_live_position(
    departures: Sequence[ScheduledDeparture], vehicle_position_entities: Iterable[dict]
) -> List[EnrichedDeparture]:
    """Attach the current vehicle position to each departure, or ``NO_LIVE_DATA``."""
    vehicles_by_trip = _first_by_trip(vehicle_position_entities, "vehicle")

    merged = []
    for departure in departures:
        enriched = EnrichedDeparture.from_scheduled(departure)
        entity = vehicles_by_trip.get(departure.trip_id)
        position = entity["vehicle"].get("position") if entity else None
        enriched.live_position = position if position is not None else NO_LIVE_DATA
        merged.append(enriched)
    return merged
