"""Joins and filters over the static schedule tables."""

import logging
from dataclasses import replace
from datetime import date as date_type, datetime, timedelta
from typing import Dict, List, Sequence, Tuple

from .config import DEPARTURE_WINDOW_MINUTES
from .gtfs_loader import WEEKDAYS
from .models import CalendarRecord, RouteRecord, ScheduledDeparture, StopTimeRecord, TripRecord

logger = logging.getLogger(__name__)


def join_route_trip(routes: Sequence[RouteRecord], trips: Sequence[TripRecord]) -> List[ScheduledDeparture]:
    """
    Join trips to their routes on route_id.

    Trips whose route is not in ``routes`` are dropped. If several routes share
    a route_id, the first one wins.

    Args:
        routes: Routes selected for this query
        trips: All trips

    Returns:
        One ScheduledDeparture per matched trip, in trip order.
    """
    routes_by_id: Dict[str, RouteRecord] = {}
    for route in routes:
        routes_by_id.setdefault(route.route_id, route)

    joined = []
    for trip in trips:
        route = routes_by_id.get(trip.route_id)
        if route is None:
            continue
        joined.append(
            ScheduledDeparture(
                route_short_name=route.route_short_name,
                route_long_name=route.route_long_name,
                service_id=trip.service_id,
                trip_id=trip.trip_id,
                heading_sign=trip.trip_headsign,
            )
        )
    logger.debug(f"Joined {len(joined)} of {len(trips)} trips to {len(routes)} routes")
    return joined


def filter_by_calendar(
    departures: Sequence[ScheduledDeparture],
    calendar: Sequence[CalendarRecord],
    date: str,
    weekday: str,
) -> List[ScheduledDeparture]:
    """
    Keep departures whose service runs on the given day.

    Args:
        departures: Candidate departures
        calendar: Calendar entries
        date: Service date as YYYYMMDD
        weekday: Lowercase weekday name (e.g. "monday")

    Returns:
        Departures with a calendar entry active on ``weekday`` whose period contains ``date``.
    """
    entries_by_service: Dict[str, List[CalendarRecord]] = {}
    for entry in calendar:
        entries_by_service.setdefault(entry.service_id, []).append(entry)

    return [
        departure
        for departure in departures
        if any(
            entry.runs_on(weekday) and entry.covers(date)
            for entry in entries_by_service.get(departure.service_id, [])
        )
    ]


def join_stop_time(
    departures: Sequence[ScheduledDeparture],
    stop_times: Sequence[StopTimeRecord],
    window_start: str,
    window_end: str,
) -> List[ScheduledDeparture]:
    """
    Attach station arrival times that fall inside [window_start, window_end].

    Times are compared as HH:MM:SS strings. Each qualifying stop time yields
    one row, so a trip stopping at several platforms appears more than once.
    """
    departures_by_trip: Dict[str, ScheduledDeparture] = {}
    for departure in departures:
        departures_by_trip.setdefault(departure.trip_id, departure)

    joined = []
    for stop_time in stop_times:
        if not window_start <= stop_time.arrival_time <= window_end:
            continue
        departure = departures_by_trip.get(stop_time.trip_id)
        if departure is not None:
            joined.append(replace(departure, scheduled_arrival_time=stop_time.arrival_time))
    return joined


def time_window(when: datetime, minutes: int = DEPARTURE_WINDOW_MINUTES) -> Tuple[str, str]:
    """
    Get the HH:MM:SS search window starting at ``when``.

    The end wraps past midnight without changing the date, so a window starting
    at 23:55 ends at 00:05:00.
    """
    end = when + timedelta(minutes=minutes)
    return when.strftime("%H:%M:00"), end.strftime("%H:%M:00")


def weekday_name(day: date_type) -> str:
    """Get the calendar.txt column for a date (e.g. "monday")."""
    return WEEKDAYS[day.weekday()]


def calendar_date(day: date_type) -> str:
    """Format a date as YYYYMMDD."""
    return day.strftime("%Y%m%d")
