"""GTFS static schedule loader for the UQ Lakes station."""

import csv
import io
import logging
import os
from typing import Iterable, List, Optional

from .models import CalendarRecord, RouteRecord, StopTimeRecord, TripRecord

logger = logging.getLogger(__name__)

ROUTES_FILE = "routes.txt"
TRIPS_FILE = "trips.txt"
CALENDAR_FILE = "calendar.txt"
STOP_TIMES_FILE = "stop_times.txt"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class ScheduleStore:
    """
    Holds the static schedule tables for one session.

    Trips, calendar and station stop times are read once and reused by every
    query. Routes are re-read per query since the route selection changes.
    """

    def __init__(self, static_dir: str, station_stop_ids: Iterable[str]):
        """
        Initialize the store.

        Args:
            static_dir: Directory holding routes.txt, trips.txt, calendar.txt and stop_times.txt
            station_stop_ids: Stop IDs of the station platforms; stop times elsewhere are dropped
        """
        self.static_dir = static_dir
        self.station_stop_ids = set(station_stop_ids)
        self._trips: Optional[List[TripRecord]] = None
        self._calendar: Optional[List[CalendarRecord]] = None
        self._stop_times: Optional[List[StopTimeRecord]] = None

    @property
    def trips(self) -> List[TripRecord]:
        if self._trips is None:
            self._trips = self._parse_trips(self._read_file(TRIPS_FILE))
            logger.info(f"Loaded {len(self._trips)} trips")
        return self._trips

    @property
    def calendar(self) -> List[CalendarRecord]:
        if self._calendar is None:
            self._calendar = self._parse_calendar(self._read_file(CALENDAR_FILE))
            logger.info(f"Loaded {len(self._calendar)} calendar entries")
        return self._calendar

    @property
    def stop_times(self) -> List[StopTimeRecord]:
        if self._stop_times is None:
            self._stop_times = self._parse_stop_times(self._read_file(STOP_TIMES_FILE))
            logger.info(f"Loaded {len(self._stop_times)} stop times at the station")
        return self._stop_times

    def load_routes(self, route_names: Iterable[str]) -> List[RouteRecord]:
        """
        Read routes.txt, keeping only the given routes.

        Args:
            route_names: Route short names to keep (e.g. ["66", "P332"])

        Returns:
            Matching RouteRecord objects in file order.
        """
        routes = self._parse_routes(self._read_file(ROUTES_FILE), set(route_names))
        logger.debug(f"Loaded {len(routes)} routes")
        return routes

    def load_all(self) -> None:
        """Read the tables that do not depend on the query."""
        logger.info(
            f"Schedule ready: {len(self.trips)} trips, {len(self.calendar)} calendar entries, "
            f"{len(self.stop_times)} station stop times"
        )

    def clear(self) -> None:
        """Drop the cached tables; they are re-read on next access."""
        self._trips = None
        self._calendar = None
        self._stop_times = None

    def _read_file(self, filename: str) -> str:
        path = os.path.join(self.static_dir, filename)
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise

    @staticmethod
    def _parse_routes(csv_content: str, route_names: set) -> List[RouteRecord]:
        reader = csv.DictReader(io.StringIO(csv_content))
        return [
            RouteRecord(
                route_id=row["route_id"],
                route_short_name=row["route_short_name"],
                route_long_name=row["route_long_name"],
            )
            for row in reader
            if row["route_short_name"] in route_names
        ]

    @staticmethod
    def _parse_trips(csv_content: str) -> List[TripRecord]:
        reader = csv.DictReader(io.StringIO(csv_content))
        return [
            TripRecord(
                trip_id=row["trip_id"],
                route_id=row["route_id"],
                service_id=row["service_id"],
                trip_headsign=row.get("trip_headsign", ""),
            )
            for row in reader
        ]

    @staticmethod
    def _parse_calendar(csv_content: str) -> List[CalendarRecord]:
        reader = csv.DictReader(io.StringIO(csv_content))
        entries = []
        for row in reader:
            entries.append(
                CalendarRecord(
                    service_id=row["service_id"],
                    days={day: row[day].strip() == "1" for day in WEEKDAYS},
                    start_date=row["start_date"].strip(),
                    end_date=row["end_date"].strip(),
                )
            )
        return entries

    def _parse_stop_times(self, csv_content: str) -> List[StopTimeRecord]:
        # stop_times.txt is large; only rows at the station's platforms are kept
        reader = csv.DictReader(io.StringIO(csv_content))
        return [
            StopTimeRecord(
                trip_id=row["trip_id"],
                stop_id=row["stop_id"],
                arrival_time=row["arrival_time"],
            )
            for row in reader
            if row["stop_id"] in self.station_stop_ids
        ]
